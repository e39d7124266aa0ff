"""
Gunicorn configuration for the notes transform API.

Usage:
    gunicorn -c gunicorn.conf.py app.main:app
"""

import os
import multiprocessing

# Server socket
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
backlog = 2048

# Workers mostly wait on the inference API, so a few per core is enough
workers = int(os.getenv("GUNICORN_WORKERS", min(4, multiprocessing.cpu_count())))
worker_class = "uvicorn.workers.UvicornWorker"

# Worker recycling
max_requests = int(os.getenv("GUNICORN_MAX_REQUESTS", "1000"))
max_requests_jitter = int(os.getenv("GUNICORN_MAX_REQUESTS_JITTER", "100"))

# Transform calls can take a while on a busy model
timeout = int(os.getenv("GUNICORN_TIMEOUT", "180"))
graceful_timeout = 30
keepalive = 5

proc_name = "notes-transform-api"

# Logging
errorlog = "-"
accesslog = "-"
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Each worker runs the lifespan (table creation, default folder seed) itself
preload_app = False
