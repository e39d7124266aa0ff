"""Middleware package for FastAPI application."""

from app.middleware.request_tracing import RequestTracingMiddleware, get_request_id

__all__ = ["RequestTracingMiddleware", "get_request_id"]
