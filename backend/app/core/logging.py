import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from app.core.config import settings

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s"

_session_dir: Optional[Path] = None


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure root logging with project defaults and return the app logger."""
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    return logging.getLogger("app")


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a named logger, ensuring logging is configured."""
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name if name else "app")


def get_session_dir() -> Path:
    """Per-process directory for structured call logs, created on first use."""
    global _session_dir
    if _session_dir is None:
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        _session_dir = Path(settings.llm_log_dir) / f"session_{stamp}"
        _session_dir.mkdir(parents=True, exist_ok=True)
    return _session_dir
