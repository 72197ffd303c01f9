import logging
import os
import traceback
from typing import Optional

DEFAULT_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'


def resolve_log_level(value: Optional[str] = None) -> int:
	"""Map a level name (e.g. "debug") to a logging level, defaulting to INFO."""
	name = (value or os.environ.get("LOG_LEVEL") or "INFO").strip().upper()
	level = logging.getLevelName(name)
	return level if isinstance(level, int) else logging.INFO


def setup_logging(level: Optional[int] = None, fmt: Optional[str] = None) -> None:
	"""Configure root logging once. Subsequent calls are no-ops.
	If level is not provided, LOG_LEVEL from the environment is used.
	"""
	if logging.getLogger().handlers:
		return
	logging.basicConfig(level=level if level is not None else resolve_log_level(), format=fmt or DEFAULT_FORMAT)


def get_logger(name: Optional[str] = None) -> logging.Logger:
	"""Return a module/logger by name, after ensuring logging is configured."""
	setup_logging()
	return logging.getLogger(name) if name else logging.getLogger(__name__)


def log_exception(logger: logging.Logger, message: str = "An error occurred", exc_info: Exception = None) -> None:
	"""Log message and the exception at error level; the traceback only shows at DEBUG."""
	logger.error(message)
	if exc_info is not None:
		logger.error(f"{type(exc_info).__name__}: {exc_info}")
	logger.debug("Full traceback:\n" + traceback.format_exc())
