"""
Logging configuration for the service.

Format: 2026-01-06T14:05:52Z [source] LEVEL message

Environment Variables:
    LOG_LEVEL: "DEBUG" or "INFO" (default)

Usage:
    from app.backend.logging_config import configure_logging, get_logger

    configure_logging(source="api")
    logger = get_logger(__name__)
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional


class ISO8601Formatter(logging.Formatter):
	"""Formatter producing ISO8601 UTC timestamps and a bracketed source tag."""

	def __init__(self, source: str = "app"):
		self.source = source
		super().__init__()

	def format(self, record: logging.LogRecord) -> str:
		timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
		message = record.getMessage()
		if record.exc_info:
			message = f"{message}\n{self.formatException(record.exc_info)}"
		return f"{timestamp} [{self.source}] {record.levelname} {message}"


class HealthCheckFilter(logging.Filter):
	"""Suppress health summary access logs unless running at DEBUG."""

	HEALTH_PATHS = {"/api/health"}

	def filter(self, record: logging.LogRecord) -> bool:
		if record.levelno == logging.DEBUG:
			return True
		message = record.getMessage()
		return all(not (path in message and ("GET" in message or "200" in message)) for path in self.HEALTH_PATHS)


def resolve_level(value: Optional[str]) -> int:
	if (value or "").upper() == "DEBUG":
		return logging.DEBUG
	return logging.INFO


def configure_logging(source: str = "app", level: Optional[int] = None) -> logging.Logger:
	if level is None:
		level = resolve_level(os.getenv("LOG_LEVEL"))

	root_logger = logging.getLogger()
	root_logger.setLevel(level)
	root_logger.handlers.clear()

	handler = logging.StreamHandler(sys.stdout)
	handler.setLevel(level)
	handler.setFormatter(ISO8601Formatter(source=source))
	handler.addFilter(HealthCheckFilter())
	root_logger.addHandler(handler)

	for uvicorn_logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
		uvicorn_logger = logging.getLogger(uvicorn_logger_name)
		uvicorn_logger.handlers.clear()
		uvicorn_logger.addHandler(handler)
		uvicorn_logger.setLevel(level)
		uvicorn_logger.propagate = False

	logging.getLogger("httpx").setLevel(logging.WARNING)
	logging.getLogger("httpcore").setLevel(logging.WARNING)
	return root_logger


def get_logger(name: str) -> logging.Logger:
	return logging.getLogger(name)
