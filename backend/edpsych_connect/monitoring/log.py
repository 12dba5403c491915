from __future__ import annotations
import logging
from typing import Any

ROOT_LOGGER_NAME = "edpsych_connect"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_handler: logging.Handler | None = None


def configure_logging(level: str | int = "INFO") -> logging.Logger:
	"""Attach a single stream handler to the package logger.

	Safe to call more than once; later calls only adjust the level.
	"""
	global _handler
	root = logging.getLogger(ROOT_LOGGER_NAME)
	if isinstance(level, str):
		level = logging.getLevelName(level.upper())
		if not isinstance(level, int):
			level = logging.INFO
	root.setLevel(level)
	if _handler is None:
		_handler = logging.StreamHandler()
		_handler.setFormatter(logging.Formatter(LOG_FORMAT))
		root.addHandler(_handler)
	logging.getLogger("passlib").setLevel(logging.ERROR)
	logging.getLogger("httpx").setLevel(logging.WARNING)
	return root


def format_context(context: dict[str, Any]) -> str:
	return " ".join(f"{k}={context[k]!r}" for k in sorted(context))


def log_event(logger: logging.Logger, level: int, message: str, /, **context: Any) -> None:
	# Positional-only so context may carry keys such as "message"
	if context:
		message = f"{message} | {format_context(context)}"
	logger.log(level, message)
