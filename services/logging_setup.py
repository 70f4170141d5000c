from __future__ import annotations

import os
import sys
import threading
import time
from contextlib import contextmanager
from typing import Any

from loguru import logger


LOG_FORMAT = (
	"{level.icon} <green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
	"<blue>{extra[component]:<14}</blue> | "
	"[<level>{level:<8}</level>] | "
	"<white>{name}.{function}:{line}</white> | "
	"<level>{message}</level>"
)

DEFAULT_FILE_LEVEL = "DEBUG"

# REST calls slower than this are logged as warnings
SLOW_REQUEST_MS = 2000.0

# never written to the log, whatever the payload shape
REDACTED_KEYS = frozenset({"password", "oldpassword", "newpassword", "token", "cookie", "set-cookie"})


def parse_level(level_value: str | int | None) -> str:
	"""
	Level name known to loguru ("info", "SUCCESS", ...) or a stdlib number
	(logging.INFO == 20). Anything else means INFO.
	"""
	if isinstance(level_value, int):
		for name in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"):
			if logger.level(name).no == level_value:
				return name
		return "INFO"

	name = str(level_value or "").strip().upper()
	if not name:
		return "INFO"
	try:
		logger.level(name)
	except ValueError:
		return "INFO"
	return name


def _log_uncaught(exc_type, exc_value, exc_tb) -> None:
	logger.opt(exception=(exc_type, exc_value, exc_tb)).critical("[_log_uncaught] - uncaught_exception")


def _log_uncaught_thread(args) -> None:
	# io_bound REST calls run in worker threads
	thread_name = getattr(args.thread, "name", "unknown")
	logger.opt(exception=(args.exc_type, args.exc_value, args.exc_traceback)).critical(
		f"[_log_uncaught_thread] - uncaught_thread_exception - thread={thread_name}"
	)


def log_ui_exception(ex: Exception) -> None:
	"""Hook for ``app.on_exception``: errors raised inside page handlers."""
	logger.opt(exception=ex).error(f"[log_ui_exception] - ui_handler_failed - error={ex!r}")


def setup_logging(
	app_name: str = "pricewatch",
	log_dir: str = "log",
	log_level: str | int | None = None,
	file_level: str | int | None = None,
) -> str:
	"""
	Console sink plus a rotating file sink (10 MB, zipped, 50 kept).
	Every record carries a ``component`` (``logger.bind(component=...)``),
	"app" when nobody bound one. Returns the log file path.
	"""
	console_level = parse_level(log_level if log_level is not None else os.getenv("LOG_LEVEL", "INFO"))
	resolved_file_level = parse_level(
		file_level if file_level is not None else os.getenv("LOG_FILE_LEVEL", DEFAULT_FILE_LEVEL)
	)

	os.makedirs(log_dir, exist_ok=True)
	log_path = os.path.join(log_dir, f"{app_name}.log")

	logger.remove()
	logger.configure(
		extra={"component": "app"},
		handlers=[
			{"sink": sys.stdout, "format": LOG_FORMAT, "colorize": True, "level": console_level},
			{
				"sink": log_path,
				"format": LOG_FORMAT,
				"rotation": "10 MB",
				"compression": "zip",
				"retention": 50,
				"colorize": False,
				"level": resolved_file_level,
				"enqueue": True,
			},
		],
	)
	sys.excepthook = _log_uncaught
	threading.excepthook = _log_uncaught_thread

	logger.info(
		f"[setup_logging] - logger_initialized - app_name={app_name} "
		f"console_level={console_level} file_level={resolved_file_level} log_path={log_path}"
	)
	return log_path


def summarize_for_log(payload: Any, *, max_items: int = 10, max_text: int = 140) -> Any:
	"""Short, credential-free rendering of a request or response payload."""
	if payload is None:
		return None
	if isinstance(payload, dict):
		out = {}
		for key, value in list(payload.items())[:max_items]:
			key = str(key)
			if key.lower() in REDACTED_KEYS:
				out[key] = "***"
			else:
				out[key] = summarize_for_log(value, max_items=max_items, max_text=max_text)
		if len(payload) > max_items:
			out["..."] = f"{len(payload) - max_items} more"
		return out
	if isinstance(payload, (list, tuple)):
		items = [summarize_for_log(v, max_items=max_items, max_text=max_text) for v in list(payload)[:max_items]]
		if len(payload) > max_items:
			items.append(f"...({len(payload)} items)")
		return items
	text = str(payload)
	if len(text) > max_text:
		return f"{text[:max_text]}...({len(text)} chars)"
	return text


@contextmanager
def log_timing(method_name: str, *, slow_ms: float = SLOW_REQUEST_MS, **context: Any):
	"""Debug start/end records around a block; slow blocks are raised to WARNING."""
	start = time.perf_counter()
	context_txt = " ".join(f"{k}={summarize_for_log(v)}" for k, v in context.items())
	logger.debug(f"[{method_name}] - start {context_txt}".strip())
	try:
		yield
	except Exception as ex:
		duration_ms = round((time.perf_counter() - start) * 1000, 2)
		logger.debug(f"[{method_name}] - failed - duration_ms={duration_ms} error={ex!r} {context_txt}".strip())
		raise
	duration_ms = round((time.perf_counter() - start) * 1000, 2)
	if duration_ms >= slow_ms:
		logger.warning(f"[{method_name}] - slow - duration_ms={duration_ms} {context_txt}".strip())
	else:
		logger.debug(f"[{method_name}] - end - duration_ms={duration_ms} {context_txt}".strip())
