from __future__ import annotations

import contextvars
import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

_request_id: contextvars.ContextVar[str] = contextvars.ContextVar("resourcegraph_request_id", default="-")


def set_request_id(request_id: str) -> contextvars.Token:
    return _request_id.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id.reset(token)


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - formatting logic
        payload = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _make_formatter(jsonl: bool) -> logging.Formatter:
    if jsonl:
        return JsonFormatter()
    return logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s [request=%(request_id)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def configure_logging(
    *,
    level: str = "INFO",
    jsonl: bool = False,
    log_file: Path | None = None,
) -> None:
    """Configure root logging for the resourcegraph CLI."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = _make_formatter(jsonl)
    context_filter = RequestContextFilter()

    handler: logging.Handler
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(log_file, maxBytes=5_000_000, backupCount=5, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    handler.addFilter(context_filter)
    root.addHandler(handler)


__all__ = [
    "configure_logging",
    "JsonFormatter",
    "RequestContextFilter",
    "set_request_id",
    "reset_request_id",
]
