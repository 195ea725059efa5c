import logging
import json
import os
from typing import Any, Dict
from opentelemetry.trace import get_current_span


SENSITIVE_KEYS = {"phone", "email", "address", "token", "password", "authorization"}
REDACTED = "[REDACTED]"


def _from_g(name: str) -> str:
    try:
        from flask import g
        value = getattr(g, name, None)
        return str(value) if value else "n/a"
    except Exception:
        return "n/a"


def current_request_id() -> str:
    return _from_g("request_id")


def current_owner_id() -> str:
    return _from_g("owner_id")


class RequestContextFilter(logging.Filter):
    """Tag records with the request id and the shop account being served."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = current_request_id()
        record.owner_id = current_owner_id()
        return True


def current_trace_ids():
    try:
        span = get_current_span()
        ctx = span.get_span_context() if span else None
        if not ctx or not ctx.is_valid:
            return "n/a", "n/a"
        return format(ctx.trace_id, "032x"), format(ctx.span_id, "016x")
    except Exception:
        return "n/a", "n/a"


class TraceIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        trace_id, span_id = current_trace_ids()
        record.trace_id = trace_id
        record.span_id = span_id
        return True


def mask_sensitive(data: Any) -> Any:
    if isinstance(data, dict):
        return {
            key: (REDACTED if str(key).lower() in SENSITIVE_KEYS else mask_sensitive(value))
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive(v) for v in data)
    return data


class MaskingFilter(logging.Filter):
    """Redact customer contact details unless debugging outside production."""

    def filter(self, record: logging.LogRecord) -> bool:
        env = os.getenv("APP_ENV", "development").lower()
        if record.levelno == logging.DEBUG and env != "production":
            return True
        if isinstance(record.msg, dict):
            record.msg = mask_sensitive(record.msg)
        if isinstance(record.args, dict):
            record.args = mask_sensitive(record.args)
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        base: Dict[str, Any] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "request_id": getattr(record, "request_id", "n/a"),
            "owner_id": getattr(record, "owner_id", "n/a"),
            "trace_id": getattr(record, "trace_id", "n/a"),
            "span_id": getattr(record, "span_id", "n/a"),
        }
        if isinstance(record.msg, dict):
            base.update(record.msg)
        else:
            base["message"] = record.getMessage()
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, default=str)


def configure_logging(app) -> None:
    datefmt = "%Y-%m-%dT%H:%M:%S%z"
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter(datefmt=datefmt))
    handler.addFilter(RequestContextFilter())
    handler.addFilter(TraceIdFilter())
    handler.addFilter(MaskingFilter())

    app.logger.handlers.clear()
    app.logger.addHandler(handler)

    level_name = os.getenv("LOG_LEVEL")
    if level_name:
        level = getattr(logging, level_name.upper(), logging.INFO)
    else:
        level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    app.logger.setLevel(level)

    root = logging.getLogger()
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        root.addHandler(handler)
    root.setLevel(level)

    wl = logging.getLogger("werkzeug")
    wl.setLevel(level)
    wl.handlers.clear()
    wl.addHandler(handler)
