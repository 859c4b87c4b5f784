"""Process-wide logging setup.

Modules log through ``logging.getLogger(__name__)``; ``init_logging`` wires the
root logger once per process. In JSON mode every line carries the service name
and environment, and the report context keys (tenant, order, scope) are lifted
to the top level so log search can filter on them directly.
"""
from __future__ import annotations

import json
import logging
import sys
from typing import Any

from app.core.config import settings

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}

CONTEXT_KEYS = ("tenant_id", "order", "scope")

PLAIN_FORMAT = "%(asctime)s | %(levelname)s | {service} | %(name)s | %(message)s"


class JsonFormatter(logging.Formatter):
    def __init__(self, service: str | None = None, env: str | None = None):
        super().__init__()
        self.service = service or settings.APP_NAME
        self.env = env or settings.ENV

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "service": self.service,
            "env": self.env,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key.startswith("_") or key in payload or key in _RESERVED_ATTRS:
                continue
            if key in CONTEXT_KEYS:
                payload[key] = value
            else:
                payload.setdefault("extra", {})[key] = value
        return json.dumps(payload, default=str)


def build_handler(log_format: str | None = None) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if (log_format or settings.LOG_FORMAT).lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT.format(service=settings.APP_NAME)))
    return handler


def init_logging(level: int | None = None) -> None:
    root = logging.getLogger()
    if root.handlers:
        return
    effective_level = level or getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    root.setLevel(effective_level)
    root.addHandler(build_handler())
