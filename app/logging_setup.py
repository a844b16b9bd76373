from __future__ import annotations

import json
import logging
import os
import socket
import time
import traceback
import uuid
from collections.abc import Awaitable, Callable
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from typing_extensions import override

from fastapi import Request, Response

from .config import settings

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

REQUEST_ID_HEADER = "X-Request-ID"


def _utc_ts(created: float) -> str:
    """ISO8601 UTC with milliseconds, e.g. 2026-02-12T12:01:02.123Z"""
    sec = int(created)
    ms = int((created - sec) * 1000)
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(sec)) + f".{ms:03d}Z"


def new_request_id() -> str:
    return str(uuid.uuid4())


class JsonLineFormatter(logging.Formatter):
    app_name: str
    host: str
    include_stacktrace: bool
    allowed_extra_keys: set[str]

    def __init__(self) -> None:
        super().__init__()
        self.app_name = settings.APP_NAME
        self.host = socket.gethostname()
        self.include_stacktrace = settings.LOG_INCLUDE_STACKTRACE

        self.allowed_extra_keys = {
            "event_type",
            "src_ip",
            "user_id",
            "subscription_id",
            "method",
            "path",
            "status",
            "latency_ms",
            "user_agent",
            "data",
        }

    @override
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "ts": _utc_ts(record.created),
            "app": self.app_name,
            "host": self.host,
            "level": record.levelname,
            "event_type": getattr(record, "event_type", "log"),
            "request_id": request_id_ctx.get(),
            "msg": record.getMessage(),
        }

        for key in self.allowed_extra_keys:
            value = getattr(record, key, None)
            if value is None:
                continue

            if key == "data":
                if isinstance(value, dict) and value:
                    payload["data"] = {
                        str(k): v for k, v in value.items() if v is not None
                    }
                continue

            payload[key] = value

        exc_info = record.exc_info
        if exc_info:
            exc_type, exc_val, exc_tb = exc_info
            if exc_type is not None:
                _ = payload.setdefault(
                    "error_type", getattr(exc_type, "__name__", "Exception")
                )
            if exc_val is not None:
                payload["error_msg"] = str(exc_val)

            if self.include_stacktrace and exc_type and exc_val and exc_tb:
                payload["traceback"] = "".join(
                    traceback.format_exception(exc_type, exc_val, exc_tb)
                )

        return json.dumps(
            payload, ensure_ascii=False, separators=(",", ":"), default=str
        )


def setup_logger() -> logging.Logger:
    logger = logging.getLogger("subscriptions")
    logger.setLevel(settings.LOG_LEVEL.upper())
    logger.propagate = False

    if logger.handlers:
        return logger

    formatter = JsonLineFormatter()

    sh = logging.StreamHandler()
    sh.setFormatter(formatter)
    logger.addHandler(sh)

    if settings.LOG_PATH:
        log_dir = os.path.dirname(settings.LOG_PATH)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        fh = RotatingFileHandler(
            settings.LOG_PATH,
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger


async def log_requests(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """
    HTTP middleware: tags the request with an id and logs one line per request.
    """
    logger = setup_logger()
    request_id = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
    token = request_id_ctx.set(request_id)
    started = time.perf_counter()

    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "unhandled error",
            extra={
                "event_type": "http_error",
                "method": request.method,
                "path": request.url.path,
                "status": 500,
                "src_ip": request.client.host if request.client else None,
            },
        )
        raise
    else:
        latency_ms = int((time.perf_counter() - started) * 1000)
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "request",
            extra={
                "event_type": "http_request",
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "latency_ms": latency_ms,
                "src_ip": request.client.host if request.client else None,
                "user_agent": (request.headers.get("user-agent") or "")[:256],
            },
        )
        return response
    finally:
        request_id_ctx.reset(token)
