"""Structured JSON logging and per-request access logs."""

from __future__ import annotations

import json
import logging
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request, Response
from jose import JWTError
from starlette.middleware.base import BaseHTTPMiddleware

from officehub.core.security import decode_session_cookie
from officehub.core.settings import settings

# Attributes copied from ``extra=`` onto the JSON line when present.
CONTEXT_FIELDS = (
    "request_id",
    "user_id",
    "path",
    "method",
    "status_code",
    "latency_ms",
    "event",
    "month",
    "year",
)

SECURITY_STATUSES = {401: "unauthorized", 403: "forbidden"}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update({key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)})
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)
    # RequestLoggingMiddleware already writes one line per request.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def session_subject(request: Request) -> Optional[int]:
    """User id carried in the signed session cookie, without a database hit."""
    cookie = request.cookies.get(settings.session_cookie_name)
    if not cookie:
        return None
    try:
        return int(decode_session_cookie(cookie)["sub"])
    except (JWTError, KeyError, ValueError, TypeError):
        return None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, logger_name: str = "request") -> None:
        super().__init__(app)
        self.logger = logging.getLogger(logger_name)
        self.security_logger = logging.getLogger("security")

    @staticmethod
    def _context(request: Request, request_id: str, started: float) -> dict[str, Any]:
        return {
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "latency_ms": round((time.perf_counter() - started) * 1000, 2),
            "user_id": session_subject(request),
        }

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            self.logger.exception("unhandled_exception", extra=self._context(request, request_id, started))
            raise

        context = self._context(request, request_id, started)
        context["status_code"] = response.status_code
        level = logging.ERROR if response.status_code >= 500 else logging.INFO
        self.logger.log(level, "request", extra=context)

        event = SECURITY_STATUSES.get(response.status_code)
        if event and context["user_id"] is not None:
            self.security_logger.info(event, extra={**context, "event": event})

        response.headers["X-Request-Id"] = request_id
        return response
