"""Structured request logging middleware.

Every request is logged once, as http.request_completed (or
http.request_failed), with method, path, status_code and duration_ms.
The request id is taken from an incoming X-Request-ID header or generated,
bound into structlog contextvars for the duration of the request, and
echoed on the response. Requests under /api/v1/workspaces/{id} also carry
workspace_id.

Console output in development, JSON in production. Credential fields are
masked before rendering.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.catalog.config import Environment, get_settings

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Probe and scrape routes are logged at debug level only.
_QUIET_PATHS = frozenset({"/health", "/health/ready", "/metrics"})

_WORKSPACE_PATH = re.compile(r"^/api/v1/workspaces/([^/]+)")

_SECRET_KEYS = frozenset({"woocommerce_secret", "api_secret", "authorization"})


def mask_secrets(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor replacing credential values with '***'."""
    for key in event_dict.keys() & _SECRET_KEYS:
        event_dict[key] = "***"
    return event_dict


def configure_structlog() -> None:
    """Configure structlog and stdlib logging from LOG_LEVEL and ENVIRONMENT."""
    settings = get_settings()

    logging.basicConfig(format="%(message)s", level=settings.LOG_LEVEL.upper())

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        mask_secrets,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.ENVIRONMENT == Environment.production:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _request_context(request: Request) -> dict[str, str]:
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    context = {"request_id": request_id}
    match = _WORKSPACE_PATH.match(request.url.path)
    if match:
        context["workspace_id"] = match.group(1)
    return context


def _log_method_for(path: str, status_code: int):
    if status_code >= 500:
        return logger.error
    if status_code >= 400:
        return logger.warning
    if path in _QUIET_PATHS:
        return logger.debug
    return logger.info


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request once, with timing and the request id."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        context = _request_context(request)
        path = request.url.path
        start_time = time.monotonic()

        with structlog.contextvars.bound_contextvars(**context):
            try:
                response = await call_next(request)
            except Exception:
                logger.error(
                    "http.request_failed",
                    method=request.method,
                    path=path,
                    status_code=500,
                    duration_ms=round((time.monotonic() - start_time) * 1000, 2),
                    exc_info=True,
                )
                raise

            response.headers[REQUEST_ID_HEADER] = context["request_id"]
            _log_method_for(path, response.status_code)(
                "http.request_completed",
                method=request.method,
                path=path,
                status_code=response.status_code,
                duration_ms=round((time.monotonic() - start_time) * 1000, 2),
            )

        return response
