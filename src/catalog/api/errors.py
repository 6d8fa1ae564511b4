"""Translation of catalog pipeline errors into HTTP responses.

Registered on the app as the single boundary where CatalogError becomes a
JSON body of the form {"detail": <user message>, "error": <error type>}.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.catalog.products.errors import (
    CatalogError,
    PriceUpdateError,
    ProductNotFoundError,
    RenderPreconditionError,
    SettingsMissingError,
    SyncFailedError,
    SyncInProgressError,
)
from src.catalog.workspace.registry import WorkspaceNotFoundError

logger = structlog.get_logger(__name__)

# Most specific first; the first isinstance match wins.
ERROR_STATUS: tuple[tuple[type[CatalogError], int], ...] = (
    (SettingsMissingError, status.HTTP_409_CONFLICT),
    (SyncInProgressError, status.HTTP_409_CONFLICT),
    (SyncFailedError, status.HTTP_502_BAD_GATEWAY),
    (PriceUpdateError, status.HTTP_502_BAD_GATEWAY),
    (RenderPreconditionError, 422),
    (ProductNotFoundError, status.HTTP_404_NOT_FOUND),
)


def status_for(exc: CatalogError) -> int:
    for error_type, code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    code = status_for(exc)
    logger.warning(
        "api.catalog_error",
        path=request.url.path,
        status_code=code,
        error_type=type(exc).__name__,
        cause=repr(exc.__cause__) if exc.__cause__ else None,
    )
    return JSONResponse(
        status_code=code,
        content={"detail": exc.user_message, "error": type(exc).__name__},
    )


async def workspace_not_found_handler(
    request: Request, exc: WorkspaceNotFoundError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": f"Workspace not found: {exc.args[0]}", "error": "WorkspaceNotFoundError"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(WorkspaceNotFoundError, workspace_not_found_handler)
