"""HTTP error mapping helpers for API routes."""

from __future__ import annotations

from typing import NoReturn

from fastapi import HTTPException
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rendezvous.core.logging_config import get_logger
from rendezvous.rooms.registry import RoomError

INTERNAL_ERROR_MESSAGE = "Internal server error"

logger = get_logger(__name__)


def api_error(message: str) -> dict[str, str]:
    """Build the unified API error payload."""
    return {"error": message}


def raise_api_error(*, status_code: int, message: str) -> NoReturn:
    raise HTTPException(status_code=status_code, detail=api_error(message))


async def handle_http_exception(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unify HTTP errors to the {error} payload."""
    if isinstance(exc.detail, dict) and set(exc.detail) == {"error"}:
        content = exc.detail
    else:
        content = api_error(str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def handle_room_error(request: Request, exc: RoomError) -> JSONResponse:
    """Log invariant violations with traceback; clients only see a generic message."""
    logger.error(
        "Internal room error on %s %s",
        request.method,
        request.url.path,
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    return JSONResponse(status_code=500, content=api_error(INTERNAL_ERROR_MESSAGE))
