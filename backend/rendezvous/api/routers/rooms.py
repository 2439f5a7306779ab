"""Room code REST routes."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

import rendezvous.runtime as runtime
from rendezvous.core.logging_config import get_logger

router = APIRouter()

logger = get_logger(__name__)


@router.get("/create", response_class=PlainTextResponse)
def create_room_code() -> str:
    """Return a room code nobody currently occupies.

    The code is not reserved: another client may join it before the caller
    does, in which case the caller gets ``joined`` or ``full`` instead of
    ``created``.
    """
    code = runtime.code_generator.allocate(runtime.room_registry.is_occupied)
    logger.info("Allocated room code %s", code)
    return code
