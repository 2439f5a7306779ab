"""Passage metadata REST routes."""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter
from fastapi import Request
from pydantic import ValidationError

import rendezvous.runtime as runtime
from rendezvous.api.errors import raise_api_error
from rendezvous.core.logging_config import get_logger
from rendezvous.rooms.models import PassageInfo

ROOM_ID_REQUIRED = "Room ID is required"
FIELDS_REQUIRED = "passageId and frameIds are required"
FIELDS_INVALID = "passageId must be a string and frameIds a list of integers"
INVALID_JSON = "Invalid JSON"
ROOM_NOT_FOUND = "Room not found"

router = APIRouter()

logger = get_logger(__name__)


def _require_room_id(room_id: str | None) -> str:
    if room_id is None or not room_id.strip():
        raise_api_error(status_code=400, message=ROOM_ID_REQUIRED)
    return room_id


def _parse_passage(raw: bytes) -> PassageInfo:
    try:
        body: Any = json.loads(raw)
    except ValueError:
        raise_api_error(status_code=400, message=INVALID_JSON)

    if not isinstance(body, dict):
        raise_api_error(status_code=400, message=FIELDS_REQUIRED)
    if not body.get("passageId") or body.get("frameIds") is None:
        raise_api_error(status_code=400, message=FIELDS_REQUIRED)

    try:
        return PassageInfo.model_validate(body)
    except ValidationError:
        raise_api_error(status_code=400, message=FIELDS_INVALID)


@router.post("/passage/")
def store_passage_without_room() -> dict[str, bool]:
    raise_api_error(status_code=400, message=ROOM_ID_REQUIRED)


@router.post("/passage/{room_id}")
async def store_passage(room_id: str, request: Request) -> dict[str, bool]:
    """Upsert passage info for a room; the room does not need members yet."""
    code = _require_room_id(room_id)
    info = _parse_passage(await request.body())
    runtime.passage_store.set(code, info)
    return {"success": True}


@router.get("/passage/")
def get_passage_without_room() -> dict[str, object]:
    # Missing id answers 400 while an unknown room answers 404.
    raise_api_error(status_code=400, message=ROOM_ID_REQUIRED)


@router.get("/passage/{room_id}")
def get_passage(room_id: str) -> dict[str, object]:
    """Return stored passage info for a room."""
    code = _require_room_id(room_id)
    info = runtime.passage_store.get(code)
    if info is None:
        logger.info("No passage found for room %s", code)
        raise_api_error(status_code=404, message=ROOM_NOT_FOUND)
    logger.info("Retrieved passage for room %s: %s", code, info.passage_id)
    return info.to_public()
