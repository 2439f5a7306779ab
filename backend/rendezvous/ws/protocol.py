"""WebSocket wire protocol helpers."""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any

WS_PROTOCOL_VERSION = 1

EVENT_JOIN = "join"
EVENT_CREATED = "created"
EVENT_JOINED = "joined"
EVENT_FULL = "full"
EVENT_LOG = "log"
EVENT_ERROR = "error"
EVENT_PONG = "PONG"

LOG_PREFIX = ">>> Message from server: "


class ProtocolError(ValueError):
    """Raised when an inbound frame cannot be turned into a command."""


@dataclass(frozen=True, slots=True)
class JoinIntent:
    room: str


def ws_event(event_type: str, payload: dict[str, Any]) -> dict[str, Any]:
    return {"v": WS_PROTOCOL_VERSION, "type": event_type, "payload": payload}


async def ws_send_event(websocket: Any, event_type: str, payload: dict[str, Any]) -> None:
    message = ws_event(event_type, payload)
    if hasattr(websocket, "send_json"):
        await websocket.send_json(message)
        return
    if hasattr(websocket, "send_text"):
        await websocket.send_text(json.dumps(message))


def is_ping_message(message: str) -> bool:
    if message == "PING":
        return True
    try:
        payload = json.loads(message)
    except json.JSONDecodeError:
        return False
    return isinstance(payload, dict) and payload.get("type") == "PING"


def parse_client_message(message: str) -> JoinIntent:
    """Decode one inbound text frame into a command.

    Expected shape: ``{"type": "join", "payload": {"room": "ABCDE"}}``.
    """
    try:
        frame = json.loads(message)
    except json.JSONDecodeError as exc:
        raise ProtocolError("Invalid JSON") from exc
    if not isinstance(frame, dict):
        raise ProtocolError("Message must be a JSON object")

    event_type = frame.get("type")
    if event_type != EVENT_JOIN:
        raise ProtocolError(f"Unsupported event type: {event_type}")

    payload = frame.get("payload")
    room = payload.get("room") if isinstance(payload, dict) else None
    if not isinstance(room, str) or not room.strip():
        raise ProtocolError("Room ID is required")
    return JoinIntent(room=room)
