"""Addressed delivery of events to connected members."""

from __future__ import annotations

from typing import Any

from rendezvous.core.logging_config import get_logger

from .protocol import ws_send_event

logger = get_logger(__name__)


async def send_to_member(
    connections: dict[str, Any],
    member_id: str,
    event_type: str,
    payload: dict[str, Any],
) -> bool:
    """Send one event to a member by connection id.

    Returns False when the member has no live connection. A connection that
    fails to send is dropped from the hub; its own handler cleans up the room.
    """
    websocket = connections.get(member_id)
    if websocket is None:
        logger.warning("No live connection for member %s, dropped %s event", member_id, event_type)
        return False
    try:
        await ws_send_event(websocket, event_type, payload)
    except Exception:
        logger.warning("Failed to send %s event to member %s", event_type, member_id, exc_info=True)
        connections.pop(member_id, None)
        return False
    return True
