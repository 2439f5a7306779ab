"""Per-connection signaling actor.

One ``SignalingSession`` exists per WebSocket. It turns ``join`` intents into
registry calls and emits the lifecycle events:

    created  - this connection opened an empty room
    join     - sent to the member already waiting when a peer arrives
    joined   - this connection was paired with the waiting member
    full     - the room already holds two members

``join`` always goes out before ``joined`` so the waiting side never believes
it is still alone once the new side has been confirmed.

On close the member leaves its room. Metadata for a room that becomes empty
is evicted by the registry's emptied-room hook. Closing also sweeps
passages stored for rooms nobody is in once they outlive the grace period.
The remaining peer, if any, is not told that its partner left.
"""

from __future__ import annotations

import secrets
from typing import Any

from rendezvous.core.logging_config import get_logger
from rendezvous.rooms.passages import DEFAULT_ORPHAN_TTL_SECONDS
from rendezvous.rooms.passages import PassageStore
from rendezvous.rooms.registry import JoinOutcome
from rendezvous.rooms.registry import JoinResult
from rendezvous.rooms.registry import LeaveResult
from rendezvous.rooms.registry import RoomError
from rendezvous.rooms.registry import RoomRegistry

from .broadcast import send_to_member
from .protocol import EVENT_CREATED
from .protocol import EVENT_ERROR
from .protocol import EVENT_FULL
from .protocol import EVENT_JOIN
from .protocol import EVENT_JOINED
from .protocol import EVENT_LOG
from .protocol import EVENT_PONG
from .protocol import LOG_PREFIX
from .protocol import ProtocolError
from .protocol import is_ping_message
from .protocol import parse_client_message
from .protocol import ws_send_event

INTERNAL_ERROR_MESSAGE = "Internal server error"

logger = get_logger(__name__)


def new_connection_id() -> str:
    return secrets.token_urlsafe(12)


class SignalingSession:
    """Join/leave handling for one connection."""

    def __init__(
        self,
        websocket: Any,
        *,
        registry: RoomRegistry,
        connections: dict[str, Any],
        connection_id: str | None = None,
        passage_store: PassageStore | None = None,
        orphan_ttl_seconds: float = DEFAULT_ORPHAN_TTL_SECONDS,
    ) -> None:
        self.websocket = websocket
        self.registry = registry
        self.connections = connections
        self.passage_store = passage_store
        self.orphan_ttl_seconds = orphan_ttl_seconds
        self.connection_id = connection_id or new_connection_id()

    def open(self) -> None:
        self.connections[self.connection_id] = self.websocket
        logger.info("User connected: %s", self.connection_id)

    async def send(self, event_type: str, payload: dict[str, Any]) -> None:
        await ws_send_event(self.websocket, event_type, payload)

    async def log(self, *messages: str) -> None:
        """Send diagnostic lines to this client only."""
        await self.send(EVENT_LOG, {"messages": [LOG_PREFIX, *messages]})

    async def handle_message(self, message: str) -> None:
        if is_ping_message(message):
            await self.send(EVENT_PONG, {})
            return

        try:
            intent = parse_client_message(message)
        except ProtocolError as exc:
            logger.info("Rejected frame from %s: %s", self.connection_id, exc)
            await self.send(EVENT_ERROR, {"error": str(exc)})
            return

        try:
            await self.join(intent.room)
        except RoomError:
            logger.exception("Join of room %s by %s failed", intent.room, self.connection_id)
            await self.send(EVENT_ERROR, {"error": INTERNAL_ERROR_MESSAGE})

    async def join(self, room: str) -> JoinResult:
        occupancy = self.registry.occupancy(room)
        await self.log(f"Room {room} has {occupancy} client(s)")
        await self.log(f"Request to create or join room {room}")

        result = self.registry.try_join(room, self.connection_id)
        payload = {"room": room}

        if result.outcome is JoinOutcome.FULL:
            await self.send(EVENT_FULL, payload)
        elif result.outcome is JoinOutcome.CREATED:
            await self.send(EVENT_CREATED, payload)
        elif result.outcome is JoinOutcome.JOINED:
            if result.peer_id is not None:
                await send_to_member(self.connections, result.peer_id, EVENT_JOIN, payload)
            await self.send(EVENT_JOINED, payload)
        else:
            await self.log(f"Already in room {room}")
            # Re-confirm to this connection only; the peer was already told once.
            await self.send(EVENT_CREATED if result.occupancy == 1 else EVENT_JOINED, payload)
        return result

    def close(self) -> LeaveResult:
        """Drop this connection from the hub and its room, then sweep orphaned passages."""
        self.connections.pop(self.connection_id, None)
        try:
            result = self.registry.leave(self.connection_id)
        except RoomError:
            logger.exception("Leave by %s failed", self.connection_id)
            return LeaveResult(room=None, occupancy=0)
        logger.info("User disconnected: %s", self.connection_id)
        if self.passage_store is not None:
            self.passage_store.evict_orphans(self.registry.is_occupied, self.orphan_ttl_seconds)
        return result
