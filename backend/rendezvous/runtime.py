"""Process-wide runtime state shared by REST and WebSocket handlers."""

from __future__ import annotations

from typing import Any

from rendezvous.core.config import Settings
from rendezvous.core.config import load_settings
from rendezvous.core.logging_config import setup_logging
from rendezvous.rooms.codes import CodeGenerator
from rendezvous.rooms.passages import PassageStore
from rendezvous.rooms.registry import RoomRegistry


def _build_state(current: Settings) -> tuple[PassageStore, RoomRegistry, CodeGenerator]:
    store = PassageStore()
    registry = RoomRegistry(on_room_emptied=store.evict)
    generator = CodeGenerator(
        code_length=current.rdv_code_length,
        max_attempts=current.rdv_code_max_attempts,
    )
    return store, registry, generator


settings = load_settings()
passage_store, room_registry, code_generator = _build_state(settings)
# connection_id -> websocket, for addressing one member of a room
connections: dict[str, Any] = {}


def startup() -> None:
    """Reload settings and reset in-memory room, passage and connection state."""
    global settings, passage_store, room_registry, code_generator, connections
    settings = load_settings()
    setup_logging(log_level=settings.rdv_log_level, log_file=settings.rdv_log_file)
    passage_store, room_registry, code_generator = _build_state(settings)
    connections = {}


__all__ = [
    "Settings",
    "code_generator",
    "connections",
    "passage_store",
    "room_registry",
    "settings",
    "startup",
]
