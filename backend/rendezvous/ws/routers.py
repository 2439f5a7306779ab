"""WebSocket route handler for the signaling channel."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi import WebSocket
from fastapi import WebSocketDisconnect

import rendezvous.runtime as runtime

from .session import SignalingSession

router = APIRouter()


async def ws_message_loop(websocket: Any, session: SignalingSession) -> None:
    """Process frames in arrival order until the client disconnects."""
    try:
        while True:
            message = await websocket.receive_text()
            await session.handle_message(message)
    except WebSocketDisconnect:
        return


@router.websocket("/ws")
async def ws_signaling(websocket: WebSocket) -> None:
    """Signaling websocket: join intents in, lifecycle events out."""
    await websocket.accept()
    session = SignalingSession(
        websocket,
        registry=runtime.room_registry,
        connections=runtime.connections,
        passage_store=runtime.passage_store,
        orphan_ttl_seconds=runtime.settings.rdv_passage_orphan_ttl_seconds,
    )
    session.open()
    try:
        await ws_message_loop(websocket, session)
    finally:
        session.close()
