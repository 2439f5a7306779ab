"""Shared fixtures for rendezvous tests."""

from __future__ import annotations

import asyncio
from collections.abc import Generator
import importlib
import json
from typing import Any

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect


class FakeWebSocket:
    """In-memory stand-in for a Starlette websocket.

    Create it inside the running event loop; frames pushed with ``push_*``
    are returned by ``receive_text`` in order and ``disconnect`` ends the loop.
    """

    def __init__(self) -> None:
        self.accept_count = 0
        self.sent_messages: list[dict[str, Any]] = []
        self._inbound: asyncio.Queue[str | None] = asyncio.Queue()

    async def accept(self) -> None:
        self.accept_count += 1

    async def send_json(self, payload: dict[str, Any]) -> None:
        self.sent_messages.append(payload)

    async def receive_text(self) -> str:
        message = await self._inbound.get()
        if message is None:
            raise WebSocketDisconnect(code=1000)
        return message

    def push_text(self, text: str) -> None:
        self._inbound.put_nowait(text)

    def push_join(self, room: str) -> None:
        self.push_text(json.dumps({"type": "join", "payload": {"room": room}}))

    def disconnect(self) -> None:
        self._inbound.put_nowait(None)

    def events(self, event_type: str) -> list[dict[str, Any]]:
        return [message for message in self.sent_messages if message.get("type") == event_type]

    def lifecycle_types(self) -> list[str]:
        """Sent event types without diagnostic log frames."""
        return [message["type"] for message in self.sent_messages if message.get("type") != "log"]


@pytest.fixture
def make_websocket() -> type[FakeWebSocket]:
    return FakeWebSocket


@pytest.fixture
def app_main(monkeypatch: pytest.MonkeyPatch):
    """Freshly reloaded application module with reset runtime state."""
    monkeypatch.setenv("RDV_LOG_LEVEL", "DEBUG")

    import rendezvous.main as app_main

    app_main = importlib.reload(app_main)
    app_main.startup()
    return app_main


@pytest.fixture
def client(app_main) -> Generator[TestClient, None, None]:
    with TestClient(app_main.app) as test_client:
        yield test_client
