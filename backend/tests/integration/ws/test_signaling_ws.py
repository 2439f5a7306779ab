"""Signaling websocket contract tests over the real endpoint."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from fastapi.testclient import TestClient

import rendezvous.runtime as runtime


def _join(room: str) -> dict[str, Any]:
    return {"type": "join", "payload": {"room": room}}


def _receive_event(websocket: Any, event_type: str, limit: int = 10) -> dict[str, Any]:
    """Read frames until one of ``event_type`` arrives, skipping diagnostic logs."""
    for _ in range(limit):
        message = websocket.receive_json()
        if message["type"] == event_type:
            return message
        assert message["type"] == "log", f"unexpected event {message}"
    raise AssertionError(f"no {event_type} event within {limit} frames")


async def _wait_for(websocket, event_type: str, timeout: float = 1.0) -> None:
    async def _poll() -> None:
        while not websocket.events(event_type):
            await asyncio.sleep(0.001)

    await asyncio.wait_for(_poll(), timeout=timeout)


def test_create_join_full_sequence(client: TestClient) -> None:
    """Contract: created to first, join+joined on pairing, full to third."""
    with client.websocket_connect("/ws") as ws_x:
        ws_x.send_json(_join("ABCDE"))
        assert _receive_event(ws_x, "created")["payload"] == {"room": "ABCDE"}

        with client.websocket_connect("/ws") as ws_y:
            ws_y.send_json(_join("ABCDE"))
            assert _receive_event(ws_y, "joined")["payload"] == {"room": "ABCDE"}
            assert _receive_event(ws_x, "join")["payload"] == {"room": "ABCDE"}

            with client.websocket_connect("/ws") as ws_z:
                ws_z.send_json(_join("ABCDE"))
                assert _receive_event(ws_z, "full")["payload"] == {"room": "ABCDE"}
                assert runtime.room_registry.occupancy("ABCDE") == 2


def test_passage_is_gone_after_both_members_disconnect(client: TestClient) -> None:
    with client.websocket_connect("/ws") as ws_x:
        ws_x.send_json(_join("ABCDE"))
        _receive_event(ws_x, "created")
        with client.websocket_connect("/ws") as ws_y:
            ws_y.send_json(_join("ABCDE"))
            _receive_event(ws_y, "joined")

            response = client.post("/passage/ABCDE", json={"passageId": "p1", "frameIds": [1, 2, 3]})
            assert response.status_code == 200
            assert client.get("/passage/ABCDE").status_code == 200

        assert client.get("/passage/ABCDE").status_code == 200

    response = client.get("/passage/ABCDE")
    assert response.status_code == 404
    assert response.json() == {"error": "Room not found"}
    assert runtime.room_registry.occupancy("ABCDE") == 0
    assert runtime.connections == {}


def test_ping_and_malformed_join(client: TestClient) -> None:
    with client.websocket_connect("/ws") as websocket:
        websocket.send_text("PING")
        assert websocket.receive_json()["type"] == "PONG"

        websocket.send_json({"type": "join", "payload": {}})
        error = websocket.receive_json()
        assert error["type"] == "error"
        assert error["payload"] == {"error": "Room ID is required"}


def test_endpoint_handler_cleans_up_on_disconnect(app_main, make_websocket) -> None:
    """Contract: the handler registers the connection and releases it on close."""

    async def _run() -> None:
        ws_x = make_websocket()
        ws_y = make_websocket()
        ws_x.push_join("ABCDE")
        task_x = asyncio.create_task(app_main.ws_signaling(ws_x))
        await _wait_for(ws_x, "created")

        ws_y.push_join("ABCDE")
        task_y = asyncio.create_task(app_main.ws_signaling(ws_y))
        await _wait_for(ws_y, "joined")
        await _wait_for(ws_x, "join")
        assert len(runtime.connections) == 2

        ws_x.disconnect()
        ws_y.disconnect()
        await asyncio.wait_for(asyncio.gather(task_x, task_y), timeout=1.0)

        assert ws_x.accept_count == 1
        assert runtime.connections == {}
        assert runtime.room_registry.occupancy("ABCDE") == 0

    asyncio.run(_run())


def test_disconnect_sweeps_passages_for_rooms_nobody_joined(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("RDV_PASSAGE_ORPHAN_TTL_SECONDS", "0")
    runtime.startup()
    for index in range(50):
        response = client.post(f"/passage/R{index:04d}", json={"passageId": f"p{index}", "frameIds": [index]})
        assert response.status_code == 200
    assert len(runtime.passage_store) == 50

    with client.websocket_connect("/ws") as ws_x:
        ws_x.send_json(_join("ABCDE"))
        _receive_event(ws_x, "created")

    assert len(runtime.passage_store) == 0
    assert client.get("/passage/R0000").status_code == 404
