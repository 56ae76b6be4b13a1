"""
WebSocket push channel tests, running the full application lifespan.
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from starlette.websockets import WebSocketDisconnect

from tasktrack.db import base as db_base
from tasktrack.main import app
from tasktrack.utils.time import utc_now


@pytest.fixture
def live_client(tmp_path):
    """TestClient with startup/shutdown against a throwaway database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ws.db'}")
    original_engine = db_base.engine
    original_factory = db_base.async_session_factory
    db_base.engine = engine
    db_base.async_session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    try:
        with TestClient(app) as client:
            yield client
    finally:
        db_base.engine = original_engine
        db_base.async_session_factory = original_factory


def _register(client: TestClient, name: str) -> tuple[str, str]:
    response = client.post(
        "/v1/auth/register",
        json={"email": f"{name.lower()}@example.com", "password": "hunter22", "name": name},
    )
    assert response.status_code == 201
    body = response.json()
    return body["user"]["id"], body["token"]


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _new_task(**overrides):
    payload = {
        "title": "Review pull request",
        "description": "Check the migration",
        "due_date": (utc_now() + timedelta(days=1)).isoformat(),
        "priority": "MEDIUM",
    }
    payload.update(overrides)
    return payload


def test_handshake_without_token_is_refused(live_client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with live_client.websocket_connect("/v1/ws") as ws:
            ws.receive_json()

    assert exc_info.value.code == 1008


def test_handshake_with_bad_token_is_refused(live_client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with live_client.websocket_connect("/v1/ws?token=forged") as ws:
            ws.receive_json()

    assert exc_info.value.code == 1008


def test_created_task_is_pushed(live_client):
    _, alice_token = _register(live_client, "Alice")

    with live_client.websocket_connect(f"/v1/ws?token={alice_token}") as ws:
        response = live_client.post("/v1/tasks", json=_new_task(), headers=_bearer(alice_token))
        assert response.status_code == 201

        frame = ws.receive_json()

    assert frame["event"] == "task:created"
    assert frame["data"]["id"] == response.json()["task"]["id"]


def test_new_assignee_gets_targeted_event(live_client):
    _, alice_token = _register(live_client, "Alice")
    bob_id, bob_token = _register(live_client, "Bob")

    with live_client.websocket_connect(
        "/v1/ws", headers={"Authorization": f"Bearer {bob_token}"}
    ) as ws:
        task_id = live_client.post(
            "/v1/tasks", json=_new_task(), headers=_bearer(alice_token)
        ).json()["task"]["id"]
        live_client.put(
            f"/v1/tasks/{task_id}", json={"assigned_to_id": bob_id}, headers=_bearer(alice_token)
        )

        events = [ws.receive_json() for _ in range(3)]

    assert [e["event"] for e in events] == ["task:created", "task:updated", "task:assigned"]
    assert events[2]["data"]["message"] == "You have been assigned to task: Review pull request"


def test_typing_is_relayed_to_others(live_client):
    alice_id, alice_token = _register(live_client, "Alice")
    _, bob_token = _register(live_client, "Bob")

    with live_client.websocket_connect(f"/v1/ws?token={alice_token}") as alice_ws:
        with live_client.websocket_connect(f"/v1/ws?token={bob_token}") as bob_ws:
            alice_ws.send_text("not json")
            alice_ws.send_json({"type": "user:typing", "task_id": "task-7"})

            frame = bob_ws.receive_json()

    assert frame == {"event": "user:typing", "data": {"user_id": alice_id, "task_id": "task-7"}}


def test_health_counts_live_connections(live_client):
    _, token = _register(live_client, "Alice")

    with live_client.websocket_connect(f"/v1/ws?token={token}"):
        # Registration happens after accept; poll until it lands.
        for _ in range(50):
            if live_client.get("/v1/health").json()["connections"] == 1:
                break
        assert live_client.get("/v1/health").json()["connections"] == 1


def test_binary_frame_is_ignored(live_client):
    alice_id, alice_token = _register(live_client, "Alice")
    _, bob_token = _register(live_client, "Bob")

    with live_client.websocket_connect(f"/v1/ws?token={alice_token}") as alice_ws:
        with live_client.websocket_connect(f"/v1/ws?token={bob_token}") as bob_ws:
            alice_ws.send_bytes(b"\x00\x01")
            alice_ws.send_json({"type": "user:typing", "task_id": "task-9"})

            frame = bob_ws.receive_json()

    assert frame == {"event": "user:typing", "data": {"user_id": alice_id, "task_id": "task-9"}}


def test_client_task_update_is_rebroadcast(live_client):
    _, alice_token = _register(live_client, "Alice")
    _, bob_token = _register(live_client, "Bob")

    with live_client.websocket_connect(f"/v1/ws?token={alice_token}") as alice_ws:
        with live_client.websocket_connect(f"/v1/ws?token={bob_token}") as bob_ws:
            alice_ws.send_json({"type": "task:update", "data": {"id": "task-3", "status": "REVIEW"}})

            to_bob = bob_ws.receive_json()
            to_alice = alice_ws.receive_json()

    expected = {"event": "task:updated", "data": {"id": "task-3", "status": "REVIEW"}}
    assert to_bob == expected
    assert to_alice == expected
