"""WebSocket relay tests: pushes triggered by REST writes."""
from __future__ import annotations

import contextlib

import jwt
import pytest
from fastapi.testclient import TestClient

from support_chat.api.deps import get_uow
from support_chat.api.v1.routers import ws as ws_router
from support_chat.app import create_app
from support_chat.config import settings
from support_chat.domain.value_objects.enums import SessionStatus
from tests.conftest import FakeUoW, make_session


def _token(sub: int, kind: str = "user") -> str:
    return jwt.encode({"sub": str(sub), "kind": kind}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
def app_with_uow():
    app = create_app()
    uow = FakeUoW()

    async def _override():
        yield uow

    app.dependency_overrides[get_uow] = _override
    return app, uow


def test_ping_pong(app_with_uow):
    app, _ = app_with_uow
    with TestClient(app) as client, client.websocket_connect("/ws/chat") as ws:
        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong", "data": {}}


def test_invalid_payload(app_with_uow):
    app, _ = app_with_uow
    with TestClient(app) as client, client.websocket_connect("/ws/chat") as ws:
        ws.send_text("not json")
        assert ws.receive_json()["data"]["code"] == "invalid_payload"


def test_token_on_connect_authenticates(app_with_uow):
    app, _ = app_with_uow
    with TestClient(app) as client, client.websocket_connect(f"/ws/chat?token={_token(42)}") as ws:
        reply = ws.receive_json()
        assert reply == {"type": "authenticated", "data": {"identity": "user:42", "verified": True}}
        assert "user:42" in app.state.connections


def test_announced_identity_cannot_send(app_with_uow):
    app, _ = app_with_uow
    with TestClient(app) as client, client.websocket_connect("/ws/chat") as ws:
        ws.send_json({"type": "user_login", "data": {"userId": "42"}})
        assert ws.receive_json()["data"] == {"identity": "user:42", "verified": False}

        ws.send_json({"type": "message.send", "data": {"session_id": "session_1_a", "content": "hi"}})
        reply = ws.receive_json()
        assert reply["type"] == "message.error"
        assert reply["data"]["code"] == "unauthenticated"


def test_user_message_is_pushed_to_assigned_admin(app_with_uow):
    app, uow = app_with_uow
    session = uow.sessions.add(make_session(owner=42, assignee=1, status=SessionStatus.ACTIVE))

    with TestClient(app) as client, client.websocket_connect("/ws/chat") as ws:
        ws.send_json({"type": "auth", "data": {"token": _token(1, "admin")}})
        assert ws.receive_json()["type"] == "authenticated"

        resp = client.post(
            f"/api/v1/chat/sessions/{session.session_id}/messages",
            json={"content": "my order is late"},
            headers={"Authorization": f"Bearer {_token(42)}"},
        )
        assert resp.status_code == 201

        event = ws.receive_json()
        assert event["type"] == "message.created"
        assert event["data"]["session_id"] == session.session_id
        assert event["data"]["message"]["content"] == "my order is late"
        assert event["data"]["message"]["sender"] == "user"


def test_disconnect_unregisters(app_with_uow):
    app, _ = app_with_uow
    with TestClient(app) as client:
        with client.websocket_connect(f"/ws/chat?token={_token(7)}") as ws:
            ws.receive_json()
            assert "user:7" in app.state.connections
        resp = client.get("/healthz")
        assert resp.json()["connections"] == 0


@pytest.fixture
def socket_uow(app_with_uow, monkeypatch):
    """Route the socket handlers' own DB sessions to the in-memory UoW."""
    _, uow = app_with_uow
    monkeypatch.setattr(ws_router, "AsyncSessionLocal", contextlib.nullcontext)
    monkeypatch.setattr(ws_router, "SqlAlchemyUoW", lambda _session: uow)
    return uow


@pytest.mark.parametrize("content", [123, ["hi"], None])
def test_non_text_content_is_a_validation_error(app_with_uow, socket_uow, content):
    app, _ = app_with_uow
    session = socket_uow.sessions.add(make_session(owner=42))

    with TestClient(app) as client, client.websocket_connect(f"/ws/chat?token={_token(42)}") as ws:
        ws.receive_json()
        ws.send_json({"type": "message.send", "data": {"session_id": session.session_id, "content": content}})
        reply = ws.receive_json()

    assert reply["type"] == "message.error"
    assert reply["data"]["code"] == "ValidationError"
    assert socket_uow.messages_of(session) == []


def test_legacy_send_message_event(app_with_uow, socket_uow):
    app, _ = app_with_uow
    session = socket_uow.sessions.add(make_session(owner=42))

    with TestClient(app) as client, client.websocket_connect(f"/ws/chat?token={_token(42)}") as ws:
        ws.receive_json()
        ws.send_json({"type": "send_message", "data": {"sessionId": session.session_id, "content": "still there?"}})
        reply = ws.receive_json()

    assert reply["type"] == "message.sent"
    stored = socket_uow.messages_of(session)
    assert [m.content for m in stored] == ["still there?"]
    assert reply["data"]["message_id"] == str(stored[0].id)
