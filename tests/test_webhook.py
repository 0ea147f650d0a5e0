"""
Tests for the Telegram webhook: update parsing, secret check and background dispatch.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.application.dto.webhook_event import TelegramUpdateDTO
from app.core.config import settings
from app.main import app
from app.wiring.dependencies import get_handle_update_use_case

TEXT_UPDATE = {
    "update_id": 1001,
    "message": {
        "message_id": 7,
        "from": {"id": 555},
        "chat": {"id": 42},
        "date": 1700000000,
        "text": "/start",
    },
}

CHOICE_UPDATE = {
    "update_id": 1002,
    "callback_query": {
        "id": "cb-1",
        "from": {"id": 555},
        "data": "point|2",
        "message": {"message_id": 8, "chat": {"id": 42}, "date": 1700000010},
    },
}


class RecordingUseCase:
    def __init__(self) -> None:
        self.events = []

    async def handle(self, event):
        self.events.append(event)
        return []


@pytest.fixture
def recorder():
    use_case = RecordingUseCase()
    app.dependency_overrides[get_handle_update_use_case] = lambda: use_case
    yield use_case
    app.dependency_overrides.clear()


def test_text_message_becomes_text_event():
    (event,) = TelegramUpdateDTO.model_validate(TEXT_UPDATE).extract_events()

    assert event.kind == "text"
    assert event.session_id == "42"
    assert event.sender_id == "555"
    assert event.text == "/start"
    assert event.timestamp == 1700000000
    assert event.callback_id is None


def test_callback_query_becomes_choice_event():
    (event,) = TelegramUpdateDTO.model_validate(CHOICE_UPDATE).extract_events()

    assert event.kind == "choice"
    assert event.session_id == "42"
    assert event.text == "point|2"
    assert event.callback_id == "cb-1"


def test_updates_without_text_are_ignored():
    update = {"update_id": 1003, "message": {"chat": {"id": 42}, "date": 1700000000, "sticker": {}}}
    assert TelegramUpdateDTO.model_validate(update).extract_events() == []


def test_webhook_dispatches_events(recorder):
    with TestClient(app) as client:
        response = client.post("/webhooks/telegram", json=TEXT_UPDATE)

    assert response.status_code == 200
    assert [e.text for e in recorder.events] == ["/start"]


def test_webhook_rejects_wrong_secret(recorder, monkeypatch):
    monkeypatch.setattr(settings, "TELEGRAM_WEBHOOK_SECRET", "s3cret")

    with TestClient(app) as client:
        denied = client.post(
            "/webhooks/telegram",
            json=TEXT_UPDATE,
            headers={"X-Telegram-Bot-Api-Secret-Token": "wrong"},
        )
        allowed = client.post(
            "/webhooks/telegram",
            json=CHOICE_UPDATE,
            headers={"X-Telegram-Bot-Api-Secret-Token": "s3cret"},
        )

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert [e.kind for e in recorder.events] == ["choice"]


def test_webhook_rejects_malformed_body(recorder):
    with TestClient(app) as client:
        not_json = client.post(
            "/webhooks/telegram",
            content=b"{oops",
            headers={"Content-Type": "application/json"},
        )
        not_update = client.post("/webhooks/telegram", json={"message": {}})

    assert not_json.status_code == 400
    assert not_update.status_code == 400
    assert recorder.events == []


def test_health():
    with TestClient(app) as client:
        assert client.get("/health").json() == {"status": "ok"}
