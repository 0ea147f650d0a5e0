"""
Tests for inbound event handling: dedupe, callback acknowledgement and reply delivery.
"""

from __future__ import annotations

import httpx
import pytest

from app.application.use_cases.conversation import ConversationCoordinator
from app.application.use_cases.handle_update import HandleUpdateUseCase
from app.application.use_cases.send_reply import SendReplyUseCase
from app.domain.entities.conversation_state import AwaitingDestination, AwaitingOriginChoice
from app.domain.entities.message import IncomingEvent
from app.domain.entities.rail import PointCode
from app.domain.entities.reply import RenderInstruction
from app.infrastructure.store.memory_store import MemoryConversationStore, MemorySubscriptionStore
from app.infrastructure.telegram.mock_platform import MockTelegramPlatform


class StubCoordinator:
    def __init__(self, fail: bool = False) -> None:
        self.calls: list[tuple[str, str, str]] = []
        self._fail = fail

    async def on_user_text(self, session_id, text):
        self.calls.append(("text", session_id, text))
        if self._fail:
            raise RuntimeError("boom")
        return [RenderInstruction(text=f"echo {text}")]

    async def on_user_choice(self, session_id, token):
        self.calls.append(("choice", session_id, token))
        return [RenderInstruction(text=f"chose {token}")]


class AckRecordingPlatform(MockTelegramPlatform):
    def __init__(self) -> None:
        super().__init__()
        self.acknowledged: list[str] = []

    async def acknowledge_choice(self, callback_id: str) -> None:
        self.acknowledged.append(callback_id)


def _event(kind: str = "text", text: str = "hello", callback_id: str | None = None) -> IncomingEvent:
    return IncomingEvent(
        id="1001",
        session_id="42",
        sender_id="555",
        kind=kind,
        text=text,
        timestamp=1700000000,
        platform="telegram",
        callback_id=callback_id,
    )


def _use_case(coordinator, platform, auto_reply_enabled: bool = True) -> HandleUpdateUseCase:
    return HandleUpdateUseCase(
        store=MemoryConversationStore(),
        coordinator=coordinator,
        send_reply=SendReplyUseCase(platform=platform, auto_reply_enabled=auto_reply_enabled),
        platform=platform,
    )


@pytest.mark.asyncio
async def test_text_event_is_routed_and_reply_sent():
    platform = AckRecordingPlatform()
    coordinator = StubCoordinator()

    replies = await _use_case(coordinator, platform).handle(_event())

    assert coordinator.calls == [("text", "42", "hello")]
    assert [r.text for r in replies] == ["echo hello"]
    assert [(to, r.text) for to, r in platform.sent] == [("42", "echo hello")]


@pytest.mark.asyncio
async def test_choice_event_is_acknowledged_before_routing():
    platform = AckRecordingPlatform()
    coordinator = StubCoordinator()

    await _use_case(coordinator, platform).handle(_event(kind="choice", text="train|1", callback_id="cb-1"))

    assert platform.acknowledged == ["cb-1"]
    assert coordinator.calls == [("choice", "42", "train|1")]


@pytest.mark.asyncio
async def test_duplicate_delivery_is_processed_once():
    platform = AckRecordingPlatform()
    coordinator = StubCoordinator()
    use_case = _use_case(coordinator, platform)

    await use_case.handle(_event())
    assert await use_case.handle(_event()) == []

    assert len(coordinator.calls) == 1
    assert len(platform.sent) == 1


@pytest.mark.asyncio
async def test_disabled_auto_reply_does_not_send():
    platform = AckRecordingPlatform()

    replies = await _use_case(StubCoordinator(), platform, auto_reply_enabled=False).handle(_event())

    assert [r.text for r in replies] == ["echo hello"]
    assert platform.sent == []


@pytest.mark.asyncio
async def test_unexpected_failure_is_logged_not_raised(caplog):
    platform = AckRecordingPlatform()

    replies = await _use_case(StubCoordinator(fail=True), platform).handle(_event())

    assert replies == []
    assert platform.sent == []
    assert "Failed to handle update" in caplog.text


class ExpiredCallbackPlatform(MockTelegramPlatform):
    async def acknowledge_choice(self, callback_id: str) -> None:
        request = httpx.Request("POST", "https://api.telegram.org/botTOKEN/answerCallbackQuery")
        response = httpx.Response(400, request=request, json={"description": "query is too old"})
        raise httpx.HTTPStatusError("400 Bad Request", request=request, response=response)


@pytest.mark.asyncio
async def test_failed_acknowledgement_still_applies_choice(caplog):
    moscow = PointCode(code="2000000", display_name="МОСКВА")
    moscow_okt = PointCode(code="2006004", display_name="МОСКВА ОКТЯБРЬСКАЯ")
    store = MemoryConversationStore()
    store.set_state("42", AwaitingOriginChoice(candidates=(moscow, moscow_okt)))
    platform = ExpiredCallbackPlatform()
    coordinator = ConversationCoordinator(
        store=store,
        point_resolver=None,
        schedule_query=None,
        carriage_query=None,
        subscriptions=MemorySubscriptionStore(),
    )
    use_case = HandleUpdateUseCase(
        store=store,
        coordinator=coordinator,
        send_reply=SendReplyUseCase(platform=platform),
        platform=platform,
    )

    replies = await use_case.handle(_event(kind="choice", text="point|2", callback_id="cb-old"))

    assert store.get_state("42") == AwaitingDestination(origin=moscow_okt)
    assert len(replies) == 1
    assert [to for to, _ in platform.sent] == ["42"]
    assert "Callback acknowledgement failed" in caplog.text
