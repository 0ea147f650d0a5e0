from __future__ import annotations

import logging

import httpx

from app.application.ports.conversation_store import ConversationStorePort
from app.application.ports.message_platform import MessagePlatformPort
from app.application.use_cases.conversation import ConversationCoordinator
from app.application.use_cases.send_reply import SendReplyUseCase
from app.domain.entities.message import IncomingEvent
from app.domain.entities.reply import RenderInstruction


class HandleUpdateUseCase:
    """Entry point for one inbound platform event: dedupe, route to the coordinator, send replies."""

    def __init__(
        self,
        store: ConversationStorePort,
        coordinator: ConversationCoordinator,
        send_reply: SendReplyUseCase,
        platform: MessagePlatformPort,
    ) -> None:
        self._store = store
        self._coordinator = coordinator
        self._send_reply = send_reply
        self._platform = platform
        self._logger = logging.getLogger(__name__)

    async def handle(self, event: IncomingEvent) -> list[RenderInstruction]:
        dedupe_key = f"{event.id}:{event.kind}"
        if self._store.has_processed(dedupe_key):
            self._logger.info("Duplicate update ignored", extra={"message_id": event.id, "session_id": event.session_id})
            return []
        self._store.mark_processed(dedupe_key)

        try:
            if event.kind == "choice":
                if event.callback_id:
                    await self._acknowledge(event)
                replies = await self._coordinator.on_user_choice(event.session_id, event.text)
            else:
                replies = await self._coordinator.on_user_text(event.session_id, event.text)

            for reply in replies:
                await self._send_reply.execute(event.session_id, reply)
            return replies
        except httpx.HTTPStatusError as e:
            self._logger.error(
                "Telegram API error",
                extra={
                    "message_id": event.id,
                    "session_id": event.session_id,
                    "status": e.response.status_code,
                    "reason": e.response.text[:200],
                },
            )
        except Exception as e:
            self._logger.exception(
                "Failed to handle update",
                extra={
                    "message_id": event.id,
                    "session_id": event.session_id,
                    "reason": f"{type(e).__name__}: {e}",
                },
            )
        return []

    async def _acknowledge(self, event: IncomingEvent) -> None:
        """Best effort: a failed ack is logged and the choice is still routed."""
        try:
            await self._platform.acknowledge_choice(event.callback_id)
        except httpx.HTTPError as e:
            self._logger.warning(
                "Callback acknowledgement failed",
                extra={"message_id": event.id, "session_id": event.session_id, "reason": str(e)},
            )
