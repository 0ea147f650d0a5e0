from __future__ import annotations

import logging

from app.application.ports.message_platform import MessagePlatformPort
from app.domain.entities.reply import RenderInstruction


class MockTelegramPlatform(MessagePlatformPort):
    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        self.sent: list[tuple[str, RenderInstruction]] = []

    async def send(self, recipient_id: str, reply: RenderInstruction) -> None:
        self.sent.append((recipient_id, reply))
        self._logger.info(
            "Mock send to Telegram",
            extra={"session_id": recipient_id, "reply_text": reply.text, "tokens": reply.tokens},
        )

    async def acknowledge_choice(self, callback_id: str) -> None:
        self._logger.debug("Mock callback acknowledged", extra={"event": callback_id})
