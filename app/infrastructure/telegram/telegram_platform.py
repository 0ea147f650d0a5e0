from __future__ import annotations

from typing import Any

from app.application.ports.message_platform import MessagePlatformPort
from app.domain.entities.reply import RenderInstruction
from app.infrastructure.telegram.telegram_client import TelegramClient


def inline_keyboard(reply: RenderInstruction) -> dict[str, Any] | None:
    """One button per row, in the order the choices were offered."""
    if not reply.choices:
        return None
    return {
        "inline_keyboard": [
            [{"text": choice.label, "callback_data": choice.token}] for choice in reply.choices
        ]
    }


class TelegramPlatform(MessagePlatformPort):
    def __init__(self, client: TelegramClient) -> None:
        self._client = client

    async def send(self, recipient_id: str, reply: RenderInstruction) -> None:
        await self._client.send_message(chat_id=recipient_id, text=reply.text, reply_markup=inline_keyboard(reply))

    async def acknowledge_choice(self, callback_id: str) -> None:
        await self._client.answer_callback_query(callback_id)
