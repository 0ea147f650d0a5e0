from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from app.domain.entities.message import IncomingEvent


class TelegramUpdateDTO(BaseModel):
    model_config = ConfigDict(extra="ignore")

    update_id: int
    message: dict[str, Any] | None = None
    callback_query: dict[str, Any] | None = None

    def extract_events(self) -> list[IncomingEvent]:
        events: list[IncomingEvent] = []

        message = self.message or {}
        text = message.get("text")
        chat_id = (message.get("chat") or {}).get("id")
        sender = (message.get("from") or {}).get("id")
        timestamp = message.get("date")
        if text and chat_id is not None and timestamp is not None:
            events.append(
                IncomingEvent(
                    id=str(self.update_id),
                    session_id=str(chat_id),
                    sender_id=str(sender if sender is not None else chat_id),
                    kind="text",
                    text=str(text),
                    timestamp=int(timestamp),
                    platform="telegram",
                )
            )

        query = self.callback_query or {}
        data = query.get("data")
        callback_id = query.get("id")
        origin_message = query.get("message") or {}
        chat_id = (origin_message.get("chat") or {}).get("id")
        sender = (query.get("from") or {}).get("id")
        if data and callback_id and chat_id is not None:
            events.append(
                IncomingEvent(
                    id=str(self.update_id),
                    session_id=str(chat_id),
                    sender_id=str(sender if sender is not None else chat_id),
                    kind="choice",
                    text=str(data),
                    timestamp=int(origin_message.get("date") or 0),
                    platform="telegram",
                    callback_id=str(callback_id),
                )
            )

        return events
