from __future__ import annotations

import logging
from typing import Any

import httpx


class TelegramClient:
    def __init__(
        self,
        bot_token: str,
        api_base: str = "https://api.telegram.org",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = f"{api_base.rstrip('/')}/bot{bot_token}"
        self._client = client or httpx.AsyncClient(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    async def send_message(self, chat_id: str, text: str, reply_markup: dict[str, Any] | None = None) -> None:
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if reply_markup:
            payload["reply_markup"] = reply_markup
        await self._call("sendMessage", payload, chat_id=chat_id)

    async def answer_callback_query(self, callback_query_id: str) -> None:
        await self._call("answerCallbackQuery", {"callback_query_id": callback_query_id})

    async def _call(self, method: str, payload: dict[str, Any], chat_id: str | None = None) -> None:
        resp = await self._client.post(f"{self._base_url}/{method}", json=payload)
        if resp.status_code >= 400:
            try:
                error_json = resp.json()
                error_code = error_json.get("error_code")
                error_message = error_json.get("description")
            except ValueError:
                error_code = None
                error_message = resp.text

            self._logger.error(
                "Telegram call failed",
                extra={
                    "event": method,
                    "status": resp.status_code,
                    "error_code": error_code,
                    "reason": error_message,
                    "session_id": chat_id,
                },
            )
            resp.raise_for_status()

    async def aclose(self) -> None:
        await self._client.aclose()
