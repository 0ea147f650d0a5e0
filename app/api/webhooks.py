from __future__ import annotations

import json
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response

from app.application.dto.webhook_event import TelegramUpdateDTO
from app.application.use_cases.handle_update import HandleUpdateUseCase
from app.core.config import settings
from app.infrastructure.telegram.webhook_verify import verify_secret_token
from app.wiring.dependencies import get_handle_update_use_case


router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/webhooks/telegram")
async def telegram_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    use_case: HandleUpdateUseCase = Depends(get_handle_update_use_case),
) -> Response:
    secret = request.headers.get("X-Telegram-Bot-Api-Secret-Token")
    if not verify_secret_token(secret, settings.TELEGRAM_WEBHOOK_SECRET, settings.ENV):
        return Response(status_code=403)

    body = await request.body()
    try:
        payload = json.loads(body.decode("utf-8")) if body else {}
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.exception("Failed to parse webhook body")
        return Response(status_code=400)

    try:
        update = TelegramUpdateDTO.model_validate(payload)
    except ValueError:
        logger.exception("Webhook body is not a Telegram update")
        return Response(status_code=400)

    events = update.extract_events()
    logger.info("Webhook received", extra={"message_id": update.update_id, "event": f"{len(events)} event(s)"})
    for event in events:
        background_tasks.add_task(use_case.handle, event)
    return Response(status_code=200)
