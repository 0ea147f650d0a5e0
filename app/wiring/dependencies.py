from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from app.application.ports.message_platform import MessagePlatformPort
from app.application.use_cases.compartments import CompartmentReducer
from app.application.use_cases.conversation import ConversationCoordinator
from app.application.use_cases.handle_update import HandleUpdateUseCase
from app.application.use_cases.send_reply import SendReplyUseCase
from app.core.config import settings
from app.infrastructure.rzd.identity_pool import UserAgentPool
from app.infrastructure.rzd.polling_protocol import PollingProtocol
from app.infrastructure.rzd.queries import RzdCarriageQuery, RzdPointResolver, RzdScheduleQuery
from app.infrastructure.store.json_store import JsonSubscriptionStore
from app.infrastructure.store.memory_store import MemoryConversationStore
from app.infrastructure.telegram.mock_platform import MockTelegramPlatform
from app.infrastructure.telegram.telegram_client import TelegramClient
from app.infrastructure.telegram.telegram_platform import TelegramPlatform


@lru_cache
def get_conversation_store() -> MemoryConversationStore:
    return MemoryConversationStore()


@lru_cache
def get_subscription_store() -> JsonSubscriptionStore:
    return JsonSubscriptionStore(path=settings.SUBSCRIPTIONS_PATH)


@lru_cache
def get_polling_protocol() -> PollingProtocol:
    return PollingProtocol(
        identities=UserAgentPool(settings.RZD_USER_AGENTS),
        poll_interval=settings.RZD_POLL_INTERVAL_SECONDS,
        poll_max_attempts=settings.RZD_POLL_MAX_ATTEMPTS,
        blocked_statuses=tuple(settings.RZD_BLOCKED_STATUSES),
        timeout=settings.RZD_HTTP_TIMEOUT_SECONDS,
    )


@lru_cache
def get_coordinator() -> ConversationCoordinator:
    protocol = get_polling_protocol()
    return ConversationCoordinator(
        store=get_conversation_store(),
        point_resolver=RzdPointResolver(protocol, url=settings.RZD_SUGGEST_URL, language=settings.RZD_LANGUAGE),
        schedule_query=RzdScheduleQuery(protocol, url=settings.RZD_TIMETABLE_URL, layer_id=settings.RZD_ROUTES_LAYER),
        carriage_query=RzdCarriageQuery(
            protocol,
            url=settings.RZD_TIMETABLE_URL,
            layer_id=settings.RZD_CARRIAGES_LAYER,
        ),
        subscriptions=get_subscription_store(),
        reducer=CompartmentReducer(car_type=settings.COMPARTMENT_CAR_TYPE),
        retry_budget=settings.RZD_RETRY_BUDGET,
        car_type=settings.COMPARTMENT_CAR_TYPE,
        date_format=settings.DATE_FORMAT,
        timezone=ZoneInfo(settings.TIMEZONE),
    )


@lru_cache
def get_telegram_platform() -> MessagePlatformPort:
    logger = logging.getLogger(__name__)
    logger.info("TELEGRAM_BOT_TOKEN present=%s", bool(settings.TELEGRAM_BOT_TOKEN))
    logger.info("ENV=%s", settings.ENV)

    if not settings.TELEGRAM_BOT_TOKEN:
        if settings.ENV.lower() in {"dev", "local"}:
            logger.info("Using MockTelegramPlatform (token missing, ENV=dev/local)")
            return MockTelegramPlatform()
        raise ValueError("TELEGRAM_BOT_TOKEN is required to send Telegram replies.")

    logger.info("Using real TelegramPlatform")
    client = TelegramClient(bot_token=settings.TELEGRAM_BOT_TOKEN, api_base=settings.TELEGRAM_API_BASE)
    return TelegramPlatform(client=client)


@lru_cache
def get_handle_update_use_case() -> HandleUpdateUseCase:
    platform = get_telegram_platform()
    return HandleUpdateUseCase(
        store=get_conversation_store(),
        coordinator=get_coordinator(),
        send_reply=SendReplyUseCase(platform=platform, auto_reply_enabled=settings.AUTO_REPLY_ENABLED),
        platform=platform,
    )
