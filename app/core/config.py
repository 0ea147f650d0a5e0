from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    TELEGRAM_BOT_TOKEN: str | None = None
    TELEGRAM_API_BASE: str = "https://api.telegram.org"
    TELEGRAM_WEBHOOK_SECRET: str | None = None

    RZD_SUGGEST_URL: str = "https://ticket.rzd.ru/api/v1/suggests"
    RZD_TIMETABLE_URL: str = "https://pass.rzd.ru/timetable/public/ru"
    RZD_ROUTES_LAYER: int = 5827
    RZD_CARRIAGES_LAYER: int = 5764
    RZD_LANGUAGE: str = "ru"

    RZD_RETRY_BUDGET: int = 5
    RZD_POLL_INTERVAL_SECONDS: float = 2.0
    RZD_POLL_MAX_ATTEMPTS: int = 5
    RZD_HTTP_TIMEOUT_SECONDS: float = 15.0
    RZD_BLOCKED_STATUSES: list[int] = [403, 429]
    RZD_USER_AGENTS: list[str] = [
        "Mozilla/5.0 (Linux; Android 14) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.6099.144 Mobile Safari/537.36",
        "Mozilla/5.0 (Linux; Android 13; SM-S918B) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/119.0.6045.163 Mobile Safari/537.36",
        "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1",
        "Mozilla/5.0 (Linux; Android 12; Pixel 6) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/118.0.5993.111 Mobile Safari/537.36",
    ]

    COMPARTMENT_CAR_TYPE: str = "купе"
    DATE_FORMAT: str = "%d.%m.%Y"
    TIMEZONE: str = "Europe/Moscow"

    SUBSCRIPTIONS_PATH: str = "./data/subscriptions.json"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    AUTO_REPLY_ENABLED: bool = True


settings = Settings()
