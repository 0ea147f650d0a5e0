import logging

# Context attached with `extra=` across the bot, in the order it is printed.
CONTEXT_KEYS = (
    "session_id",
    "message_id",
    "event",
    "endpoint",
    "status",
    "attempt",
    "job_id",
    "car_number",
    "reason",
)


class ContextFormatter(logging.Formatter):
    """Appends known context fields as key=value after the message."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = [
            f"{key}={getattr(record, key)}" for key in CONTEXT_KEYS if getattr(record, key, None) not in (None, "")
        ]
        if not extras:
            return base
        return f"{base} | {' '.join(extras)}"


def configure_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(asctime)s %(levelname)s:%(name)s:%(message)s"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)
    # httpx logs every request URL at INFO, which repeats what the rzd client already logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
