from dataclasses import dataclass


@dataclass(frozen=True)
class IncomingEvent:
    id: str
    session_id: str
    sender_id: str
    kind: str  # "text" | "choice"
    text: str
    timestamp: int
    platform: str
    callback_id: str | None = None
