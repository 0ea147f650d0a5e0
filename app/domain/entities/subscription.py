from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Subscription:
    kind: str  # "day" | "train"
    session_id: str
    origin: str
    destination: str
    date: str
    time: str | None = None
    train_number: str | None = None
    created_at: float | None = None

    def to_record(self) -> dict[str, str]:
        record = {
            "type": self.kind,
            "session_id": self.session_id,
            "origin": self.origin,
            "destination": self.destination,
            "date": self.date,
        }
        if self.time is not None:
            record["time"] = self.time
        if self.train_number is not None:
            record["train_number"] = self.train_number
        if self.created_at is not None:
            record["created_at"] = str(self.created_at)
        return record
