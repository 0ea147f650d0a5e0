from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from app.application.exceptions import RailError


@dataclass(frozen=True)
class Identity:
    user_agent: str


@dataclass(frozen=True)
class Endpoint:
    name: str
    url: str
    # query params sent with every poll POST (the initial request carries its own)
    poll_params: tuple[tuple[str, str], ...] = ()


@dataclass
class PollJob:
    job_id: str
    attempts_remaining: int


@dataclass(frozen=True)
class Ready:
    payload: dict[str, Any]


@dataclass(frozen=True)
class Failed:
    error: RailError

    @property
    def reason(self) -> str:
        return str(self.error)


PollOutcome = Union[Ready, Failed]
