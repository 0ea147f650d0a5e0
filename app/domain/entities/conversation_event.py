from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class UserText:
    text: str


@dataclass(frozen=True)
class UserChoice:
    token: str


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class ListSubscriptions:
    pass


ConversationEvent = Union[Start, UserText, UserChoice, Cancel, ListSubscriptions]
