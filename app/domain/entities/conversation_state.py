from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from app.domain.entities.rail import PointCode, TrainListing


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class AwaitingOrigin:
    pass


@dataclass(frozen=True)
class AwaitingOriginChoice:
    candidates: tuple[PointCode, ...]


@dataclass(frozen=True)
class AwaitingDestination:
    origin: PointCode


@dataclass(frozen=True)
class AwaitingDestinationChoice:
    origin: PointCode
    candidates: tuple[PointCode, ...]


@dataclass(frozen=True)
class AwaitingDate:
    origin: PointCode
    destination: PointCode


@dataclass(frozen=True)
class AwaitingTrainChoice:
    trains: tuple[TrainListing, ...]  # already filtered; list positions are the displayed indices
    origin: PointCode
    destination: PointCode
    travel_date: str


ConversationState = Union[
    Idle,
    AwaitingOrigin,
    AwaitingOriginChoice,
    AwaitingDestination,
    AwaitingDestinationChoice,
    AwaitingDate,
    AwaitingTrainChoice,
]
