from __future__ import annotations

from abc import ABC, abstractmethod

from app.domain.entities.rail import CarSeatMap, PointCode, TrainListing


class PointResolverPort(ABC):
    @abstractmethod
    async def run(self, query: str, retry_budget: int) -> list[PointCode]:
        """Resolve a station name fragment to candidate codes, in upstream order."""
        raise NotImplementedError


class ScheduleQueryPort(ABC):
    @abstractmethod
    async def run(self, origin: str, destination: str, date: str, retry_budget: int) -> list[TrainListing]:
        """
        List trains between two point codes on a date.
        The date must already be well-formed; no range validation happens here.
        """
        raise NotImplementedError


class CarriageQueryPort(ABC):
    @abstractmethod
    async def run(
        self,
        origin: str,
        destination: str,
        date: str,
        time: str,
        train_number: str,
        retry_budget: int,
    ) -> list[CarSeatMap]:
        """Fetch per-car seat-range strings for one departure."""
        raise NotImplementedError
