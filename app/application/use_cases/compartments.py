from __future__ import annotations

import logging
import re
from typing import Iterable, Protocol

from app.domain.entities.rail import CarSeatMap, CompartmentBlock

_SEAT_BOUND = re.compile(r"^\s*(\d+)[^\W\d_]*\s*$")


class CompartmentRule(Protocol):
    def blocks(self, first: int, last: int) -> Iterable[tuple[int, int]]:
        ...


class FourBerthCompartmentRule:
    """Compartments hold four consecutive seats starting at 1, 5, 9, ..."""

    size = 4

    def blocks(self, first: int, last: int) -> Iterable[tuple[int, int]]:
        for seat in range(first, last + 1):
            if seat % self.size == 1 and last - seat >= self.size - 1:
                yield seat, seat + self.size - 1


def parse_seat_range(token: str) -> tuple[int, int] | None:
    """Parse '21М-28Ж' style tokens into (21, 28). Returns None if the token is not a range."""
    parts = token.split("-")
    if len(parts) != 2:
        return None
    bounds = []
    for part in parts:
        match = _SEAT_BOUND.match(part)
        if not match:
            return None
        bounds.append(int(match.group(1)))
    return bounds[0], bounds[1]


class CompartmentReducer:
    """Turn free seat ranges of closed-compartment cars into whole free compartments."""

    def __init__(self, car_type: str = "купе", rule: CompartmentRule | None = None) -> None:
        self._car_type = car_type.lower()
        self._rule = rule or FourBerthCompartmentRule()
        self._logger = logging.getLogger(__name__)

    def accepts(self, car_type: str, wheelchair_accessible: bool) -> bool:
        return car_type.lower() == self._car_type and not wheelchair_accessible

    def reduce(self, seat_map: CarSeatMap) -> list[CompartmentBlock]:
        if not self.accepts(seat_map.car_type, seat_map.wheelchair_accessible):
            return []

        blocks: list[CompartmentBlock] = []
        for token in seat_map.seat_ranges:
            bounds = parse_seat_range(token)
            if bounds is None:
                self._logger.warning(
                    "Skipping unparsable seat range",
                    extra={"reason": token, "car_number": seat_map.car_number},
                )
                continue
            first, last = bounds
            if first > last:
                self._logger.warning(
                    "Upstream seat range is inverted",
                    extra={"reason": token, "car_number": seat_map.car_number},
                )
                continue
            for block_first, block_last in self._rule.blocks(first, last):
                blocks.append(
                    CompartmentBlock(car_number=seat_map.car_number, first_seat=block_first, last_seat=block_last)
                )
        return blocks

    def reduce_all(self, seat_maps: Iterable[CarSeatMap]) -> list[CompartmentBlock]:
        blocks: list[CompartmentBlock] = []
        for seat_map in seat_maps:
            blocks.extend(self.reduce(seat_map))
        return blocks
