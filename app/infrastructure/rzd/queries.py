from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from app.application.dto.polling import Endpoint, Failed
from app.application.exceptions import DecodeError
from app.application.ports.rail_queries import CarriageQueryPort, PointResolverPort, ScheduleQueryPort
from app.domain.entities.rail import CarSeatMap, PointCode, TrainListing
from app.infrastructure.rzd.dto import CarriageResponseDTO, SuggestResponseDTO, TimetableResponseDTO
from app.infrastructure.rzd.polling_protocol import PollingProtocol

logger = logging.getLogger(__name__)


async def _fetch(protocol: PollingProtocol, endpoint: Endpoint, params: dict[str, str], retry_budget: int) -> dict[str, Any]:
    outcome = await protocol.submit(endpoint, params, retry_budget)
    if isinstance(outcome, Failed):
        raise outcome.error
    return outcome.payload


def _decode(model: type[BaseModel], payload: dict[str, Any], endpoint: Endpoint):
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.error(
            "Upstream response shape changed",
            extra={"endpoint": endpoint.name, "reason": str(e)},
        )
        raise DecodeError(f"Error on decoding {endpoint.name} response: {e.error_count()} invalid field(s)") from e


class RzdPointResolver(PointResolverPort):
    def __init__(self, protocol: PollingProtocol, url: str, language: str = "ru") -> None:
        self._protocol = protocol
        self._endpoint = Endpoint(name="suggests", url=url)
        self._language = language

    async def run(self, query: str, retry_budget: int) -> list[PointCode]:
        params = {
            "GroupResults": "true",
            "RailwaySortPriority": "true",
            "MergeSuburban": "true",
            "Query": query.strip(),
            "Language": self._language,
            "TransportType": "rail",
        }
        payload = await _fetch(self._protocol, self._endpoint, params, retry_budget)
        response = _decode(SuggestResponseDTO, payload, self._endpoint)
        return [city.to_entity() for city in response.city]


class RzdScheduleQuery(ScheduleQueryPort):
    def __init__(self, protocol: PollingProtocol, url: str, layer_id: int) -> None:
        self._protocol = protocol
        self._layer_id = str(layer_id)
        self._endpoint = Endpoint(name="timetable", url=url, poll_params=(("layer_id", self._layer_id),))

    async def run(self, origin: str, destination: str, date: str, retry_budget: int) -> list[TrainListing]:
        params = {
            "layer_id": self._layer_id,
            "dir": "0",
            "tfl": "1",
            "checkSeats": "1",
            "code0": origin,
            "code1": destination,
            "dt0": date,
            "md": "0",
        }
        payload = await _fetch(self._protocol, self._endpoint, params, retry_budget)
        response = _decode(TimetableResponseDTO, payload, self._endpoint)
        if not response.tp:
            return []
        return [train.to_entity() for train in response.tp[0].trains]


class RzdCarriageQuery(CarriageQueryPort):
    def __init__(self, protocol: PollingProtocol, url: str, layer_id: int) -> None:
        self._protocol = protocol
        self._layer_id = str(layer_id)
        self._endpoint = Endpoint(name="carriages", url=url, poll_params=(("layer_id", self._layer_id),))

    async def run(
        self,
        origin: str,
        destination: str,
        date: str,
        time: str,
        train_number: str,
        retry_budget: int,
    ) -> list[CarSeatMap]:
        params = {
            "layer_id": self._layer_id,
            "dir": "0",
            "seatDetails": "1",
            "code0": origin,
            "code1": destination,
            "dt0": date,
            "time0": time,
            "tnum0": train_number,
        }
        payload = await _fetch(self._protocol, self._endpoint, params, retry_budget)
        response = _decode(CarriageResponseDTO, payload, self._endpoint)
        if not response.lst:
            return []
        return [car.to_entity() for car in response.lst[0].cars]
