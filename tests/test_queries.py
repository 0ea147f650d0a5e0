"""
Tests for the typed station, timetable and carriage lookups.
"""

from __future__ import annotations

import httpx
import pytest

from app.application.exceptions import DecodeError, TransportError
from app.domain.entities.rail import CarSeatMap, PointCode, TrainCar, TrainListing
from app.infrastructure.rzd.identity_pool import UserAgentPool
from app.infrastructure.rzd.polling_protocol import PollingProtocol
from app.infrastructure.rzd.queries import RzdCarriageQuery, RzdPointResolver, RzdScheduleQuery

SUGGEST_URL = "https://ticket.example/api/v1/suggests"
TIMETABLE_URL = "https://pass.example/timetable/public/ru"


def _protocol(*bodies: tuple[int, dict]) -> tuple[PollingProtocol, list[httpx.Request]]:
    seen: list[httpx.Request] = []
    queue = list(bodies)

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        status, body = queue.pop(0)
        return httpx.Response(status, json=body)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PollingProtocol(identities=UserAgentPool(["ua"]), client=client, poll_interval=0), seen


@pytest.mark.asyncio
async def test_point_resolver_keeps_upstream_order():
    protocol, seen = _protocol(
        (200, {"city": [{"expressCode": "2000000", "name": "МОСКВА"}, {"expressCode": 2006004, "name": "МОСКВА ОКТЯБРЬСКАЯ"}]})
    )

    points = await RzdPointResolver(protocol, url=SUGGEST_URL).run("Москва", retry_budget=5)

    assert points == [
        PointCode(code="2000000", display_name="МОСКВА"),
        PointCode(code="2006004", display_name="МОСКВА ОКТЯБРЬСКАЯ"),
    ]
    params = seen[0].url.params
    assert params["Query"] == "Москва"
    assert params["TransportType"] == "rail"
    assert params["Language"] == "ru"


@pytest.mark.asyncio
async def test_point_resolver_without_city_field_is_a_decode_error():
    protocol, _ = _protocol((200, {"train": []}))

    with pytest.raises(DecodeError):
        await RzdPointResolver(protocol, url=SUGGEST_URL).run("xx", retry_budget=5)


@pytest.mark.asyncio
async def test_schedule_query_decodes_listing_after_poll():
    listing = {
        "tp": [
            {
                "list": [
                    {
                        "number": "016А",
                        "date0": "17.10.2026",
                        "time0": "23:55",
                        "cars": [
                            {"type": "Купе", "freeSeats": 12, "disabledPerson": False},
                            {"type": "Купе", "freeSeats": 2, "disabledPerson": True},
                            {"type": "Плац", "freeSeats": 30},
                        ],
                    }
                ]
            }
        ]
    }
    protocol, seen = _protocol((200, {"RID": 42}), (200, listing))

    trains = await RzdScheduleQuery(protocol, url=TIMETABLE_URL, layer_id=5827).run(
        "2000000", "2004000", "17.10.2026", retry_budget=5
    )

    assert trains == [
        TrainListing(
            train_number="016А",
            departure_date="17.10.2026",
            departure_time="23:55",
            cars=(
                TrainCar(car_type="Купе", seats_free=12, wheelchair_accessible=False),
                TrainCar(car_type="Купе", seats_free=2, wheelchair_accessible=True),
                TrainCar(car_type="Плац", seats_free=30, wheelchair_accessible=False),
            ),
        )
    ]
    first = seen[0].url.params
    assert (first["code0"], first["code1"], first["dt0"], first["layer_id"]) == ("2000000", "2004000", "17.10.2026", "5827")


@pytest.mark.asyncio
async def test_schedule_query_with_no_directions_is_empty():
    protocol, _ = _protocol((200, {"tp": []}))
    trains = await RzdScheduleQuery(protocol, url=TIMETABLE_URL, layer_id=5827).run("1", "2", "01.01.2027", retry_budget=5)
    assert trains == []


@pytest.mark.asyncio
async def test_schedule_query_surfaces_protocol_failure():
    protocol, _ = _protocol((502, {}))
    with pytest.raises(TransportError):
        await RzdScheduleQuery(protocol, url=TIMETABLE_URL, layer_id=5827).run("1", "2", "01.01.2027", retry_budget=5)


@pytest.mark.asyncio
async def test_carriage_query_splits_places_into_tokens():
    body = {"lst": [{"cars": [{"places": "001-004, 021М-028Ж,", "cnumber": "05", "type": "Купе"}]}]}
    protocol, seen = _protocol((200, body))

    cars = await RzdCarriageQuery(protocol, url=TIMETABLE_URL, layer_id=5764).run(
        "2000000", "2004000", "17.10.2026", "23:55", "016А", retry_budget=5
    )

    assert cars == [CarSeatMap(car_number="05", car_type="Купе", seat_ranges=("001-004", "021М-028Ж"))]
    params = seen[0].url.params
    assert (params["tnum0"], params["time0"], params["layer_id"]) == ("016А", "23:55", "5764")


@pytest.mark.asyncio
async def test_carriage_query_with_wrong_shape_is_a_decode_error():
    protocol, _ = _protocol((200, {"lst": [{"cars": [{"places": "1-4"}]}]}))
    with pytest.raises(DecodeError):
        await RzdCarriageQuery(protocol, url=TIMETABLE_URL, layer_id=5764).run("1", "2", "d", "t", "n", retry_budget=5)
