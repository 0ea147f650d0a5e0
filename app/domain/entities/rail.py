from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PointCode:
    code: str
    display_name: str


@dataclass(frozen=True)
class TrainCar:
    car_type: str
    seats_free: int
    wheelchair_accessible: bool = False


@dataclass(frozen=True)
class TrainListing:
    train_number: str
    departure_date: str  # as returned upstream, dd.mm.yyyy
    departure_time: str  # HH:MM
    cars: tuple[TrainCar, ...] = ()


@dataclass(frozen=True)
class CarSeatMap:
    car_number: str
    car_type: str
    seat_ranges: tuple[str, ...] = ()
    wheelchair_accessible: bool = False


@dataclass(frozen=True)
class CompartmentBlock:
    car_number: str
    first_seat: int
    last_seat: int
