from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.entities.rail import CarSeatMap, PointCode, TrainCar, TrainListing


class _UpstreamModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SuggestCityDTO(_UpstreamModel):
    express_code: str = Field(alias="expressCode")
    name: str

    @field_validator("express_code", mode="before")
    @classmethod
    def _coerce_code(cls, value):
        # upstream sends express codes as numbers for some stations
        return str(value) if isinstance(value, int) else value

    def to_entity(self) -> PointCode:
        return PointCode(code=self.express_code, display_name=self.name)


class SuggestResponseDTO(_UpstreamModel):
    city: list[SuggestCityDTO]


class TimetableCarDTO(_UpstreamModel):
    type: str
    disabled_person: bool = Field(default=False, alias="disabledPerson")
    free_seats: int = Field(alias="freeSeats")

    def to_entity(self) -> TrainCar:
        return TrainCar(
            car_type=self.type,
            seats_free=self.free_seats,
            wheelchair_accessible=self.disabled_person,
        )


class TimetableTrainDTO(_UpstreamModel):
    cars: list[TimetableCarDTO] = Field(default_factory=list)
    number: str
    date0: str
    time0: str

    def to_entity(self) -> TrainListing:
        return TrainListing(
            train_number=self.number,
            departure_date=self.date0,
            departure_time=self.time0,
            cars=tuple(car.to_entity() for car in self.cars),
        )


class TimetableDirectionDTO(_UpstreamModel):
    trains: list[TimetableTrainDTO] = Field(default_factory=list, alias="list")


class TimetableResponseDTO(_UpstreamModel):
    tp: list[TimetableDirectionDTO]


class CarriageCarDTO(_UpstreamModel):
    places: str = ""
    cnumber: str
    type: str
    disabled_person: bool = Field(default=False, alias="disabledPerson")

    @field_validator("cnumber", mode="before")
    @classmethod
    def _coerce_number(cls, value):
        return str(value) if isinstance(value, int) else value

    def to_entity(self) -> CarSeatMap:
        ranges = tuple(token.strip() for token in self.places.split(",") if token.strip())
        return CarSeatMap(
            car_number=self.cnumber,
            car_type=self.type,
            seat_ranges=ranges,
            wheelchair_accessible=self.disabled_person,
        )


class CarriageTrainDTO(_UpstreamModel):
    cars: list[CarriageCarDTO] = Field(default_factory=list)


class CarriageResponseDTO(_UpstreamModel):
    lst: list[CarriageTrainDTO]
