from __future__ import annotations

from app.application.utils import tokens
from app.domain.entities.rail import CompartmentBlock, PointCode, TrainListing
from app.domain.entities.reply import Choice, RenderInstruction

RESET_NOTICE = "The current dialogue has been reset."
START_HINT = "Send /start to search for free compartments."


def ask_origin() -> RenderInstruction:
    return RenderInstruction(text="Type the departure station.")


def ask_destination(origin: PointCode) -> RenderInstruction:
    return RenderInstruction(text=f"Departure: {origin.display_name}. Type the arrival station.")


def ask_date(origin: PointCode, destination: PointCode) -> RenderInstruction:
    return RenderInstruction(
        text=f"{origin.display_name} -> {destination.display_name}. Send the travel date (day.month.year)."
    )


def point_candidates(prompt: str, candidates: list[PointCode] | tuple[PointCode, ...]) -> RenderInstruction:
    choices = tuple(
        Choice(label=candidate.display_name, token=tokens.encode(tokens.POINT, str(position)))
        for position, candidate in enumerate(candidates, start=1)
    )
    return RenderInstruction(text=prompt, choices=choices)


def compartment_seats_free(train: TrainListing, car_type: str) -> int:
    """Free seats in closed-compartment cars, ignoring the accessibility car."""
    target = car_type.lower()
    return sum(car.seats_free for car in train.cars if car.car_type.lower() == target and not car.wheelchair_accessible)


def train_listing(
    trains: list[TrainListing] | tuple[TrainListing, ...],
    car_type: str,
    origin: str,
    destination: str,
    travel_date: str,
) -> RenderInstruction:
    lines = []
    for position, train in enumerate(trains, start=1):
        lines.append(
            f"{position}. Train: {train.train_number}\n"
            f"Departure date: {train.departure_date}\n"
            f"Departure time: {train.departure_time}\n"
            f"Free compartment seats: {compartment_seats_free(train, car_type)}"
        )
    lines.append("Send the number of a train to see its free compartments.")
    return RenderInstruction(
        text="\n".join(lines),
        choices=(
            Choice(
                label="Watch this day",
                token=tokens.encode(tokens.WATCH_DAY, origin, destination, travel_date),
            ),
        ),
    )


def compartments(
    blocks: list[CompartmentBlock],
    origin: str,
    destination: str,
    train: TrainListing,
) -> RenderInstruction:
    if blocks:
        body = "\n".join(f"Car {b.car_number}: seats {b.first_seat}-{b.last_seat}" for b in blocks)
    else:
        body = f"No free compartments found. {START_HINT}"
    watch_token = tokens.encode(
        tokens.WATCH_TRAIN,
        origin,
        destination,
        train.departure_date,
        train.departure_time,
        train.train_number,
    )
    return RenderInstruction(
        text=f"{body}\n{RESET_NOTICE}",
        choices=(
            Choice(label="Watch this train", token=watch_token),
            Choice(label="Don't watch", token=tokens.encode(tokens.CANCEL)),
        ),
    )


def subscription_summary(key: str, record: dict[str, str]) -> RenderInstruction:
    kind = record.get("type", "")
    if kind == "day":
        text = (
            "Watching a day:\n"
            f"Id: {key}\n"
            f"Departure code: {record.get('origin', 'UNKNOWN')}\n"
            f"Arrival code: {record.get('destination', 'UNKNOWN')}\n"
            f"Date: {record.get('date', 'UNKNOWN')}"
        )
    elif kind == "train":
        text = (
            "Watching a train:\n"
            f"Id: {key}\n"
            f"Departure code: {record.get('origin', 'UNKNOWN')}\n"
            f"Arrival code: {record.get('destination', 'UNKNOWN')}\n"
            f"Departure date: {record.get('date', 'UNKNOWN')}\n"
            f"Departure time: {record.get('time', 'UNKNOWN')}\n"
            f"Train number: {record.get('train_number', 'UNKNOWN')}"
        )
    else:
        text = f"Unknown watch type:\nId: {key}"
    return RenderInstruction(
        text=text,
        choices=(Choice(label="Stop watching", token=tokens.encode(tokens.UNWATCH, key)),),
    )


def error(message: str, reset: bool = False) -> RenderInstruction:
    if reset:
        return RenderInstruction(text=f"{message.rstrip('.')}. {RESET_NOTICE}")
    return RenderInstruction(text=message)
