from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable
from zoneinfo import ZoneInfo

from app.application.exceptions import InvalidUserInput, NotFound, RailError
from app.application.ports.conversation_store import ConversationStorePort
from app.application.ports.rail_queries import CarriageQueryPort, PointResolverPort, ScheduleQueryPort
from app.application.ports.subscription_store import SubscriptionStorePort
from app.application.use_cases.compartments import CompartmentReducer
from app.application.utils import replies, tokens
from app.application.utils.date_parser import format_travel_date, parse_travel_date
from app.domain.entities.conversation_event import (
    Cancel,
    ConversationEvent,
    ListSubscriptions,
    Start,
    UserChoice,
    UserText,
)
from app.domain.entities.conversation_state import (
    AwaitingDate,
    AwaitingDestination,
    AwaitingDestinationChoice,
    AwaitingOrigin,
    AwaitingOriginChoice,
    AwaitingTrainChoice,
    ConversationState,
    Idle,
)
from app.domain.entities.rail import PointCode
from app.domain.entities.reply import RenderInstruction
from app.domain.entities.subscription import Subscription


@dataclass(frozen=True)
class Transition:
    state: ConversationState
    replies: list[RenderInstruction] = field(default_factory=list)


class ConversationCoordinator:
    """
    Walks one chat session through station, date and train selection.

    `transition` computes the next state and the replies for one event without touching
    the store; the `on_*` entry points serialize events per session, load and save state,
    and drop results that finish after the user cancelled.
    """

    def __init__(
        self,
        store: ConversationStorePort,
        point_resolver: PointResolverPort,
        schedule_query: ScheduleQueryPort,
        carriage_query: CarriageQueryPort,
        subscriptions: SubscriptionStorePort,
        reducer: CompartmentReducer | None = None,
        retry_budget: int = 5,
        car_type: str = "купе",
        date_format: str = "%d.%m.%Y",
        timezone: ZoneInfo | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._point_resolver = point_resolver
        self._schedule_query = schedule_query
        self._carriage_query = carriage_query
        self._subscriptions = subscriptions
        self._reducer = reducer or CompartmentReducer(car_type=car_type)
        self._retry_budget = retry_budget
        self._car_type = car_type
        self._date_format = date_format
        self._timezone = timezone or ZoneInfo("Europe/Moscow")
        self._clock = clock
        # Entries exist only while a session has a transition running or queued.
        self._locks: dict[str, asyncio.Lock] = {}
        self._pending: dict[str, int] = {}
        self._generations: dict[str, int] = {}
        self._logger = logging.getLogger(__name__)

    async def on_user_text(self, session_id: str, text: str) -> list[RenderInstruction]:
        command = _command(text)
        if command == "/cancel":
            return await self.on_cancel(session_id)
        if command == "/start":
            event: ConversationEvent = Start()
        elif command == "/tasks":
            event = ListSubscriptions()
        else:
            event = UserText(text=text)
        return await self._dispatch(session_id, event)

    async def on_user_choice(self, session_id: str, token: str) -> list[RenderInstruction]:
        decoded = tokens.decode(token)
        if decoded is not None and decoded.action == tokens.CANCEL:
            return await self.on_cancel(session_id)
        return await self._dispatch(session_id, UserChoice(token=token))

    async def on_cancel(self, session_id: str) -> list[RenderInstruction]:
        # Not taken under the session lock; an in-flight transition sees the new generation and drops its result.
        if session_id in self._pending:
            self._generations[session_id] = self._generations.get(session_id, 0) + 1
        self._store.set_state(session_id, Idle())
        self._logger.info("Dialogue cancelled", extra={"session_id": session_id, "event": "cancel"})
        return [RenderInstruction(text=f"Cancelled. {replies.START_HINT}")]

    async def _dispatch(self, session_id: str, event: ConversationEvent) -> list[RenderInstruction]:
        self._pending[session_id] = self._pending.get(session_id, 0) + 1
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        try:
            async with lock:
                generation = self._generations.get(session_id, 0)
                state = self._store.get_state(session_id)
                result = await self.transition(session_id, state, event)
                if self._generations.get(session_id, 0) != generation:
                    self._logger.info(
                        "Discarding result that finished after cancel",
                        extra={"session_id": session_id, "event": type(event).__name__},
                    )
                    return []
                self._store.set_state(session_id, result.state)
                self._logger.debug(
                    "Transition applied",
                    extra={
                        "session_id": session_id,
                        "event": type(event).__name__,
                        "reason": f"{type(state).__name__} -> {type(result.state).__name__}",
                    },
                )
                return list(result.replies)
        finally:
            self._release(session_id)

    def _release(self, session_id: str) -> None:
        self._pending[session_id] -= 1
        if not self._pending[session_id]:
            # nobody holds or waits on the lock any more
            del self._pending[session_id]
            self._locks.pop(session_id, None)
            self._generations.pop(session_id, None)

    async def transition(self, session_id: str, state: ConversationState, event: ConversationEvent) -> Transition:
        if isinstance(event, Cancel):
            return Transition(Idle(), [RenderInstruction(text=f"Cancelled. {replies.START_HINT}")])
        if isinstance(event, Start):
            return Transition(AwaitingOrigin(), [replies.ask_origin()])
        if isinstance(event, ListSubscriptions):
            return Transition(state, await self._list_subscriptions(session_id))
        if isinstance(event, UserChoice):
            return await self._on_choice(session_id, state, event.token)
        return await self._on_text(state, event.text)

    async def _on_text(self, state: ConversationState, text: str) -> Transition:
        if not text.strip():
            return Transition(state, [replies.error("Send me plain text")])
        if isinstance(state, AwaitingOrigin):
            return await self._resolve_points(
                text,
                prompt="Choose the departure station",
                next_state=lambda candidates: AwaitingOriginChoice(candidates=candidates),
            )
        if isinstance(state, AwaitingDestination):
            return await self._resolve_points(
                text,
                prompt="Choose the arrival station",
                next_state=lambda candidates: AwaitingDestinationChoice(origin=state.origin, candidates=candidates),
            )
        if isinstance(state, (AwaitingOriginChoice, AwaitingDestinationChoice)):
            return self._choose_point(state, text)
        if isinstance(state, AwaitingDate):
            return await self._receive_date(state, text)
        if isinstance(state, AwaitingTrainChoice):
            return await self._choose_train(state, text)
        return Transition(state, [RenderInstruction(text=replies.START_HINT)])

    async def _on_choice(self, session_id: str, state: ConversationState, token: str) -> Transition:
        decoded = tokens.decode(token)
        if decoded is None:
            return Transition(state, [replies.error("This button is no longer active")])

        if decoded.action in (tokens.WATCH_DAY, tokens.WATCH_TRAIN):
            return Transition(state, [await self._watch(session_id, decoded)])
        if decoded.action == tokens.UNWATCH:
            return Transition(state, [await self._unwatch(session_id, decoded.args[0])])
        if decoded.action == tokens.CANCEL:
            return Transition(Idle(), [RenderInstruction(text=f"Cancelled. {replies.START_HINT}")])
        if decoded.action == tokens.POINT and isinstance(state, (AwaitingOriginChoice, AwaitingDestinationChoice)):
            return self._choose_point(state, decoded.args[0])
        if decoded.action == tokens.TRAIN and isinstance(state, AwaitingTrainChoice):
            return await self._choose_train(state, decoded.args[0])
        return Transition(state, [replies.error("This button is no longer active")])

    async def _resolve_points(
        self,
        query: str,
        prompt: str,
        next_state: Callable[[tuple[PointCode, ...]], ConversationState],
    ) -> Transition:
        try:
            candidates = await self._point_resolver.run(query, self._retry_budget)
        except RailError as e:
            return Transition(Idle(), [replies.error(f"Error while looking up stations: {e}", reset=True)])
        if not candidates:
            return Transition(Idle(), [replies.error(f"No stations found for '{query.strip()}'", reset=True)])
        candidates = tuple(candidates)
        return Transition(next_state(candidates), [replies.point_candidates(prompt, candidates)])

    def _choose_point(self, state: AwaitingOriginChoice | AwaitingDestinationChoice, raw_index: str) -> Transition:
        # Out-of-range station picks keep the candidate list; train picks reset to Idle.
        try:
            chosen = _pick(state.candidates, raw_index, "Unknown station, choose one of the offered options")
        except InvalidUserInput as e:
            return Transition(state, [replies.error(str(e))])

        if isinstance(state, AwaitingOriginChoice):
            return Transition(AwaitingDestination(origin=chosen), [replies.ask_destination(chosen)])
        return Transition(
            AwaitingDate(origin=state.origin, destination=chosen),
            [replies.ask_date(state.origin, chosen)],
        )

    async def _receive_date(self, state: AwaitingDate, text: str) -> Transition:
        parsed = parse_travel_date(text, self._timezone)
        if parsed is None:
            return Transition(
                state,
                [replies.error(f"Could not read '{text.strip()}' as a date, use day.month.year")],
            )
        travel_date = format_travel_date(parsed, self._date_format)

        try:
            trains = await self._schedule_query.run(
                state.origin.code,
                state.destination.code,
                travel_date,
                self._retry_budget,
            )
        except RailError as e:
            return Transition(Idle(), [replies.error(f"Error while fetching trains: {e}", reset=True)])

        available = tuple(t for t in trains if replies.compartment_seats_free(t, self._car_type) > 0)
        if not available:
            return Transition(
                Idle(),
                [replies.error(f"Nothing found. {replies.START_HINT}", reset=True)],
            )

        return Transition(
            AwaitingTrainChoice(
                trains=available,
                origin=state.origin,
                destination=state.destination,
                travel_date=travel_date,
            ),
            [
                replies.train_listing(
                    available,
                    self._car_type,
                    state.origin.code,
                    state.destination.code,
                    travel_date,
                )
            ],
        )

    async def _choose_train(self, state: AwaitingTrainChoice, raw_index: str) -> Transition:
        try:
            train = _pick(state.trains, raw_index, "Wrong train number")
        except InvalidUserInput as e:
            return Transition(Idle(), [replies.error(str(e), reset=True)])

        try:
            seat_maps = await self._carriage_query.run(
                state.origin.code,
                state.destination.code,
                train.departure_date,
                train.departure_time,
                train.train_number,
                self._retry_budget,
            )
        except RailError as e:
            return Transition(Idle(), [replies.error(f"Error while fetching train carriages: {e}", reset=True)])

        blocks = self._reducer.reduce_all(seat_maps)
        return Transition(
            Idle(),
            [replies.compartments(blocks, state.origin.code, state.destination.code, train)],
        )

    async def _watch(self, session_id: str, decoded: tokens.ChoiceToken) -> RenderInstruction:
        if decoded.action == tokens.WATCH_DAY:
            origin, destination, travel_date = decoded.args
            subscription = Subscription(
                kind="day",
                session_id=session_id,
                origin=origin,
                destination=destination,
                date=travel_date,
                created_at=self._clock(),
            )
        else:
            origin, destination, travel_date, departure_time, train_number = decoded.args
            subscription = Subscription(
                kind="train",
                session_id=session_id,
                origin=origin,
                destination=destination,
                date=travel_date,
                time=departure_time,
                train_number=train_number,
                created_at=self._clock(),
            )

        key = f"{session_id}:{uuid.uuid4().hex[:8]}"
        try:
            key = await asyncio.to_thread(self._subscriptions.put, key, subscription.to_record())
        except RailError as e:
            return replies.error(f"Could not create watch: {e}")
        self._logger.info("Watch created", extra={"session_id": session_id, "event": f"watch-{subscription.kind}"})
        return RenderInstruction(text=f"Created watch with id {key}")

    async def _unwatch(self, session_id: str, key: str) -> RenderInstruction:
        try:
            record = (await asyncio.to_thread(self._subscriptions.list_all)).get(key)
            if record is None or record.get("session_id") != session_id:
                raise NotFound(f"no watch with id {key}")
            await asyncio.to_thread(self._subscriptions.delete, key)
        except RailError as e:
            return replies.error(f"Could not delete watch: {e}")
        self._logger.info("Watch deleted", extra={"session_id": session_id, "event": "unwatch"})
        return RenderInstruction(text=f"Deleted watch with id {key}")

    async def _list_subscriptions(self, session_id: str) -> list[RenderInstruction]:
        try:
            records = await asyncio.to_thread(self._subscriptions.list_all)
        except RailError as e:
            return [replies.error(f"Error on getting watches: {e}")]
        own = [(key, record) for key, record in sorted(records.items()) if record.get("session_id") == session_id]
        if not own:
            return [RenderInstruction(text="You are not watching anything.")]
        return [replies.subscription_summary(key, record) for key, record in own]


def _pick(items: tuple, raw_index: str, message: str):
    """Return the item at a 1-based position typed or pressed by the user."""
    index = tokens.parse_index(raw_index)
    if index is None or index > len(items):
        raise InvalidUserInput(message)
    return items[index - 1]


def _command(text: str) -> str | None:
    stripped = (text or "").strip()
    if not stripped.startswith("/"):
        return None
    # "/start@my_bot" in group chats
    return stripped.split()[0].split("@", 1)[0].lower()
