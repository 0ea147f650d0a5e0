from __future__ import annotations

from app.application.exceptions import NotFound
from app.application.ports.conversation_store import ConversationStorePort
from app.application.ports.subscription_store import SubscriptionStorePort
from app.domain.entities.conversation_state import ConversationState, Idle


class MemoryConversationStore(ConversationStorePort):
    def __init__(self, processed_limit: int = 10_000) -> None:
        self._states: dict[str, ConversationState] = {}
        self._processed: dict[str, None] = {}
        self._processed_limit = processed_limit

    def get_state(self, session_id: str) -> ConversationState:
        return self._states.get(session_id, Idle())

    def set_state(self, session_id: str, state: ConversationState) -> None:
        self._states[session_id] = state

    def has_processed(self, event_id: str) -> bool:
        return event_id in self._processed

    def mark_processed(self, event_id: str) -> None:
        self._processed[event_id] = None
        if len(self._processed) > self._processed_limit:
            # dicts keep insertion order, so this drops the oldest id
            del self._processed[next(iter(self._processed))]


class MemorySubscriptionStore(SubscriptionStorePort):
    def __init__(self) -> None:
        self._records: dict[str, dict[str, str]] = {}

    def put(self, key: str, value: dict[str, str]) -> str:
        self._records[key] = dict(value)
        return key

    def delete(self, key: str) -> str:
        if key not in self._records:
            raise NotFound(f"no watch with id {key}")
        del self._records[key]
        return key

    def list_all(self) -> dict[str, dict[str, str]]:
        return {key: dict(value) for key, value in self._records.items()}
