from abc import ABC, abstractmethod


class SubscriptionStorePort(ABC):
    @abstractmethod
    def put(self, key: str, value: dict[str, str]) -> str:
        """Store a subscription record. Returns the key."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> str:
        """Remove a subscription record. Returns the key; raises NotFound if absent."""
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> dict[str, dict[str, str]]:
        raise NotImplementedError
