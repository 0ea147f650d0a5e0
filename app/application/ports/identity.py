from abc import ABC, abstractmethod

from app.application.dto.polling import Identity


class IdentityProviderPort(ABC):
    @abstractmethod
    def next(self) -> Identity:
        """Return the outbound identity for the next request attempt."""
        raise NotImplementedError
