from abc import ABC, abstractmethod

from app.domain.entities.reply import RenderInstruction


class MessagePlatformPort(ABC):
    @abstractmethod
    async def send(self, recipient_id: str, reply: RenderInstruction) -> None:
        raise NotImplementedError

    @abstractmethod
    async def acknowledge_choice(self, callback_id: str) -> None:
        """Tell the platform a button press was received (stops the client spinner)."""
        raise NotImplementedError
