from __future__ import annotations

import itertools
import threading
from typing import Iterable

from app.application.dto.polling import Identity
from app.application.ports.identity import IdentityProviderPort


class UserAgentPool(IdentityProviderPort):
    """Round-robin over a fixed list of browser user agents; safe to share across sessions."""

    def __init__(self, user_agents: Iterable[str]) -> None:
        agents = [ua.strip() for ua in user_agents if ua and ua.strip()]
        if not agents:
            raise ValueError("At least one user agent is required")
        self._cycle = itertools.cycle(agents)
        self._lock = threading.Lock()

    def next(self) -> Identity:
        with self._lock:
            return Identity(user_agent=next(self._cycle))
