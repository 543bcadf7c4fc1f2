"""
Process-wide provider-state store.

Holds a reference to exactly one active ``UserRepository``. The only way to
change it is ``set_active``, which swaps the reference under a lock;
repositories themselves are immutable, so readers never observe a partial
fixture.
"""

from __future__ import annotations

import logging
import threading

from .fixtures import ProviderState, repository_for
from .schemas import UserRepository

logger = logging.getLogger(__name__)


class ProviderStateStore:
    def __init__(self, initial: ProviderState = ProviderState.DEFAULT):
        self._lock = threading.Lock()
        self._state = initial
        self._repository = repository_for(initial)

    def get_active(self) -> UserRepository:
        with self._lock:
            return self._repository

    @property
    def active_state(self) -> ProviderState:
        with self._lock:
            return self._state

    def set_active(self, name: str) -> ProviderState:
        """
        Activate the fixture for a provider-state name.

        Unknown names resolve to ``ProviderState.DEFAULT``.

        Args:
            name: Provider state name as sent by the verification engine

        Returns:
            ProviderState: The state whose fixture is now active
        """
        state = ProviderState.from_name(name)
        repository = repository_for(state)
        with self._lock:
            previous = self._state
            self._state = state
            self._repository = repository

        if state is ProviderState.DEFAULT and name != ProviderState.DEFAULT.value:
            logger.info(f"Unknown provider state '{name}', using default fixture")
        logger.info(f"Provider state switched: {previous.value} -> {state.value}")
        return state
