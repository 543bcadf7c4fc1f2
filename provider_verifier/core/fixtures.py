"""
Provider-state fixtures for the user service.

Each known provider state maps to one immutable ``UserRepository``. State
names arriving from the verification engine are decoded into the closed
``ProviderState`` enumeration; anything unrecognised lands on
``ProviderState.DEFAULT`` (no users at all).
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

from .schemas import User, UserRepository


class ProviderState(str, Enum):
    BILLY_EXISTS = "User billy exists"
    BILLY_UNAUTHORIZED = "User billy is unauthorized"
    DEFAULT = "User billy does not exist"

    @classmethod
    def from_name(cls, name: str) -> "ProviderState":
        for state in cls:
            if state.value == name:
                return state
        return cls.DEFAULT


BILLY_EXISTS = UserRepository(
    users={
        "billy": User(name="billy", username="billy", password="issilly", type="admin"),
    }
)

BILLY_UNAUTHORIZED = UserRepository(
    users={
        "billy": User(name="billy", username="billy", password="issilly1", type="blocked"),
    }
)

BILLY_DOES_NOT_EXIST = UserRepository()

FIXTURES: Mapping[ProviderState, UserRepository] = MappingProxyType(
    {
        ProviderState.BILLY_EXISTS: BILLY_EXISTS,
        ProviderState.BILLY_UNAUTHORIZED: BILLY_UNAUTHORIZED,
        ProviderState.DEFAULT: BILLY_DOES_NOT_EXIST,
    }
)


def repository_for(state: ProviderState) -> UserRepository:
    return FIXTURES[state]
