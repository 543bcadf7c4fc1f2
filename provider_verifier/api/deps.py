from __future__ import annotations

from fastapi import Request

from ..core.schemas import UserRepository
from ..core.state_store import ProviderStateStore


def get_state_store(request: Request) -> ProviderStateStore:
    return request.app.state.state_store


def get_user_repository(request: Request) -> UserRepository:
    """Snapshot of the active repository, taken once per request."""
    return get_state_store(request).get_active()
