"""
Provider-state switchboard.

The verification engine posts ``{"state": "<name>"}`` here before replaying
interactions that need a particular fixture. The handler swaps the active
user repository and answers 200; an unreadable body is answered with 503 and
leaves the active repository untouched.
"""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import ValidationError
from starlette.requests import ClientDisconnect

from ..core.fixtures import ProviderState
from ..core.metrics import metrics
from ..core.schemas import ProviderStateDirective, StateSetupResponse
from ..core.state_store import ProviderStateStore
from .deps import get_state_store

logger = logging.getLogger(__name__)

STATES_SETUP_PATH = "/setup"

router = APIRouter(tags=["pact-verification"])


@router.post(
    STATES_SETUP_PATH,
    response_model=StateSetupResponse,
    status_code=status.HTTP_200_OK,
    summary="Set up provider state",
    responses={503: {"description": "State directive could not be read or decoded"}},
)
async def setup_provider_state(
    request: Request,
    store: ProviderStateStore = Depends(get_state_store),
):
    try:
        body = await request.body()
        directive = ProviderStateDirective.model_validate(json.loads(body))
    except (ClientDisconnect, ValueError, ValidationError) as e:
        logger.warning(f"Rejected provider state directive: {e}")
        metrics.record_state_setup_failure()
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    resolved = store.set_active(directive.state)
    metrics.record_state_transition(resolved.name)
    return StateSetupResponse(state=directive.state, fixture=resolved.value)


@router.get(
    STATES_SETUP_PATH,
    response_model=Dict[str, Any],
    summary="List provider states",
)
async def list_provider_states(store: ProviderStateStore = Depends(get_state_store)) -> Dict[str, Any]:
    return {
        "active_state": store.active_state.value,
        "available_states": [state.value for state in ProviderState],
        "default_state": ProviderState.DEFAULT.value,
    }
