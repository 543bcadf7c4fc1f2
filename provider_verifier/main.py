from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from . import __version__
from .api.provider_states import router as provider_states_router
from .api.routes import router
from .config import get_settings
from .core.state_store import ProviderStateStore


def create_app(store: Optional[ProviderStateStore] = None) -> FastAPI:
    """
    Build the instrumented provider: the user endpoints under test plus the
    provider-state switchboard, served from one base URL.
    """
    logger = logging.getLogger(__name__)
    settings = get_settings()

    app = FastAPI(
        title="User Service (instrumented for Pact verification)",
        description="""
        ## User service provider

        Serves the user login endpoints exercised by consumer pacts, plus a
        `/setup` endpoint the Pact verifier uses to switch provider states.
        """,
        version=__version__,
        tags_metadata=[
            {"name": "users", "description": "Business endpoints under verification"},
            {"name": "pact-verification", "description": "Provider state setup"},
            {"name": "metrics", "description": "Prometheus metrics"},
        ],
    )
    app.state.state_store = store or ProviderStateStore()

    app.include_router(router)
    app.include_router(provider_states_router)

    logger.info(f"{settings.SERVICE_NAME} app created (provider={settings.PROVIDER_NAME})")
    return app
