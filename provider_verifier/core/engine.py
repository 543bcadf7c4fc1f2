"""
Verification engine adapter.

The engine replays every interaction of the given pacts against a running
provider and compares the responses. This module only hands a
``VerificationRequest`` over to pact-python's verifier and reports the
aggregate outcome.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from pact import Verifier

from .exceptions import VerificationEngineError
from .schemas import VerificationRequest

logger = logging.getLogger(__name__)


class VerificationEngine(Protocol):
    def verify(self, request: VerificationRequest) -> bool:
        ...


class PactVerificationEngine:
    """Runs the Pact provider verifier against a list of pact URLs."""

    def __init__(self, log_dir: Optional[str] = None, log_level: str = "INFO"):
        self.log_dir = log_dir
        self.log_level = log_level

    def _verifier_options(self, request: VerificationRequest) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "provider_states_setup_url": request.states_setup_url,
            "broker_url": request.broker_url,
            "publish_verification_results": request.publish_results,
            "provider_app_version": request.provider_version,
            "log_level": self.log_level,
        }
        if request.broker_credentials is not None:
            options["broker_username"] = request.broker_credentials.username
            options["broker_password"] = request.broker_credentials.password
        if self.log_dir:
            Path(self.log_dir).mkdir(parents=True, exist_ok=True)
            options["log_dir"] = self.log_dir
        return options

    def verify(self, request: VerificationRequest) -> bool:
        verifier = Verifier(
            provider=request.provider_name,
            provider_base_url=request.provider_base_url,
        )
        try:
            return_code, _ = verifier.verify_pacts(
                *request.contract_urls,
                **self._verifier_options(request),
            )
        except Exception as e:
            raise VerificationEngineError(f"Pact verifier could not be run: {e}") from e

        logger.info(f"Pact verifier finished with return code {return_code}")
        return return_code == 0
