"""
Provider verification orchestrator.

Starts the instrumented provider, resolves the applicable pacts on the
broker and hands the whole run to the verification engine. The engine's
answer is the run's answer: the orchestrator never looks at individual
interactions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .config import Settings, get_settings
from .core.broker import BrokerClient
from .core.engine import PactVerificationEngine, VerificationEngine
from .core.exceptions import VerificationFailedError
from .core.metrics import metrics
from .core.schemas import BrokerCredentials, VerificationRequest
from .core.state_store import ProviderStateStore
from .provider import InstrumentedProvider

logger = logging.getLogger(__name__)


class RunState(Enum):
    """Phases of a verification run."""
    INIT = "init"
    PROVIDER_STARTING = "provider_starting"
    CONTRACTS_RESOLVED = "contracts_resolved"
    VERIFYING = "verifying"
    DONE = "done"


@dataclass
class VerificationOutcome:
    """Result of a successful run."""

    success: bool
    provider_base_url: str
    contract_urls: List[str] = field(default_factory=list)
    request: Optional[VerificationRequest] = None


class VerificationOrchestrator:
    """
    Drives one verification run through ``RunState``.

    The provider listener is started in the background and left running when
    the run ends; shutting it down belongs to the surrounding process.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        engine: Optional[VerificationEngine] = None,
        store: Optional[ProviderStateStore] = None,
        provider: Optional[InstrumentedProvider] = None,
        broker_client: Optional[BrokerClient] = None,
    ):
        self.settings = settings or get_settings()
        self.engine = engine or PactVerificationEngine(
            log_dir=self.settings.PACT_LOG_DIR,
            log_level=self.settings.LOG_LEVEL,
        )
        self.store = store if store is not None else ProviderStateStore()
        self.provider = provider
        self.broker_client = broker_client
        self.state = RunState.INIT
        self.succeeded: Optional[bool] = None

    def _transition(self, state: RunState) -> None:
        logger.info(f"Verification run: {self.state.value} -> {state.value}")
        self.state = state

    def _finish(self, success: bool) -> None:
        self.succeeded = success
        metrics.record_verification_run(success)
        self._transition(RunState.DONE)

    def _start_provider(self) -> InstrumentedProvider:
        if self.provider is None:
            self.provider = InstrumentedProvider(store=self.store, host=self.settings.PROVIDER_HOST)
        self.provider.start()
        self.provider.wait_until_ready(self.settings.PROVIDER_STARTUP_TIMEOUT)
        return self.provider

    def _broker_client(self, broker_url: str, credentials: Optional[BrokerCredentials]) -> BrokerClient:
        if self.broker_client is not None:
            return self.broker_client
        return BrokerClient(
            broker_url,
            self.settings.PROVIDER_NAME,
            credentials=credentials,
            timeout=self.settings.BROKER_TIMEOUT,
        )

    def run(
        self,
        broker_url: Optional[str] = None,
        target_tag: Optional[str] = None,
        consumer_filter: Optional[str] = None,
        credentials: Optional[BrokerCredentials] = None,
        publish_results: Optional[bool] = None,
        provider_version: Optional[str] = None,
    ) -> VerificationOutcome:
        """
        Verify the provider against every applicable pact.

        Arguments left as ``None`` fall back to the settings.

        Returns:
            VerificationOutcome: Details of the successful run

        Raises:
            ProviderStartupError: If the provider could not be started
            BrokerQueryError: If contract discovery failed
            VerificationEngineError: If the engine could not be run
            VerificationFailedError: If the engine reported a failure
        """
        if self.state is not RunState.INIT:
            raise RuntimeError("A VerificationOrchestrator runs exactly once")

        s = self.settings
        broker_url = s.PACT_BROKER_URL if broker_url is None else broker_url
        target_tag = s.PACT_TARGET_ENV if target_tag is None else target_tag
        consumer_filter = s.CONSUMER if consumer_filter is None else consumer_filter
        credentials = s.broker_credentials() if credentials is None else credentials
        publish_results = s.PUBLISH_VERIFICATION_RESULTS if publish_results is None else publish_results
        provider_version = s.PROVIDER_VERSION if provider_version is None else provider_version

        self._transition(RunState.PROVIDER_STARTING)
        try:
            provider = self._start_provider()
            contract_urls = self._broker_client(broker_url, credentials).resolve_contracts(
                target_tag, consumer_filter
            )
        except Exception:
            self._finish(False)
            raise
        self._transition(RunState.CONTRACTS_RESOLVED)
        logger.info(f"Pacts to verify: {contract_urls}")

        if not contract_urls:
            logger.info("No pacts apply to this provider, nothing to verify")
            self._finish(True)
            return VerificationOutcome(success=True, provider_base_url=provider.base_url)

        request = VerificationRequest(
            provider_name=s.PROVIDER_NAME,
            provider_base_url=provider.base_url,
            states_setup_url=provider.states_setup_url,
            contract_urls=tuple(contract_urls),
            broker_url=broker_url,
            broker_credentials=credentials,
            publish_results=publish_results,
            provider_version=provider_version,
        )

        self._transition(RunState.VERIFYING)
        try:
            success = self.engine.verify(request)
        except Exception:
            self._finish(False)
            raise

        self._finish(success)
        if not success:
            raise VerificationFailedError(
                f"Provider '{s.PROVIDER_NAME}' failed verification against {len(contract_urls)} pact(s)",
                contract_urls=contract_urls,
            )

        logger.info(f"Provider '{s.PROVIDER_NAME}' verified against {len(contract_urls)} pact(s)")
        return VerificationOutcome(
            success=True,
            provider_base_url=provider.base_url,
            contract_urls=contract_urls,
            request=request,
        )
