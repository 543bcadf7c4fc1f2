import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from provider_verifier.config import Settings
from provider_verifier.core.state_store import ProviderStateStore
from provider_verifier.main import create_app
from provider_verifier.provider import InstrumentedProvider


@pytest.fixture(scope="session", autouse=True)
def set_env():
    os.environ.setdefault("LOG_LEVEL", "INFO")
    os.environ.setdefault("PUBLISH_VERIFICATION_RESULTS", "false")


@pytest.fixture()
def store() -> ProviderStateStore:
    """A fresh provider-state store per test."""
    return ProviderStateStore()


@pytest.fixture()
def client(store: ProviderStateStore) -> TestClient:
    return TestClient(create_app(store))


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        PACT_BROKER_URL="http://broker.test",
        PACT_TARGET_ENV="master",
        CONSUMER="<all>",
        PUBLISH_VERIFICATION_RESULTS=False,
        PROVIDER_STARTUP_TIMEOUT=5.0,
    )


@pytest.fixture()
def live_provider(store: ProviderStateStore) -> Generator[InstrumentedProvider, None, None]:
    """A provider listening on a real port for the duration of a test."""
    provider = InstrumentedProvider(store=store)
    provider.start()
    provider.wait_until_ready(timeout=5.0)
    yield provider
    provider.stop()


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "pact: mark test as a Pact contract verification test"
    )
    config.addinivalue_line(
        "markers", "provider: mark test as a provider verification test"
    )
