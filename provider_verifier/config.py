from __future__ import annotations

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.schemas import BrokerCredentials


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="", extra="ignore")

    SERVICE_NAME: str = "bobby-provider"
    LOG_LEVEL: str = "INFO"

    # Pact broker
    PACT_BROKER_URL: str = "http://pact-broker.keyshift.co:80"
    PACT_TARGET_ENV: str = "master"
    CONSUMER: str = "<all>"
    PACT_BROKER_USERNAME: Optional[str] = None
    PACT_BROKER_PASSWORD: Optional[str] = None
    BROKER_TIMEOUT: float = 10.0

    # Provider under test
    PROVIDER_NAME: str = "bobby"
    PROVIDER_VERSION: str = "1.0.0"
    PROVIDER_HOST: str = "127.0.0.1"
    PROVIDER_STARTUP_TIMEOUT: float = 10.0

    # Verification engine
    PUBLISH_VERIFICATION_RESULTS: bool = True
    PACT_LOG_DIR: str = "log"

    def broker_credentials(self) -> Optional[BrokerCredentials]:
        if self.PACT_BROKER_USERNAME is None and self.PACT_BROKER_PASSWORD is None:
            return None
        return BrokerCredentials(
            username=self.PACT_BROKER_USERNAME or "",
            password=self.PACT_BROKER_PASSWORD or "",
        )


def get_settings() -> Settings:
    return Settings()
