from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator


class ContractLink(BaseModel):
    """A single HAL link to a pact document, as returned by the broker."""

    model_config = ConfigDict(frozen=True)

    href: str


class ContractLinkSet(BaseModel):
    """The ``_links`` section of a broker "latest pacts for provider" response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    self_link: Optional[ContractLink] = Field(default=None, alias="self")
    provider: Optional[ContractLink] = None
    pacts: List[ContractLink] = Field(default_factory=list)


class PactListResponse(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    links: ContractLinkSet = Field(alias="_links")


class ProviderStateDirective(BaseModel):
    """Body posted by the verification engine to the state setup endpoint."""

    model_config = ConfigDict(extra="ignore")

    state: StrictStr = ""
    params: Optional[Dict[str, Any]] = None

    @field_validator("state", mode="before")
    @classmethod
    def null_state_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    username: str
    password: str
    type: str


class UserRepository(BaseModel):
    """Backing dataset for the user endpoints. Never mutated once installed."""

    model_config = ConfigDict(frozen=True)

    users: Dict[str, User] = Field(default_factory=dict)

    def by_username(self, username: str) -> Optional[User]:
        return self.users.get(username)


class LoginRequest(BaseModel):
    username: str
    password: str


class PublicUser(BaseModel):
    name: str
    username: str
    type: str


class LoginResponse(BaseModel):
    user: PublicUser


class StateSetupResponse(BaseModel):
    state: str
    fixture: str


class BrokerCredentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str
    password: str = Field(repr=False)


class VerificationRequest(BaseModel):
    """Everything the verification engine needs for one run."""

    model_config = ConfigDict(frozen=True)

    provider_name: str
    provider_base_url: str
    states_setup_url: str
    contract_urls: Tuple[str, ...]
    broker_url: str
    broker_credentials: Optional[BrokerCredentials] = None
    publish_results: bool = False
    provider_version: str
