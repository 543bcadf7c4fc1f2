"""
Pact broker client for contract discovery.

Resolves the pact URLs a provider must be verified against for a target
environment tag, optionally narrowed to a single consumer.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import requests
from pydantic import ValidationError

from .exceptions import BrokerQueryError
from .metrics import metrics
from .schemas import BrokerCredentials, ContractLink, PactListResponse

logger = logging.getLogger(__name__)

ALL_CONSUMERS = "<all>"


def select_contracts(links: List[ContractLink], consumer_filter: str) -> List[str]:
    """
    Pick the pact hrefs that apply to ``consumer_filter``.

    ``ALL_CONSUMERS`` keeps every link. Any other value keeps links whose href
    contains ``/consumer/<filter>``; this is a plain substring test, so a
    filter of ``bil`` also matches ``/consumer/billy``.
    """
    marker = f"/consumer/{consumer_filter}"
    hrefs = (
        link.href
        for link in links
        if consumer_filter == ALL_CONSUMERS or marker in link.href
    )
    return list(dict.fromkeys(hrefs))


class BrokerClient:
    """
    Read-only client for the broker's "latest pacts by tag" resource.

    A single GET is issued per call. There are no retries: any failure is
    raised as ``BrokerQueryError`` and the caller is expected to abort.
    """

    def __init__(
        self,
        broker_url: str,
        provider_name: str,
        credentials: Optional[BrokerCredentials] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.broker_url = broker_url.rstrip("/")
        self.provider_name = provider_name
        self.credentials = credentials
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_headers(self) -> dict:
        return {"Accept": "application/hal+json, application/json"}

    def latest_pacts_url(self, target_tag: str) -> str:
        return f"{self.broker_url}/pacts/provider/{self.provider_name}/latest/{target_tag}"

    def fetch_links(self, target_tag: str) -> PactListResponse:
        url = self.latest_pacts_url(target_tag)
        auth = None
        if self.credentials is not None:
            auth = (self.credentials.username, self.credentials.password)

        logger.info(f"Querying Pact broker: GET {url}")
        try:
            response = self.session.get(
                url,
                headers=self._get_headers(),
                auth=auth,
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = PactListResponse.model_validate(response.json())
        except requests.RequestException as e:
            metrics.record_broker_query(success=False)
            raise BrokerQueryError(url, str(e)) from e
        except (ValueError, ValidationError) as e:
            metrics.record_broker_query(success=False)
            raise BrokerQueryError(url, f"malformed response body: {e}") from e

        metrics.record_broker_query(success=True)
        return payload

    def resolve_contracts(self, target_tag: str, consumer_filter: str = ALL_CONSUMERS) -> List[str]:
        """
        Resolve the pact URLs for this provider.

        Args:
            target_tag: Environment tag, e.g. ``master`` or ``prod``
            consumer_filter: Consumer name, or ``ALL_CONSUMERS``

        Returns:
            List[str]: Pact hrefs in broker order, unmodified. Empty when the
            broker knows no applicable pacts.

        Raises:
            BrokerQueryError: On network failure, non-2xx status or an
                undecodable body
        """
        payload = self.fetch_links(target_tag)
        contract_urls = select_contracts(payload.links.pacts, consumer_filter)
        logger.info(
            f"Resolved {len(contract_urls)} of {len(payload.links.pacts)} pacts "
            f"for provider '{self.provider_name}' (tag={target_tag}, consumer={consumer_filter})"
        )
        return contract_urls


def resolve_contracts(
    broker_url: str,
    target_tag: str,
    consumer_filter: str = ALL_CONSUMERS,
    provider_name: str = "bobby",
    credentials: Optional[BrokerCredentials] = None,
    timeout: Optional[float] = None,
) -> List[str]:
    client = BrokerClient(broker_url, provider_name, credentials=credentials, timeout=timeout)
    return client.resolve_contracts(target_tag, consumer_filter)
