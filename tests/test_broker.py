import json
from unittest.mock import MagicMock

import pytest
import requests

from provider_verifier.core.broker import ALL_CONSUMERS, BrokerClient, select_contracts
from provider_verifier.core.exceptions import BrokerQueryError
from provider_verifier.core.schemas import BrokerCredentials, ContractLink

BROKER = "http://broker.test"
BILLY = "http://broker.test/pacts/provider/bobby/consumer/billy/version/1.0.0"
MILLY = "http://broker.test/pacts/provider/bobby/consumer/milly/version/1.0.0"
BILLY_BOB = "http://broker.test/pacts/provider/bobby/consumer/billybob/version/2.1.0"


def make_response(status_code: int = 200, body=None, raw: bytes = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = raw if raw is not None else json.dumps(body).encode("utf-8")
    response.url = f"{BROKER}/pacts/provider/bobby/latest/master"
    return response


def broker_body(*hrefs: str) -> dict:
    return {
        "_links": {
            "self": {"href": f"{BROKER}/pacts/provider/bobby/latest/master"},
            "provider": {"href": f"{BROKER}/pacticipants/bobby"},
            "pacts": [{"href": href} for href in hrefs],
        }
    }


def make_client(response=None, error=None, credentials=None) -> BrokerClient:
    session = MagicMock(spec=requests.Session)
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return BrokerClient(BROKER, "bobby", credentials=credentials, timeout=10, session=session)


def test_queries_latest_pacts_for_tag():
    client = make_client(make_response(body=broker_body(BILLY)))

    client.resolve_contracts("prod", ALL_CONSUMERS)

    args, kwargs = client.session.get.call_args
    assert args[0] == "http://broker.test/pacts/provider/bobby/latest/prod"
    assert kwargs["timeout"] == 10
    assert kwargs["auth"] is None


def test_trailing_slash_on_broker_url_is_ignored():
    client = BrokerClient(BROKER + "/", "bobby", session=MagicMock())
    assert client.latest_pacts_url("master") == "http://broker.test/pacts/provider/bobby/latest/master"


def test_credentials_are_sent_as_basic_auth():
    creds = BrokerCredentials(username="ci", password="s3cret")
    client = make_client(make_response(body=broker_body()), credentials=creds)

    client.resolve_contracts("master")

    assert client.session.get.call_args.kwargs["auth"] == ("ci", "s3cret")


def test_all_sentinel_returns_every_pact_unfiltered():
    client = make_client(make_response(body=broker_body(BILLY, MILLY, BILLY_BOB)))

    assert client.resolve_contracts("master", ALL_CONSUMERS) == [BILLY, MILLY, BILLY_BOB]


def test_sentinel_is_case_sensitive():
    client = make_client(make_response(body=broker_body(BILLY, MILLY)))

    assert client.resolve_contracts("master", "<ALL>") == []


def test_consumer_filter_exact_match():
    client = make_client(make_response(body=broker_body(BILLY, MILLY)))

    assert client.resolve_contracts("master", "billy") == [BILLY]


def test_consumer_filter_is_a_substring_match():
    # "billy" is a prefix of "billybob", so both pacts are selected
    client = make_client(make_response(body=broker_body(BILLY, MILLY, BILLY_BOB)))

    assert client.resolve_contracts("master", "billy") == [BILLY, BILLY_BOB]


def test_hrefs_are_returned_verbatim():
    odd = "HTTP://Broker.Test:80//pacts/provider/bobby/consumer/milly/version/1.0.0?x=%20"
    client = make_client(make_response(body=broker_body(odd)))

    assert client.resolve_contracts("master", "milly") == [odd]


def test_duplicate_hrefs_are_kept_once():
    client = make_client(make_response(body=broker_body(BILLY, BILLY, MILLY)))

    assert client.resolve_contracts("master", ALL_CONSUMERS) == [BILLY, MILLY]


def test_empty_pact_list_is_not_an_error():
    client = make_client(make_response(body={"_links": {"pacts": []}}))

    assert client.resolve_contracts("master", ALL_CONSUMERS) == []


def test_network_failure_raises_broker_query_error():
    client = make_client(error=requests.ConnectionError("connection refused"))

    with pytest.raises(BrokerQueryError) as exc_info:
        client.resolve_contracts("master")

    assert "broker query failed" in str(exc_info.value)
    assert exc_info.value.url.endswith("/latest/master")


@pytest.mark.parametrize("status_code", [401, 404, 500, 503])
def test_non_2xx_raises_broker_query_error(status_code):
    client = make_client(make_response(status_code=status_code, body={"error": "nope"}))

    with pytest.raises(BrokerQueryError):
        client.resolve_contracts("master")


def test_malformed_json_raises_broker_query_error():
    client = make_client(make_response(raw=b"<html>not json</html>"))

    with pytest.raises(BrokerQueryError):
        client.resolve_contracts("master")


def test_body_without_links_raises_broker_query_error():
    client = make_client(make_response(body={"pacts": [{"href": BILLY}]}))

    with pytest.raises(BrokerQueryError):
        client.resolve_contracts("master")


def test_select_contracts_preserves_order():
    links = [ContractLink(href=MILLY), ContractLink(href=BILLY)]

    assert select_contracts(links, ALL_CONSUMERS) == [MILLY, BILLY]
    assert select_contracts(links, "nobody") == []


def test_duplicates_are_dropped_across_a_large_listing():
    hrefs = [f"{BROKER}/pacts/provider/bobby/consumer/c{i % 50}/version/1.0.0" for i in range(5000)]

    selected = select_contracts([ContractLink(href=h) for h in hrefs], ALL_CONSUMERS)

    assert selected == hrefs[:50]
