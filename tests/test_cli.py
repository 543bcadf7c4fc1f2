from unittest.mock import patch

from provider_verifier import cli
from provider_verifier.core.exceptions import BrokerQueryError
from provider_verifier.orchestrator import VerificationOutcome


@patch("provider_verifier.cli.setup_logging")
@patch("provider_verifier.cli.VerificationOrchestrator")
def test_main_passes_arguments_to_orchestrator(orchestrator_cls, _setup_logging):
    orchestrator = orchestrator_cls.return_value
    orchestrator.run.return_value = VerificationOutcome(success=True, provider_base_url="http://127.0.0.1:1")

    code = cli.main([
        "--broker-url", "http://broker.test",
        "--target-env", "prod",
        "--consumer", "billy",
        "--provider-version", "3.1.4",
        "--no-publish",
    ])

    assert code == 0
    orchestrator.run.assert_called_once_with(
        broker_url="http://broker.test",
        target_tag="prod",
        consumer_filter="billy",
        publish_results=False,
        provider_version="3.1.4",
    )
    orchestrator.provider.stop.assert_called_once()


@patch("provider_verifier.cli.setup_logging")
@patch("provider_verifier.cli.VerificationOrchestrator")
def test_main_returns_1_on_verifier_error(orchestrator_cls, _setup_logging):
    orchestrator_cls.return_value.run.side_effect = BrokerQueryError("http://broker.test/x", "boom")

    assert cli.main([]) == 1


@patch("provider_verifier.cli.setup_logging")
@patch("provider_verifier.cli.VerificationOrchestrator")
def test_publish_defaults_to_settings(orchestrator_cls, _setup_logging):
    cli.main(["--consumer", "<all>"])

    kwargs = orchestrator_cls.return_value.run.call_args.kwargs
    assert kwargs["publish_results"] is None
    assert kwargs["consumer_filter"] == "<all>"
