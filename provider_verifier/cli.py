"""
Command line entry point for a provider verification run.

Every option defaults to the corresponding setting (environment variable or
``.env``), so a plain ``python -m provider_verifier`` verifies against the
configured broker.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import get_settings
from .core.exceptions import VerifierError
from .logging_setup import setup_logging
from .orchestrator import VerificationOrchestrator

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Verify this provider against consumer pacts from a Pact broker")
    parser.add_argument("--broker-url", default=settings.PACT_BROKER_URL,
                        help="Pact broker base URL (PACT_BROKER_URL)")
    parser.add_argument("--target-env", default=settings.PACT_TARGET_ENV,
                        help="Tag of the pacts to verify (PACT_TARGET_ENV)")
    parser.add_argument("--consumer", default=settings.CONSUMER,
                        help="Only verify pacts of this consumer; '<all>' verifies every consumer (CONSUMER)")
    parser.add_argument("--provider-version", default=settings.PROVIDER_VERSION,
                        help="Provider version reported with the results (PROVIDER_VERSION)")
    parser.add_argument("--no-publish", action="store_true",
                        help="Do not publish verification results to the broker")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)

    orchestrator = VerificationOrchestrator()
    try:
        orchestrator.run(
            broker_url=args.broker_url,
            target_tag=args.target_env,
            consumer_filter=args.consumer,
            publish_results=False if args.no_publish else None,
            provider_version=args.provider_version,
        )
    except VerifierError as e:
        logger.error(f"Verification run failed: {e}")
        return 1
    finally:
        if orchestrator.provider is not None:
            orchestrator.provider.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
