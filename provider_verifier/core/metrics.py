"""
Prometheus metrics for the provider verification run.

Tracks provider-state switching on the instrumented provider as well as
broker discovery and overall verification outcomes on the orchestrator side.
"""

from __future__ import annotations

from typing import Optional

from prometheus_client import CollectorRegistry, Counter


class VerifierMetrics:
    """Metrics collector with its own registry so tests never share counters."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        self.state_transitions = Counter(
            "provider_state_transitions_total",
            "Provider state directives applied, by resolved fixture",
            labelnames=["fixture"],
            registry=self.registry,
        )

        self.state_setup_failures = Counter(
            "provider_state_setup_failures_total",
            "State setup requests rejected because the body could not be decoded",
            registry=self.registry,
        )

        self.broker_queries = Counter(
            "pact_broker_queries_total",
            "Broker contract discovery queries",
            labelnames=["outcome"],
            registry=self.registry,
        )

        self.verification_runs = Counter(
            "pact_verification_runs_total",
            "Verification runs by final outcome",
            labelnames=["outcome"],
            registry=self.registry,
        )

    def record_state_transition(self, fixture: str) -> None:
        self.state_transitions.labels(fixture=fixture).inc()

    def record_state_setup_failure(self) -> None:
        self.state_setup_failures.inc()

    def record_broker_query(self, success: bool) -> None:
        self.broker_queries.labels(outcome="success" if success else "error").inc()

    def record_verification_run(self, success: bool) -> None:
        self.verification_runs.labels(outcome="success" if success else "failure").inc()


metrics = VerifierMetrics()
