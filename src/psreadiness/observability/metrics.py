"""Prometheus metrics for psreadiness.

Exposes metrics for monitoring evaluation passes and status updates.
"""

from __future__ import annotations

from collections.abc import Mapping

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
)


class MetricsCollector:
    """Prometheus metrics collector for psreadiness.

    Provides metrics for:
    - Evaluation passes and their outcome
    - Violating namespace counts per condition type
    - Status update attempts against the operator resource
    """

    def __init__(
        self,
        namespace: str = "psreadiness",
        registry: CollectorRegistry | None = None,
    ) -> None:
        """Initialize metrics.

        Args:
            namespace: Prometheus namespace prefix for all metrics.
            registry: Registry to register with (defaults to the global one).
        """
        self.namespace = namespace
        self.registry = registry if registry is not None else REGISTRY

        self.info = Info(
            f"{namespace}_build",
            "psreadiness build information",
            registry=self.registry,
        )

        self.evaluations_total = Counter(
            f"{namespace}_evaluations_total",
            "Total number of readiness evaluation passes",
            ["outcome"],  # success, error
            registry=self.registry,
        )

        self.violating_namespaces = Gauge(
            f"{namespace}_violating_namespaces",
            "Namespaces classified into each violation condition in the last pass",
            ["condition_type"],
            registry=self.registry,
        )

        self.evaluation_duration = Histogram(
            f"{namespace}_evaluation_duration_seconds",
            "Time spent in one evaluation pass",
            buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
            registry=self.registry,
        )

        self.status_updates_total = Counter(
            f"{namespace}_status_updates_total",
            "Status update attempts against the operator resource",
            ["status"],  # updated, unchanged, conflict, error
            registry=self.registry,
        )

    def set_build_info(
        self,
        version: str,
        commit: str = "unknown",
        build_date: str = "unknown",
    ) -> None:
        """Set build information metrics.

        Args:
            version: Application version.
            commit: Git commit hash.
            build_date: Build date.
        """
        self.info.info(
            {
                "version": version,
                "commit": commit,
                "build_date": build_date,
            }
        )

    def record_evaluation(
        self,
        violations: Mapping[str, int],
        duration_seconds: float,
        outcome: str = "success",
    ) -> None:
        """Record a finished evaluation pass.

        Args:
            violations: Violating namespace count keyed by condition type.
            duration_seconds: Wall time of the pass.
            outcome: Pass outcome (success, error).
        """
        self.evaluations_total.labels(outcome=outcome).inc()
        self.evaluation_duration.observe(duration_seconds)

        for condition_type, count in violations.items():
            self.violating_namespaces.labels(condition_type=condition_type).set(count)

    def record_status_update(self, status: str) -> None:
        """Record a status update attempt.

        Args:
            status: Result (updated, unchanged, conflict, error).
        """
        self.status_updates_total.labels(status=status).inc()


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get the global metrics collector.

    Returns:
        The global MetricsCollector instance.
    """
    global _metrics
    if _metrics is None:
        from psreadiness.config.settings import get_settings

        _metrics = MetricsCollector(namespace=get_settings().observability.metrics_namespace)
    return _metrics


def start_metrics_server(port: int = 8080) -> None:
    """Start the Prometheus metrics HTTP server.

    Args:
        port: Port to serve metrics on.
    """
    start_http_server(port)
