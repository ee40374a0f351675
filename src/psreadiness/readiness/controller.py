"""One reconciliation pass of the pod security readiness check.

The controller wires a namespace source to a status sink: it takes a
snapshot of namespaces, classifies them with a fresh accumulator, and
hands the resulting condition update functions to the sink. It does not
schedule itself and does not retry; both belong to the caller.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from psreadiness.observability.logging import get_logger
from psreadiness.observability.metrics import MetricsCollector
from psreadiness.readiness.classifier import PodSecurityViolations
from psreadiness.readiness.conditions import (
    ConditionMergeFunc,
    UpdateStatusFunc,
    apply_status_updates,
    set_operator_condition,
    update_condition_fn,
)
from psreadiness.readiness.models import NamespaceDescriptor, OperatorCondition, OperatorStatus


log = get_logger(__name__)


class NamespaceSource(Protocol):
    """Supplies the namespaces to evaluate in one pass."""

    def list_namespaces(self) -> Iterable[NamespaceDescriptor]: ...


class StatusSink(Protocol):
    """Applies condition update functions to persisted status."""

    def update_status(self, funcs: Sequence[UpdateStatusFunc]) -> OperatorStatus: ...


@dataclass
class StaticNamespaceSource:
    """Namespace source backed by an in-memory list."""

    namespaces: list[NamespaceDescriptor] = field(default_factory=list)

    def list_namespaces(self) -> list[NamespaceDescriptor]:
        return list(self.namespaces)


@dataclass
class InMemoryStatusSink:
    """Status sink holding the status in memory; used offline and in tests."""

    status: OperatorStatus = field(default_factory=OperatorStatus)

    def update_status(self, funcs: Sequence[UpdateStatusFunc]) -> OperatorStatus:
        # Assigned only once every function applied cleanly
        self.status = apply_status_updates(self.status, funcs)
        return self.status


class PodSecurityReadinessController:
    """Evaluates namespaces and publishes the readiness conditions."""

    def __init__(
        self,
        namespace_source: NamespaceSource,
        status_sink: StatusSink,
        metrics: MetricsCollector | None = None,
        merge: ConditionMergeFunc = set_operator_condition,
    ) -> None:
        self.namespace_source = namespace_source
        self.status_sink = status_sink
        self.metrics = metrics
        self.merge = merge

    def evaluate(self, namespaces: Iterable[NamespaceDescriptor]) -> PodSecurityViolations:
        """Classify ``namespaces`` into a fresh accumulator."""
        violations = PodSecurityViolations()
        violations.add_violations(namespaces)
        return violations

    def sync(self) -> list[OperatorCondition]:
        """Run one evaluation pass.

        Returns:
            list[OperatorCondition]: The four rendered conditions.

        Raises:
            ReadinessError: Propagated unchanged from the source or the sink.
        """
        started = time.perf_counter()
        log.debug("readiness_sync_started")

        try:
            violations = self.evaluate(self.namespace_source.list_namespaces())
            conditions = violations.to_conditions()
            self.status_sink.update_status(
                [update_condition_fn(condition, merge=self.merge) for condition in conditions]
            )
        except Exception:
            if self.metrics is not None:
                self.metrics.record_evaluation({}, time.perf_counter() - started, outcome="error")
            raise

        duration = time.perf_counter() - started
        if self.metrics is not None:
            self.metrics.record_evaluation(violations.counts(), duration)

        log.info(
            "readiness_sync_completed",
            namespaces=violations.total,
            violations=violations.counts(),
            duration_seconds=round(duration, 4),
        )
        return conditions

