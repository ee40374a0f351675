"""Classification of namespaces into pod security violation buckets.

Rules apply top-down and the first match wins:

1. run-level zero namespaces (``default``, ``kube-system``, ``kube-public``)
2. names starting with ``openshift``
3. namespaces that opted out of label synchronization
4. everything else is a customer namespace
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from psreadiness.readiness.conditions import (
    BUCKET_CONDITION_TYPES,
    CONDITION_TYPES,
    ConditionMergeFunc,
    UpdateStatusFunc,
    make_condition,
    set_operator_condition,
    update_condition_fn,
)
from psreadiness.readiness.models import NamespaceDescriptor, OperatorCondition, ViolationBucket


# Run-level zero namespaces; these win over the openshift prefix rule
RUN_LEVEL_ZERO_NAMESPACES: frozenset[str] = frozenset(
    {
        "default",
        "kube-system",
        "kube-public",
    }
)

OPENSHIFT_NAMESPACE_PREFIX = "openshift"

LABEL_SYNC_CONTROL_LABEL = "security.openshift.io/scc.podSecurityLabelSync"
LABEL_SYNC_DISABLED_VALUE = "false"

_CONDITION_BUCKETS: dict[str, ViolationBucket] = {
    condition_type: bucket for bucket, condition_type in BUCKET_CONDITION_TYPES.items()
}


def classify(namespace: NamespaceDescriptor) -> ViolationBucket | None:
    """Return the violation bucket of a namespace.

    ``None`` would mean compliant; with the current rules every namespace
    lands in a bucket, customer being the fallback.
    """
    if namespace.name in RUN_LEVEL_ZERO_NAMESPACES:
        return ViolationBucket.RUN_LEVEL_ZERO

    if namespace.name.startswith(OPENSHIFT_NAMESPACE_PREFIX):
        return ViolationBucket.OPENSHIFT

    if namespace.labels.get(LABEL_SYNC_CONTROL_LABEL) == LABEL_SYNC_DISABLED_VALUE:
        # The only case in which pod security labels are not synchronized
        return ViolationBucket.SYNCER_DISABLED

    return ViolationBucket.CUSTOMER


class PodSecurityViolations:
    """Accumulates violating namespace names for one evaluation pass.

    Names keep the order in which namespaces were added and duplicates are
    kept as-is. Create a fresh instance per pass.
    """

    def __init__(self) -> None:
        self._buckets: dict[ViolationBucket, list[str]] = {bucket: [] for bucket in ViolationBucket}

    def add_violation(self, namespace: NamespaceDescriptor) -> ViolationBucket | None:
        """Classify a namespace and record its name in the matching bucket."""
        bucket = classify(namespace)
        if bucket is not None:
            self._buckets[bucket].append(namespace.name)
        return bucket

    def add_violations(self, namespaces: Iterable[NamespaceDescriptor]) -> None:
        for namespace in namespaces:
            self.add_violation(namespace)

    def namespaces(self, bucket: ViolationBucket) -> list[str]:
        """Names recorded in ``bucket``, in insertion order (a copy)."""
        return list(self._buckets[bucket])

    @property
    def total(self) -> int:
        return sum(len(names) for names in self._buckets.values())

    def counts(self) -> dict[str, int]:
        """Number of names per condition type."""
        return {
            condition_type: len(self._buckets[_CONDITION_BUCKETS[condition_type]])
            for condition_type in CONDITION_TYPES
        }

    def to_conditions(self, now: datetime | None = None) -> list[OperatorCondition]:
        """Render one condition per bucket, in the fixed condition order."""
        return [
            make_condition(condition_type, self._buckets[_CONDITION_BUCKETS[condition_type]], now=now)
            for condition_type in CONDITION_TYPES
        ]

    def to_condition_funcs(
        self,
        merge: ConditionMergeFunc = set_operator_condition,
        now: datetime | None = None,
    ) -> list[UpdateStatusFunc]:
        """Status update functions for the four conditions.

        Args:
            merge: Merge policy of the status sink the functions are applied by.
            now: Transition time stamped on the rendered conditions.
        """
        return [update_condition_fn(condition, merge=merge) for condition in self.to_conditions(now=now)]

    def __repr__(self) -> str:
        counts = ", ".join(f"{bucket.value}={len(names)}" for bucket, names in self._buckets.items())
        return f"PodSecurityViolations({counts})"


__all__ = [
    "LABEL_SYNC_CONTROL_LABEL",
    "LABEL_SYNC_DISABLED_VALUE",
    "OPENSHIFT_NAMESPACE_PREFIX",
    "RUN_LEVEL_ZERO_NAMESPACES",
    "PodSecurityViolations",
    "classify",
]
