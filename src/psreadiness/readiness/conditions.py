"""Rendering of violation buckets into operator status conditions.

One condition is produced per violation bucket on every pass. Merging a
rendered condition into persisted status is the job of a merge function
(``set_operator_condition`` by default), wrapped into update functions
that a status sink folds over the status it read.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime

from psreadiness.readiness.errors import StatusUpdateError
from psreadiness.readiness.models import (
    ConditionStatus,
    OperatorCondition,
    OperatorStatus,
    ViolationBucket,
)


POD_SECURITY_CUSTOMER_TYPE = "PodSecurityCustomerEvaluationConditionsDetected"
POD_SECURITY_OPENSHIFT_TYPE = "PodSecurityOpenshiftEvaluationConditionsDetected"
POD_SECURITY_RUN_LEVEL_ZERO_TYPE = "PodSecurityRunLevelZeroEvaluationConditionsDetected"
POD_SECURITY_DISABLED_SYNCER_TYPE = "PodSecurityDisabledSyncerEvaluationConditionsDetected"

# Order in which update functions are produced
CONDITION_TYPES: tuple[str, ...] = (
    POD_SECURITY_CUSTOMER_TYPE,
    POD_SECURITY_OPENSHIFT_TYPE,
    POD_SECURITY_RUN_LEVEL_ZERO_TYPE,
    POD_SECURITY_DISABLED_SYNCER_TYPE,
)

BUCKET_CONDITION_TYPES: dict[ViolationBucket, str] = {
    ViolationBucket.CUSTOMER: POD_SECURITY_CUSTOMER_TYPE,
    ViolationBucket.OPENSHIFT: POD_SECURITY_OPENSHIFT_TYPE,
    ViolationBucket.RUN_LEVEL_ZERO: POD_SECURITY_RUN_LEVEL_ZERO_TYPE,
    ViolationBucket.SYNCER_DISABLED: POD_SECURITY_DISABLED_SYNCER_TYPE,
}

VIOLATIONS_DETECTED_REASON = "PSViolationsDetected"
NO_VIOLATIONS_REASON = "ExpectedReason"
VIOLATIONS_MESSAGE_PREFIX = "Violations detected in namespaces: "

UpdateStatusFunc = Callable[[OperatorStatus], OperatorStatus]
ConditionMergeFunc = Callable[[list[OperatorCondition], OperatorCondition], list[OperatorCondition]]


def _now() -> datetime:
    return datetime.now(UTC).replace(microsecond=0)


def format_namespace_list(namespaces: Sequence[str]) -> str:
    """Render names as a bracketed, space separated list: ``[a b]``."""
    return "[" + " ".join(namespaces) + "]"


def make_condition(
    condition_type: str,
    namespaces: Sequence[str],
    now: datetime | None = None,
) -> OperatorCondition:
    """Render the condition for one violation bucket.

    A non-empty bucket yields a True condition whose message lists the
    namespaces sorted ascending; the caller's sequence is left untouched.
    An empty bucket yields a False condition with no message.

    Args:
        condition_type: One of the four condition type identifiers.
        namespaces: Names accumulated in the bucket, in any order.
        now: Transition time to stamp (defaults to the current time).

    Returns:
        OperatorCondition: The rendered condition.
    """
    transition_time = now or _now()

    if namespaces:
        return OperatorCondition(
            type=condition_type,
            status=ConditionStatus.TRUE,
            last_transition_time=transition_time,
            reason=VIOLATIONS_DETECTED_REASON,
            message=VIOLATIONS_MESSAGE_PREFIX + format_namespace_list(sorted(namespaces)),
        )

    return OperatorCondition(
        type=condition_type,
        status=ConditionStatus.FALSE,
        last_transition_time=transition_time,
        reason=NO_VIOLATIONS_REASON,
    )


def set_operator_condition(
    conditions: list[OperatorCondition],
    new_condition: OperatorCondition,
) -> list[OperatorCondition]:
    """Upsert ``new_condition`` by type and return the new condition list.

    An existing condition keeps its transition time unless its status
    changes. The input list and its conditions are not modified.

    Raises:
        StatusUpdateError: If the new condition has no type or the existing
            list already holds more than one condition of that type.
    """
    if not new_condition.type:
        msg = "Cannot set a condition without a type"
        raise StatusUpdateError(msg, code="condition_type_missing")

    matches = [index for index, condition in enumerate(conditions) if condition.type == new_condition.type]
    if len(matches) > 1:
        msg = f"Status holds {len(matches)} conditions of type {new_condition.type}"
        raise StatusUpdateError(
            msg,
            code="condition_type_duplicated",
            details={"type": new_condition.type, "count": len(matches)},
        )

    if new_condition.last_transition_time is None:
        new_condition = new_condition.model_copy(update={"last_transition_time": _now()})

    merged = list(conditions)
    if not matches:
        merged.append(new_condition)
        return merged

    existing = conditions[matches[0]]
    update = {"reason": new_condition.reason, "message": new_condition.message}
    if existing.status != new_condition.status:
        update["status"] = new_condition.status
        update["last_transition_time"] = new_condition.last_transition_time
    merged[matches[0]] = existing.model_copy(update=update)
    return merged


def update_condition_fn(
    condition: OperatorCondition,
    merge: ConditionMergeFunc = set_operator_condition,
) -> UpdateStatusFunc:
    """Wrap a rendered condition into a status update function.

    Args:
        condition: Condition to upsert.
        merge: Merge policy of the status sink.

    Returns:
        A function taking the current status and returning the updated one.
    """

    def update(status: OperatorStatus) -> OperatorStatus:
        return status.model_copy(update={"conditions": merge(list(status.conditions), condition)})

    return update


def apply_status_updates(status: OperatorStatus, funcs: Iterable[UpdateStatusFunc]) -> OperatorStatus:
    """Fold update functions over ``status``; the first error propagates."""
    for func in funcs:
        status = func(status)
    return status


__all__ = [
    "BUCKET_CONDITION_TYPES",
    "CONDITION_TYPES",
    "NO_VIOLATIONS_REASON",
    "POD_SECURITY_CUSTOMER_TYPE",
    "POD_SECURITY_DISABLED_SYNCER_TYPE",
    "POD_SECURITY_OPENSHIFT_TYPE",
    "POD_SECURITY_RUN_LEVEL_ZERO_TYPE",
    "VIOLATIONS_DETECTED_REASON",
    "VIOLATIONS_MESSAGE_PREFIX",
    "ConditionMergeFunc",
    "UpdateStatusFunc",
    "apply_status_updates",
    "format_namespace_list",
    "make_condition",
    "set_operator_condition",
    "update_condition_fn",
]
