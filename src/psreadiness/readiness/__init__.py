"""Pod security readiness evaluation.

Classifies namespaces into violation buckets and renders one operator
status condition per bucket.
"""

from psreadiness.readiness.classifier import (
    LABEL_SYNC_CONTROL_LABEL,
    OPENSHIFT_NAMESPACE_PREFIX,
    RUN_LEVEL_ZERO_NAMESPACES,
    PodSecurityViolations,
    classify,
)
from psreadiness.readiness.conditions import (
    CONDITION_TYPES,
    NO_VIOLATIONS_REASON,
    POD_SECURITY_CUSTOMER_TYPE,
    POD_SECURITY_DISABLED_SYNCER_TYPE,
    POD_SECURITY_OPENSHIFT_TYPE,
    POD_SECURITY_RUN_LEVEL_ZERO_TYPE,
    VIOLATIONS_DETECTED_REASON,
    UpdateStatusFunc,
    apply_status_updates,
    make_condition,
    set_operator_condition,
    update_condition_fn,
)
from psreadiness.readiness.controller import (
    InMemoryStatusSink,
    PodSecurityReadinessController,
    StaticNamespaceSource,
)
from psreadiness.readiness.errors import (
    NamespaceListError,
    ReadinessError,
    StatusUpdateError,
    ensure_readiness_error,
)
from psreadiness.readiness.models import (
    ConditionStatus,
    NamespaceDescriptor,
    OperatorCondition,
    OperatorStatus,
    ViolationBucket,
)


__all__ = [
    "CONDITION_TYPES",
    "LABEL_SYNC_CONTROL_LABEL",
    "NO_VIOLATIONS_REASON",
    "OPENSHIFT_NAMESPACE_PREFIX",
    "POD_SECURITY_CUSTOMER_TYPE",
    "POD_SECURITY_DISABLED_SYNCER_TYPE",
    "POD_SECURITY_OPENSHIFT_TYPE",
    "POD_SECURITY_RUN_LEVEL_ZERO_TYPE",
    "RUN_LEVEL_ZERO_NAMESPACES",
    "VIOLATIONS_DETECTED_REASON",
    "ConditionStatus",
    "InMemoryStatusSink",
    "NamespaceDescriptor",
    "NamespaceListError",
    "OperatorCondition",
    "OperatorStatus",
    "PodSecurityReadinessController",
    "PodSecurityViolations",
    "ReadinessError",
    "StaticNamespaceSource",
    "StatusUpdateError",
    "UpdateStatusFunc",
    "ViolationBucket",
    "apply_status_updates",
    "classify",
    "ensure_readiness_error",
    "make_condition",
    "set_operator_condition",
    "update_condition_fn",
]
