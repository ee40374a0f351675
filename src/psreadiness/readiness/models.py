"""Pydantic models for readiness evaluation.

Covers the namespace input, the violation buckets a namespace can land
in, and the operator status conditions produced for each bucket.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


# RFC3339 at seconds precision, as the API server stores condition times
KUBERNETES_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class ViolationBucket(str, Enum):
    """Category of a namespace that would violate pod security enforcement."""

    RUN_LEVEL_ZERO = "RunLevelZero"
    OPENSHIFT = "OpenShiftSystem"
    SYNCER_DISABLED = "SyncerDisabled"
    CUSTOMER = "Customer"


class ConditionStatus(str, Enum):
    """Status of an operator condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class NamespaceDescriptor(BaseModel):
    """Name and labels of a namespace, the only inputs classification reads."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", description="Namespace name")
    labels: dict[str, str] = Field(default_factory=dict, description="Namespace labels")

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v: Any) -> str:
        """Treat a missing name as empty."""
        return v if isinstance(v, str) else ""

    @field_validator("labels", mode="before")
    @classmethod
    def coerce_labels(cls, v: Any) -> dict[str, str]:
        """Keep only string labels; anything malformed means no labels."""
        if not isinstance(v, Mapping):
            return {}
        return {key: value for key, value in v.items() if isinstance(key, str) and isinstance(value, str)}

    @classmethod
    def from_kubernetes_object(cls, obj: Any) -> NamespaceDescriptor:
        """Create a descriptor from a raw API dict or a ``V1Namespace``."""
        if isinstance(obj, Mapping):
            metadata = obj.get("metadata") or {}
            if not isinstance(metadata, Mapping):
                metadata = {}
            return cls(name=metadata.get("name"), labels=metadata.get("labels"))

        metadata = getattr(obj, "metadata", None)
        return cls(
            name=getattr(metadata, "name", None),
            labels=getattr(metadata, "labels", None),
        )


class OperatorCondition(BaseModel):
    """A single operator status condition."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: str
    status: ConditionStatus
    reason: str = Field(default="")
    message: str = Field(default="")
    last_transition_time: datetime | None = Field(default=None, alias="lastTransitionTime")

    @field_validator("reason", "message", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return "" if v is None else v

    @field_serializer("last_transition_time")
    def serialize_transition_time(self, v: datetime | None) -> str | None:
        if v is None:
            return None
        if v.tzinfo is not None:
            v = v.astimezone(UTC)
        return v.strftime(KUBERNETES_TIME_FORMAT)

    @property
    def is_true(self) -> bool:
        """Check if the condition status is True."""
        return self.status == ConditionStatus.TRUE

    def to_dict(self) -> dict[str, Any]:
        """Convert to Kubernetes API dict format."""
        data = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        if not data.get("message"):
            data.pop("message", None)
        return data


class OperatorStatus(BaseModel):
    """The part of an operator status this package reads and writes.

    Fields other than ``conditions`` are kept verbatim so that writing the
    status back does not drop them.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    conditions: list[OperatorCondition] = Field(default_factory=list)

    def find_condition(self, condition_type: str) -> OperatorCondition | None:
        """Return the first condition of the given type, if any."""
        for condition in self.conditions:
            if condition.type == condition_type:
                return condition
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to Kubernetes API dict format."""
        data = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        data["conditions"] = [condition.to_dict() for condition in self.conditions]
        return data

    @classmethod
    def from_kubernetes_object(cls, status: Mapping[str, Any] | None) -> OperatorStatus:
        """Create an OperatorStatus from the ``status`` stanza of a resource."""
        data = dict(status or {})
        if data.get("conditions") is None:
            data["conditions"] = []
        return cls.model_validate(data)


__all__ = [
    "KUBERNETES_TIME_FORMAT",
    "ConditionStatus",
    "NamespaceDescriptor",
    "OperatorCondition",
    "OperatorStatus",
    "ViolationBucket",
]
