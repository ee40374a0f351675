"""Operator status persistence.

Reads the cluster-scoped operator resource, folds condition update
functions over its status, and writes the status subresource back with
the resourceVersion that was read. A concurrent writer surfaces as a
retryable :class:`StatusUpdateError`; retrying is left to the caller.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from kubernetes import client
from pydantic import ValidationError

from psreadiness.kubernetes.client import is_retryable_status
from psreadiness.observability.logging import get_logger
from psreadiness.observability.metrics import MetricsCollector
from psreadiness.readiness.conditions import UpdateStatusFunc, apply_status_updates
from psreadiness.readiness.errors import StatusUpdateError
from psreadiness.readiness.models import OperatorStatus


log = get_logger(__name__)


class OperatorStatusSink:
    """Status sink writing conditions to a cluster-scoped custom resource."""

    def __init__(
        self,
        group: str,
        version: str,
        plural: str,
        name: str,
        custom_api: client.CustomObjectsApi | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self.group = group
        self.version = version
        self.plural = plural
        self.name = name
        self.custom_api = custom_api or client.CustomObjectsApi()
        self.metrics = metrics

    @property
    def resource(self) -> str:
        return f"{self.plural}.{self.group}/{self.name}"

    def update_status(self, funcs: Sequence[UpdateStatusFunc]) -> OperatorStatus:
        """Apply ``funcs`` to the current status and persist the result.

        Returns:
            OperatorStatus: The status as written (or as read, if unchanged).

        Raises:
            StatusUpdateError: If the resource cannot be read, its status is
                malformed, a merge function rejects it, or the write fails.
        """
        obj = self._read()

        try:
            current = OperatorStatus.from_kubernetes_object(obj.get("status"))
        except ValidationError as e:
            self._record("error")
            raise StatusUpdateError(
                f"Status of {self.resource} is malformed",
                code="status_malformed",
                details={"resource": self.resource, "errors": e.errors(include_url=False)},
            ) from e

        try:
            updated = apply_status_updates(current, funcs)
        except StatusUpdateError:
            self._record("error")
            raise

        if updated.to_dict() == current.to_dict():
            self._record("unchanged")
            log.debug("operator_status_unchanged", resource=self.resource)
            return current

        self._write(obj, updated)
        self._record("updated")
        log.info(
            "operator_status_updated",
            resource=self.resource,
            resource_version=obj.get("metadata", {}).get("resourceVersion"),
        )
        return updated

    def _read(self) -> dict[str, Any]:
        try:
            return self.custom_api.get_cluster_custom_object(
                group=self.group,
                version=self.version,
                plural=self.plural,
                name=self.name,
            )
        except client.ApiException as e:
            self._record("error")
            log.exception("operator_status_read_failed", resource=self.resource, error=e.reason)
            raise StatusUpdateError(
                f"Reading {self.resource} failed: {e.reason}",
                code="status_read_failed",
                retryable=is_retryable_status(e.status),
                details={"resource": self.resource, "status": e.status},
            ) from e

    def _write(self, obj: dict[str, Any], status: OperatorStatus) -> None:
        body = dict(obj)
        body["status"] = status.to_dict()

        try:
            self.custom_api.replace_cluster_custom_object_status(
                group=self.group,
                version=self.version,
                plural=self.plural,
                name=self.name,
                body=body,
            )
        except client.ApiException as e:
            conflict = e.status == 409
            self._record("conflict" if conflict else "error")
            log.warning(
                "operator_status_write_failed",
                resource=self.resource,
                status=e.status,
                error=e.reason,
            )
            raise StatusUpdateError(
                f"Writing status of {self.resource} failed: {e.reason}",
                code="status_conflict" if conflict else "status_write_failed",
                retryable=is_retryable_status(e.status),
                details={"resource": self.resource, "status": e.status},
            ) from e

    def _record(self, status: str) -> None:
        if self.metrics is not None:
            self.metrics.record_status_update(status)
