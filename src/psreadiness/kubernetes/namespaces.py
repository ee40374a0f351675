"""Namespace listing from the Kubernetes API."""

from __future__ import annotations

from kubernetes import client

from psreadiness.kubernetes.client import is_retryable_status
from psreadiness.observability.logging import get_logger
from psreadiness.readiness.errors import NamespaceListError
from psreadiness.readiness.models import NamespaceDescriptor


log = get_logger(__name__)


class KubernetesNamespaceSource:
    """Lists namespaces through ``CoreV1Api`` and converts them to descriptors."""

    def __init__(
        self,
        core_api: client.CoreV1Api | None = None,
        label_selector: str | None = None,
        request_timeout: int | None = None,
    ) -> None:
        self.core_api = core_api or client.CoreV1Api()
        self.label_selector = label_selector
        self.request_timeout = request_timeout

    def list_namespaces(self) -> list[NamespaceDescriptor]:
        """Return a snapshot of the namespaces to evaluate.

        Raises:
            NamespaceListError: If the API request fails.
        """
        kwargs: dict[str, object] = {}
        if self.label_selector:
            kwargs["label_selector"] = self.label_selector
        if self.request_timeout:
            kwargs["_request_timeout"] = self.request_timeout

        try:
            namespace_list = self.core_api.list_namespace(**kwargs)
        except client.ApiException as e:
            log.exception("namespace_list_failed", status=e.status, error=e.reason)
            raise NamespaceListError(
                f"Listing namespaces failed: {e.reason}",
                retryable=is_retryable_status(e.status),
                details={"status": e.status, "label_selector": self.label_selector},
            ) from e

        namespaces = [NamespaceDescriptor.from_kubernetes_object(item) for item in namespace_list.items or []]
        log.debug("namespaces_listed", count=len(namespaces), label_selector=self.label_selector)
        return namespaces
