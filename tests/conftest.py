"""Pytest configuration and fixtures for psreadiness tests."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any
from unittest.mock import MagicMock

import pytest
from prometheus_client import CollectorRegistry

from psreadiness.observability.metrics import MetricsCollector

if TYPE_CHECKING:
    from collections.abc import Callable, Generator


# Ensure we're using test configuration
os.environ.setdefault("PSR_ENVIRONMENT", "development")
os.environ.setdefault("PSR_OBSERVABILITY_METRICS_ENABLED", "false")


@pytest.fixture(autouse=True)
def reset_settings() -> Generator[None, None, None]:
    """Reset settings cache before each test."""
    from psreadiness.config.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def metrics() -> MetricsCollector:
    """Metrics collector on a private registry."""
    return MetricsCollector(namespace="test_psreadiness", registry=CollectorRegistry())


@pytest.fixture
def namespace_object() -> Callable[..., dict[str, Any]]:
    """Factory for raw Namespace API objects."""

    def _make(name: str, labels: dict[str, str] | None = None) -> dict[str, Any]:
        metadata: dict[str, Any] = {"name": name}
        if labels is not None:
            metadata["labels"] = labels
        return {"apiVersion": "v1", "kind": "Namespace", "metadata": metadata}

    return _make


@pytest.fixture
def kubeapiserver_object() -> dict[str, Any]:
    """Sample cluster-scoped operator resource with one foreign condition."""
    return {
        "apiVersion": "operator.openshift.io/v1",
        "kind": "KubeAPIServer",
        "metadata": {
            "name": "cluster",
            "resourceVersion": "4711",
        },
        "spec": {"managementState": "Managed"},
        "status": {
            "latestAvailableRevision": 7,
            "conditions": [
                {
                    "type": "NodeInstallerDegraded",
                    "status": "False",
                    "reason": "AsExpected",
                    "lastTransitionTime": "2024-01-01T00:00:00Z",
                },
            ],
        },
    }


@pytest.fixture
def mock_custom_api(kubeapiserver_object: dict[str, Any]) -> MagicMock:
    """Mock CustomObjectsApi serving the sample operator resource."""
    api = MagicMock()
    api.get_cluster_custom_object.return_value = kubeapiserver_object
    return api


@pytest.fixture
def mock_core_api() -> MagicMock:
    """Mock CoreV1Api returning no namespaces."""
    api = MagicMock()
    api.list_namespace.return_value = MagicMock(items=[])
    return api
