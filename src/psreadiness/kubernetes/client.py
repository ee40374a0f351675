"""Kubernetes client configuration."""

from __future__ import annotations

from kubernetes import config as k8s_config

from psreadiness.config.settings import KubernetesSettings
from psreadiness.observability.logging import get_logger


log = get_logger(__name__)


def load_kube_config(settings: KubernetesSettings) -> None:
    """Load client configuration for the API server.

    In-cluster configuration is used when ``settings.in_cluster`` is set;
    otherwise the kubeconfig file and context from settings (or the
    client defaults) are used.
    """
    if settings.in_cluster:
        k8s_config.load_incluster_config()
        log.debug("k8s_config_loaded", source="in-cluster")
        return

    k8s_config.load_kube_config(
        config_file=settings.kubeconfig,
        context=settings.context,
    )
    log.debug("k8s_config_loaded", source="kubeconfig", context=settings.context)


def is_retryable_status(status: int | None) -> bool:
    """Whether an API error with this HTTP status is worth retrying later."""
    return not status or status in (409, 429) or status >= 500
