"""psreadiness Kubernetes package.

Adapters reading namespaces from and writing operator status to the
Kubernetes API.
"""

from psreadiness.kubernetes.client import load_kube_config
from psreadiness.kubernetes.namespaces import KubernetesNamespaceSource
from psreadiness.kubernetes.status import OperatorStatusSink


__all__ = [
    "KubernetesNamespaceSource",
    "OperatorStatusSink",
    "load_kube_config",
]
