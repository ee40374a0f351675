"""psreadiness observability package.

Logging and metrics for the readiness operator.
"""

from psreadiness.observability.logging import configure_logging, get_logger
from psreadiness.observability.metrics import MetricsCollector, get_metrics

__all__ = ["configure_logging", "get_logger", "MetricsCollector", "get_metrics"]
