"""psreadiness Kubernetes operator main entry point.

Registers a Kopf timer on the cluster-scoped operator resource. Every
tick runs one readiness evaluation pass: list namespaces, classify them,
and write the four pod security conditions to the resource status.

Usage:
    # Run in development mode (verbose)
    python -m psreadiness.operator.main --dev
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import kopf
import structlog

from psreadiness.config.settings import Settings, get_settings
from psreadiness.kubernetes import KubernetesNamespaceSource, OperatorStatusSink, load_kube_config
from psreadiness.observability.logging import LogContext, configure_logging
from psreadiness.observability.metrics import MetricsCollector, get_metrics, start_metrics_server
from psreadiness.readiness.controller import PodSecurityReadinessController
from psreadiness.readiness.errors import ensure_readiness_error


_settings = get_settings()

# Configure structured logging
configure_logging(
    level=_settings.observability.log_level,
    format_type=_settings.observability.log_format,
)
logger = structlog.get_logger(__name__)

# Prefix for kopf's own bookkeeping annotations on the operator resource
KOPF_ANNOTATION_PREFIX = "psreadiness.openshift.io"

# Backoff for retryable failures before kopf runs the handler again
RETRY_DELAY_SECONDS = 60


@kopf.on.startup()
async def startup_handler(settings: kopf.OperatorSettings, **_kwargs: Any) -> None:
    """Configure the operator on startup."""
    app_settings = get_settings()

    settings.posting.level = logging.WARNING
    settings.watching.server_timeout = app_settings.kubernetes.api_timeout
    settings.watching.client_timeout = app_settings.kubernetes.api_timeout + 10
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage(
        prefix=KOPF_ANNOTATION_PREFIX
    )
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage(
        prefix=KOPF_ANNOTATION_PREFIX
    )

    load_kube_config(app_settings.kubernetes)

    if app_settings.observability.metrics_enabled:
        metrics = get_metrics()
        metrics.set_build_info(version=app_settings.version)
        start_metrics_server(app_settings.observability.metrics_port)

    logger.info(
        "psreadiness_operator_starting",
        version=app_settings.version,
        environment=app_settings.environment,
        resource=f"{app_settings.readiness.operator_plural}.{app_settings.readiness.operator_group}"
        f"/{app_settings.readiness.operator_name}",
        interval_seconds=app_settings.readiness.interval_seconds,
    )


@kopf.on.cleanup()
async def cleanup_handler(**_kwargs: Any) -> None:
    """Log operator shutdown."""
    logger.info("psreadiness_operator_shutting_down")


def is_readiness_target(name: str | None, **_kwargs: Any) -> bool:
    """Only the configured operator resource carries the conditions."""
    return name == get_settings().readiness.operator_name


def build_controller(
    app_settings: Settings,
    metrics: MetricsCollector | None = None,
) -> PodSecurityReadinessController:
    """Wire the Kubernetes source and sink into a readiness controller."""
    readiness = app_settings.readiness
    return PodSecurityReadinessController(
        namespace_source=KubernetesNamespaceSource(
            label_selector=app_settings.kubernetes.namespace_label_selector,
            request_timeout=app_settings.kubernetes.api_timeout,
        ),
        status_sink=OperatorStatusSink(
            group=readiness.operator_group,
            version=readiness.operator_version,
            plural=readiness.operator_plural,
            name=readiness.operator_name,
            metrics=metrics,
        ),
        metrics=metrics,
    )


# ============================================================================
# Readiness Evaluation Timer
# ============================================================================


@kopf.timer(
    _settings.readiness.operator_group,
    _settings.readiness.operator_version,
    _settings.readiness.operator_plural,
    interval=_settings.readiness.interval_seconds,
    initial_delay=_settings.readiness.initial_delay_seconds,
    when=is_readiness_target,
)
def evaluate_pod_security_readiness(name: str | None, **_kwargs: Any) -> None:
    """Run one readiness evaluation pass against the operator resource.

    Raises:
        kopf.TemporaryError: For retryable failures (conflicts, server errors).
        kopf.PermanentError: For failures a retry would not fix.
    """
    app_settings = get_settings()
    metrics = get_metrics() if app_settings.observability.metrics_enabled else None
    controller = build_controller(app_settings, metrics)

    with LogContext(operator_resource=name):
        try:
            conditions = controller.sync()
        except Exception as e:
            # Unknown failures get retried, as kopf does for arbitrary errors
            error = ensure_readiness_error(e, retryable=True)
            logger.warning("readiness_sync_failed", error=error.to_dict())
            if error.retryable:
                raise kopf.TemporaryError(error.message, delay=RETRY_DELAY_SECONDS) from e
            raise kopf.PermanentError(error.message) from e

        logger.info(
            "readiness_conditions_published",
            conditions={condition.type: condition.status.value for condition in conditions},
        )


# ============================================================================
# Main Entry Point
# ============================================================================


def run(dev_mode: bool = False) -> int:
    """Run the psreadiness operator."""
    app_settings = get_settings()

    logger.info(
        "starting_psreadiness_operator",
        dev_mode=dev_mode,
        environment=app_settings.environment,
    )

    if dev_mode:
        configure_logging(level="DEBUG", format_type="console")

    try:
        # Blocks until stopped; the operator resource is cluster-scoped
        kopf.run(
            standalone=True,
            clusterwide=True,
        )
        return 0

    except KeyboardInterrupt:
        logger.info("operator_interrupted")
        return 0
    except Exception as e:
        logger.exception("operator_failed", error=str(e))
        return 1


def cli() -> int:
    """Console entry point for ``psreadiness-operator``."""
    return run(dev_mode="--dev" in sys.argv)


if __name__ == "__main__":
    sys.exit(cli())
