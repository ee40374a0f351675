"""psreadiness Command Line Interface.

Provides CLI commands for running the operator and for one-shot
evaluations of namespaces from a file or from the cluster.
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

import yaml

from psreadiness.observability.logging import configure_logging
from psreadiness.readiness.conditions import CONDITION_TYPES
from psreadiness.readiness.controller import (
    InMemoryStatusSink,
    PodSecurityReadinessController,
    StaticNamespaceSource,
)
from psreadiness.readiness.errors import NamespaceListError, ReadinessError
from psreadiness.readiness.models import NamespaceDescriptor, OperatorCondition
from psreadiness.version import __version__

if TYPE_CHECKING:
    from argparse import Namespace

    from psreadiness.readiness.controller import NamespaceSource


_VERBOSITY_LEVELS = ("WARNING", "INFO", "DEBUG")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="psreadiness",
        description="psreadiness - Pod Security Readiness evaluation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  psreadiness run                               Start the operator
  psreadiness evaluate                          Evaluate the cluster namespaces
  psreadiness evaluate --file namespaces.yaml   Evaluate namespaces from a file
  psreadiness conditions                        List the condition types
        """,
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be repeated: -v, -vv)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Start the psreadiness operator")
    run_parser.add_argument(
        "--dev",
        action="store_true",
        help="Run in development mode with console logging",
    )

    # Evaluate command
    evaluate_parser = subparsers.add_parser(
        "evaluate", help="Evaluate namespaces once and print the conditions"
    )
    evaluate_parser.add_argument(
        "--file",
        "-f",
        type=Path,
        default=None,
        help="YAML or JSON file with namespaces (default: read from the cluster)",
    )
    evaluate_parser.add_argument(
        "--output",
        "-o",
        choices=["text", "json", "yaml"],
        default="text",
        help="Output format",
    )

    # Conditions command
    subparsers.add_parser("conditions", help="List the condition types that are published")

    return parser


def load_namespaces_file(path: Path) -> list[NamespaceDescriptor]:
    """Load namespaces from a YAML or JSON file.

    Accepts a list of items, a ``NamespaceList`` style mapping with
    ``items``, or a mapping with ``namespaces``. Items are either namespace
    objects (with ``metadata``) or plain ``{name, labels}`` mappings.

    Raises:
        ValueError: If the document has none of the accepted shapes.
    """
    document = yaml.safe_load(path.read_text(encoding="utf-8"))

    if isinstance(document, Mapping):
        document = document.get("items", document.get("namespaces"))
    if document is None:
        return []
    if not isinstance(document, list):
        msg = f"{path}: expected a list of namespaces"
        raise ValueError(msg)

    namespaces = []
    for item in document:
        if isinstance(item, str):
            namespaces.append(NamespaceDescriptor(name=item))
        elif isinstance(item, Mapping) and "metadata" in item:
            namespaces.append(NamespaceDescriptor.from_kubernetes_object(item))
        elif isinstance(item, Mapping):
            namespaces.append(NamespaceDescriptor(name=item.get("name"), labels=item.get("labels")))
        else:
            msg = f"{path}: unsupported namespace entry {item!r}"
            raise ValueError(msg)
    return namespaces


def format_conditions(conditions: list[OperatorCondition], output: str) -> str:
    """Render conditions for terminal output."""
    if output == "json":
        return json.dumps([condition.to_dict() for condition in conditions], indent=2)
    if output == "yaml":
        return yaml.safe_dump(
            [condition.to_dict() for condition in conditions], sort_keys=False
        ).rstrip()

    width = max(len(condition.type) for condition in conditions)
    lines = []
    for condition in conditions:
        line = f"{condition.type:<{width}}  {condition.status.value:<5}  {condition.reason}"
        if condition.message:
            line += f"  {condition.message}"
        lines.append(line)
    return "\n".join(lines)


def _cluster_namespace_source() -> NamespaceSource:
    from kubernetes import config as k8s_config

    from psreadiness.config.settings import get_settings
    from psreadiness.kubernetes import KubernetesNamespaceSource, load_kube_config

    settings = get_settings()
    try:
        load_kube_config(settings.kubernetes)
    except k8s_config.ConfigException as e:
        msg = f"Cannot load Kubernetes configuration: {e}"
        raise NamespaceListError(msg) from e
    return KubernetesNamespaceSource(
        label_selector=settings.kubernetes.namespace_label_selector,
        request_timeout=settings.kubernetes.api_timeout,
    )


def run_operator(args: Namespace) -> int:
    """Start the psreadiness operator."""
    from psreadiness.operator.main import run

    return run(dev_mode=args.dev)


def run_evaluate(args: Namespace) -> int:
    """Evaluate namespaces once; status is kept in memory only."""
    source: NamespaceSource
    try:
        if args.file is not None:
            source = StaticNamespaceSource(load_namespaces_file(args.file))
        else:
            source = _cluster_namespace_source()
        conditions = PodSecurityReadinessController(source, InMemoryStatusSink()).sync()
    except (OSError, ValueError, yaml.YAMLError, ReadinessError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(format_conditions(conditions, args.output))
    return 0


def list_conditions(args: Namespace) -> int:  # noqa: ARG001
    """Print the published condition types."""
    for condition_type in CONDITION_TYPES:
        print(condition_type)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    # Log lines go to stderr so that stdout carries only command output
    configure_logging(
        level=_VERBOSITY_LEVELS[min(args.verbose, 2)],
        format_type="console",
        stream=sys.stderr,
    )

    command_handlers = {
        "run": run_operator,
        "evaluate": run_evaluate,
        "conditions": list_conditions,
    }

    handler = command_handlers.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
