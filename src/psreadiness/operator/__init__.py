# ruff: noqa: A005
"""psreadiness Operator package.

The Kopf-based operator that periodically evaluates pod security
readiness and publishes the result on the operator resource status.

Note: The module name 'operator' intentionally follows Kubernetes operator
naming conventions, hence the A005 (standard-library shadow) is suppressed.
"""
