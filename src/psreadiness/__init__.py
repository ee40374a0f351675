"""psreadiness - Pod Security Readiness evaluation.

Classifies namespaces that would violate pod security admission
enforcement and publishes the result as operator status conditions.
"""

from psreadiness.version import __version__


__all__ = ["__version__"]
