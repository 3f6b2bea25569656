"""Observability for shared middleware operations."""

from shared_kernel.middleware.observability.auth_context_probe import (
    AuthContextProbe,
    DefaultAuthContextProbe,
)

__all__ = [
    "AuthContextProbe",
    "DefaultAuthContextProbe",
]
