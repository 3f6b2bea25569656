"""Shared middleware for cross-cutting concerns.

This module contains the ASGI middleware and the request-scoped auth context
shared across bounded contexts. The middleware binds the credentials of each
inbound request; the Cumulocity context reads them when resolving a client.
"""

from shared_kernel.middleware.auth_context import (
    AuthContextScope,
    RequestAuthContextMiddleware,
)

__all__ = [
    "AuthContextScope",
    "RequestAuthContextMiddleware",
]
