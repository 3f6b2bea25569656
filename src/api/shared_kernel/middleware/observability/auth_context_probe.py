"""Domain probe for request credential binding.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to parsing the Authorization header and
binding the resulting credentials to a request.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthContextProbe(Protocol):
    """Domain probe for request auth context operations."""

    def credentials_bound(
        self,
        tenant_url: str,
        auth_scheme: str,
        path: str,
    ) -> None:
        """Record that request credentials were bound for the request lifetime."""
        ...

    def credentials_rejected(
        self,
        path: str,
        reason: str,
        error_type: str,
    ) -> None:
        """Record that a request was rejected for missing or malformed credentials."""
        ...

    def with_context(self, context: ObservationContext) -> AuthContextProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuthContextProbe:
    """Default implementation of AuthContextProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultAuthContextProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuthContextProbe(logger=self._logger, context=context)

    def credentials_bound(
        self,
        tenant_url: str,
        auth_scheme: str,
        path: str,
    ) -> None:
        """Record that request credentials were bound for the request lifetime."""
        self._logger.debug(
            "auth_context_bound",
            tenant_url=tenant_url,
            auth_scheme=auth_scheme,
            path=path,
            **self._get_context_kwargs(),
        )

    def credentials_rejected(
        self,
        path: str,
        reason: str,
        error_type: str,
    ) -> None:
        """Record that a request was rejected for missing or malformed credentials."""
        self._logger.warning(
            "auth_context_rejected",
            path=path,
            reason=reason,
            error_type=error_type,
            **self._get_context_kwargs(),
        )
