"""Domain probe for Cumulocity API client operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to authenticating against a tenant and
reading from its REST API.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class CumulocityClientProbe(Protocol):
    """Domain probe for Cumulocity client operations."""

    def authenticated(self, tenant_url: str, auth_scheme: str) -> None:
        """Record that credentials were verified against a tenant."""
        ...

    def authentication_failed(
        self, tenant_url: str, auth_scheme: str, status_code: int | None
    ) -> None:
        """Record that a tenant rejected the credentials or was unreachable."""
        ...

    def request_completed(self, path: str, status_code: int) -> None:
        """Record that an API request succeeded."""
        ...

    def request_failed(self, path: str, status_code: int | None, error: str) -> None:
        """Record that an API request failed."""
        ...

    def with_context(self, context: ObservationContext) -> CumulocityClientProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultCumulocityClientProbe:
    """Default implementation of CumulocityClientProbe using structlog."""

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

    def with_context(
        self, context: ObservationContext
    ) -> DefaultCumulocityClientProbe:
        """Create a new probe with observation context bound."""
        return DefaultCumulocityClientProbe(logger=self._logger, context=context)

    def authenticated(self, tenant_url: str, auth_scheme: str) -> None:
        """Record that credentials were verified against a tenant."""
        self._logger.info(
            "cumulocity_authenticated",
            tenant_url=tenant_url,
            auth_scheme=auth_scheme,
            **self._get_context_kwargs(),
        )

    def authentication_failed(
        self, tenant_url: str, auth_scheme: str, status_code: int | None
    ) -> None:
        """Record that a tenant rejected the credentials or was unreachable."""
        self._logger.warning(
            "cumulocity_authentication_failed",
            tenant_url=tenant_url,
            auth_scheme=auth_scheme,
            status_code=status_code,
            **self._get_context_kwargs(),
        )

    def request_completed(self, path: str, status_code: int) -> None:
        """Record that an API request succeeded."""
        self._logger.debug(
            "cumulocity_request_completed",
            path=path,
            status_code=status_code,
            **self._get_context_kwargs(),
        )

    def request_failed(self, path: str, status_code: int | None, error: str) -> None:
        """Record that an API request failed."""
        self._logger.warning(
            "cumulocity_request_failed",
            path=path,
            status_code=status_code,
            error=error,
            **self._get_context_kwargs(),
        )
