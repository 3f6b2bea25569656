"""Domain probe for credential store operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to storing and reading credentials.
Secrets never reach the probe; only tenant URLs do.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class CredentialStoreProbe(Protocol):
    """Domain probe for credential store operations."""

    def credential_loaded(self, tenant_url: str) -> None:
        """Record that stored credentials were read for a tenant."""
        ...

    def credential_not_found(self, tenant_url: str) -> None:
        """Record that no credentials are stored for a tenant."""
        ...

    def credential_corrupted(self, tenant_url: str, reason: str) -> None:
        """Record that a stored record could not be used."""
        ...

    def credential_skipped(self, tenant_url: str, reason: str) -> None:
        """Record that a record was left out of a listing."""
        ...

    def credential_saved(self, tenant_url: str) -> None:
        """Record that credentials were stored for a tenant."""
        ...

    def credential_deleted(self, tenant_url: str) -> None:
        """Record that credentials were removed for a tenant."""
        ...

    def index_corrupted(self, service: str) -> None:
        """Record that the tenant index entry could not be parsed."""
        ...

    def backend_failed(self, account: str, operation: str, error: Exception) -> None:
        """Record that the keyring backend raised an error."""
        ...

    def with_context(self, context: ObservationContext) -> CredentialStoreProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultCredentialStoreProbe:
    """Default implementation of CredentialStoreProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultCredentialStoreProbe:
        """Create a new probe with observation context bound."""
        return DefaultCredentialStoreProbe(logger=self._logger, context=context)

    def credential_loaded(self, tenant_url: str) -> None:
        """Record that stored credentials were read for a tenant."""
        self._logger.debug(
            "credential_loaded",
            tenant_url=tenant_url,
            **self._get_context_kwargs(),
        )

    def credential_not_found(self, tenant_url: str) -> None:
        """Record that no credentials are stored for a tenant."""
        self._logger.warning(
            "credential_not_found",
            tenant_url=tenant_url,
            **self._get_context_kwargs(),
        )

    def credential_corrupted(self, tenant_url: str, reason: str) -> None:
        """Record that a stored record could not be used."""
        self._logger.error(
            "credential_corrupted",
            tenant_url=tenant_url,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def credential_skipped(self, tenant_url: str, reason: str) -> None:
        """Record that a record was left out of a listing."""
        self._logger.warning(
            "credential_skipped",
            tenant_url=tenant_url,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def credential_saved(self, tenant_url: str) -> None:
        """Record that credentials were stored for a tenant."""
        self._logger.info(
            "credential_saved",
            tenant_url=tenant_url,
            **self._get_context_kwargs(),
        )

    def credential_deleted(self, tenant_url: str) -> None:
        """Record that credentials were removed for a tenant."""
        self._logger.info(
            "credential_deleted",
            tenant_url=tenant_url,
            **self._get_context_kwargs(),
        )

    def index_corrupted(self, service: str) -> None:
        """Record that the tenant index entry could not be parsed."""
        self._logger.error(
            "credential_index_corrupted",
            service=service,
            **self._get_context_kwargs(),
        )

    def backend_failed(self, account: str, operation: str, error: Exception) -> None:
        """Record that the keyring backend raised an error."""
        self._logger.error(
            "credential_backend_failed",
            account=account,
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
