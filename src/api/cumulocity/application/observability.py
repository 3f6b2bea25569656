"""Domain probes for the Cumulocity application layer.

Following Domain-Oriented Observability patterns, these probes capture
domain-significant events of client resolution and MCP tool execution.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.execution_mode import ExecutionMode
    from shared_kernel.observability_context import ObservationContext


class ClientResolverProbe(Protocol):
    """Domain probe for client resolution."""

    def credentials_resolved(
        self, mode: ExecutionMode, tenant_url: str, auth_scheme: str
    ) -> None:
        """Record which tenant and scheme a client is being built for."""
        ...

    def tenant_url_missing(self, mode: ExecutionMode) -> None:
        """Record that a tool call omitted the tenant URL in single-user mode."""
        ...

    def invalid_credentials(self, mode: ExecutionMode, tenant_url: str | None) -> None:
        """Record that resolved credentials lacked required fields."""
        ...

    def with_context(self, context: ObservationContext) -> ClientResolverProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultClientResolverProbe:
    """Default implementation of ClientResolverProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultClientResolverProbe:
        """Create a new probe with observation context bound."""
        return DefaultClientResolverProbe(logger=self._logger, context=context)

    def credentials_resolved(
        self, mode: ExecutionMode, tenant_url: str, auth_scheme: str
    ) -> None:
        """Record which tenant and scheme a client is being built for."""
        self._logger.info(
            "client_credentials_resolved",
            mode=str(mode),
            tenant_url=tenant_url,
            auth_scheme=auth_scheme,
            **self._get_context_kwargs(),
        )

    def tenant_url_missing(self, mode: ExecutionMode) -> None:
        """Record that a tool call omitted the tenant URL in single-user mode."""
        self._logger.warning(
            "client_tenant_url_missing",
            mode=str(mode),
            **self._get_context_kwargs(),
        )

    def invalid_credentials(self, mode: ExecutionMode, tenant_url: str | None) -> None:
        """Record that resolved credentials lacked required fields."""
        self._logger.warning(
            "client_invalid_credentials",
            mode=str(mode),
            tenant_url=tenant_url,
            **self._get_context_kwargs(),
        )


class ToolProbe(Protocol):
    """Domain probe for MCP tool and prompt execution."""

    def tool_failed(self, tool_name: str, action: str, error: Exception) -> None:
        """Record that a tool call failed and was reported to the agent."""
        ...

    def with_context(self, context: ObservationContext) -> ToolProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultToolProbe:
    """Default implementation of ToolProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultToolProbe:
        """Create a new probe with observation context bound."""
        return DefaultToolProbe(logger=self._logger, context=context)

    def tool_failed(self, tool_name: str, action: str, error: Exception) -> None:
        """Record that a tool call failed and was reported to the agent."""
        self._logger.warning(
            "mcp_tool_failed",
            tool_name=tool_name,
            action=action,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
