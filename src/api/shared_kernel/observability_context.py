"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Attributes:
        tenant_url: Canonical tenant URL the operation acts on (if known).
        auth_scheme: ``basic`` or ``bearer`` (if known).
        tool_name: MCP tool or prompt being served (if applicable).
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(tenant_url="https://t1.example.com")
        probe = DefaultClientResolverProbe().with_context(context)
    """

    tenant_url: str | None = None
    auth_scheme: str | None = None
    tool_name: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.tenant_url is not None:
            result["tenant_url"] = self.tenant_url
        if self.auth_scheme is not None:
            result["auth_scheme"] = self.auth_scheme
        if self.tool_name is not None:
            result["tool_name"] = self.tool_name
        result.update(self.extra)
        return result
