"""MCP-specific cross-context dependency composition.

This is the integration/composition layer for MCP tools and prompts.
It's the ONLY place allowed to wire the Credentials context and the
request auth context into the Cumulocity context.

The keyring store satisfies the Cumulocity context's CredentialProvider
port; the resolver never imports the Credentials context directly.
"""

from __future__ import annotations

from functools import lru_cache, partial
from typing import TYPE_CHECKING

from shared_kernel.execution_mode import ExecutionMode
from shared_kernel.middleware.auth_context import AuthContextScope

if TYPE_CHECKING:
    from cumulocity.application.client_resolver import ClientResolver
    from cumulocity.infrastructure.client import CumulocityClient


@lru_cache(maxsize=1)
def get_auth_context_scope() -> AuthContextScope:
    """Get the process-wide auth context scope (cached).

    The same instance must be handed to the HTTP middleware that binds
    request credentials and to the resolver that reads them.
    """
    return AuthContextScope()


def build_client_resolver(
    mode: ExecutionMode | None = None,
) -> ClientResolver[CumulocityClient]:
    """Compose a ClientResolver from the Credentials and Cumulocity contexts.

    Args:
        mode: Execution mode. Defaults to the configured execution mode.

    Returns:
        Resolver backed by the keyring store, the shared auth context scope
        and CumulocityClient.authenticate
    """
    from credentials.dependencies import get_credential_store
    from cumulocity.application.client_resolver import ClientResolver
    from cumulocity.application.observability import DefaultClientResolverProbe
    from cumulocity.infrastructure.client import CumulocityClient
    from infrastructure.settings import get_settings

    settings = get_settings()
    return ClientResolver(
        mode=mode or settings.execution_mode,
        credential_provider=get_credential_store(),
        auth_context=get_auth_context_scope(),
        authenticator=partial(
            CumulocityClient.authenticate,
            timeout=settings.request_timeout_seconds,
        ),
        probe=DefaultClientResolverProbe(),
    )
