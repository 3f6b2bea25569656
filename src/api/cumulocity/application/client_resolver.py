"""Resolution of authenticated Cumulocity clients.

Every tool call asks the resolver for a client. Where the credentials come
from depends on the execution mode:

- SERVER: the credentials bound to the current HTTP request by the
  auth-context middleware. Any tenant URL passed by the caller is ignored.
- SINGLE_USER: the keyring entry for the tenant URL passed by the caller.

Each call authenticates a fresh client. Clients are never cached or shared
between calls.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Generic, TypeVar

from cumulocity.application.observability import (
    ClientResolverProbe,
    DefaultClientResolverProbe,
)
from cumulocity.ports.client import AuthenticatedClient, ClientAuthenticator
from cumulocity.ports.credentials import CredentialProvider
from shared_kernel.auth.credentials import (
    BasicCredential,
    BearerCredential,
    CredentialDescriptor,
)
from shared_kernel.auth.exceptions import (
    InvalidCredentialError,
    MissingTenantUrlError,
)
from shared_kernel.auth.tenant_url import normalize_tenant_url
from shared_kernel.execution_mode import ExecutionMode
from shared_kernel.middleware.auth_context import AuthContextScope

ClientT = TypeVar("ClientT", bound=AuthenticatedClient)


class ClientResolver(Generic[ClientT]):
    """Produces an authenticated client for the current caller."""

    def __init__(
        self,
        mode: ExecutionMode,
        credential_provider: CredentialProvider,
        auth_context: AuthContextScope,
        authenticator: ClientAuthenticator[ClientT],
        probe: ClientResolverProbe | None = None,
    ):
        """Initialize the resolver.

        Args:
            mode: Where credentials come from.
            credential_provider: Stored credentials, used in single-user mode.
            auth_context: Request-bound credentials, used in server mode.
            authenticator: Builds and verifies a client for a descriptor.
            probe: Domain probe for observability.
        """
        self._mode = mode
        self._credential_provider = credential_provider
        self._auth_context = auth_context
        self._authenticator = authenticator
        self._probe = probe or DefaultClientResolverProbe()

    @property
    def mode(self) -> ExecutionMode:
        return self._mode

    async def resolve(self, tenant_url: str | None = None) -> ClientT:
        """Return a newly authenticated client.

        Args:
            tenant_url: Tenant to act on. Required in single-user mode,
                ignored in server mode.

        Raises:
            NoAuthContextError: Server mode outside an authenticated request
            MissingTenantUrlError: Single-user mode without a tenant URL
            NotFoundError: No stored credentials for the tenant
            CorruptionError: Stored credentials cannot be read
            InvalidCredentialError: Credentials lack required fields
            CumulocityAuthenticationError: The tenant rejected the credentials
        """
        match self._mode:
            case ExecutionMode.SERVER:
                credential = self._auth_context.read()
            case ExecutionMode.SINGLE_USER:
                credential = self._stored_credential(tenant_url)

        self._validate(credential)
        self._probe.credentials_resolved(
            mode=self._mode,
            tenant_url=credential.tenant_url,
            auth_scheme=credential.SCHEME,
        )
        return await self._authenticator(credential)

    @asynccontextmanager
    async def client(self, tenant_url: str | None = None) -> AsyncIterator[ClientT]:
        """Resolve a client for the duration of the block and close it afterwards."""
        client = await self.resolve(tenant_url)
        try:
            yield client
        finally:
            await client.aclose()

    def _stored_credential(self, tenant_url: str | None) -> BasicCredential:
        if not tenant_url or not tenant_url.strip():
            self._probe.tenant_url_missing(mode=self._mode)
            raise MissingTenantUrlError("tenant_url is required in single-user mode")
        return self._credential_provider.lookup(normalize_tenant_url(tenant_url))

    def _validate(self, credential: CredentialDescriptor) -> None:
        match (self._mode, credential):
            case (ExecutionMode.SERVER, BearerCredential(token=token)) if token:
                return
            case (_, BasicCredential(user=user, password=password)) if user and password:
                return

        self._probe.invalid_credentials(
            mode=self._mode, tenant_url=getattr(credential, "tenant_url", None)
        )
        if self._mode is ExecutionMode.SINGLE_USER:
            raise InvalidCredentialError(
                "Invalid credentials: user and password are required in single-user mode"
            )
        raise InvalidCredentialError("Invalid authentication credentials in context")
