"""Ports for producing authenticated Cumulocity clients."""

from __future__ import annotations

from typing import Protocol, TypeVar

from shared_kernel.auth.credentials import CredentialDescriptor


class AuthenticatedClient(Protocol):
    """A live client bound to one tenant and identity."""

    tenant_url: str

    async def aclose(self) -> None:
        """Release the underlying connections."""
        ...


ClientT_co = TypeVar("ClientT_co", bound=AuthenticatedClient, covariant=True)


class ClientAuthenticator(Protocol[ClientT_co]):
    """Turns a credential descriptor into an authenticated client.

    Implementations verify the credentials against the tenant before
    returning and raise CumulocityAuthenticationError when they are rejected.
    """

    async def __call__(self, credential: CredentialDescriptor) -> ClientT_co: ...
