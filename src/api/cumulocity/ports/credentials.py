"""Port for looking up stored credentials in single-user mode."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from shared_kernel.auth.credentials import BasicCredential


@runtime_checkable
class CredentialProvider(Protocol):
    """Source of stored Basic credentials keyed by tenant URL.

    Satisfied by the Credentials context's keyring store.
    """

    def lookup(self, tenant_url: str) -> BasicCredential:
        """Return the credential stored for a tenant.

        Raises:
            NotFoundError: Nothing stored for the tenant
            CorruptionError: A record exists but cannot be used
        """
        ...
