"""Repository interfaces (ports) for the Credentials bounded context."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from shared_kernel.auth.credentials import BasicCredential


@runtime_checkable
class ICredentialStore(Protocol):
    """Persistent per-tenant store of Basic credentials.

    Every method normalizes the tenant URL it receives, so callers may pass
    URLs with paths, padding or trailing slashes.
    """

    def list_all(self) -> list[BasicCredential]:
        """Return every readable stored credential.

        Records that cannot be deserialized are skipped, not raised.
        """
        ...

    def lookup(self, tenant_url: str) -> BasicCredential:
        """Return the credential stored for a tenant.

        Raises:
            CredentialNotFoundError: Nothing stored for the tenant
            CredentialCorruptedError: A record exists but cannot be used
        """
        ...

    def save(self, credential: BasicCredential) -> None:
        """Store a credential, replacing any previous one for the tenant.

        Raises:
            CredentialStoreError: The backend rejected the write
        """
        ...

    def delete(self, tenant_url: str) -> bool:
        """Remove the credential for a tenant.

        Returns:
            True if a record existed and was removed, False otherwise.
        """
        ...
