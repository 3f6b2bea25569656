"""Dependency injection for the Credentials bounded context.

Provides dependencies local to the Credentials context only.
Cross-context composition is handled in infrastructure.mcp_dependencies.
"""

from functools import lru_cache

from credentials.infrastructure.keyring_store import KeyringCredentialStore
from credentials.infrastructure.observability import DefaultCredentialStoreProbe
from credentials.ports.repositories import ICredentialStore
from infrastructure.settings import get_settings


@lru_cache(maxsize=1)
def get_credential_store() -> ICredentialStore:
    """Get the keyring credential store for the configured service (cached).

    Returns:
        KeyringCredentialStore using the platform keyring backend
    """
    settings = get_settings()
    return KeyringCredentialStore(
        service=settings.keyring_service,
        probe=DefaultCredentialStoreProbe(),
    )
