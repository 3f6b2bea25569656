"""Observability for credential storage."""

from credentials.infrastructure.observability.credential_store_probe import (
    CredentialStoreProbe,
    DefaultCredentialStoreProbe,
)

__all__ = [
    "CredentialStoreProbe",
    "DefaultCredentialStoreProbe",
]
