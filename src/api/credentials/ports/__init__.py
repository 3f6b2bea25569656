"""Credentials ports (interfaces) module.

Ports define the contracts between the application layer and infrastructure.
"""

from credentials.ports.exceptions import CredentialStoreError
from credentials.ports.repositories import ICredentialStore

__all__ = ["CredentialStoreError", "ICredentialStore"]
