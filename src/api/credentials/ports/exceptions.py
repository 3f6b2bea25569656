"""Exceptions raised by credential store implementations."""

from shared_kernel.auth.exceptions import AuthenticationError


class CredentialStoreError(AuthenticationError):
    """The storage backend rejected a read, write or delete."""
