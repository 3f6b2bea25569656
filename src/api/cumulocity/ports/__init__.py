"""Cumulocity ports (interfaces) module.

Ports define the contracts between the application layer and infrastructure.
They allow for dependency inversion, enabling the resolver to stay
independent of the keyring and of the HTTP client.
"""

from cumulocity.ports.client import AuthenticatedClient, ClientAuthenticator
from cumulocity.ports.credentials import CredentialProvider
from cumulocity.ports.exceptions import (
    CumulocityAuthenticationError,
    CumulocityError,
    CumulocityRequestError,
)

__all__ = [
    "AuthenticatedClient",
    "ClientAuthenticator",
    "CredentialProvider",
    "CumulocityAuthenticationError",
    "CumulocityError",
    "CumulocityRequestError",
]
