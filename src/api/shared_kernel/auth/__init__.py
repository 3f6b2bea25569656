"""Authentication shared kernel module."""

from shared_kernel.auth.credentials import (
    BasicCredential,
    BearerCredential,
    CredentialDescriptor,
)
from shared_kernel.auth.exceptions import (
    AuthenticationError,
    ContextError,
    CorruptionError,
    CredentialCorruptedError,
    CredentialNotFoundError,
    CredentialShapeError,
    EmptyBearerTokenError,
    InputError,
    InvalidCredentialError,
    InvalidRequestUrlError,
    MalformedBasicError,
    MissingAuthorizationError,
    MissingTenantUrlError,
    NoAuthContextError,
    NotFoundError,
    UnsupportedSchemeError,
)
from shared_kernel.auth.header_extractor import extract_credentials
from shared_kernel.auth.tenant_url import normalize_tenant_url

__all__ = [
    "AuthenticationError",
    "BasicCredential",
    "BearerCredential",
    "ContextError",
    "CorruptionError",
    "CredentialCorruptedError",
    "CredentialDescriptor",
    "CredentialNotFoundError",
    "CredentialShapeError",
    "EmptyBearerTokenError",
    "InputError",
    "InvalidCredentialError",
    "InvalidRequestUrlError",
    "MalformedBasicError",
    "MissingAuthorizationError",
    "MissingTenantUrlError",
    "NoAuthContextError",
    "NotFoundError",
    "UnsupportedSchemeError",
    "extract_credentials",
    "normalize_tenant_url",
]
