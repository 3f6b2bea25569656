"""Parse inbound HTTP credentials into a credential descriptor.

The tenant is always derived from the address the request was sent to,
never from the header itself. A reverse proxy that rewrites the host
therefore changes the tenant the credentials are forwarded to.
"""

from __future__ import annotations

import base64
from collections.abc import Mapping
from urllib.parse import urlsplit

from shared_kernel.auth.credentials import (
    BasicCredential,
    BearerCredential,
    CredentialDescriptor,
)
from shared_kernel.auth.exceptions import (
    EmptyBearerTokenError,
    InvalidRequestUrlError,
    MalformedBasicError,
    MissingAuthorizationError,
    UnsupportedSchemeError,
)

AUTHORIZATION_HEADER = "authorization"


def extract_credentials(
    headers: Mapping[str, str], request_url: str
) -> CredentialDescriptor:
    """Build a credential descriptor from request headers and URL.

    Args:
        headers: Request headers. Names are matched case-insensitively.
        request_url: Full URL the request was sent to.

    Returns:
        A BasicCredential or BearerCredential bound to the request's tenant.

    Raises:
        MissingAuthorizationError: No Authorization header present
        InvalidRequestUrlError: Request URL lacks a scheme or host
        MalformedBasicError: Basic payload is not base64 ``user:password``
        EmptyBearerTokenError: Bearer scheme sent without a token
        UnsupportedSchemeError: Any scheme other than Basic or Bearer
    """
    authorization = _get_header(headers, AUTHORIZATION_HEADER)
    if not authorization:
        raise MissingAuthorizationError("Missing Authorization header")

    tenant_url = tenant_url_from_request(request_url)
    scheme, _, payload = authorization.partition(" ")

    match scheme.lower():
        case "basic":
            user, password = _decode_basic(payload)
            return BasicCredential(user=user, password=password, tenant_url=tenant_url)
        case "bearer":
            if not payload:
                raise EmptyBearerTokenError("Empty Bearer token")
            return BearerCredential(token=payload, tenant_url=tenant_url)
        case _:
            raise UnsupportedSchemeError(
                "Unsupported authentication method. Use Basic or Bearer."
            )


def tenant_url_from_request(request_url: str) -> str:
    """Return ``scheme://host[:port]`` of a request URL, without userinfo."""
    parts = urlsplit(request_url)
    host = parts.netloc.rpartition("@")[2]
    if not parts.scheme or not host:
        raise InvalidRequestUrlError("Invalid request URL")
    return f"{parts.scheme}://{host}"


def _get_header(headers: Mapping[str, str], name: str) -> str | None:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def _decode_basic(payload: str) -> tuple[str, str]:
    try:
        decoded = base64.b64decode(payload.strip(), validate=True).decode("utf-8")
    except ValueError as e:
        raise MalformedBasicError("Invalid Basic authentication credentials") from e

    username, separator, password = decoded.partition(":")
    if not separator:
        raise MalformedBasicError("Invalid Basic authentication credentials")

    # "t12345/jane" authenticates as "jane"; the tenant comes from the host
    _, slash, user = username.partition("/")
    return (user if slash else username), password
