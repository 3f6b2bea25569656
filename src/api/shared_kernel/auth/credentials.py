"""Credential descriptors shared by the auth and Cumulocity contexts.

A descriptor carries exactly what is needed to authenticate against one
Cumulocity tenant. Descriptors are immutable and always hold a canonical
tenant URL.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from shared_kernel.auth.tenant_url import normalize_tenant_url


@dataclass(frozen=True)
class BasicCredential:
    """Username and password for a tenant.

    Attributes:
        user: Username without any ``tenant/`` prefix.
        password: Plain password. Excluded from ``repr``.
        tenant_url: Canonical tenant URL.
    """

    SCHEME: ClassVar[str] = "basic"

    user: str
    password: str = field(repr=False)
    tenant_url: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "tenant_url", normalize_tenant_url(self.tenant_url))


@dataclass(frozen=True)
class BearerCredential:
    """Opaque bearer token for a tenant.

    Attributes:
        token: Bearer token forwarded as-is. Excluded from ``repr``.
        tenant_url: Canonical tenant URL.
    """

    SCHEME: ClassVar[str] = "bearer"

    token: str = field(repr=False)
    tenant_url: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "tenant_url", normalize_tenant_url(self.tenant_url))


CredentialDescriptor = BasicCredential | BearerCredential
