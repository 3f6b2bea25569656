"""Authentication error taxonomy.

Errors are grouped by kind so callers can react to a whole family at once:
the HTTP layer turns every ``InputError`` into a 401, while tools report
any ``AuthenticationError`` back to the agent.
"""


class AuthenticationError(Exception):
    """Base class for all credential resolution failures."""


class InputError(AuthenticationError):
    """The incoming request does not carry usable credentials."""


class MissingAuthorizationError(InputError):
    """No Authorization header was sent."""


class MalformedBasicError(InputError):
    """A Basic payload could not be decoded into ``user:password``."""


class EmptyBearerTokenError(InputError):
    """A Bearer header was sent without a token."""


class UnsupportedSchemeError(InputError):
    """The Authorization header uses a scheme other than Basic or Bearer."""


class InvalidRequestUrlError(InputError):
    """The tenant URL could not be derived from the request URL."""


class MissingTenantUrlError(InputError):
    """Single-user mode was asked for a client without a tenant URL."""


class NotFoundError(AuthenticationError):
    """A requested credential does not exist."""


class CredentialNotFoundError(NotFoundError):
    """No stored credential exists for the tenant URL."""

    def __init__(self, tenant_url: str):
        self.tenant_url = tenant_url
        super().__init__(f"No stored credentials found for tenant: {tenant_url}")


class CorruptionError(AuthenticationError):
    """A persisted record exists but cannot be used."""


class CredentialCorruptedError(CorruptionError):
    """The stored record for a tenant URL cannot be deserialized."""

    def __init__(self, tenant_url: str, reason: str = "unreadable record"):
        self.tenant_url = tenant_url
        self.reason = reason
        super().__init__(f"Stored credentials for tenant {tenant_url} are corrupted: {reason}")


class ContextError(AuthenticationError):
    """Request-scoped auth state is missing."""


class NoAuthContextError(ContextError):
    """Server mode was asked for a client outside any authenticated request."""


class CredentialShapeError(AuthenticationError):
    """A credential descriptor is missing required fields."""


class InvalidCredentialError(CredentialShapeError):
    """The descriptor has neither a token nor a user and password."""
