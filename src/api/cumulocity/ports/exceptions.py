"""Exceptions for Cumulocity API access."""

from __future__ import annotations


class CumulocityError(Exception):
    """Base exception for failures talking to a Cumulocity tenant."""


class CumulocityRequestError(CumulocityError):
    """A request failed at the transport level or returned an error status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        reason: str | None = None,
    ):
        self.status_code = status_code
        self.reason = reason
        self.detail = message
        if status_code is not None:
            prefix = f"HTTP {status_code}{f' {reason}' if reason else ''}"
            message = f"{prefix}: {message}"
        super().__init__(message)


class CumulocityAuthenticationError(CumulocityError):
    """The tenant rejected the supplied credentials."""

    def __init__(
        self, tenant_url: str, status_code: int | None = None, detail: str | None = None
    ):
        self.tenant_url = tenant_url
        self.status_code = status_code
        message = f"Authentication against {tenant_url} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
