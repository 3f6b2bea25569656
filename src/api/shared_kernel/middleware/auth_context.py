"""Request-scoped propagation of credential descriptors.

In server mode every inbound HTTP request carries its own credentials. The
middleware in this module parses them once and binds the resulting
descriptor to the task handling that request, so code deep inside the MCP
tool call graph can read it without the descriptor being passed along
explicitly.

Isolation between concurrent requests relies on ``contextvars``: asyncio
copies the current context into every task it creates, and a value set
inside one request's task is invisible to all others.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TypeVar

import structlog
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from shared_kernel.auth.credentials import CredentialDescriptor
from shared_kernel.auth.exceptions import InputError, NoAuthContextError
from shared_kernel.auth.header_extractor import extract_credentials
from shared_kernel.middleware.observability import (
    AuthContextProbe,
    DefaultAuthContextProbe,
)

T = TypeVar("T")

WWW_AUTHENTICATE = "Basic, Bearer"


class AuthContextScope:
    """Binds one credential descriptor to the current logical call graph.

    Each scope owns a private ContextVar. The same instance is shared by the
    middleware that binds and the resolver that reads.
    """

    def __init__(self, name: str = "c8y_auth_context"):
        self._current: ContextVar[CredentialDescriptor | None] = ContextVar(
            name, default=None
        )

    @contextmanager
    def bind(self, descriptor: CredentialDescriptor) -> Iterator[CredentialDescriptor]:
        """Make ``descriptor`` visible to everything executed inside the block.

        The previous binding is restored on every exit path, including
        exceptions and cancellation.
        """
        token = self._current.set(descriptor)
        try:
            yield descriptor
        finally:
            self._current.reset(token)

    async def run(
        self, descriptor: CredentialDescriptor, body: Callable[[], Awaitable[T]]
    ) -> T:
        """Await ``body()`` with ``descriptor`` bound."""
        with self.bind(descriptor):
            return await body()

    def read(self) -> CredentialDescriptor:
        """Return the bound descriptor.

        Raises:
            NoAuthContextError: Called outside any binding
        """
        descriptor = self._current.get()
        if descriptor is None:
            raise NoAuthContextError("No authentication context available")
        return descriptor


class RequestAuthContextMiddleware:
    """ASGI middleware binding the request's credentials for its lifetime.

    Requests without usable credentials are answered with 401 and never
    reach the wrapped application. Non-HTTP scopes pass through untouched.
    """

    def __init__(
        self,
        app: ASGIApp,
        auth_context: AuthContextScope,
        probe: AuthContextProbe | None = None,
    ):
        self.app = app
        self._auth_context = auth_context
        self._probe = probe or DefaultAuthContextProbe()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        try:
            descriptor = extract_credentials(request.headers, str(request.url))
        except InputError as e:
            self._probe.credentials_rejected(
                path=request.url.path,
                reason=str(e),
                error_type=type(e).__name__,
            )
            response = JSONResponse(
                {"error": "unauthorized", "detail": str(e)},
                status_code=401,
                headers={"WWW-Authenticate": WWW_AUTHENTICATE},
            )
            await response(scope, receive, send)
            return

        self._probe.credentials_bound(
            tenant_url=descriptor.tenant_url,
            auth_scheme=descriptor.SCHEME,
            path=request.url.path,
        )
        with (
            self._auth_context.bind(descriptor),
            structlog.contextvars.bound_contextvars(
                tenant_url=descriptor.tenant_url,
                auth_scheme=descriptor.SCHEME,
            ),
        ):
            await self.app(scope, receive, send)
