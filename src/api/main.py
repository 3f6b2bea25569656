"""Main FastAPI application entry point for server mode.

Every request to the MCP endpoint must carry an ``Authorization`` header.
The tenant is taken from the scheme and host the request was addressed to,
so the server has to be reachable under the tenant's own host name (or
behind a proxy that preserves it).
"""

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from starlette.middleware import Middleware

from cumulocity.application.client_resolver import ClientResolver
from cumulocity.dependencies import set_client_resolver
from cumulocity.infrastructure.client import CumulocityClient
from cumulocity.presentation.mcp import mcp
from infrastructure.logging import configure_logging
from infrastructure.mcp_dependencies import (
    build_client_resolver,
    get_auth_context_scope,
)
from infrastructure.settings import get_server_settings, get_settings
from infrastructure.version import __version__
from shared_kernel.execution_mode import ExecutionMode
from shared_kernel.middleware import RequestAuthContextMiddleware
from shared_kernel.middleware.observability import DefaultAuthContextProbe


def create_app(
    resolver: ClientResolver[CumulocityClient] | None = None,
) -> FastAPI:
    """Build the server-mode application.

    Args:
        resolver: Client resolver for the MCP tools. Defaults to a
            server-mode resolver reading request-bound credentials.
    """
    settings = get_settings()
    server_settings = get_server_settings()
    configure_logging(debug=settings.debug)

    set_client_resolver(resolver or build_client_resolver(ExecutionMode.SERVER))

    mcp_app = mcp.http_app(
        path=server_settings.mcp_path,
        stateless_http=True,
        json_response=True,
        middleware=[
            Middleware(
                RequestAuthContextMiddleware,
                auth_context=get_auth_context_scope(),
                probe=DefaultAuthContextProbe(),
            )
        ],
    )

    app = FastAPI(
        title="Cumulocity MCP Server",
        description="Model Context Protocol server for Cumulocity IoT",
        version=__version__,
        lifespan=mcp_app.lifespan,
    )

    @app.get("/health")
    def health():
        """Basic health check endpoint."""
        return {"status": "ok"}

    @app.get("/", response_class=PlainTextResponse)
    def banner():
        return f"{settings.app_name} {__version__} - MCP endpoint at {server_settings.mcp_path}"

    # Registered last: the mount catches every path not matched above
    app.mount(path="/", app=mcp_app)

    return app


app = create_app()
