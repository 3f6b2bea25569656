"""MCP tools for the Credentials bounded context.

Only registered when the server runs in single-user mode, where the
keyring is the source of credentials.
"""

from fastmcp import FastMCP
from fastmcp.dependencies import Depends
from fastmcp.exceptions import ToolError

from credentials.dependencies import get_credential_store
from credentials.ports.exceptions import CredentialStoreError
from credentials.ports.repositories import ICredentialStore


async def list_credentials(
    store: ICredentialStore = Depends(get_credential_store),
) -> str:
    """List the tenant URLs with stored credentials. Passwords are never shown."""
    try:
        stored = store.list_all()
    except CredentialStoreError as e:
        raise ToolError(f"Error listing credentials: {e}") from e
    if not stored:
        raise ToolError("No stored credentials found.")

    lines = ["Found credentials for the following tenants:"]
    lines.extend(f"TenantUrl: {credential.tenant_url}" for credential in stored)
    return "\n".join(lines)


def register_credential_tools(server: FastMCP) -> None:
    server.tool(
        list_credentials,
        name="list-credentials",
        annotations={"readOnlyHint": True, "idempotentHint": True},
    )
