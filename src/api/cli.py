"""Command-line entry point: ``c8y-mcp``.

Usage:
    c8y-mcp                       # MCP over stdio, credentials from the keyring
    c8y-mcp serve --port 3000     # MCP over HTTP, credentials per request
    c8y-mcp creds add
    c8y-mcp creds list
    c8y-mcp creds remove [TENANT_URL ...]
"""

import argparse
import sys

from rich.console import Console

console = Console()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="c8y-mcp",
        description="MCP server for Cumulocity IoT",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                  run over stdio (single-user)
  %(prog)s serve --port 8080                run over HTTP (server mode)
  %(prog)s creds add                        store credentials for a tenant
  %(prog)s creds remove https://t.example   remove stored credentials
        """,
    )
    commands = parser.add_subparsers(dest="command")

    serve = commands.add_parser("serve", help="Serve MCP over HTTP in server mode")
    serve.add_argument("--host", help="Bind address (default: from settings)")
    serve.add_argument("--port", type=int, help="Listen port (default: from settings)")

    creds = commands.add_parser("creds", help="Manage stored tenant credentials")
    creds_commands = creds.add_subparsers(dest="creds_command", required=True)
    creds_commands.add_parser("add", help="Store credentials for a tenant")
    creds_commands.add_parser("list", help="List tenants with stored credentials")
    remove = creds_commands.add_parser("remove", help="Remove stored credentials")
    remove.add_argument(
        "tenant_urls",
        nargs="*",
        metavar="TENANT_URL",
        help="Tenants to remove (interactive selection when omitted)",
    )

    return parser.parse_args(argv)


def run_stdio() -> int:
    """Serve MCP over stdio with credentials from the keyring."""
    from credentials.presentation.mcp import register_credential_tools
    from cumulocity.dependencies import set_client_resolver
    from cumulocity.presentation.mcp import mcp
    from infrastructure.logging import configure_logging
    from infrastructure.mcp_dependencies import build_client_resolver
    from infrastructure.settings import get_settings
    from shared_kernel.execution_mode import ExecutionMode

    # stdout carries the MCP messages
    configure_logging(stream=sys.stderr, debug=get_settings().debug)
    set_client_resolver(build_client_resolver(ExecutionMode.SINGLE_USER))
    register_credential_tools(mcp)
    mcp.run(transport="stdio", show_banner=False)
    return 0


def run_server(host: str | None, port: int | None) -> int:
    """Serve MCP over HTTP with credentials from each request."""
    import uvicorn

    from infrastructure.settings import get_server_settings

    server_settings = get_server_settings()
    uvicorn.run(
        "main:app",
        host=host or server_settings.host,
        port=port or server_settings.port,
    )
    return 0


def run_creds(args: argparse.Namespace) -> int:
    from credentials.dependencies import get_credential_store
    from credentials.presentation import cli as creds_cli

    store = get_credential_store()
    match args.creds_command:
        case "add":
            return creds_cli.add_credential(store, console)
        case "list":
            return creds_cli.list_credentials(store, console)
        case "remove":
            return creds_cli.remove_credentials(store, args.tenant_urls, console)
    return 2


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    try:
        match args.command:
            case "serve":
                return run_server(args.host, args.port)
            case "creds":
                return run_creds(args)
            case _:
                return run_stdio()
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
