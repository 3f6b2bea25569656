"""How the process obtains credentials."""

from enum import StrEnum


class ExecutionMode(StrEnum):
    """Execution mode of the MCP server.

    SERVER: credentials arrive with every HTTP request.
    SINGLE_USER: credentials come from the local keyring, selected by the
        tenant URL passed to each tool call.
    """

    SERVER = "server"
    SINGLE_USER = "single_user"
