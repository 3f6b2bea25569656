"""Dependency injection for the Cumulocity bounded context.

Provides dependencies local to the Cumulocity context only.
Cross-context composition (credential store, request auth context) is
handled in infrastructure.mcp_dependencies, which installs the resolver
here at startup.
"""

from functools import lru_cache
from pathlib import Path

from cumulocity.application.client_resolver import ClientResolver
from cumulocity.application.observability import DefaultToolProbe, ToolProbe
from cumulocity.infrastructure.client import CumulocityClient
from cumulocity.infrastructure.prompt_repository import PromptRepository

_client_resolver: ClientResolver[CumulocityClient] | None = None


def set_client_resolver(resolver: ClientResolver[CumulocityClient]) -> None:
    """Install the resolver used by MCP tools and prompts."""
    global _client_resolver
    _client_resolver = resolver


def get_client_resolver() -> ClientResolver[CumulocityClient]:
    """Get the installed client resolver.

    Raises:
        RuntimeError: If called before set_client_resolver
    """
    if _client_resolver is None:
        raise RuntimeError(
            "Client resolver not configured. Call set_client_resolver at startup."
        )
    return _client_resolver


def get_tool_probe() -> ToolProbe:
    """Get ToolProbe instance.

    Returns:
        DefaultToolProbe instance for observability
    """
    return DefaultToolProbe()


@lru_cache(maxsize=1)
def get_prompt_repository() -> PromptRepository:
    """Get prompt repository with default prompts directory (cached).

    Loads prompts from cumulocity/infrastructure/prompts directory.
    Performs startup validation to ensure required files exist.

    Returns:
        PromptRepository instance with validated prompts (singleton)

    Raises:
        FileNotFoundError: If prompts directory or required files are missing
    """
    prompts_dir = Path(__file__).parent / "infrastructure" / "prompts"
    return PromptRepository(prompts_dir=prompts_dir)
