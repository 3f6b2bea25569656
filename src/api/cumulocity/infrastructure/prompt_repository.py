"""Repository for loading prompt and instruction files."""

from functools import cache
from pathlib import Path


class PromptRepository:
    """Repository for loading prompt/instruction files from the filesystem.

    Each static prompt is a markdown file named after the prompt
    (``alarms-guide`` is ``alarms-guide.md``). Uses Python's built-in
    @cache decorator so files are read only once per process lifecycle.

    Raises FileNotFoundError at initialization if required files are missing,
    enabling fail-fast behavior at application startup.
    """

    SERVER_INSTRUCTIONS_FILENAME = "server_instructions.md"

    GUIDE_PROMPTS: dict[str, str] = {
        "alarms-guide": "Learn about alarm monitoring in Cumulocity.",
        "events-guide": "Learn about querying events in Cumulocity.",
        "measurements-guide": "Learn how to query measurements effectively.",
        "inventory-query": (
            "Get help constructing OData inventory queries. "
            "OData syntax only works for inventory, not measurements, events or alarms."
        ),
        "metadata-guide": "Learn about dashboards, tenant, user and audit metadata.",
        "applications-guide": (
            "Guide for querying applications, extensions, plugins, widgets "
            "and microservices."
        ),
        "audit-query": "Get help with audit log queries and available audit types.",
    }

    def __init__(self, prompts_dir: Path):
        """Initialize repository with prompts directory.

        Args:
            prompts_dir: Path to directory containing prompt files

        Raises:
            FileNotFoundError: If prompts directory or required files don't exist
        """
        self._prompts_dir = prompts_dir

        # Pre-flight check: Validate required files exist at startup
        self._validate_required_files()

    def _get_prompt_path(self, name: str) -> Path:
        return self._prompts_dir / f"{name}.md"

    def _validate_required_files(self) -> None:
        """Validate that all required prompt files exist.

        Raises:
            FileNotFoundError: If any required file is missing
        """
        if not self._prompts_dir.exists():
            raise FileNotFoundError(f"Prompts directory not found: {self._prompts_dir}")

        required = [
            self._prompts_dir / self.SERVER_INSTRUCTIONS_FILENAME,
            *(self._get_prompt_path(name) for name in self.GUIDE_PROMPTS),
        ]
        missing = [path for path in required if not path.exists()]
        if missing:
            raise FileNotFoundError(
                f"Required prompt files not found: {', '.join(str(p) for p in missing)}"
            )

    @cache
    def get_server_instructions(self) -> str:
        """Load the instructions announced to MCP clients (cached)."""
        path = self._prompts_dir / self.SERVER_INSTRUCTIONS_FILENAME
        return path.read_text(encoding="utf-8")

    @cache
    def get_prompt(self, name: str) -> str:
        """Load a guide prompt by name (cached).

        Args:
            name: Prompt name, one of GUIDE_PROMPTS

        Returns:
            Prompt content as markdown string

        Raises:
            KeyError: If the name is not a known guide prompt
        """
        if name not in self.GUIDE_PROMPTS:
            raise KeyError(f"Unknown prompt: {name}")
        return self._get_prompt_path(name).read_text(encoding="utf-8")
