"""Text responses returned by the MCP tools.

Responses start with a markdown heading naming the entity (and the paging
position for collections), optionally followed by a hint line, then the
payload as indented JSON.
"""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from typing import Any

from cumulocity.domain.value_objects import ResultList


def to_json(payload: Any) -> str:
    if is_dataclass(payload) and not isinstance(payload, type):
        payload = asdict(payload)
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


def paginated_response(result: ResultList, entity_name: str, hint: str | None = None) -> str:
    """Render one page of a collection.

    Example:
        # Alarms for tenant: Page 1/3 of 150 (more available)
        # Refine query if too many results

        [ ... ]
    """
    lines = [f"# {entity_name}: {result.paging.describe()}"]
    if hint:
        lines.append(f"# {hint}")
    lines.append("")
    lines.append(to_json(result.items))
    return "\n".join(lines)


def object_response(payload: Any, entity_name: str) -> str:
    """Render a single object under a heading."""
    return f"# {entity_name}\n{to_json(payload)}"


def error_message(error: Exception, action: str) -> str:
    """Describe a failed tool call, e.g. ``Error getting alarms: HTTP 404 Not Found: ...``."""
    detail = str(error) or type(error).__name__
    return f"Error {action}: {detail}"
