"""Output formatting utilities for CLI and MCP."""

from __future__ import annotations

import json
from typing import Any, Callable, Optional

OUTPUT_FORMATS = ("text", "json")


def format_response(
    payload: Any,
    output_format: str = "text",
    text_renderer: Optional[Callable[[Any], str]] = None,
) -> dict:
    """Normalize response with format metadata and content.

    Args:
        payload: Data to serialize.
        output_format: "text" or "json".
        text_renderer: Optional renderer for text output.
    """
    output_format = (output_format or "text").lower()
    if output_format not in OUTPUT_FORMATS:
        payload = {
            "error": "invalid_format",
            "message": f"Unknown format '{output_format}'. Expected one of: {', '.join(OUTPUT_FORMATS)}",
        }
        output_format = "text"

    if output_format == "json":
        return {"format": "json", "content": payload}

    if isinstance(payload, dict) and "error" in payload:
        content = render_error(payload)
    elif text_renderer:
        content = text_renderer(payload)
    else:
        content = json.dumps(payload, indent=2)
    return {"format": "text", "content": content}


def render_cli(response: dict) -> str:
    """Render a formatted response into a CLI string."""
    fmt = response.get("format")
    content = response.get("content")
    if fmt == "json":
        return json.dumps(content, indent=2)
    return str(content)


def render_error(payload: dict) -> str:
    lines = [f"Error: {payload.get('message') or payload['error']}"]
    if payload.get("available_statuses"):
        statuses = ", ".join(f'"{s}"' for s in payload["available_statuses"])
        lines.append(f"Available statuses: {statuses}")
    for suggestion in payload.get("suggestions") or []:
        lines.append(f"  {suggestion}")
    return "\n".join(lines)
