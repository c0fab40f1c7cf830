"""Shared service layer for CLI and MCP."""

from .context import get_client, resolve_context_info
from .issues import (
    get_issue,
    get_comments,
    add_comment,
    list_transitions,
    update_issue_status,
    create_issue,
    assign_issue,
    add_to_sprint,
    add_attachment,
    search_issues,
)

__all__ = [
    "get_client",
    "resolve_context_info",
    "get_issue",
    "get_comments",
    "add_comment",
    "list_transitions",
    "update_issue_status",
    "create_issue",
    "assign_issue",
    "add_to_sprint",
    "add_attachment",
    "search_issues",
]
