"""MCP Server for jira-cli - Jira issue management.

This MCP server exposes Jira issue operations to AI assistants over stdio.

Host and token are resolved per call (JIRA_HOST / JIRA_TOKEN, then the
configuration saved by ``jira-cli configure``), so rotating a token does not
require restarting the server.
"""

import logging
from typing import Optional

from keyring.errors import KeyringError
from mcp.server.fastmcp import FastMCP

from .jira_client import JiraClient, JiraClientError
from .jira_config import AuthenticationError, get_auth_help_message
from .log import configure_logging
from .output import OUTPUT_FORMATS, format_response
from .output import text
from .services import (
    get_client,
    get_issue as svc_get_issue,
    get_comments as svc_get_comments,
    add_comment as svc_add_comment,
    list_transitions as svc_list_transitions,
    update_issue_status as svc_update_issue_status,
    create_issue as svc_create_issue,
    assign_issue as svc_assign_issue,
    add_to_sprint as svc_add_to_sprint,
    add_attachment as svc_add_attachment,
    search_issues as svc_search_issues,
)
from .transitions import NoSuchTransition

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "jira-cli",
    instructions="""jira-cli - Jira issue management

| Goal | Tool |
|------|------|
| Read an issue | `get_issue(issue_key)` |
| Read discussion | `get_comments(issue_key)` |
| Move an issue | `update_issue_status(issue_key, status)` |
| See legal moves | `list_transitions(issue_key)` |
| Find issues | `search_issues(jql)` |

Status names are matched exactly (case-sensitive). If a status is not
reachable, the error lists the available statuses.

All tools accept `format`: "text" (default) or "json".""",
)


def _get_client_safe(output_format: str = "text") -> tuple[Optional[JiraClient], Optional[dict]]:
    """Get client with proper error handling.

    An unknown output format is rejected here, before any tool touches Jira.
    """
    if (output_format or "text").lower() not in OUTPUT_FORMATS:
        return None, {
            "error": "invalid_format",
            "message": f"Unknown format '{output_format}'. Expected one of: {', '.join(OUTPUT_FORMATS)}",
        }

    try:
        client, _ = get_client()
        return client, None
    except AuthenticationError as e:
        return None, {
            "error": "authentication_required",
            "message": str(e),
            "suggestions": e.suggestions,
            "help": get_auth_help_message(),
        }
    except KeyringError as e:
        return None, {
            "error": "secret_store_error",
            "message": f"Failed to read token from secret store: {e}",
        }


def _error_payload(error: Exception) -> dict:
    """Translate a domain error into a tool error payload."""
    if isinstance(error, NoSuchTransition):
        return {
            "error": "no_such_transition",
            "message": str(error),
            "requested_status": error.requested,
            "available_statuses": error.available,
        }
    if isinstance(error, JiraClientError):
        return {
            "error": "jira_api_error",
            "message": str(error),
            "status_code": error.status_code,
        }
    raise error


@mcp.tool()
def get_issue(issue_key: str, format: str = "text") -> dict:
    """Get details of a Jira issue including status, summary, reporter, and description.

    Editable custom fields with simple values are included as well.

    Args:
        issue_key: Jira issue key (e.g., 'PROJ-123')
    """
    client, error = _get_client_safe(format)
    if error:
        return format_response(error, format)

    try:
        result = svc_get_issue(client, issue_key)
    except JiraClientError as e:
        return format_response(_error_payload(e), format)
    return format_response(result, format, text.render_issue)


@mcp.tool()
def update_issue_status(issue_key: str, status: str, format: str = "text") -> dict:
    """Update the status of a Jira issue using transitions.

    Args:
        issue_key: Jira issue key (e.g., 'PROJ-123')
        status: New status name (e.g., 'In Progress', 'Closed'), matched exactly

    If the issue is already in that status nothing changes. If no transition
    leads there, the error lists the statuses that are reachable.
    """
    client, error = _get_client_safe(format)
    if error:
        return format_response(error, format)

    try:
        result = svc_update_issue_status(client, issue_key, status)
    except (JiraClientError, NoSuchTransition) as e:
        return format_response(_error_payload(e), format)
    return format_response(result, format, text.render_status_update)


@mcp.tool()
def list_transitions(issue_key: str, format: str = "text") -> dict:
    """List the transitions currently available for a Jira issue.

    Args:
        issue_key: Jira issue key (e.g., 'PROJ-123')
    """
    client, error = _get_client_safe(format)
    if error:
        return format_response(error, format)

    try:
        result = svc_list_transitions(client, issue_key)
    except JiraClientError as e:
        return format_response(_error_payload(e), format)
    return format_response(result, format, text.render_transitions)


@mcp.tool()
def add_comment(issue_key: str, comment: str, format: str = "text") -> dict:
    """Add a comment to a Jira issue.

    Args:
        issue_key: Jira issue key (e.g., 'PROJ-123')
        comment: Comment text to add
    """
    client, error = _get_client_safe(format)
    if error:
        return format_response(error, format)

    try:
        result = svc_add_comment(client, issue_key, comment)
    except JiraClientError as e:
        return format_response(_error_payload(e), format)
    return format_response(result, format, text.render_message("Successfully added comment to issue {key}"))


@mcp.tool()
def get_comments(issue_key: str, format: str = "text") -> dict:
    """Get all comments on a Jira issue.

    Args:
        issue_key: Jira issue key (e.g., 'PROJ-123')
    """
    client, error = _get_client_safe(format)
    if error:
        return format_response(error, format)

    try:
        result = svc_get_comments(client, issue_key)
    except JiraClientError as e:
        return format_response(_error_payload(e), format)
    return format_response(result, format, text.render_comments)


@mcp.tool()
def create_issue(
    project: str,
    description: str,
    summary: Optional[str] = None,
    issue_type: str = "Task",
    assignee: Optional[str] = None,
    format: str = "text",
) -> dict:
    """Create a new Jira issue.

    Args:
        project: Jira project key
        description: Issue description (also used as summary when none is given)
        summary: Optional one-line summary
        issue_type: Issue type name (default "Task")
        assignee: Optional assignee username
    """
    client, error = _get_client_safe(format)
    if error:
        return format_response(error, format)

    try:
        result = svc_create_issue(
            client,
            project=project,
            summary=summary or description,
            description=description,
            issue_type=issue_type,
            assignee=assignee,
        )
    except JiraClientError as e:
        return format_response(_error_payload(e), format)
    return format_response(result, format, text.render_created)


@mcp.tool()
def assign_issue(issue_key: str, assignee: Optional[str] = None, format: str = "text") -> dict:
    """Assign a Jira issue to a user, or unassign it when no assignee is given.

    Args:
        issue_key: Jira issue key (e.g., 'PROJ-123')
        assignee: Username (Server/Data Center) or account ID (Cloud)
    """
    client, error = _get_client_safe(format)
    if error:
        return format_response(error, format)

    try:
        result = svc_assign_issue(client, issue_key, assignee)
    except JiraClientError as e:
        return format_response(_error_payload(e), format)
    return format_response(result, format, text.render_assignment)


@mcp.tool()
def add_to_sprint(sprint_id: int, issue_keys: list[str], format: str = "text") -> dict:
    """Add Jira issues to a sprint.

    Args:
        sprint_id: Numeric sprint ID
        issue_keys: Issue keys to move into the sprint
    """
    client, error = _get_client_safe(format)
    if error:
        return format_response(error, format)

    try:
        result = svc_add_to_sprint(client, sprint_id, issue_keys)
    except JiraClientError as e:
        return format_response(_error_payload(e), format)
    return format_response(result, format, text.render_sprint)


@mcp.tool()
def add_attachment(issue_key: str, file_path: str, format: str = "text") -> dict:
    """Attach a local file to a Jira issue.

    Args:
        issue_key: Jira issue key (e.g., 'PROJ-123')
        file_path: Path of the file on the server's machine
    """
    client, error = _get_client_safe(format)
    if error:
        return format_response(error, format)

    try:
        result = svc_add_attachment(client, issue_key, file_path)
    except JiraClientError as e:
        return format_response(_error_payload(e), format)
    return format_response(result, format, text.render_message("Attached {filename} to {key}"))


@mcp.tool()
def search_issues(jql: str, limit: int = 20, format: str = "text") -> dict:
    """Search Jira issues with JQL.

    Args:
        jql: JQL query (e.g., 'project = PROJ AND status = "In Progress"')
        limit: Maximum results to return (default 20)
    """
    client, error = _get_client_safe(format)
    if error:
        return format_response(error, format)

    try:
        result = svc_search_issues(client, jql, limit=limit)
    except JiraClientError as e:
        return format_response(_error_payload(e), format)
    return format_response(result, format, text.render_search)


def main():
    """Run the MCP server."""
    configure_logging()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
