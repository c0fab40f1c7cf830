"""Shared Jira issue operations for CLI and MCP."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from ..fields import editable_custom_fields
from ..jira_client import JiraClient, JiraClientError
from ..transitions import resolve_transition

logger = logging.getLogger(__name__)


def get_issue(client: JiraClient, key: str) -> dict:
    issue = client.get_issue(key)
    custom_fields = issue.pop("custom_fields")

    # Best effort: an issue is still worth showing without its custom fields
    try:
        edit_metadata = client.get_edit_metadata(key)
    except JiraClientError as e:
        logger.warning("Skipping custom fields for %s: %s", key, e)
        edit_metadata = {}

    issue["custom_fields"] = [
        {"name": name, "value": value}
        for name, value in editable_custom_fields(custom_fields, edit_metadata)
    ]
    return {"issue": issue}


def get_comments(client: JiraClient, key: str) -> dict:
    comments = client.get_comments(key)
    return {"key": key, "count": len(comments), "comments": comments}


def add_comment(client: JiraClient, key: str, body: str) -> dict:
    if not body.strip():
        return {"error": "Comment text is required"}
    client.add_comment(key, body)
    return {"success": True, "key": key}


def list_transitions(client: JiraClient, key: str) -> dict:
    transitions = client.get_transitions(key)
    return {
        "key": key,
        "transitions": [{"id": t.id, "to": t.to_state_name} for t in transitions],
    }


def update_issue_status(client: JiraClient, key: str, status: str) -> dict:
    """Move an issue to ``status`` via the matching transition.

    Raises:
        NoSuchTransition: no available transition leads to ``status``
    """
    issue = client.get_issue(key)
    current = issue["status"]

    choice = resolve_transition(current, status, client.get_transitions(key))
    if choice.already_in_state:
        return {"success": True, "key": key, "status": status, "changed": False}

    client.apply_transition(key, choice.transition_id)
    return {
        "success": True,
        "key": key,
        "previous_status": current,
        "status": status,
        "changed": True,
        "transition_id": choice.transition_id,
    }


def create_issue(
    client: JiraClient,
    project: str,
    summary: str,
    description: Optional[str] = None,
    issue_type: str = "Task",
    assignee: Optional[str] = None,
) -> dict:
    # Summary doubles as description when none is given
    key = client.create_issue(
        project=project,
        summary=summary,
        description=description if description is not None else summary,
        issue_type=issue_type,
        assignee=assignee,
    )
    return {
        "success": True,
        "key": key,
        "url": f"{client.context.server_url}/browse/{key}",
    }


def assign_issue(client: JiraClient, key: str, assignee: Optional[str]) -> dict:
    client.assign_issue(key, assignee or None)
    return {"success": True, "key": key, "assignee": assignee or None}


def add_to_sprint(client: JiraClient, sprint_id: int, keys: Sequence[str]) -> dict:
    keys = [k.strip() for k in keys if k and k.strip()]
    if not keys:
        return {"error": "At least one issue key is required"}
    client.add_to_sprint(sprint_id, keys)
    return {"success": True, "sprint_id": sprint_id, "keys": keys}


def add_attachment(client: JiraClient, key: str, path: Path) -> dict:
    path = Path(path).expanduser()
    if not path.is_file():
        return {"error": f"File not found: {path}"}
    filename = client.add_attachment(key, path)
    return {"success": True, "key": key, "filename": filename}


def search_issues(client: JiraClient, jql: str, limit: int = 50) -> dict:
    issues = client.search_issues(jql, max_results=limit)
    summaries = [
        {
            "key": i["key"],
            "status": i["status"],
            "summary": i["summary"],
            "assignee": i["assignee"],
        }
        for i in issues
    ]
    return {"jql": jql, "count": len(summaries), "issues": summaries}
