"""Jira REST client for jira-cli.

Thin wrapper around the ``jira`` package exposing the handful of calls the
CLI and MCP server need, with results flattened to plain dicts.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence, TYPE_CHECKING

from jira import JIRA
from jira.exceptions import JIRAError
from requests.exceptions import RequestException

from .transitions import Transition

if TYPE_CHECKING:
    from .jira_config import JiraContext

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_FIELDS = ("summary", "status", "assignee", "issuetype", "priority")

# Raised by the jira package once its session retries are exhausted
API_ERRORS = (JIRAError, RequestException)


class JiraClientError(Exception):
    """Raised when a Jira API call fails."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.status_code = getattr(cause, "status_code", None)
        detail = getattr(cause, "text", None) or str(cause)
        super().__init__(f"Failed to {operation}: {detail}")


def _user_fields(user: Optional[dict]) -> tuple[str, str]:
    if not user:
        return "", ""
    # Server/DC has "name"; Cloud only exposes accountId
    return user.get("displayName") or "", user.get("name") or user.get("accountId") or ""


def _format_issue(raw: dict) -> dict:
    fields = raw.get("fields") or {}
    reporter_display, reporter_name = _user_fields(fields.get("reporter"))
    assignee_display, _ = _user_fields(fields.get("assignee"))
    return {
        "key": raw.get("key"),
        "status": (fields.get("status") or {}).get("name", ""),
        "summary": fields.get("summary") or "",
        "reporter_display_name": reporter_display,
        "reporter_name": reporter_name,
        "assignee": assignee_display or None,
        "description": fields.get("description") or "",
        "custom_fields": {k: v for k, v in fields.items() if k.startswith("customfield_")},
    }


class JiraClient:
    """Client for the Jira REST API."""

    def __init__(self, context: "JiraContext", jira: Optional[JIRA] = None):
        self.context = context
        self._jira = jira or JIRA(
            server=context.server_url,
            token_auth=context.token,
            get_server_info=False,
        )

    def get_issue(self, key: str) -> dict:
        """Get an issue. Returns key, status, summary, reporter, description, custom fields."""
        try:
            issue = self._jira.issue(key)
        except API_ERRORS as e:
            raise JiraClientError(f"get issue {key}", e) from e
        return _format_issue(issue.raw)

    def get_comments(self, key: str) -> list[dict]:
        """Get all comments on an issue, oldest first."""
        try:
            comments = self._jira.comments(key)
        except API_ERRORS as e:
            raise JiraClientError(f"get comments for {key}", e) from e

        result = []
        for comment in comments:
            display, name = _user_fields(comment.raw.get("author"))
            result.append({
                "author_display_name": display,
                "author_name": name,
                "body": comment.raw.get("body", ""),
                "created": comment.raw.get("created"),
            })
        return result

    def get_transitions(self, key: str) -> list[Transition]:
        """Get transitions currently available for an issue, in Jira's order."""
        try:
            transitions = self._jira.transitions(key)
        except API_ERRORS as e:
            raise JiraClientError(f"get transitions for {key}", e) from e
        return [Transition.from_dict(t) for t in transitions]

    def apply_transition(self, key: str, transition_id: str) -> None:
        try:
            self._jira.transition_issue(key, transition_id)
        except API_ERRORS as e:
            raise JiraClientError(f"update issue status for {key}", e) from e
        logger.info("Applied transition %s to %s", transition_id, key)

    def add_comment(self, key: str, body: str) -> None:
        try:
            self._jira.add_comment(key, body)
        except API_ERRORS as e:
            raise JiraClientError(f"add comment to {key}", e) from e
        logger.info("Added comment to %s", key)

    def search_issues(
        self,
        jql: str,
        max_results: int = 50,
        fields: Sequence[str] = DEFAULT_SEARCH_FIELDS,
    ) -> list[dict]:
        """Search issues with JQL."""
        try:
            issues = self._jira.search_issues(
                jql,
                maxResults=max_results,
                fields=",".join(fields),
            )
        except API_ERRORS as e:
            raise JiraClientError("search issues", e) from e
        return [_format_issue(issue.raw) for issue in issues]

    def create_issue(
        self,
        project: str,
        summary: str,
        description: str = "",
        issue_type: str = "Task",
        assignee: Optional[str] = None,
    ) -> str:
        """Create an issue. Returns the new issue key."""
        fields: dict = {
            "project": {"key": project},
            "summary": summary,
            "description": description,
            "issuetype": {"name": issue_type},
        }
        if assignee:
            fields["assignee"] = {"name": assignee}

        try:
            issue = self._jira.create_issue(fields=fields)
        except API_ERRORS as e:
            raise JiraClientError(f"create issue in {project}", e) from e
        logger.info("Created %s", issue.key)
        return issue.key

    def get_edit_metadata(self, key: str) -> dict:
        """Get editable field descriptors. Returns {field_key: descriptor}."""
        try:
            meta = self._jira.editmeta(key)
        except API_ERRORS as e:
            raise JiraClientError(f"get edit metadata for {key}", e) from e
        return meta.get("fields", {})

    def assign_issue(self, key: str, assignee: Optional[str]) -> None:
        """Assign an issue. ``None`` unassigns it."""
        try:
            self._jira.assign_issue(key, assignee)
        except API_ERRORS as e:
            raise JiraClientError(f"assign {key}", e) from e
        logger.info("Assigned %s to %s", key, assignee or "nobody")

    def add_to_sprint(self, sprint_id: int, keys: Sequence[str]) -> None:
        try:
            self._jira.add_issues_to_sprint(sprint_id, list(keys))
        except API_ERRORS as e:
            raise JiraClientError(f"add issues to sprint {sprint_id}", e) from e
        logger.info("Added %d issue(s) to sprint %s", len(keys), sprint_id)

    def add_attachment(self, key: str, path: Path) -> str:
        """Attach a local file to an issue. Returns the stored filename."""
        try:
            with open(path, "rb") as f:
                attachment = self._jira.add_attachment(key, attachment=f, filename=Path(path).name)
        except API_ERRORS + (OSError,) as e:
            raise JiraClientError(f"attach {Path(path).name} to {key}", e) from e
        logger.info("Attached %s to %s", attachment.filename, key)
        return attachment.filename
