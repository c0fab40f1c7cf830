"""Plain-text renderers for service results."""

from __future__ import annotations


def render_issue(result: dict) -> str:
    issue = result["issue"]
    lines = [
        f"Key:         {issue['key']}",
        f"Status:      {issue['status']}",
        f"Summary:     {issue['summary']}",
        f"Reporter:    {issue['reporter_display_name']} ({issue['reporter_name']})",
    ]
    for field in issue.get("custom_fields", []):
        lines.append(f"{field['name']}: {field['value']}")
    lines.append("Description:")
    lines.append(issue["description"] or "")
    return "\n".join(lines)


def render_comments(result: dict) -> str:
    if not result["comments"]:
        return "No comments found"
    return "\n---\n".join(
        f"{c['author_display_name']} ({c['author_name']}):\n{c['body']}"
        for c in result["comments"]
    )


def render_status_update(result: dict) -> str:
    if not result["changed"]:
        return f"Issue {result['key']} is already in status: {result['status']}"
    return f"Successfully updated issue {result['key']} to status: {result['status']}"


def render_transitions(result: dict) -> str:
    if not result["transitions"]:
        return f"No transitions available for {result['key']}"
    return "\n".join(f"{t['id']}: {t['to']}" for t in result["transitions"])


def render_created(result: dict) -> str:
    return f"Successfully created issue: {result['key']}\n{result['url']}"


def render_search(result: dict) -> str:
    if not result["issues"]:
        return "No issues found"
    return "\n".join(
        f"{i['key']:<12} {i['status']:<14} {i['summary']}"
        for i in result["issues"]
    )


def render_message(message: str):
    """Build a renderer that fills ``message`` from the result's keys."""
    def render(result: dict) -> str:
        return message.format(**result)
    return render


def render_assignment(result: dict) -> str:
    if not result["assignee"]:
        return f"Unassigned {result['key']}"
    return f"Assigned {result['key']} to {result['assignee']}"


def render_sprint(result: dict) -> str:
    return f"Added {', '.join(result['keys'])} to sprint {result['sprint_id']}"
