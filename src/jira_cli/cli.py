"""Main CLI for jira-cli."""

import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

import typer
from keyring.errors import KeyringError
from rich.console import Console
from rich.markup import escape

from .credentials import CredentialError, CredentialStore
from .jira_client import JiraClient, JiraClientError
from .jira_config import (
    HOST_ENV,
    ISSUE_KEY_ENV,
    TOKEN_ENV,
    AuthenticationError,
    get_auth_help_message,
    resolve_issue_key,
)
from .log import configure_logging
from .output import OUTPUT_FORMATS, format_response, render_cli
from .output import text
from .services import (
    get_client as svc_get_client,
    resolve_context_info,
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

app = typer.Typer(
    name="jira-cli",
    help="Jira from the command line, plus an MCP server for AI assistants",
)
console = Console()
err_console = Console(stderr=True)


@dataclass
class CLIState:
    """Global options shared by every command."""

    host: Optional[str] = None
    token: Optional[str] = None


@app.callback()
def main(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", "-H", help="Jira host (e.g., your-domain.atlassian.net)"),
    token: Optional[str] = typer.Option(None, "--token", "-t", help="Jira API token", show_default=False),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Jira from the command line."""
    configure_logging(verbose)
    ctx.obj = CLIState(host=host, token=token)


def _fail(message: str, suggestions: Optional[list[str]] = None) -> None:
    err_console.print(f"[red]Error:[/red] {escape(message)}")
    for suggestion in suggestions or []:
        err_console.print(f"  [cyan]{escape(suggestion)}[/cyan]")
    raise typer.Exit(1)


def get_client(ctx: typer.Context) -> JiraClient:
    """Get configured Jira client or exit with error."""
    state: CLIState = ctx.obj or CLIState()
    try:
        client, _ = svc_get_client(host=state.host, token=state.token)
        return client
    except AuthenticationError as e:
        err_console.print(f"[red]Authentication Error:[/red] {escape(str(e))}")
        err_console.print("")
        err_console.print(get_auth_help_message())
        raise typer.Exit(1)
    except KeyringError as e:
        _fail(f"Failed to read token from secret store: {e}")


@contextmanager
def api_errors():
    """Turn Jira and workflow errors into a CLI error exit."""
    try:
        yield
    except NoSuchTransition as e:
        _fail(
            f"No transition found to status '{e.requested}'",
            [f"Available statuses: {', '.join(repr(s) for s in e.available) or '(none)'}"],
        )
    except JiraClientError as e:
        _fail(str(e))


def _issue_key(issue_key: Optional[str]) -> str:
    try:
        return resolve_issue_key(issue_key)
    except ValueError as e:
        _fail(str(e))


def emit(result: dict, output_format: str, renderer: Optional[Callable[[dict], str]] = None) -> None:
    """Print a service result, exiting non-zero for error payloads."""
    response = format_response(result, output_format, renderer)
    if "error" in result:
        err_console.print(render_cli(response), markup=False, highlight=False, soft_wrap=True)
        raise typer.Exit(1)
    console.print(render_cli(response), markup=False, highlight=False, soft_wrap=True)


def _validate_format(value: str) -> str:
    value = value.lower()
    if value not in OUTPUT_FORMATS:
        raise typer.BadParameter(f"expected one of: {', '.join(OUTPUT_FORMATS)}")
    return value


FORMAT_OPTION = typer.Option(
    "text", "--format", "-f", help="Output format (text|json)", callback=_validate_format
)


# ============================================================================
# Configuration Commands
# ============================================================================


@app.command("configure")
def configure(
    host: str = typer.Argument(..., help="Jira host (e.g., your-domain.atlassian.net)"),
    token: str = typer.Option(..., "--token", prompt="Jira API token", hide_input=True, help="Jira API token"),
):
    """Save the Jira host and store the API token securely.

    The token goes to the OS keychain when available, otherwise to an
    owner-only file in the config directory.
    """
    host = host.strip()
    if host.startswith(("https://", "http://")):
        host = host.split("://", 1)[1]
    host = host.rstrip("/")
    if not host:
        _fail("Host is required")

    store = CredentialStore()
    try:
        config_path = store.save_config(host)
        store.save_token(host, token)
    except CredentialError as e:
        _fail(str(e), e.suggestions)
    except KeyringError as e:
        _fail(f"Failed to store token in secret store: {e}")

    console.print(f"[green]✓[/green] Configuration saved to {config_path}")


@app.command("status")
def status(
    ctx: typer.Context,
    output_format: str = FORMAT_OPTION,
):
    """Show where the host and token are resolved from."""
    state: CLIState = ctx.obj or CLIState()
    info = resolve_context_info(host=state.host)
    response = format_response(info, output_format)
    console.print(render_cli(response), markup=False, highlight=False, soft_wrap=True)
    if info["error"]:
        raise typer.Exit(1)


# ============================================================================
# Issue Commands
# ============================================================================


@app.command("get-issue")
def get_issue(
    ctx: typer.Context,
    issue_key: Optional[str] = typer.Argument(None, envvar=ISSUE_KEY_ENV, help="Issue key (e.g., PROJ-123)"),
    output_format: str = FORMAT_OPTION,
):
    """Show an issue's status, summary, reporter, and description."""
    key = _issue_key(issue_key)
    client = get_client(ctx)
    with api_errors():
        result = svc_get_issue(client, key)
    emit(result, output_format, text.render_issue)


@app.command("get-comments")
def get_comments(
    ctx: typer.Context,
    issue_key: Optional[str] = typer.Argument(None, envvar=ISSUE_KEY_ENV, help="Issue key (e.g., PROJ-123)"),
    output_format: str = FORMAT_OPTION,
):
    """Show all comments on an issue."""
    key = _issue_key(issue_key)
    client = get_client(ctx)
    with api_errors():
        result = svc_get_comments(client, key)
    emit(result, output_format, text.render_comments)


@app.command("add-comment")
def add_comment(
    ctx: typer.Context,
    issue_key: str = typer.Argument(..., help="Issue key (e.g., PROJ-123)"),
    comment: str = typer.Argument(..., help="Comment text"),
    output_format: str = FORMAT_OPTION,
):
    """Add a comment to an issue."""
    client = get_client(ctx)
    with api_errors():
        result = svc_add_comment(client, issue_key, comment)
    emit(result, output_format, text.render_message("Successfully added comment to issue {key}"))


@app.command("update-status")
def update_status(
    ctx: typer.Context,
    issue_key: str = typer.Argument(..., help="Issue key (e.g., PROJ-123)"),
    status: str = typer.Argument(..., help="Target status name, exact (e.g., 'In Progress')"),
    output_format: str = FORMAT_OPTION,
):
    """Move an issue to another status using the matching transition."""
    client = get_client(ctx)
    with api_errors():
        result = svc_update_issue_status(client, issue_key, status)
    emit(result, output_format, text.render_status_update)


@app.command("transitions")
def transitions(
    ctx: typer.Context,
    issue_key: Optional[str] = typer.Argument(None, envvar=ISSUE_KEY_ENV, help="Issue key (e.g., PROJ-123)"),
    output_format: str = FORMAT_OPTION,
):
    """List the transitions currently available for an issue."""
    key = _issue_key(issue_key)
    client = get_client(ctx)
    with api_errors():
        result = svc_list_transitions(client, key)
    emit(result, output_format, text.render_transitions)


@app.command("create-issue")
def create_issue(
    ctx: typer.Context,
    project: str = typer.Argument(..., help="Project key"),
    summary: str = typer.Argument(..., help="One-line summary"),
    description: Optional[str] = typer.Option(None, "-d", "--description", help="Description (defaults to the summary)"),
    issue_type: str = typer.Option("Task", "--type", help="Issue type name"),
    assignee: Optional[str] = typer.Option(None, "-a", "--assignee", help="Assignee username"),
    output_format: str = FORMAT_OPTION,
):
    """Create a new issue."""
    client = get_client(ctx)
    with api_errors():
        result = svc_create_issue(
            client,
            project=project,
            summary=summary,
            description=description,
            issue_type=issue_type,
            assignee=assignee,
        )
    emit(result, output_format, text.render_created)


@app.command("assign")
def assign(
    ctx: typer.Context,
    issue_key: str = typer.Argument(..., help="Issue key (e.g., PROJ-123)"),
    assignee: Optional[str] = typer.Argument(None, help="Username or account ID; omit to unassign"),
    output_format: str = FORMAT_OPTION,
):
    """Assign an issue to a user."""
    client = get_client(ctx)
    with api_errors():
        result = svc_assign_issue(client, issue_key, assignee)
    emit(result, output_format, text.render_assignment)


@app.command("search")
def search(
    ctx: typer.Context,
    jql: str = typer.Argument(..., help="JQL query"),
    limit: int = typer.Option(50, "--limit", help="Maximum issues to show"),
    output_format: str = FORMAT_OPTION,
):
    """Search issues with JQL."""
    client = get_client(ctx)
    with api_errors():
        result = svc_search_issues(client, jql, limit=limit)
    emit(result, output_format, text.render_search)


@app.command("sprint-add")
def sprint_add(
    ctx: typer.Context,
    sprint_id: int = typer.Argument(..., help="Sprint ID"),
    issue_keys: List[str] = typer.Argument(..., help="Issue keys to add"),
    output_format: str = FORMAT_OPTION,
):
    """Add issues to a sprint."""
    client = get_client(ctx)
    with api_errors():
        result = svc_add_to_sprint(client, sprint_id, issue_keys)
    emit(result, output_format, text.render_sprint)


@app.command("attach")
def attach(
    ctx: typer.Context,
    issue_key: str = typer.Argument(..., help="Issue key (e.g., PROJ-123)"),
    file: Path = typer.Argument(..., help="File to attach"),
    output_format: str = FORMAT_OPTION,
):
    """Attach a file to an issue."""
    client = get_client(ctx)
    with api_errors():
        result = svc_add_attachment(client, issue_key, file)
    emit(result, output_format, text.render_message("Attached {filename} to {key}"))


# ============================================================================
# MCP Server
# ============================================================================


@app.command("mcp-server")
def mcp_server(ctx: typer.Context):
    """Run the MCP server on stdio."""
    # Fail fast here; tools resolve credentials again on every call
    get_client(ctx)

    state: CLIState = ctx.obj or CLIState()
    if state.host:
        os.environ[HOST_ENV] = state.host
    if state.token:
        os.environ[TOKEN_ENV] = state.token

    from .mcp_server import mcp

    mcp.run(transport="stdio")


if __name__ == "__main__":
    app()
