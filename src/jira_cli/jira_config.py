"""Per-invocation Jira context resolution.

### Resolution Order

Host:
1. Explicit value (``--host`` flag)
2. ``JIRA_HOST`` environment variable
3. ``config.json`` written by ``jira-cli configure``

Token:
1. Explicit value (``--token`` flag)
2. ``JIRA_TOKEN`` environment variable
3. OS secret store, then the token file (see ``credentials``)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from .credentials import CredentialError, CredentialStore

logger = logging.getLogger(__name__)

HOST_ENV = "JIRA_HOST"
TOKEN_ENV = "JIRA_TOKEN"
ISSUE_KEY_ENV = "JIRA_ISSUE_KEY"


class AuthenticationError(Exception):
    """Raised when the Jira host or token cannot be resolved."""

    def __init__(self, message: str, suggestions: list[str] | None = None):
        super().__init__(message)
        self.suggestions = suggestions or []


@dataclass
class JiraContext:
    """Resolved connection settings for one command invocation."""

    host: str
    token: str = ""
    host_source: str = "none"  # "argument", "env", "config"
    token_source: str = "none"  # "argument", "env", "store"

    @property
    def server_url(self) -> str:
        return f"https://{self.host}"

    def __repr__(self) -> str:
        # Keep the token out of tracebacks and logs
        return (
            f"JiraContext(host={self.host!r}, host_source={self.host_source!r}, "
            f"token_source={self.token_source!r})"
        )


def get_auth_help_message() -> str:
    """Get helpful message about authentication options."""
    return """Jira authentication not configured.

To authenticate, use one of these methods:

1. Run configure (stores the token in the OS keychain):
   $ jira-cli configure your-domain.atlassian.net

2. Environment variables:
   $ export JIRA_HOST=your-domain.atlassian.net
   $ export JIRA_TOKEN=xxxxxxxxxxxx

3. Command-line options:
   $ jira-cli --host your-domain.atlassian.net --token xxxx get-issue PROJ-123
"""


def resolve_host(host: Optional[str] = None, store: Optional[CredentialStore] = None) -> tuple[str, str]:
    """Resolve the host. Returns ``(host, source)``."""
    if host:
        return host, "argument"

    env_host = os.environ.get(HOST_ENV)
    if env_host:
        return env_host, "env"

    store = store or CredentialStore()
    try:
        stored = store.load_config()
    except CredentialError as e:
        raise AuthenticationError(
            f"Jira host must be configured: {e}",
            suggestions=e.suggestions,
        ) from e

    if not stored:
        raise AuthenticationError(
            "Jira host must be configured",
            suggestions=["Run: jira-cli configure <host>", f"Or set: export {HOST_ENV}=<host>"],
        )
    return stored, "config"


def resolve_context(
    host: Optional[str] = None,
    token: Optional[str] = None,
    store: Optional[CredentialStore] = None,
) -> JiraContext:
    """Resolve host and token for a command.

    Raises:
        AuthenticationError: host or token missing
    """
    store = store or CredentialStore()
    resolved_host, host_source = resolve_host(host, store)
    context = JiraContext(host=resolved_host, host_source=host_source)

    if token:
        context.token, context.token_source = token, "argument"
    elif os.environ.get(TOKEN_ENV):
        context.token, context.token_source = os.environ[TOKEN_ENV], "env"
    else:
        try:
            context.token = store.load_token(resolved_host)
        except CredentialError as e:
            raise AuthenticationError(
                f"Jira token must be set: {e}",
                suggestions=e.suggestions,
            ) from e
        context.token_source = "store"

    if not context.token:
        raise AuthenticationError(
            "Jira token must be set",
            suggestions=[f"Run: jira-cli configure {resolved_host}", f"Or set: export {TOKEN_ENV}=<token>"],
        )

    logger.debug("Resolved %r", context)
    return context


def resolve_issue_key(issue_key: Optional[str] = None) -> str:
    """Return the issue key from the argument or ``JIRA_ISSUE_KEY``."""
    key = issue_key or os.environ.get(ISSUE_KEY_ENV)
    if not key:
        raise ValueError(f"Issue key is required (pass it or set {ISSUE_KEY_ENV})")
    return key
