"""Context and client resolution helpers shared by CLI and MCP."""

from __future__ import annotations

from typing import Optional

from keyring.errors import KeyringError

from ..credentials import CredentialStore
from ..jira_client import JiraClient
from ..jira_config import AuthenticationError, JiraContext, resolve_context


def get_client(
    host: Optional[str] = None,
    token: Optional[str] = None,
    store: Optional[CredentialStore] = None,
) -> tuple[JiraClient, JiraContext]:
    """Return Jira client + resolved context."""
    context = resolve_context(host=host, token=token, store=store)
    return JiraClient(context), context


def resolve_context_info(host: Optional[str] = None, store: Optional[CredentialStore] = None) -> dict:
    """Describe where host and token would come from, without exposing the token."""
    store = store or CredentialStore()
    info = {
        "config_dir": str(store.config_dir),
        "host": None,
        "host_source": "none",
        "token_configured": False,
        "token_source": "none",
        "error": None,
    }
    try:
        context = resolve_context(host=host, store=store)
    except (AuthenticationError, KeyringError) as e:
        info["error"] = str(e)
        return info

    info.update(
        host=context.host,
        host_source=context.host_source,
        token_configured=bool(context.token),
        token_source=context.token_source,
    )
    return info
