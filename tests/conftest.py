"""Shared fixtures."""

import errno
from pathlib import Path
from unittest.mock import patch

import pytest
from keyring.errors import KeyringError

from jira_cli.credentials import CredentialStore


class FakeKeyring:
    """In-memory stand-in for the keyring module's password API."""

    def __init__(self):
        self.passwords: dict[tuple[str, str], str] = {}

    def set_password(self, service: str, username: str, password: str) -> None:
        self.passwords[(service, username)] = password

    def get_password(self, service: str, username: str):
        return self.passwords.get((service, username))


class BrokenKeyring:
    """Keyring whose every call raises ``error``."""

    def __init__(self, error: Exception):
        self.error = error

    def set_password(self, service, username, password):
        raise self.error

    def get_password(self, service, username):
        raise self.error


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep tests away from the real environment and config dir."""
    for name in ("JIRA_HOST", "JIRA_TOKEN", "JIRA_ISSUE_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("JIRA_CLI_CONFIG_DIR", str(tmp_path / "default-config"))


@pytest.fixture
def store(tmp_path):
    """Credential store rooted in a fresh temporary directory."""
    return CredentialStore(tmp_path / "jira-cli")


@pytest.fixture
def fake_keyring():
    """Reachable secret store backed by a dict."""
    fake = FakeKeyring()
    with patch("jira_cli.credentials.keyring", fake):
        yield fake


@pytest.fixture
def unavailable_keyring():
    """Secret store that cannot be reached (headless Linux)."""
    broken = BrokenKeyring(KeyringError("Cannot autolaunch D-Bus without X11 $DISPLAY"))
    with patch("jira_cli.credentials.keyring", broken):
        yield broken


@pytest.fixture
def broken_keyring(monkeypatch):
    """Factory installing a secret store that raises the given error."""
    def install(error: Exception) -> BrokenKeyring:
        broken = BrokenKeyring(error)
        monkeypatch.setattr("jira_cli.credentials.keyring", broken)
        return broken
    return install


@pytest.fixture
def deny_read(monkeypatch):
    """Make reads of the given paths fail with EACCES."""
    denied = set()
    real_read_text = Path.read_text

    def read_text(self, *args, **kwargs):
        if self in denied:
            raise PermissionError(errno.EACCES, "Permission denied", str(self))
        return real_read_text(self, *args, **kwargs)

    monkeypatch.setattr(Path, "read_text", read_text)
    return denied.add
