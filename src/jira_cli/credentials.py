"""Credential storage for jira-cli.

Persists the Jira host and a per-host API token.

## Layout

```
<config dir>/            # 0700, platformdirs user_config_dir("jira-cli")
├── config.json          # {"host": "your-domain.atlassian.net"}, 0600
└── token                # {"<host>": "<token>", ...}, 0600 (fallback only)
```

Tokens go to the OS secret store (via ``keyring``) under the service name
``jira-cli`` with the host as the account. When the secret store cannot be
reached (e.g. headless Linux without a D-Bus session), tokens are written to
the ``token`` file instead.

Nothing is cached in memory; every load re-reads storage. There is no file
locking: two processes saving a token for the same host at the same time may
race, and the last write wins.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

import keyring
from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "jira-cli"
SERVICE_NAME = "jira-cli"
CONFIG_FILE = "config.json"
TOKEN_FILE = "token"

# Overrides the per-user config directory
CONFIG_DIR_ENV = "JIRA_CLI_CONFIG_DIR"

DIR_MODE = 0o700
FILE_MODE = 0o600

# Substrings (compared lowercase) that mark a secret-store error as "the store
# is unreachable" rather than "the store misbehaved". This is a heuristic:
# backends report these conditions with free-form messages that vary by
# platform, so extend this table when a new phrasing shows up.
UNAVAILABLE_MARKERS: tuple[str, ...] = (
    "dbus",                      # D-Bus / DBus / DBUS_SESSION_BUS_ADDRESS
    "cannot autolaunch",         # dbus-launch without X11
    "secret service",            # Secret Service API missing
    "org.freedesktop.secrets",   # no provider for the secrets bus name
    "dial unix",                 # unix socket connection errors
    "connection refused",
    "permission denied",         # bus socket not accessible
    "no recommended backend",    # keyring.errors.NoKeyringError
)

CONFIGURE_HINT = "Run: jira-cli configure <host>"


class CredentialError(Exception):
    """Base class for config and token storage failures."""

    def __init__(self, message: str, suggestions: list[str] | None = None):
        super().__init__(message)
        self.suggestions = suggestions or []


class ConfigNotFound(CredentialError):
    """Raised when no configuration has been saved yet."""


class ConfigReadError(CredentialError):
    """Raised when a stored file exists but cannot be read."""


class ConfigWriteError(CredentialError):
    """Raised when the config directory or a stored file cannot be written."""


class ConfigParseError(CredentialError):
    """Raised when a stored file does not contain the expected JSON."""


class TokenNotFoundError(CredentialError):
    """Raised when neither the secret store nor the token file has a token."""


def is_secret_store_unavailable(error: Optional[BaseException]) -> bool:
    """Check whether a secret-store error means the store is unreachable.

    Only these errors trigger the file fallback; anything else is a real
    failure of the store and must reach the caller unchanged.
    """
    if error is None:
        return False
    message = str(error).lower()
    return any(marker in message for marker in UNAVAILABLE_MARKERS)


def default_config_dir() -> Path:
    """Return the config directory, honouring JIRA_CLI_CONFIG_DIR."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    return Path(user_config_dir(APP_NAME))


class CredentialStore:
    """Reads and writes the host config and per-host tokens."""

    def __init__(self, config_dir: Optional[Path] = None, service_name: str = SERVICE_NAME):
        self.config_dir = Path(config_dir) if config_dir else default_config_dir()
        self.service_name = service_name

    @property
    def config_path(self) -> Path:
        return self.config_dir / CONFIG_FILE

    @property
    def token_path(self) -> Path:
        return self.config_dir / TOKEN_FILE

    # ------------------------------------------------------------------
    # Host configuration
    # ------------------------------------------------------------------

    def save_config(self, host: str) -> Path:
        """Persist the default host. Returns the config file path."""
        self._write_json(self.config_path, {"host": host})
        logger.debug("Saved config to %s", self.config_path)
        return self.config_path

    def load_config(self) -> str:
        """Load the default host.

        Raises:
            ConfigNotFound: configure has never been run
            ConfigReadError: the file exists but cannot be read
            ConfigParseError: the file is not a JSON object, or its host is not a string
        """
        try:
            data = self._read_json(self.config_path, "config file")
        except FileNotFoundError:
            raise ConfigNotFound(
                f"No configuration found at {self.config_path}",
                suggestions=[CONFIGURE_HINT, "Or set: export JIRA_HOST=your-domain.atlassian.net"],
            ) from None

        host = data.get("host", "")
        if not isinstance(host, str):
            raise ConfigParseError(
                f"Failed to parse config file {self.config_path}: host must be a string",
                suggestions=[CONFIGURE_HINT],
            )
        return host

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def save_token(self, host: str, token: str) -> None:
        """Store a token for a host, preferring the OS secret store."""
        try:
            keyring.set_password(self.service_name, host, token)
            logger.debug("Stored token for %s in secret store", host)
            return
        except Exception as e:
            if not is_secret_store_unavailable(e):
                raise
            logger.info("Secret store unavailable (%s), using token file", e)

        self._save_token_to_file(host, token)

    def load_token(self, host: str) -> str:
        """Load the token for a host.

        The secret store is consulted first. When it is unreachable, or
        reachable but without an entry for the host, the token file is tried.
        """
        try:
            token = keyring.get_password(self.service_name, host)
        except Exception as e:
            if not is_secret_store_unavailable(e):
                raise
            logger.info("Secret store unavailable (%s), reading token file", e)
            return self._load_token_from_file(host)

        if token is not None:
            return token

        # Store is reachable but empty for this host
        try:
            return self._load_token_from_file(host)
        except CredentialError as file_error:
            logger.debug("Token file lookup failed for %s: %s", host, file_error)
            raise TokenNotFoundError(
                f"No token stored for {host} in secret store '{self.service_name}'",
                suggestions=[
                    f"Run: jira-cli configure {host}",
                    "Or set: export JIRA_TOKEN=<your API token>",
                ],
            ) from None

    def _save_token_to_file(self, host: str, token: str) -> None:
        tokens: dict[str, str] = {}
        try:
            tokens = self._read_json(self.token_path, "token file")
        except FileNotFoundError:
            pass
        except CredentialError as e:
            logger.warning("Replacing unreadable token file %s: %s", self.token_path, e)

        tokens[host] = token
        self._write_json(self.token_path, tokens)
        logger.debug("Stored token for %s in %s", host, self.token_path)

    def _load_token_from_file(self, host: str) -> str:
        try:
            tokens = self._read_json(self.token_path, "token file")
        except FileNotFoundError:
            raise TokenNotFoundError(
                f"Token not found: {self.token_path} does not exist",
                suggestions=[f"Run: jira-cli configure {host}"],
            ) from None

        token = tokens.get(host)
        if not isinstance(token, str):
            raise TokenNotFoundError(
                f"Token not found for host: {host}",
                suggestions=[f"Run: jira-cli configure {host}"],
            )
        return token

    # ------------------------------------------------------------------
    # File helpers
    # ------------------------------------------------------------------

    def _ensure_config_dir(self) -> None:
        try:
            self.config_dir.mkdir(mode=DIR_MODE, parents=True)
        except FileExistsError:
            return
        except OSError as e:
            raise ConfigWriteError(
                f"Failed to create config directory {self.config_dir}: {e}",
                suggestions=["Check permissions on the parent directory"],
            ) from e

        try:
            # mkdir's mode is filtered by the umask
            os.chmod(self.config_dir, DIR_MODE)
        except OSError as e:
            raise ConfigWriteError(
                f"Failed to set permissions on {self.config_dir}: {e}",
                suggestions=["Check permissions on the parent directory"],
            ) from e

    def _write_json(self, path: Path, data: dict) -> None:
        self._ensure_config_dir()
        payload = json.dumps(data, indent=2)
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            # An existing file keeps its old mode through O_CREAT
            os.chmod(path, FILE_MODE)
        except OSError as e:
            raise ConfigWriteError(
                f"Failed to write {path}: {e}",
                suggestions=[f"Check permissions on {self.config_dir}"],
            ) from e

    def _read_json(self, path: Path, what: str) -> dict:
        """Read a JSON object from ``path``.

        ``FileNotFoundError`` is left to the caller, which knows what a
        missing file means for it.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise
        except OSError as e:
            raise ConfigReadError(
                f"Failed to read {what} {path}: {e}",
                suggestions=[f"Check permissions on {path}"],
            ) from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigParseError(
                f"Failed to parse {what} {path}: {e}",
                suggestions=[CONFIGURE_HINT],
            ) from e

        if not isinstance(data, dict):
            raise ConfigParseError(
                f"Failed to parse {what} {path}: expected a JSON object",
                suggestions=[CONFIGURE_HINT],
            )
        return data
