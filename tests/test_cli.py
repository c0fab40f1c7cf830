"""Tests for the command line interface."""

import json
from unittest.mock import Mock, patch

import pytest
import requests
from typer.testing import CliRunner

from jira_cli.cli import app
from jira_cli.credentials import CredentialStore
from jira_cli.jira_client import JiraClient
from jira_cli.jira_config import JiraContext
from jira_cli.transitions import Transition

runner = CliRunner()


@pytest.fixture
def mock_client():
    client = Mock()
    client.context = JiraContext(host="test.atlassian.net", token="secret")
    client.get_issue.return_value = {
        "key": "PROJ-1",
        "status": "To Do",
        "summary": "Fix login",
        "reporter_display_name": "Jane Doe",
        "reporter_name": "jdoe",
        "assignee": None,
        "description": "It breaks",
        "custom_fields": {},
    }
    client.get_edit_metadata.return_value = {}
    client.get_transitions.return_value = [
        Transition(id="1", to_state_name="In Progress"),
        Transition(id="2", to_state_name="Done"),
    ]
    return client


@pytest.fixture
def patched_client(mock_client):
    with patch("jira_cli.cli.svc_get_client") as mock_get_client:
        mock_get_client.return_value = (mock_client, mock_client.context)
        yield mock_get_client


class TestConfigure:
    """Tests for the configure command."""

    def test_saves_host_and_token(self, fake_keyring):
        result = runner.invoke(app, ["configure", "https://test.atlassian.net/", "--token", "secret"])

        assert result.exit_code == 0, result.output
        store = CredentialStore()
        assert store.load_config() == "test.atlassian.net"
        assert fake_keyring.passwords[("jira-cli", "test.atlassian.net")] == "secret"

    def test_falls_back_to_file(self, unavailable_keyring):
        result = runner.invoke(app, ["configure", "test.atlassian.net", "--token", "secret"])

        assert result.exit_code == 0, result.output
        assert CredentialStore().load_token("test.atlassian.net") == "secret"

    def test_prompts_for_token(self, fake_keyring):
        result = runner.invoke(app, ["configure", "test.atlassian.net"], input="secret\n")

        assert result.exit_code == 0, result.output
        assert fake_keyring.passwords[("jira-cli", "test.atlassian.net")] == "secret"


class TestMissingConfiguration:
    """Commands fail cleanly without credentials."""

    def test_get_issue_without_config(self):
        result = runner.invoke(app, ["get-issue", "PROJ-1"])
        assert result.exit_code == 1

    def test_status_without_config(self):
        result = runner.invoke(app, ["status", "--format", "json"])

        assert result.exit_code == 1
        info = json.loads(result.stdout)
        assert info["host_source"] == "none"
        assert "host must be configured" in info["error"]

    def test_issue_key_required(self, patched_client):
        result = runner.invoke(app, ["get-issue"])
        assert result.exit_code == 1


class TestIssueCommands:
    """Tests for issue commands."""

    def test_get_issue(self, patched_client):
        result = runner.invoke(app, ["get-issue", "PROJ-1"])

        assert result.exit_code == 0, result.output
        assert "Key:         PROJ-1" in result.stdout
        assert "Summary:     Fix login" in result.stdout

    def test_get_issue_from_env(self, patched_client, mock_client, monkeypatch):
        monkeypatch.setenv("JIRA_ISSUE_KEY", "PROJ-1")

        result = runner.invoke(app, ["get-issue"])

        assert result.exit_code == 0, result.output
        mock_client.get_issue.assert_called_with("PROJ-1")

    def test_global_options_passed(self, patched_client):
        runner.invoke(app, ["--host", "other.atlassian.net", "--token", "t", "get-issue", "PROJ-1"])
        patched_client.assert_called_once_with(host="other.atlassian.net", token="t")

    def test_update_status(self, patched_client, mock_client):
        result = runner.invoke(app, ["update-status", "PROJ-1", "Done"])

        assert result.exit_code == 0, result.output
        mock_client.apply_transition.assert_called_once_with("PROJ-1", "2")
        assert "Successfully updated issue PROJ-1 to status: Done" in result.stdout

    def test_update_status_no_match(self, patched_client, mock_client):
        result = runner.invoke(app, ["update-status", "PROJ-1", "Blocked"])

        assert result.exit_code == 1
        mock_client.apply_transition.assert_not_called()

    def test_update_status_json(self, patched_client):
        result = runner.invoke(app, ["update-status", "PROJ-1", "To Do", "--format", "json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["changed"] is False

    def test_add_empty_comment(self, patched_client, mock_client):
        result = runner.invoke(app, ["add-comment", "PROJ-1", " "])

        assert result.exit_code == 1
        mock_client.add_comment.assert_not_called()

    def test_sprint_add(self, patched_client, mock_client):
        result = runner.invoke(app, ["sprint-add", "12", "PROJ-1", "PROJ-2"])

        assert result.exit_code == 0, result.output
        mock_client.add_to_sprint.assert_called_once_with(12, ["PROJ-1", "PROJ-2"])


class TestErrorHandling:
    """Failures end in a clean non-zero exit."""

    def test_connection_error(self, mock_client):
        jira = Mock()
        jira.issue.side_effect = requests.exceptions.ConnectionError("Max retries exceeded")
        client = JiraClient(mock_client.context, jira=jira)

        with patch("jira_cli.cli.svc_get_client", return_value=(client, client.context)):
            result = runner.invoke(app, ["get-issue", "PROJ-1"])

        assert result.exit_code == 1
        assert not isinstance(result.exception, requests.exceptions.RequestException)

    def test_unreadable_config(self, deny_read):
        store = CredentialStore()
        store.save_config("test.atlassian.net")
        deny_read(store.config_path)

        result = runner.invoke(app, ["get-issue", "PROJ-1"])

        assert result.exit_code == 1
        assert not isinstance(result.exception, PermissionError)

    def test_unknown_format(self, patched_client, mock_client):
        result = runner.invoke(app, ["get-issue", "PROJ-1", "--format", "yaml"])

        assert result.exit_code == 2
        mock_client.get_issue.assert_not_called()
