"""Tests for the thoughts CLI and its credential file."""
import stat
from unittest.mock import patch, MagicMock

import pytest

from portal import cli, credentials
from portal.client import PortalApiError, UnauthorizedError

URL = "https://api.example.com/"
THOUGHT = {
    "id": "thought_T1",
    "timestamp": "T1",
    "content": "feed the cat",
    "category": "family",
    "status": "pending",
    "isAcknowledged": False,
    "actionTaken": True,
}


@pytest.fixture(autouse=True)
def portal_home(tmp_path, monkeypatch):
    monkeypatch.setenv("THOUGHTS_PORTAL_HOME", str(tmp_path))
    monkeypatch.delenv("THOUGHTS_API_URL", raising=False)
    return tmp_path


@pytest.fixture
def logged_in():
    credentials.save_credentials("alice", "pw")


@pytest.fixture
def client():
    instance = MagicMock()
    instance.list_thoughts.return_value = [THOUGHT]
    with patch.object(cli, "ThoughtsClient", return_value=instance) as cls:
        instance.cls = cls
        yield instance


class TestCredentials:
    def test_save_and_load(self, portal_home):
        path = credentials.save_credentials("alice", "pw")

        assert path == portal_home / "credentials.yaml"
        assert credentials.load_credentials() == ("alice", "pw")
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_missing_or_partial(self, portal_home):
        assert credentials.load_credentials() is None
        (portal_home / "credentials.yaml").write_text("username: alice\n")
        assert credentials.load_credentials() is None

    def test_clear(self):
        credentials.save_credentials("alice", "pw")
        assert credentials.clear_credentials() is True
        assert credentials.clear_credentials() is False


class TestCommands:
    def test_list(self, logged_in, client, capsys):
        assert cli.main(["--url", URL, "list"]) == 0

        out = capsys.readouterr().out
        assert "thought_T1" in out
        assert "feed the cat" in out
        client.cls.assert_called_once_with(URL, "alice", "pw")

    def test_submit_lowercases_category(self, logged_in, client, capsys):
        assert cli.main(["--url", URL, "submit", "hello", "--category", "Work"]) == 0

        client.create_thought.assert_called_once_with("hello", "work")
        client.list_thoughts.assert_called_once()

    def test_ack_toggles_flag(self, logged_in, client):
        cli.main(["--url", URL, "ack", "thought_T1"])
        client.update_thought.assert_called_once_with(THOUGHT, isAcknowledged=True)

    def test_action_toggles_flag(self, logged_in, client):
        cli.main(["--url", URL, "action", "thought_T1"])
        client.update_thought.assert_called_once_with(THOUGHT, actionTaken=False)

    def test_status_toggles(self, logged_in, client):
        cli.main(["--url", URL, "status", "thought_T1"])
        client.update_thought.assert_called_once_with(THOUGHT, status="completed")

        client.update_thought.reset_mock()
        client.list_thoughts.return_value = [{**THOUGHT, "status": "completed"}]
        cli.main(["--url", URL, "status", "thought_T1"])
        client.update_thought.assert_called_once_with({**THOUGHT, "status": "completed"}, status="pending")

    def test_delete(self, logged_in, client):
        cli.main(["--url", URL, "delete", "thought_T1"])
        client.delete_thought.assert_called_once_with(THOUGHT)

    def test_unknown_id(self, logged_in, client, capsys):
        assert cli.main(["--url", URL, "delete", "thought_nope"]) == 1
        assert "No thought with id thought_nope" in capsys.readouterr().out

    def test_api_error_exits_nonzero(self, logged_in, client, capsys):
        client.list_thoughts.side_effect = PortalApiError(500, "Error processing request: boom")
        assert cli.main(["--url", URL, "list"]) == 1
        assert "boom" in capsys.readouterr().out

    def test_url_required(self, logged_in):
        with pytest.raises(SystemExit):
            cli.main(["list"])

    def test_url_from_environment(self, logged_in, client, monkeypatch):
        monkeypatch.setenv("THOUGHTS_API_URL", URL)
        assert cli.main(["list"]) == 0


class TestLogin:
    def test_login_prompts_and_warns(self, monkeypatch, capsys):
        monkeypatch.setattr("builtins.input", lambda prompt: "alice")
        monkeypatch.setattr(cli.getpass, "getpass", lambda prompt: "pw")

        assert cli.main(["login"]) == 0

        assert credentials.load_credentials() == ("alice", "pw")
        assert "plaintext" in capsys.readouterr().out

    def test_prompts_when_no_credentials(self, client, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda prompt: "bob")
        monkeypatch.setattr(cli.getpass, "getpass", lambda prompt: "pw2")

        cli.main(["--url", URL, "list"])

        client.cls.assert_called_once_with(URL, "bob", "pw2")

    def test_401_asks_again_and_retries_once(self, logged_in, client, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda prompt: "alice")
        monkeypatch.setattr(cli.getpass, "getpass", lambda prompt: "new-pw")
        client.list_thoughts.side_effect = [UnauthorizedError(401, "Unauthorized"), [THOUGHT]]

        assert cli.main(["--url", URL, "list"]) == 0

        assert client.cls.call_args_list[-1].args == (URL, "alice", "new-pw")
        assert credentials.load_credentials() == ("alice", "new-pw")

    def test_logout(self, logged_in, capsys):
        assert cli.main(["logout"]) == 0
        assert credentials.load_credentials() is None
        assert "removed" in capsys.readouterr().out
