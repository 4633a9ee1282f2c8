"""Tests for github_parts.server."""

import base64
import io
import json
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest

from conftest import START, ManualClock
from github_parts import GitHubAppSettings
from github_parts.server import GitHubAppServer, serve


@pytest.fixture
def server(client) -> GitHubAppServer:
    return GitHubAppServer(client=client, settings=GitHubAppSettings(id=1, installation_id=1))


def _payload(result):
    return json.loads(result["content"][0]["text"])


class TestProtocol:
    def test_initialize(self, server):
        response = server.handle_request({"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}})

        assert response["id"] == 1
        assert response["result"]["serverInfo"]["name"] == "github-parts"

    def test_tools_list(self, server):
        response = server.handle_request({"jsonrpc": "2.0", "id": 2, "method": "tools/list"})

        names = [tool["name"] for tool in response["result"]["tools"]]
        assert names == [
            "get_file",
            "get_repository",
            "create_check_run",
            "update_check_run",
            "list_check_runs",
            "list_check_suites",
        ]

    def test_unknown_method(self, server):
        response = server.handle_request({"jsonrpc": "2.0", "id": 3, "method": "resources/list"})
        assert response["result"] == {"error": "Unknown method: resources/list"}

    def test_unknown_tool(self, server):
        assert server.handle_tools_call("delete_everything", {}) == {"error": "Unknown tool: delete_everything"}


class TestTools:
    def test_get_file_text(self, server, session):
        session.add_token(1)
        session.add(
            "GET",
            "/repos/octocat/hello-world/contents/README.md",
            payload={
                "type": "file",
                "encoding": "base64",
                "name": "README.md",
                "path": "README.md",
                "sha": "abc",
                "size": 5,
                "content": base64.b64encode(b"hello").decode("ascii"),
            },
        )

        result = server.handle_tools_call("get_file", {"owner": "octocat", "repo": "hello-world", "path": "README.md"})

        payload = _payload(result)
        assert payload["success"] is True
        assert payload["content"] == "hello"
        assert payload["is_binary"] is False

    def test_get_file_binary(self, server, session):
        session.add_token(1)
        session.add(
            "GET",
            "/repos/octocat/hello-world/contents/logo.png",
            payload={
                "type": "file",
                "encoding": "base64",
                "name": "logo.png",
                "path": "logo.png",
                "sha": "abc",
                "size": 2,
                "content": base64.b64encode(b"\xff\xfe").decode("ascii"),
            },
        )

        payload = _payload(
            server.handle_tools_call("get_file", {"owner": "octocat", "repo": "hello-world", "path": "logo.png"})
        )

        assert payload["is_binary"] is True
        assert base64.b64decode(payload["content_base64"]) == b"\xff\xfe"

    def test_api_error_is_reported(self, server, session):
        session.add_token(1)
        session.add("GET", "/repos/octocat/hello-world/contents/nope", status=404, payload={"message": "Not Found"})

        payload = _payload(
            server.handle_tools_call("get_file", {"owner": "octocat", "repo": "hello-world", "path": "nope"})
        )

        assert payload == {
            "success": False,
            "error": "GitHub API error (404): Not Found",
            "status": 404,
            "error_type": "NotFoundError",
        }

    def test_missing_installation_id(self, client):
        server = GitHubAppServer(client=client, settings=GitHubAppSettings(id=1))

        payload = _payload(server.handle_tools_call("list_check_runs", {"owner": "o", "repo": "r", "check_suite_id": 5}))

        assert payload["success"] is False
        assert payload["error_type"] == "ConfigurationError"

    def test_invalid_status_is_reported(self, server):
        payload = _payload(
            server.handle_tools_call(
                "create_check_run",
                {"owner": "o", "repo": "r", "name": "lint", "head_sha": "abc", "status": "exploded"},
            )
        )

        assert payload["success"] is False
        assert payload["error_type"] == "ValidationError"

    def test_create_check_run(self, server, session):
        session.add_token(7)
        session.add(
            "POST",
            "/repos/o/r/check-runs",
            status=201,
            payload={"id": 4, "name": "lint", "head_sha": "abc", "status": "queued"},
        )

        payload = _payload(
            server.handle_tools_call(
                "create_check_run",
                {"installation_id": 7, "owner": "o", "repo": "r", "name": "lint", "head_sha": "abc", "summary": "ok"},
            )
        )

        assert payload["check_run"]["id"] == 4
        [call] = session.calls_to("POST", "/repos/o/r/check-runs")
        assert call["json"] == {"name": "lint", "head_sha": "abc", "output": {"summary": "ok"}}

    def test_update_check_run_sets_completed_at(self, server, session, clock):
        session.add_token(1)
        session.add(
            "PATCH",
            "/repos/o/r/check-runs/4",
            payload={"id": 4, "name": "lint", "head_sha": "abc", "status": "completed", "conclusion": "failure"},
        )

        server.handle_tools_call(
            "update_check_run",
            {"owner": "o", "repo": "r", "check_run_id": 4, "status": "completed", "conclusion": "failure"},
        )

        [call] = session.calls_to("PATCH", "/repos/o/r/check-runs/4")
        assert call["json"]["completed_at"] == "2024-06-01T12:00:00Z"

    def test_update_check_run_reads_time_from_client_clock(self, server, session):
        session.add_token(1)
        session.add(
            "PATCH",
            "/repos/o/r/check-runs/4",
            payload={"id": 4, "name": "lint", "head_sha": "abc", "status": "completed", "conclusion": "success"},
        )
        server.client.clock = ManualClock(START + timedelta(hours=1))

        server.handle_tools_call(
            "update_check_run",
            {"owner": "o", "repo": "r", "check_run_id": 4, "status": "completed", "conclusion": "success"},
        )

        [call] = session.calls_to("PATCH", "/repos/o/r/check-runs/4")
        assert call["json"]["completed_at"] == "2024-06-01T13:00:00Z"

    def test_get_repository_uses_pygithub(self, server):
        repository = MagicMock()
        repository.id = 1296269
        repository.name = "hello-world"
        repository.full_name = "octocat/hello-world"
        repository.owner.login = "octocat"
        repository.description = None
        repository.html_url = "https://github.com/octocat/hello-world"
        repository.default_branch = "main"
        repository.private = False
        repository.archived = False
        repository.pushed_at = None
        github = MagicMock()
        github.get_repo.return_value = repository

        with patch.object(server.client, "pygithub", return_value=github) as pygithub:
            payload = _payload(server.handle_tools_call("get_repository", {"owner": "octocat", "repo": "hello-world"}))

        pygithub.assert_called_once_with(1)
        github.get_repo.assert_called_once_with("octocat/hello-world")
        github.close.assert_called_once()
        assert payload["repository"]["full_name"] == "octocat/hello-world"


class TestServe:
    def test_skips_malformed_lines(self, server):
        stdin = io.StringIO('not json\n\n{"jsonrpc": "2.0", "id": 9, "method": "tools/list"}\n')
        stdout = io.StringIO()

        serve(server, stdin=stdin, stdout=stdout)

        lines = stdout.getvalue().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["id"] == 9

    def test_unexpected_error_becomes_internal_error(self, server):
        stdin = io.StringIO('{"jsonrpc": "2.0", "id": 4, "method": "tools/list"}\n')
        stdout = io.StringIO()

        with patch.object(server, "handle_tools_list", side_effect=RuntimeError("boom")):
            serve(server, stdin=stdin, stdout=stdout)

        response = json.loads(stdout.getvalue())
        assert response["error"] == {"code": -32603, "message": "boom"}
