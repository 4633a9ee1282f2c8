#!/usr/bin/env python3
"""
GitHub App tool server

Speaks line-delimited JSON-RPC 2.0 on stdin/stdout (initialize, tools/list,
tools/call) and exposes the actions of this package as tools. Configuration
comes from the GITHUB_APP_* environment variables, see github_parts.config.
"""

import base64
import json
import logging
import sys
from typing import Any, Callable, Dict, List, Optional

from github.GithubException import GithubException
from pydantic import ValidationError

from . import __version__
from .actions import (
    CreateCheckRunInput,
    UpdateCheckRunInput,
    create_check_run,
    get_file,
    list_check_runs,
    list_check_suites,
    update_check_run,
)
from .client import GitHubClient
from .config import GitHubAppSettings
from .errors import ApiError, ConfigurationError, GitHubPartsError, RequestFailed
from .models import CheckRunOutput

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"

_REPO_PROPERTIES = {
    "installation_id": {
        "type": "integer",
        "description": "Installation to act for (optional, defaults to GITHUB_APP_INSTALLATION_ID)",
    },
    "owner": {"type": "string", "description": "Repository owner (user or organization login)"},
    "repo": {"type": "string", "description": "Repository name"},
}

_CHECK_RUN_PROPERTIES = {
    "status": {"type": "string", "enum": ["queued", "in_progress", "completed"]},
    "conclusion": {
        "type": "string",
        "enum": ["success", "failure", "neutral", "skipped", "cancelled", "timed_out", "action_required"],
        "description": "Required when status is completed",
    },
    "title": {"type": "string", "description": "Output title"},
    "summary": {"type": "string", "description": "Output summary (Markdown)"},
    "text": {"type": "string", "description": "Output details (Markdown)"},
    "details_url": {"type": "string"},
}


def _schema(extra: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {**_REPO_PROPERTIES, **extra},
        "required": ["owner", "repo"] + required,
    }


TOOLS = [
    {
        "name": "get_file",
        "description": "Read a file from a repository. Binary files are returned base64 encoded.",
        "inputSchema": _schema(
            {
                "path": {"type": "string", "description": "File path relative to the repository root"},
                "ref": {"type": "string", "description": "Branch, tag or commit SHA (optional)"},
            },
            ["path"],
        ),
    },
    {
        "name": "get_repository",
        "description": "Get repository details.",
        "inputSchema": _schema({}, []),
    },
    {
        "name": "create_check_run",
        "description": "Create a check run for a commit.",
        "inputSchema": _schema(
            {
                "name": {"type": "string", "description": "Name of the check"},
                "head_sha": {"type": "string", "description": "Commit SHA the check run belongs to"},
                **_CHECK_RUN_PROPERTIES,
            },
            ["name", "head_sha"],
        ),
    },
    {
        "name": "update_check_run",
        "description": "Update the status, conclusion or output of a check run.",
        "inputSchema": _schema(
            {"check_run_id": {"type": "integer"}, **_CHECK_RUN_PROPERTIES},
            ["check_run_id"],
        ),
    },
    {
        "name": "list_check_runs",
        "description": "List the check runs of a check suite (first 100).",
        "inputSchema": _schema({"check_suite_id": {"type": "integer"}}, ["check_suite_id"]),
    },
    {
        "name": "list_check_suites",
        "description": "List the check suites of a commit (first 100).",
        "inputSchema": _schema(
            {"ref": {"type": "string", "description": "Commit SHA, branch or tag name"}},
            ["ref"],
        ),
    },
]


def _text_result(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": json.dumps(payload, ensure_ascii=False, indent=2)}]}


def _error_result(error: Exception, status: Optional[int] = None) -> Dict[str, Any]:
    return _text_result(
        {
            "success": False,
            "error": str(error),
            "status": status,
            "error_type": type(error).__name__,
        }
    )


def _output(arguments: Dict[str, Any]) -> Optional[CheckRunOutput]:
    if not any(arguments.get(key) for key in ("title", "summary", "text")):
        return None
    return CheckRunOutput(title=arguments.get("title"), summary=arguments.get("summary"), text=arguments.get("text"))


class GitHubAppServer:
    """Tool server backed by one GitHubClient"""

    def __init__(self, client: Optional[GitHubClient] = None, settings: Optional[GitHubAppSettings] = None):
        self.settings = settings or GitHubAppSettings()
        self._client = client
        self._tools: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
            "get_file": self.get_file,
            "get_repository": self.get_repository,
            "create_check_run": self.create_check_run,
            "update_check_run": self.update_check_run,
            "list_check_runs": self.list_check_runs,
            "list_check_suites": self.list_check_suites,
        }
        logger.info(
            "GitHub App tool server %s initialized (app id: %s, installation id: %s)",
            __version__,
            self.settings.id or "not set",
            self.settings.installation_id or "not set",
        )

    @property
    def client(self) -> GitHubClient:
        if self._client is None:
            self._client = GitHubClient.from_settings(self.settings)
        return self._client

    def handle_initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": "github-parts", "version": __version__},
        }

    def handle_tools_list(self) -> Dict[str, Any]:
        return {"tools": TOOLS}

    def handle_tools_call(self, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        tool = self._tools.get(name)
        if tool is None:
            return {"error": f"Unknown tool: {name}"}
        try:
            return tool(arguments)
        except (ApiError, RequestFailed) as e:
            return _error_result(e, e.status)
        except GithubException as e:
            message = e.data.get("message", str(e)) if isinstance(e.data, dict) else str(e)
            return _error_result(ApiError(e.status, message), e.status)
        except (GitHubPartsError, ValidationError) as e:
            return _error_result(e)

    def _installation_id(self, arguments: Dict[str, Any]) -> int:
        installation_id = arguments.get("installation_id") or self.settings.installation_id
        if not installation_id:
            raise ConfigurationError("No installation id given. Pass installation_id or set GITHUB_APP_INSTALLATION_ID.")
        return int(installation_id)

    def get_file(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        result = get_file(
            self.client,
            self._installation_id(arguments),
            arguments["owner"],
            arguments["repo"],
            arguments["path"],
            arguments.get("ref"),
        )
        payload = {"success": True, "name": result.name, "path": result.path, "sha": result.sha, "size": result.size}
        try:
            payload["content"] = result.text()
            payload["is_binary"] = False
        except UnicodeDecodeError:
            payload["content_base64"] = base64.b64encode(result.content).decode("ascii")
            payload["is_binary"] = True
        return _text_result(payload)

    def get_repository(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        github = self.client.pygithub(self._installation_id(arguments))
        try:
            repository = github.get_repo(f"{arguments['owner']}/{arguments['repo']}")
            return _text_result(
                {
                    "success": True,
                    "repository": {
                        "id": repository.id,
                        "name": repository.name,
                        "full_name": repository.full_name,
                        "owner": repository.owner.login,
                        "description": repository.description,
                        "url": repository.html_url,
                        "default_branch": repository.default_branch,
                        "private": repository.private,
                        "archived": repository.archived,
                        "pushed_at": repository.pushed_at.isoformat() if repository.pushed_at else None,
                    },
                }
            )
        finally:
            github.close()

    def create_check_run(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        check_run = create_check_run(
            self.client,
            self._installation_id(arguments),
            arguments["owner"],
            arguments["repo"],
            CreateCheckRunInput(
                name=arguments["name"],
                head_sha=arguments["head_sha"],
                status=arguments.get("status"),
                conclusion=arguments.get("conclusion"),
                details_url=arguments.get("details_url"),
                output=_output(arguments),
            ),
        )
        return _text_result({"success": True, "check_run": check_run.model_dump(mode="json")})

    def update_check_run(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        completed = arguments.get("status") == "completed" or arguments.get("conclusion")
        check_run = update_check_run(
            self.client,
            self._installation_id(arguments),
            arguments["owner"],
            arguments["repo"],
            int(arguments["check_run_id"]),
            UpdateCheckRunInput(
                status=arguments.get("status"),
                conclusion=arguments.get("conclusion"),
                details_url=arguments.get("details_url"),
                completed_at=self.client.clock.now() if completed else None,
                output=_output(arguments),
            ),
        )
        return _text_result({"success": True, "check_run": check_run.model_dump(mode="json")})

    def list_check_runs(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        check_runs = list_check_runs(
            self.client,
            self._installation_id(arguments),
            arguments["owner"],
            arguments["repo"],
            int(arguments["check_suite_id"]),
        )
        return _text_result({"success": True, "check_runs": [run.model_dump(mode="json") for run in check_runs]})

    def list_check_suites(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        check_suites = list_check_suites(
            self.client,
            self._installation_id(arguments),
            arguments["owner"],
            arguments["repo"],
            arguments["ref"],
        )
        return _text_result(
            {"success": True, "check_suites": [suite.model_dump(mode="json") for suite in check_suites]}
        )

    def handle_request(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """Turn one JSON-RPC request into its response"""
        method = request.get("method")
        params = request.get("params") or {}

        if method == "initialize":
            result = self.handle_initialize(params)
        elif method == "tools/list":
            result = self.handle_tools_list()
        elif method == "tools/call":
            result = self.handle_tools_call(params.get("name"), params.get("arguments") or {})
        else:
            result = {"error": f"Unknown method: {method}"}

        return {"jsonrpc": "2.0", "id": request.get("id"), "result": result}


def serve(server: GitHubAppServer, stdin=sys.stdin, stdout=sys.stdout) -> None:
    """Answer requests line by line until stdin is closed"""
    for line in stdin:
        line = line.strip()
        if not line:
            continue
        try:
            request = json.loads(line)
        except json.JSONDecodeError:
            logger.warning("Skipping malformed request line")
            continue

        try:
            response = server.handle_request(request)
        except Exception as e:
            logger.exception("Request %s failed", request.get("id"))
            response = {
                "jsonrpc": "2.0",
                "id": request.get("id"),
                "error": {"code": -32603, "message": str(e)},
            }

        stdout.write(json.dumps(response) + "\n")
        stdout.flush()


def main() -> None:
    # stdout carries the protocol, logs go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        serve(GitHubAppServer())
    except KeyboardInterrupt:
        pass
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
