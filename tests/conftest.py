"""Pytest configuration and shared fixtures.

Provides a fake GitHub API (``httpx.MockTransport``) so unit tests exercise the
real client without network traffic.
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

# Make the package importable without installing it
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))

import httpx
import pytest

from auto_approve.common.config import ActionConfig, RunContext
from auto_approve.github.client import GitHubClient

API_URL = "https://api.github.test"


class FakeGitHub:
    """Serve canned GitHub responses and record every request.

    ``memberships`` maps team slug to an HTTP status, or to an exception the
    transport raises for that team.
    """

    def __init__(self):
        self.pending: Union[List[Dict[str, Any]], Dict[str, Any]] = []
        self.pending_status = 200
        self.pending_error: Optional[Exception] = None
        self.pending_text: Optional[str] = None
        self.memberships: Dict[str, Union[int, Exception]] = {}
        self.approve_status = 200
        self.approve_text: Optional[str] = None
        self.requests: List[httpx.Request] = []
        self.approvals: List[Dict[str, Any]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.endswith("/pending_deployments") and request.method == "GET":
            if self.pending_error is not None:
                raise self.pending_error
            if self.pending_text is not None:
                return httpx.Response(self.pending_status, text=self.pending_text)
            return httpx.Response(self.pending_status, json=self.pending)

        if path.endswith("/pending_deployments") and request.method == "POST":
            self.approvals.append(json.loads(request.content))
            if self.approve_status >= 400:
                return httpx.Response(self.approve_status, json={"message": "Review failed"})
            if self.approve_text is not None:
                return httpx.Response(self.approve_status, text=self.approve_text)
            return httpx.Response(self.approve_status, json=[{"id": 1, "environment": "approved"}])

        if "/teams/" in path and "/memberships/" in path:
            slug = path.split("/teams/", 1)[1].split("/", 1)[0]
            outcome = self.memberships.get(slug, 404)
            if isinstance(outcome, Exception):
                raise outcome
            if outcome == 200:
                return httpx.Response(200, json={"state": "active", "role": "member"})
            return httpx.Response(outcome, json={"message": "Not Found"})

        return httpx.Response(404, json={"message": "Not Found"})

    @property
    def membership_checks(self) -> List[str]:
        return [
            r.url.path.split("/teams/", 1)[1].split("/", 1)[0]
            for r in self.requests
            if "/memberships/" in r.url.path
        ]

    def client(self) -> GitHubClient:
        http_client = httpx.AsyncClient(
            base_url=API_URL,
            transport=httpx.MockTransport(self.handler),
        )
        return GitHubClient("test-token", base_url=API_URL, http_client=http_client)


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def run_context() -> RunContext:
    return RunContext(owner="acme", repo="web", run_id=4242, actor="alice")


@pytest.fixture
def action_config() -> ActionConfig:
    return ActionConfig(
        github_token="test-token",
        environment="prod",
        api_url=API_URL,
        request_timeout_sec=5.0,
    )


@pytest.fixture
def step_summary_file(tmp_path, monkeypatch) -> Path:
    path = tmp_path / "summary.md"
    monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(path))
    return path
