"""Async GitHub REST client for the deployment review endpoints.

Covers the three calls the approval step needs: listing pending deployments
for a run, checking team membership, and reviewing pending deployments.
Each call is a single attempt; failures are raised to the caller.
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, Sequence

import httpx

from auto_approve.common.config import ActionConfig
from auto_approve.common.logging import get_logger

logger = get_logger(__name__)

GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "deployment-auto-approve"


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""


class GitHubAPIError(GitHubClientError):
    """Non-success response from the GitHub API."""

    def __init__(self, status_code: int, message: str, url: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        super().__init__(f"GitHub API returned {status_code}: {message}")


class CredentialError(GitHubAPIError):
    """Raised when the token is missing, invalid, or lacks permission."""


def _build_headers(token: str) -> Dict[str, str]:
    """Build HTTP headers for the GitHub REST API."""
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
        "User-Agent": USER_AGENT,
    }


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text[:200]


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    message = _error_message(response)
    url = str(response.request.url)
    if response.status_code in (401, 403):
        raise CredentialError(response.status_code, message, url=url)
    raise GitHubAPIError(response.status_code, message, url=url)


def _json_body(response: httpx.Response, what: str) -> Any:
    # Proxies in front of GHES can answer 200 with an HTML page.
    try:
        return response.json()
    except ValueError as exc:
        raise GitHubClientError(f"Unexpected {what} payload (not JSON): {response.text[:100]!r}") from exc


class GitHubClient:
    """Client for the GitHub Actions deployment review API.

    Usable as an async context manager; the underlying ``httpx.AsyncClient`` is
    closed on exit. Tests pass their own ``http_client`` (typically backed by
    ``httpx.MockTransport``).
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = "https://api.github.com",
        timeout_sec: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            headers=_build_headers(token),
            timeout=timeout_sec,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        start = time.perf_counter()
        response = await self._http.request(method, path, **kwargs)
        logger.debug(
            "github_request",
            extra={
                "event": "github_request",
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_sec": round(time.perf_counter() - start, 3),
            },
        )
        return response

    async def get_pending_deployments(self, owner: str, repo: str, run_id: int) -> List[Dict[str, Any]]:
        """List deployment gates waiting for review in a workflow run.

        Raises:
            CredentialError: On 401/403.
            GitHubAPIError: On any other non-2xx response.
            httpx.HTTPError: On transport failures.
        """
        response = await self._request("GET", f"/repos/{owner}/{repo}/actions/runs/{run_id}/pending_deployments")
        _raise_for_status(response)
        data = _json_body(response, "pending deployments")
        if not isinstance(data, list):
            raise GitHubClientError("Unexpected pending deployments payload (expected a list)")
        return data

    async def get_team_membership(self, org: str, team_slug: str, username: str) -> int:
        """Check a user's membership in an organization team.

        Returns:
            The HTTP status (200 when the user is a member).

        Raises:
            GitHubAPIError: When GitHub answers with a non-2xx status
                (404 means not a member, or the team is not visible to the token).
        """
        response = await self._request("GET", f"/orgs/{org}/teams/{team_slug}/memberships/{username}")
        _raise_for_status(response)
        return response.status_code

    async def review_pending_deployments(
        self,
        owner: str,
        repo: str,
        run_id: int,
        *,
        environment_ids: Sequence[int],
        state: str,
        comment: str,
    ) -> List[Dict[str, Any]]:
        """Approve or reject pending deployments for a workflow run.

        Returns:
            The deployments GitHub created as a result of the review.
        """
        payload = {
            "environment_ids": list(environment_ids),
            "state": state,
            "comment": comment,
        }
        response = await self._request(
            "POST", f"/repos/{owner}/{repo}/actions/runs/{run_id}/pending_deployments", json=payload
        )
        _raise_for_status(response)
        data = _json_body(response, "review")
        return data if isinstance(data, list) else []


def create_github_client(config: ActionConfig) -> GitHubClient:
    """Create a client from action configuration."""
    return GitHubClient(
        config.github_token,
        base_url=config.api_url,
        timeout_sec=config.request_timeout_sec,
    )
