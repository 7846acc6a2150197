"""Fetch pending deployment gates for the current workflow run."""

from __future__ import annotations

from typing import List

from pydantic import ValidationError

from auto_approve.approval.models import DeploymentGate
from auto_approve.common.logging import get_logger
from auto_approve.github.client import GitHubClient, GitHubClientError

logger = get_logger(__name__)


async def fetch_pending_gates(client: GitHubClient, owner: str, repo: str, run_id: int) -> List[DeploymentGate]:
    """Return the run's pending gates in API order.

    Single attempt: client errors propagate to the caller. A payload that does
    not parse is reported as a ``GitHubClientError``.
    """
    items = await client.get_pending_deployments(owner, repo, run_id)
    if not all(isinstance(item, dict) for item in items):
        raise GitHubClientError("Malformed pending deployment payload: expected a list of objects")
    try:
        gates = [DeploymentGate.from_api(item) for item in items]
    except ValidationError as exc:
        raise GitHubClientError(f"Malformed pending deployment payload: {exc.error_count()} error(s)") from exc

    logger.info(
        "Fetched pending deployment gates",
        extra={
            "event": "gates_fetched",
            "run_id": run_id,
            "count": len(gates),
            "environments": [gate.environment_name for gate in gates],
        },
    )
    return gates
