"""Live integration test against the GitHub API.

Lists the pending deployments of a real workflow run and resolves the verdict
without approving anything.

Run with: RUN_LIVE_TESTS=1 python -m pytest tests/integration -v

Prerequisites:
- GITHUB_TOKEN with actions:read on the repository
- GITHUB_REPOSITORY, GITHUB_RUN_ID and GITHUB_ACTOR of a run waiting for review
- INPUT_ENVIRONMENT naming one of its environments
"""

import asyncio
import os

import pytest

from auto_approve.approval.fetcher import fetch_pending_gates
from auto_approve.approval.resolver import TeamMembershipLookup, resolve
from auto_approve.common.config import ConfigError, load_action_config, load_run_context
from auto_approve.github.client import create_github_client

pytestmark = pytest.mark.skipif(
    os.environ.get("RUN_LIVE_TESTS") != "1",
    reason="Live tests disabled. Set RUN_LIVE_TESTS=1 to run.",
)


@pytest.fixture
def live_settings():
    try:
        return load_action_config(), load_run_context()
    except ConfigError as exc:
        pytest.skip(f"Live tests require a run context: {exc}")


def test_resolve_against_live_run(live_settings):
    config, context = live_settings

    async def resolve_live():
        async with create_github_client(config) as client:
            gates = await fetch_pending_gates(client, context.owner, context.repo, context.run_id)
            verdict = await resolve(
                gates,
                config.environment,
                context.actor,
                TeamMembershipLookup(client, context.owner, context.actor),
            )
            return gates, verdict

    gates, verdict = asyncio.run(resolve_live())

    assert all(gate.environment_id > 0 for gate in gates)
    if verdict.environment_found:
        assert verdict.matched_gate_ids
        assert all(name.lower() == config.environment.lower() for name in verdict.matched_environment_names)
