"""Entry point for the deployment auto-approval step.

Runs the three stages in order for one workflow run:

1. fetch the run's pending deployment gates
2. resolve whether the actor may approve the requested environment
3. approve the matching gates, or report why not

Transport and API failures during fetch or approval end the run with an
``InvocationResult`` carrying the error. By default the step still exits 0
(existing workflows depend on that); set the ``fail-on-error`` input to make
those failures fail the step.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Optional

import httpx
from dotenv import find_dotenv, load_dotenv

from auto_approve.approval.executor import execute
from auto_approve.approval.fetcher import fetch_pending_gates
from auto_approve.approval.models import InvocationResult
from auto_approve.approval.resolver import TeamMembershipLookup, resolve
from auto_approve.common.config import ActionConfig, ConfigError, RunContext, load_action_config, load_run_context
from auto_approve.common.logging import bind_run, get_logger, log_failure
from auto_approve.github.client import GitHubClient, GitHubClientError, create_github_client
from auto_approve.github.workflow_commands import StepSummary, WorkflowCommands

logger = get_logger(__name__)


async def run(
    config: ActionConfig,
    context: RunContext,
    *,
    client: Optional[GitHubClient] = None,
    commands: Optional[WorkflowCommands] = None,
    summary: Optional[StepSummary] = None,
) -> InvocationResult:
    """Run one approval attempt and return its result."""
    bind_run(context)
    logger.info(
        f"Auto approval requested for {config.environment} environment.",
        extra={"environment": config.environment},
    )

    owns_client = client is None
    client = client or create_github_client(config)
    try:
        gates = await fetch_pending_gates(client, context.owner, context.repo, context.run_id)
        verdict = await resolve(
            gates,
            config.environment,
            context.actor,
            TeamMembershipLookup(client, context.owner, context.actor),
        )
        outcome = await execute(
            verdict,
            target_environment=config.environment,
            context=context,
            client=client,
            commands=commands,
            summary=summary,
        )
    except (GitHubClientError, httpx.HTTPError) as exc:
        log_failure(logger, "Auto approval failed", exc, environment=config.environment)
        return InvocationResult(error=str(exc) or type(exc).__name__, error_type=type(exc).__name__)
    finally:
        if owns_client:
            await client.aclose()

    return InvocationResult(outcome=outcome)


def main() -> int:
    """Console entry point; returns the process exit status."""
    # Variables already set in the environment take precedence over .env.
    env_file = find_dotenv(usecwd=True)
    if env_file:
        load_dotenv(env_file)
    commands = WorkflowCommands()

    try:
        config = load_action_config()
        context = load_run_context()
    except ConfigError as exc:
        commands.error(str(exc))
        log_failure(logger, "Invalid configuration", exc)
        return 1

    result = asyncio.run(run(config, context, commands=commands))

    if not result.ok and config.fail_on_error:
        commands.error(f"Auto approval failed: {result.error}")
    return result.exit_code(config.fail_on_error)


if __name__ == "__main__":
    sys.exit(main())
