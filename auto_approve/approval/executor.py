"""Act on an authorization verdict: approve, or report why not."""

from __future__ import annotations

from typing import Optional

from auto_approve.approval.models import AuthorizationVerdict, ExecutionOutcome, OutcomeKind
from auto_approve.common.config import RunContext
from auto_approve.common.logging import get_logger, log_decision
from auto_approve.github.client import GitHubClient
from auto_approve.github.workflow_commands import StepSummary, WorkflowCommands

logger = get_logger(__name__)

APPROVED_STATE = "approved"
SUMMARY_HEADING = ":white_check_mark: Auto Approval Status"


def build_approval_comment(environment_label: str, actor: str) -> str:
    return f"Auto-Approved by GitHub Action for environment(s) - {environment_label}. Reviewer: {actor}"


async def execute(
    verdict: AuthorizationVerdict,
    *,
    target_environment: str,
    context: RunContext,
    client: GitHubClient,
    commands: Optional[WorkflowCommands] = None,
    summary: Optional[StepSummary] = None,
) -> ExecutionOutcome:
    """Carry out the verdict.

    Only the approved branch calls the API. The approval request is sent as-is;
    re-approving an already approved gate is left to GitHub to reject.

    Raises:
        GitHubClientError, httpx.HTTPError: If the approval request fails.
    """
    commands = commands or WorkflowCommands()
    summary = summary or StepSummary()

    if not verdict.environment_found:
        commands.warning(
            f"env '{target_environment}' is not part of the workflow "
            "or deployment was already approved by one of the reviewers"
        )
        log_decision(logger, stage="execute", outcome=OutcomeKind.ENVIRONMENT_NOT_FOUND.value, environment=target_environment)
        return ExecutionOutcome(kind=OutcomeKind.ENVIRONMENT_NOT_FOUND)

    if not verdict.authorized:
        commands.notice(
            "Auto Approval Not Possible; current user is not a reviewer for the environment(s) - "
            + verdict.environment_label
        )
        commands.info("Reviewers: " + ",".join(verdict.all_reviewers))
        log_decision(
            logger,
            stage="execute",
            outcome=OutcomeKind.NOT_AUTHORIZED.value,
            environment=target_environment,
            reviewers=list(verdict.all_reviewers),
        )
        return ExecutionOutcome(
            kind=OutcomeKind.NOT_AUTHORIZED,
            environment_names=verdict.matched_environment_names,
            reviewers=verdict.all_reviewers,
        )

    await client.review_pending_deployments(
        context.owner,
        context.repo,
        context.run_id,
        environment_ids=verdict.matched_gate_ids,
        state=APPROVED_STATE,
        comment=build_approval_comment(verdict.environment_label, context.actor),
    )
    log_decision(
        logger,
        stage="execute",
        outcome=OutcomeKind.APPROVED.value,
        environment=target_environment,
        environment_ids=list(verdict.matched_gate_ids),
    )

    summary.add_heading(SUMMARY_HEADING)
    summary.add_quote(f"Auto-Approved by GitHub Action. Reviewer: {context.actor}")
    summary.write()

    return ExecutionOutcome(
        kind=OutcomeKind.APPROVED,
        environment_ids=verdict.matched_gate_ids,
        environment_names=verdict.matched_environment_names,
        reviewers=verdict.all_reviewers,
    )
