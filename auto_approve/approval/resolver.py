"""Decide whether the invoking actor may approve the requested environment.

Reviewer entries are examined one at a time. A team entry awaits its
membership lookup before the next entry is looked at, so the accumulated
state is only ever touched by one entry.
"""

from __future__ import annotations

from typing import Awaitable, Callable, List, Sequence

from auto_approve.approval.models import AuthorizationVerdict, DeploymentGate, GroupReviewer, IndividualReviewer
from auto_approve.common.logging import get_logger, log_decision, log_failure
from auto_approve.github.client import GitHubClient

logger = get_logger(__name__)

MembershipLookup = Callable[[GroupReviewer], Awaitable[bool]]


class TeamMembershipLookup:
    """Membership check for one actor against organization teams."""

    def __init__(self, client: GitHubClient, org: str, username: str):
        self.client = client
        self.org = org
        self.username = username

    async def __call__(self, group: GroupReviewer) -> bool:
        status = await self.client.get_team_membership(self.org, group.slug, self.username)
        logger.info(
            "Team membership checked",
            extra={"team_slug": group.slug, "username": self.username, "status_code": status},
        )
        return status == 200


def _append_unique(items: List, value) -> None:
    if value not in items:
        items.append(value)


async def _is_group_member(group: GroupReviewer, membership: MembershipLookup) -> bool:
    try:
        return await membership(group)
    except Exception as exc:  # any lookup failure counts as "not a member"
        log_failure(logger, "Team membership check failed", exc, team=group.name, team_slug=group.slug)
        return False


async def resolve(
    gates: Sequence[DeploymentGate],
    target_environment: str,
    actor: str,
    membership: MembershipLookup,
) -> AuthorizationVerdict:
    """Resolve the authorization verdict for ``actor`` on ``target_environment``.

    Args:
        gates: Pending gates for the run, in API order.
        target_environment: Environment name, compared case-insensitively.
        actor: Login of the invoking identity.
        membership: Async callable answering whether ``actor`` belongs to a team.

    Returns:
        AuthorizationVerdict. When no gate matches, ``environment_found`` is False
        and every other field is empty.
    """
    matched = [gate for gate in gates if gate.matches(target_environment)]
    if not matched:
        log_decision(logger, stage="resolve", outcome="environment_not_found", environment=target_environment)
        return AuthorizationVerdict.not_found()

    gate_ids: List[int] = []
    names: List[str] = []
    reviewers: List[str] = []
    authorized = False
    lookups = 0

    for gate in matched:
        _append_unique(gate_ids, gate.environment_id)
        names.append(gate.environment_name)

        for entry in gate.reviewers:
            _append_unique(reviewers, entry.display_name)
            # Once authorized, remaining entries are only listed.
            if authorized:
                continue
            if isinstance(entry, IndividualReviewer):
                authorized = entry.login == actor
            elif isinstance(entry, GroupReviewer):
                lookups += 1
                authorized = await _is_group_member(entry, membership)

    verdict = AuthorizationVerdict(
        environment_found=True,
        matched_gate_ids=tuple(gate_ids),
        matched_environment_names=tuple(names),
        all_reviewers=tuple(reviewers),
        authorized=authorized,
    )
    log_decision(
        logger,
        stage="resolve",
        outcome="authorized" if authorized else "not_authorized",
        environment=target_environment,
        environment_ids=list(verdict.matched_gate_ids),
        reviewers=list(verdict.all_reviewers),
        membership_lookups=lookups,
    )
    return verdict
