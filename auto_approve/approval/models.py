"""Models for pending deployment gates and the approval decision.

API payloads are parsed with pydantic; the verdict and outcome produced during
one invocation are plain frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from auto_approve.common.logging import get_logger

logger = get_logger(__name__)


class ReviewerType(str, Enum):
    """Reviewer kinds returned by the pending deployments API."""

    USER = "User"
    TEAM = "Team"


class OutcomeKind(str, Enum):
    """Terminal outcome of one invocation."""

    ENVIRONMENT_NOT_FOUND = "environment_not_found"
    NOT_AUTHORIZED = "not_authorized"
    APPROVED = "approved"


# =============================================================================
# Gate Models
# =============================================================================


class IndividualReviewer(BaseModel):
    """A user listed as a required reviewer."""

    model_config = ConfigDict(frozen=True)

    type: Literal["User"] = "User"
    login: str = Field(..., min_length=1)

    @property
    def display_name(self) -> str:
        return self.login


class GroupReviewer(BaseModel):
    """A team listed as a required reviewer.

    ``slug`` is what the membership endpoint takes; ``name`` is shown to people.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["Team"] = "Team"
    name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1)

    @property
    def display_name(self) -> str:
        return self.name


ReviewerEntry = Annotated[Union[IndividualReviewer, GroupReviewer], Field(discriminator="type")]

_reviewer_adapter: TypeAdapter = TypeAdapter(ReviewerEntry)


def parse_reviewer(item: dict[str, Any]) -> Optional[Union[IndividualReviewer, GroupReviewer]]:
    """Parse one ``{"type": ..., "reviewer": {...}}`` item.

    Returns None for reviewer kinds this step does not understand and for
    entries missing the fields their kind needs; either way the remaining
    reviewers of the gate are still considered.
    """
    reviewer_type = item.get("type") if isinstance(item, dict) else None
    reviewer = item.get("reviewer") if isinstance(item, dict) else None

    if reviewer_type not in (ReviewerType.USER.value, ReviewerType.TEAM.value):
        logger.warning("Skipping unsupported reviewer type", extra={"reviewer_type": reviewer_type})
        return None
    if not isinstance(reviewer, dict):
        logger.warning("Skipping reviewer without details", extra={"reviewer_type": reviewer_type})
        return None

    if reviewer_type == ReviewerType.USER.value:
        fields = {"type": reviewer_type, "login": reviewer.get("login")}
    else:
        fields = {"type": reviewer_type, "name": reviewer.get("name"), "slug": reviewer.get("slug")}

    try:
        return _reviewer_adapter.validate_python(fields)
    except ValidationError as exc:
        logger.warning(
            "Skipping malformed reviewer",
            extra={"reviewer_type": reviewer_type, "errors": exc.error_count()},
        )
        return None


class DeploymentGate(BaseModel):
    """One environment waiting for approval in the current run."""

    model_config = ConfigDict(frozen=True)

    environment_id: int
    environment_name: str
    reviewers: tuple[ReviewerEntry, ...] = ()

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "DeploymentGate":
        """Build a gate from one pending-deployments response item.

        Raises:
            ValidationError: If the environment id or name is missing.
        """
        environment = payload.get("environment") or {}
        reviewers = []
        for item in payload.get("reviewers") or []:
            entry = parse_reviewer(item)
            if entry is not None:
                reviewers.append(entry)

        return cls(
            environment_id=environment.get("id"),
            environment_name=environment.get("name"),
            reviewers=tuple(reviewers),
        )

    def matches(self, environment: str) -> bool:
        return self.environment_name.lower() == environment.lower()


# =============================================================================
# Decision Models
# =============================================================================


@dataclass(frozen=True)
class AuthorizationVerdict:
    """Authorization decision for one invocation.

    ``all_reviewers`` holds each display name once, in the order first seen.
    """

    environment_found: bool
    matched_gate_ids: tuple[int, ...] = ()
    matched_environment_names: tuple[str, ...] = ()
    all_reviewers: tuple[str, ...] = ()
    authorized: bool = False

    @classmethod
    def not_found(cls) -> "AuthorizationVerdict":
        return cls(environment_found=False)

    @property
    def environment_label(self) -> str:
        return ",".join(self.matched_environment_names)


@dataclass(frozen=True)
class ExecutionOutcome:
    """What the decision executor did."""

    kind: OutcomeKind
    environment_ids: tuple[int, ...] = ()
    environment_names: tuple[str, ...] = ()
    reviewers: tuple[str, ...] = ()


@dataclass(frozen=True)
class InvocationResult:
    """Result of a full run: an outcome, or the transport error that stopped it."""

    outcome: Optional[ExecutionOutcome] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def exit_code(self, fail_on_error: bool) -> int:
        """Map the result to a process exit status."""
        if self.ok or not fail_on_error:
            return 0
        return 1
