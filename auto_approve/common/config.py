"""Configuration loader for the auto-approval step.

Reads action inputs and the workflow run context from the environment the
GitHub Actions runner provides.

Exports:
    - ConfigError: Exception for configuration errors
    - _get_env, _int_env, _float_env, _bool_env, _optional_env: Environment helpers
    - ActionConfig: Action inputs (token, environment, error policy)
    - RunContext: Workflow run the step executes in
    - load_action_config: Load action inputs from environment
    - load_run_context: Load the run context from environment
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""


def _get_env(key: str, default: Optional[str] = None, required: bool = False) -> str:
    value = os.getenv(key, default)
    if required and (value is None or value == ""):
        raise ConfigError(f"Missing required environment variable: {key}")
    if value is None:
        raise ConfigError(f"Environment variable {key} is not set and no default provided")
    if value == "" and default is None:
        raise ConfigError(f"Environment variable {key} is empty and no default provided")
    return value


def _int_env(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid int for {key}: {raw}") from exc


def _float_env(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid float for {key}: {raw}") from exc


_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}


def _bool_env(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid boolean for {key}: {raw}")


def _optional_env(key: str) -> Optional[str]:
    value = os.getenv(key)
    if value is None or value == "":
        return None
    return value


# Default values for action inputs
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_REQUEST_TIMEOUT_SEC = 30.0


@dataclass
class ActionConfig:
    """Inputs of the auto-approval action.

    fail_on_error defaults to False: transport failures are logged and the
    step still succeeds, which is what existing workflows rely on.
    """

    github_token: str
    environment: str
    api_url: str
    request_timeout_sec: float
    fail_on_error: bool = False


@dataclass
class RunContext:
    """Workflow run the step is executing in."""

    owner: str
    repo: str
    run_id: int
    actor: str


def load_action_config() -> ActionConfig:
    """Load action inputs from environment variables.

    The token is read from the ``GITHUB_TOKEN`` action input, falling back to a
    plain ``GITHUB_TOKEN`` variable for local runs.

    Raises:
        ConfigError: If required environment variables are missing or invalid.
    """
    token = _optional_env("INPUT_GITHUB_TOKEN") or _optional_env("GITHUB_TOKEN")
    if token is None:
        raise ConfigError("Missing required environment variable: INPUT_GITHUB_TOKEN")

    return ActionConfig(
        github_token=token,
        environment=_get_env("INPUT_ENVIRONMENT", required=True).strip(),
        api_url=_get_env("GITHUB_API_URL", default=DEFAULT_API_URL).rstrip("/"),
        request_timeout_sec=_float_env("INPUT_REQUEST_TIMEOUT", default=DEFAULT_REQUEST_TIMEOUT_SEC),
        fail_on_error=_bool_env("INPUT_FAIL_ON_ERROR", default=False),
    )


def load_run_context() -> RunContext:
    """Load the workflow run context from the runner's default variables."""
    repository = _get_env("GITHUB_REPOSITORY", required=True)
    owner, sep, repo = repository.partition("/")
    if not sep or not owner or not repo:
        raise ConfigError(f"Invalid GITHUB_REPOSITORY (expected owner/repo): {repository}")

    run_id = _int_env("GITHUB_RUN_ID", default=0)
    if run_id <= 0:
        raise ConfigError("Missing required environment variable: GITHUB_RUN_ID")

    return RunContext(
        owner=owner,
        repo=repo,
        run_id=run_id,
        actor=_get_env("GITHUB_ACTOR", required=True),
    )
