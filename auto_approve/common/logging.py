"""JSON logging for the auto-approval step.

One JSON object per line on stdout. After ``bind_run`` every record also
carries the workflow run it belongs to (``run_id``, ``actor``, ``repository``),
so the fetch, resolve and approve lines of one run can be grouped together.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from auto_approve.common.config import RunContext

# Attributes every LogRecord has; anything else came in through `extra`.
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_run_fields: Dict[str, Any] = {}


def bind_run(context: RunContext) -> None:
    """Attach the run's identity to every record logged from now on."""
    _run_fields.clear()
    _run_fields.update(
        run_id=context.run_id,
        actor=context.actor,
        repository=f"{context.owner}/{context.repo}",
    )


class RunFieldsFilter(logging.Filter):
    """Fill in the bound run fields; values passed via `extra` take precedence."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _run_fields.items():
            record.__dict__.setdefault(key, value)
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update((key, value) for key, value in record.__dict__.items() if key not in _STANDARD_ATTRS)
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _install_handler() -> None:
    root = logging.getLogger()
    if any(isinstance(h.formatter, JsonFormatter) for h in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RunFieldsFilter())
    root.addHandler(handler)
    # The runner sets RUNNER_DEBUG=1 when a job is re-run with debug logging.
    root.setLevel(logging.DEBUG if os.getenv("RUNNER_DEBUG") == "1" else logging.INFO)


def get_logger(name: str) -> logging.Logger:
    _install_handler()
    return logging.getLogger(name)


def log_decision(logger: logging.Logger, *, stage: str, outcome: str, **fields: Any) -> None:
    """Record what a stage decided (``resolve``/``execute``) and why."""
    logger.info(f"{stage}: {outcome}", extra={"stage": stage, "outcome": outcome, **fields})


def log_failure(logger: logging.Logger, message: str, error: Optional[BaseException] = None, **fields: Any) -> None:
    logger.error(message, extra=fields, exc_info=error)
