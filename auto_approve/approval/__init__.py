"""Approval stages for one workflow run.

Modules:
    models: Pydantic gate/reviewer models and the verdict/outcome dataclasses
    fetcher: Reads the run's pending deployment gates
    resolver: Decides whether the actor may approve the requested environment
    executor: Approves the matching gates or reports why it cannot
"""
