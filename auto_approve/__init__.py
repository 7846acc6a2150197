"""Deployment auto-approval step for GitHub Actions.

Approves the current workflow run's pending deployment for one environment
when the invoking actor is one of that environment's required reviewers,
either directly or through team membership.

Subpackages:
    - approval: gate fetching, authorization resolution and the approval decision
    - github: REST client and workflow command output
    - common: configuration and logging
"""
