"""GitHub integration.

Modules:
    client: Async REST client for pending deployments and team membership
    workflow_commands: ::warning::/::notice::/::error:: output and the step summary
"""
