"""Shared configuration and logging for the auto-approval step."""
