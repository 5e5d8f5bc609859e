"""Persistence: session log and state files."""
