"""CLI command modules; importing them registers the commands."""
