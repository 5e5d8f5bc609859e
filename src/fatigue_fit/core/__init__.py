"""Pure load, recovery and recommendation engines."""
