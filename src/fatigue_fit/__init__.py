"""fatigue-fit: per-muscle fatigue and recovery tracking."""

__version__ = "0.1.0"
