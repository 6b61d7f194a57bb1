"""Session lifecycle wiring between the stores and the learning-state services."""

from .tracker import ProgressTracker, SessionCounters

__all__ = ["ProgressTracker", "SessionCounters"]
