"""
skillkeep: progress persistence and spaced-repetition scheduling.

Tracks a learner's mastery over a graph of skills, schedules re-practice of
mastered skills before they decay, and keeps an append-only, globally ordered
event log with point-in-time snapshots for fast restore.
"""

__version__ = "1.0.0"
