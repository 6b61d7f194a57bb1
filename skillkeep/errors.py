"""
Exception hierarchy for skillkeep.

Storage failures always propagate to the caller; data-quality problems found
while restoring a snapshot are handled locally and never surface here.
"""

from __future__ import annotations


class SkillkeepError(Exception):
    """Base class for all skillkeep errors."""


class StorageError(SkillkeepError):
    """A durable-storage call failed."""


class SequenceError(StorageError):
    """The global sequence counter could not be advanced."""


class SnapshotStoreError(StorageError):
    """A snapshot could not be saved, loaded or pruned."""


class EventLogError(StorageError):
    """An event could not be appended to or read from the event log."""


class SkillGraphError(SkillkeepError):
    """The skill catalog is malformed (unknown prerequisite, cycle, bad file)."""
