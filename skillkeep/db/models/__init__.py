# SQLAlchemy models
from .base import Base, JSONDocument, UTCDateTime
from .events import AnswerEvent, EventColumns, GemEvent, MasteryEvent, SessionEvent
from .sequence import GlobalSequence
from .snapshot import Snapshot

__all__ = [
    # Base
    "Base",
    "JSONDocument",
    "UTCDateTime",
    # Ordering
    "GlobalSequence",
    # Events
    "EventColumns",
    "MasteryEvent",
    "AnswerEvent",
    "GemEvent",
    "SessionEvent",
    # Snapshots
    "Snapshot",
]
