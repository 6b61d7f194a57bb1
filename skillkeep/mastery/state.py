from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MasteryState(str, Enum):
    """A skill's position in the mastery lifecycle."""

    NEW = "new"
    LEARNING = "learning"
    MASTERED = "mastered"
    RUSTY = "rusty"

    @property
    def display_name(self) -> str:
        return self.value.title()


@dataclass
class StateTransition:
    """A mastery state change, for display and audit logging."""

    skill_id: str
    skill_name: str
    from_state: MasteryState
    to_state: MasteryState
    trigger: str  # "prove-complete", "time-decay", "recovery-complete", ...
