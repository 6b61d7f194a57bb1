from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from skillkeep.core.timestamps import utcnow

from .rarity import Rarity


class GemType(str, Enum):
    """What a gem was awarded for."""

    MASTERY = "mastery"
    RECOVERY = "recovery"
    RETENTION = "retention"
    STREAK = "streak"
    SESSION = "session"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def icon(self) -> str:
        return _ICONS.get(self, "✦")


_ICONS = {
    GemType.MASTERY: "💎",
    GemType.RECOVERY: "🔥",
    GemType.RETENTION: "🛡️",
    GemType.STREAK: "⚡",
    GemType.SESSION: "🏆",
}


@dataclass
class GemAward:
    """A gem earned during a session."""

    gem_type: GemType
    rarity: Rarity
    session_id: str
    reason: str
    skill_id: str | None = None  # None for streak and session gems
    skill_name: str | None = None
    awarded_at: datetime = field(default_factory=utcnow)
