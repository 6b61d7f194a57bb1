"""Gem rarity tiers and the streak/session classifiers."""

from enum import Enum

BASE_STREAK_THRESHOLD = 5

_STREAK_MILESTONES = (5, 10, 15, 20)


class Rarity(str, Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


def streak_rarity(length: int) -> Rarity:
    """Rarity for a streak of ``length`` consecutive correct answers."""
    if length >= 20:
        return Rarity.LEGENDARY
    if length >= 15:
        return Rarity.EPIC
    if length >= 10:
        return Rarity.RARE
    return Rarity.COMMON


def session_rarity(accuracy: float) -> Rarity:
    """Rarity for a finished session, from its accuracy in [0, 1]."""
    if accuracy >= 0.90:
        return Rarity.LEGENDARY
    if accuracy >= 0.75:
        return Rarity.EPIC
    if accuracy >= 0.50:
        return Rarity.RARE
    return Rarity.COMMON


def next_streak_threshold(current: int) -> int:
    """
    Next streak length that earns a gem.

    Milestones are 5, 10, 15 and 20, then every further multiple of 5.
    """
    for milestone in _STREAK_MILESTONES:
        if milestone > current:
            return milestone
    return (current // 5 + 1) * 5
