"""
Fluency scoring.

Fluency = 0.6 * accuracy + 0.2 * speed + 0.2 * consistency, each clamped to
[0, 1]. Speed is the rolling average of recent per-answer speed scores;
consistency is the current streak relative to a cap.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_SPEED_WINDOW = 10
DEFAULT_STREAK_CAP = 8
NEUTRAL_SPEED = 0.5


def _clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))


@dataclass
class FluencyMetrics:
    """Raw inputs for the fluency score."""

    speed_scores: list[float] = field(default_factory=list)
    speed_window: int = DEFAULT_SPEED_WINDOW
    streak: int = 0
    streak_cap: int = DEFAULT_STREAK_CAP

    def record_speed(self, score: float) -> None:
        """Add a speed score, keeping only the last ``speed_window`` values."""
        self.speed_scores.append(score)
        window = self.speed_window if self.speed_window > 0 else DEFAULT_SPEED_WINDOW
        if len(self.speed_scores) > window:
            del self.speed_scores[:-window]

    @property
    def average_speed(self) -> float:
        if not self.speed_scores:
            return NEUTRAL_SPEED
        return sum(self.speed_scores) / len(self.speed_scores)


def consistency_score(streak: int, cap: int) -> float:
    if cap <= 0:
        return 0.0
    if streak >= cap:
        return 1.0
    return streak / cap


def fluency_score(metrics: FluencyMetrics, accuracy: float) -> float:
    """Combined fluency score in [0, 1]."""
    speed = metrics.average_speed
    consistency = consistency_score(metrics.streak, metrics.streak_cap)
    score = 0.6 * _clamp(accuracy) + 0.2 * _clamp(speed) + 0.2 * _clamp(consistency)
    return _clamp(score)
