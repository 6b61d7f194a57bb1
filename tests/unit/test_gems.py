"""
Unit tests for gem rarity and awards.

Tests:
- Streak and session rarity boundaries
- Streak milestones
- Depth map quartiles and depth-based rarity
- GemService awards and best-effort persistence
"""

import pytest

from skillkeep.errors import EventLogError
from skillkeep.gems import (
    DepthMap,
    GemService,
    GemType,
    Rarity,
    compute_depth_map,
    next_streak_threshold,
    session_rarity,
    streak_rarity,
)
from skillkeep.skillgraph import Skill, SkillGraph


class FakeGemLog:
    def __init__(self, fail=False):
        self.fail = fail
        self.events = []

    def append_gem_event(self, data):
        if self.fail:
            raise EventLogError("database is locked")
        self.events.append(data)
        return len(self.events)

    def gem_counts(self):
        if self.fail:
            raise EventLogError("database is locked")
        counts = {}
        for e in self.events:
            counts[e.gem_type] = counts.get(e.gem_type, 0) + 1
        return counts, len(self.events)


class TestRarityClassifiers:
    """Tests for streak_rarity and session_rarity."""

    @pytest.mark.parametrize(
        "length,expected",
        [
            (0, Rarity.COMMON),
            (9, Rarity.COMMON),
            (10, Rarity.RARE),
            (14, Rarity.RARE),
            (15, Rarity.EPIC),
            (19, Rarity.EPIC),
            (20, Rarity.LEGENDARY),
            (50, Rarity.LEGENDARY),
        ],
    )
    def test_streak_rarity(self, length, expected):
        assert streak_rarity(length) == expected

    @pytest.mark.parametrize(
        "accuracy,expected",
        [
            (0.0, Rarity.COMMON),
            (0.49, Rarity.COMMON),
            (0.50, Rarity.RARE),
            (0.74, Rarity.RARE),
            (0.75, Rarity.EPIC),
            (0.89, Rarity.EPIC),
            (0.90, Rarity.LEGENDARY),
            (1.0, Rarity.LEGENDARY),
        ],
    )
    def test_session_rarity(self, accuracy, expected):
        assert session_rarity(accuracy) == expected

    def test_display_names(self):
        assert Rarity.LEGENDARY.display_name == "Legendary"
        assert GemType.RETENTION.display_name == "Retention"
        assert GemType.MASTERY.icon == "💎"


class TestStreakThresholds:
    @pytest.mark.parametrize(
        "current,expected",
        [(0, 5), (4, 5), (5, 10), (12, 15), (19, 20), (20, 25), (24, 25), (25, 30), (31, 35)],
    )
    def test_next_streak_threshold(self, current, expected):
        assert next_streak_threshold(current) == expected


class TestDepthMap:
    """Tests for compute_depth_map and rarity_for_skill."""

    def test_depths_are_longest_paths(self, skill_graph):
        dm = compute_depth_map(skill_graph)
        assert dict(dm.depths) == {
            "count": 0,
            "add-1": 1,
            "sub-1": 1,
            "add-2": 2,
            "sub-2": 2,
            "add-3": 3,
        }

    def test_quartile_boundaries(self, skill_graph):
        # sorted depths [0, 1, 1, 2, 2, 3] -> indices 1, 3, 4
        assert compute_depth_map(skill_graph).boundaries == (1, 2, 2)

    def test_rarity_by_depth(self, skill_graph):
        dm = compute_depth_map(skill_graph)
        assert dm.rarity_for_skill("count") == Rarity.COMMON
        assert dm.rarity_for_skill("add-1") == Rarity.COMMON
        assert dm.rarity_for_skill("add-2") == Rarity.RARE
        assert dm.rarity_for_skill("add-3") == Rarity.LEGENDARY

    def test_root_skill_is_common(self, skill_graph):
        dm = compute_depth_map(skill_graph)
        for root in skill_graph.roots():
            assert dm.rarity_for_skill(root.id) == Rarity.COMMON

    def test_unknown_skill_is_depth_zero(self, skill_graph):
        dm = compute_depth_map(skill_graph)
        assert dm.depth("nope") == 0
        assert dm.rarity_for_skill("nope") == Rarity.COMMON

    def test_long_chain_spreads_over_all_tiers(self):
        chain = [Skill("s0", "S0")] + [Skill(f"s{i}", f"S{i}", (f"s{i - 1}",)) for i in range(1, 8)]
        dm = compute_depth_map(SkillGraph(chain))
        # depths 0..7 -> boundaries (2, 4, 6)
        assert dm.boundaries == (2, 4, 6)
        assert dm.rarity_for_skill("s2") == Rarity.COMMON
        assert dm.rarity_for_skill("s3") == Rarity.RARE
        assert dm.rarity_for_skill("s5") == Rarity.EPIC
        assert dm.rarity_for_skill("s7") == Rarity.LEGENDARY

    def test_empty_graph(self):
        dm = compute_depth_map(SkillGraph([]))
        assert dm.boundaries == (0, 0, 0)
        assert dm.rarity_for_skill("anything") == Rarity.COMMON

    def test_depth_map_is_read_only(self, skill_graph):
        dm = compute_depth_map(skill_graph)
        with pytest.raises(TypeError):
            dm.depths["count"] = 9
        with pytest.raises(AttributeError):
            dm.boundaries = (0, 0, 0)

    def test_default_depth_map(self):
        assert DepthMap().rarity_for_skill("x") == Rarity.COMMON


class TestGemService:
    """Tests for GemService."""

    def test_award_mastery_uses_depth_rarity(self, skill_graph):
        log = FakeGemLog()
        service = GemService(skill_graph, log)

        award = service.award_mastery("add-3", "s-1")

        assert award.gem_type == GemType.MASTERY
        assert award.rarity == Rarity.LEGENDARY
        assert award.skill_name == "3-Digit Addition"
        assert award.reason == "Mastered 3-Digit Addition"
        assert log.events[0].gem_type == "mastery"
        assert log.events[0].rarity == "legendary"
        assert log.events[0].skill_id == "add-3"

    def test_streak_and_session_gems_have_no_skill(self, skill_graph):
        log = FakeGemLog()
        service = GemService(skill_graph, log)

        streak = service.award_streak(15, "s-1")
        session = service.award_session(0.8, "s-1")

        assert streak.rarity == Rarity.EPIC
        assert streak.reason == "15 correct in a row!"
        assert session.rarity == Rarity.EPIC
        assert session.reason == "Session complete (80% accuracy)"
        assert all(e.skill_id is None for e in log.events)

    def test_session_gems_and_reset(self, skill_graph):
        service = GemService(skill_graph)
        service.award_recovery("add-1", "s-1")
        service.award_retention("add-2", "s-1")
        assert [g.gem_type for g in service.session_gems] == [GemType.RECOVERY, GemType.RETENTION]

        service.reset_session()
        assert service.session_gems == []

    def test_persistence_failure_still_awards(self, skill_graph):
        service = GemService(skill_graph, FakeGemLog(fail=True))

        award = service.award_mastery("count", "s-1")

        assert award.rarity == Rarity.COMMON
        assert len(service.session_gems) == 1

    def test_snapshot_data_from_log(self, skill_graph):
        service = GemService(skill_graph, FakeGemLog())
        service.award_mastery("count", "s-1")
        service.award_streak(5, "s-1")
        service.award_streak(10, "s-1")

        data = service.snapshot_data()
        assert data.total_count == 3
        assert data.count_by_type == {"mastery": 1, "streak": 2}

    def test_snapshot_data_unreadable_log(self, skill_graph):
        assert GemService(skill_graph, FakeGemLog(fail=True)).snapshot_data() is None

    def test_snapshot_data_without_log(self, skill_graph):
        service = GemService(skill_graph)
        service.award_session(1.0, "s-1")
        data = service.snapshot_data()
        assert data.total_count == 1
        assert data.count_by_type == {"session": 1}
