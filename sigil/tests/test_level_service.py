"""
Tests for level thresholds, level resolution and tier entry bonuses.

Tests cover:
1. Threshold table shape and monotonicity
2. Resolution at and between thresholds
3. Negative totals and max level
4. Tier entry bonus idempotency
"""
import pytest

from sigil.constants import MAX_LEVEL, TIER_INFO
from sigil.services.level_service import (
    LEVEL_THRESHOLDS, LevelService, build_level_thresholds, resolve_level,
)
from sigil.tests.conftest import make_record, store_state


class TestLevelThresholds:
    """Tests for the threshold table builder"""

    def test_table_has_one_entry_per_level(self):
        assert len(LEVEL_THRESHOLDS) == MAX_LEVEL
        assert LEVEL_THRESHOLDS[0] == 0

    def test_first_increments(self):
        """Increment starts at 100 and grows by 50 in the first tier"""
        assert list(LEVEL_THRESHOLDS[:4]) == [0, 100, 250, 450]

    def test_thresholds_strictly_increase(self):
        assert all(b > a for a, b in zip(LEVEL_THRESHOLDS, LEVEL_THRESHOLDS[1:]))

    def test_tier_multiplier_applies_from_next_tier(self):
        """Level 11 is in tier 2, so the increment after level 10 grows by floor(50 * 1.1)"""
        thresholds = build_level_thresholds()
        increment_before = thresholds[10] - thresholds[9]
        increment_after = thresholds[11] - thresholds[10]
        assert increment_after - increment_before == 55


class TestResolveLevel:
    """Tests for resolving total experience into a level"""

    def test_zero_is_level_one(self):
        info = resolve_level(0)
        assert info.current_level == 1
        assert info.level_name == "Ashborn"
        assert info.tier_slug == "unknown-blades"
        assert info.progress_percentage == 0
        assert info.next_level_value_target == 100

    def test_negative_total_clamps_to_level_one(self):
        info = resolve_level(-500)
        assert info.current_level == 1
        assert info.progress_percentage == 0

    def test_exact_threshold_reaches_level(self):
        info = resolve_level(250)
        assert info.current_level == 3
        assert info.current_level_value_start == 250
        assert info.points_for_next_level == 200

    def test_progress_between_thresholds(self):
        info = resolve_level(150)
        assert info.current_level == 2
        assert info.progress_percentage == pytest.approx(100 / 3)
        assert info.value_towards_next_level == 50

    def test_custom_thresholds(self):
        """With thresholds [0,100,200,...] a total of 150 is level 2 at 50%"""
        thresholds = [i * 100 for i in range(100)]
        info = resolve_level(150, thresholds)
        assert info.current_level == 2
        assert info.progress_percentage == 50

    def test_max_level(self):
        info = resolve_level(LEVEL_THRESHOLDS[-1] + 1_000_000)
        assert info.current_level == MAX_LEVEL
        assert info.is_max_level is True
        assert info.progress_percentage == 100
        assert info.next_level_value_target is None
        assert info.points_for_next_level is None
        assert info.level_name == "Endborne"
        assert info.tier_slug == "final-forms"

    @pytest.mark.parametrize("total", [0, 1, 99, 100, 101, 4999, 12345, 77777, 250000])
    def test_resolution_is_consistent_with_table(self, total):
        info = resolve_level(total)
        level = info.current_level
        assert LEVEL_THRESHOLDS[level - 1] <= total
        assert level == MAX_LEVEL or total < LEVEL_THRESHOLDS[level]

    def test_tier_matches_level(self):
        info = resolve_level(LEVEL_THRESHOLDS[10])
        assert info.current_level == 11
        assert info.tier_name == "Vowbreakers"
        assert info.tier_group == 1


class TestTierEntryBonuses:
    """Tests for tier entry bonus crediting"""

    def test_new_user_gets_no_bonus(self, db_session, user_id):
        service = LevelService(db_session)
        assert service.award_tier_entry_bonuses(user_id) == 0

    def test_bonus_paid_once(self, db_session, user_id, today):
        # Enough for level 11 (tier 2) but not for level 21
        store_state(db_session, records=[make_record(today, LEVEL_THRESHOLDS[10], "work")])
        service = LevelService(db_session)

        first = service.award_tier_entry_bonuses(user_id)
        second = service.award_tier_entry_bonuses(user_id)

        assert first == TIER_INFO[1]["tier_entry_bonus"]
        assert second == 0
        state = service.state_repo.load(db_session, user_id)
        assert state.bonus_points == first
        assert "vowbreakers" in state.awarded_tier_bonuses

    def test_deduct_uses_absolute_value(self, db_session, user_id):
        service = LevelService(db_session)
        service.add_bonus_points(user_id, 300)
        assert service.deduct_bonus_points(user_id, -100) == 200
        assert service.deduct_bonus_points(user_id, 50) == 150
