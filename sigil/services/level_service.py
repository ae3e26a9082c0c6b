"""
Level calculation service.
Builds the experience threshold table, resolves a total into a level/tier,
and credits tier entry bonuses.
"""
import logging
import math
from bisect import bisect_right
from typing import Sequence
from sqlalchemy.orm import Session

from sigil.constants import (
    TIER_INFO, TIER_POINT_MULTIPLIERS, LEVEL_NAMES, FALLBACK_LEVEL_NAME,
    MAX_LEVEL, BASE_LEVEL_INCREMENT, INCREMENT_INCREASE_BASE,
)
from sigil.repositories.user_state_repository import UserStateRepository
from sigil.schemas import LevelInfo

logger = logging.getLogger("sigil.levels")


def tier_index_for_level(level: int, tiers: Sequence[dict] = TIER_INFO) -> int:
    """Index of the tier containing `level`; out-of-range levels clamp to the first/last tier."""
    for index, tier in enumerate(tiers):
        if tier["min_level"] <= level <= tier["max_level"]:
            return index
    if level > tiers[-1]["max_level"]:
        return len(tiers) - 1
    return 0


def build_level_thresholds(
    tiers: Sequence[dict] = TIER_INFO,
    max_level: int = MAX_LEVEL,
    multipliers: Sequence[float] = TIER_POINT_MULTIPLIERS,
) -> list[int]:
    """
    Build the cumulative experience needed to reach each level.

    thresholds[i] is the total required for level i+1, so thresholds[0] is 0.
    The per-level increment starts at BASE_LEVEL_INCREMENT and grows after
    each level by floor(INCREMENT_INCREASE_BASE * multiplier), where the
    multiplier belongs to the tier of the next level.

    Example:
        [0, 100, 250, 450, ...]
    """
    thresholds = [0]
    points = 0
    increment = BASE_LEVEL_INCREMENT

    for level in range(1, max_level):
        points += increment
        thresholds.append(points)

        tier_index = tier_index_for_level(level + 1, tiers)
        multiplier = multipliers[tier_index] if tier_index < len(multipliers) else 1.0
        increment += math.floor(INCREMENT_INCREASE_BASE * multiplier)

    return thresholds


LEVEL_THRESHOLDS: tuple[int, ...] = tuple(build_level_thresholds())


def resolve_level(total_experience: float, thresholds: Sequence[int] = LEVEL_THRESHOLDS) -> LevelInfo:
    """
    Resolve total experience into level, tier and progress.

    The level is the largest i+1 with thresholds[i] <= total, clamped to
    [1, len(thresholds)]. Negative totals resolve to level 1 with 0% progress.
    At max level progress is 100 and the next-level fields are None.
    """
    max_level = len(thresholds)
    current_level = min(max(bisect_right(thresholds, total_experience), 1), max_level)

    tier = TIER_INFO[tier_index_for_level(current_level)]
    level_name = LEVEL_NAMES[current_level - 1] if current_level <= len(LEVEL_NAMES) else FALLBACK_LEVEL_NAME

    is_max_level = current_level >= max_level
    level_start = thresholds[current_level - 1]

    if is_max_level:
        next_target = None
        points_for_next = None
        progress = 100.0
    else:
        next_target = thresholds[current_level]
        points_for_next = next_target - level_start
        progress = 0.0
        if points_for_next > 0:
            progress = (total_experience - level_start) / points_for_next * 100
            progress = max(0.0, min(progress, 100.0))

    return LevelInfo(
        current_level=current_level,
        level_name=level_name,
        tier_name=tier["name"],
        tier_icon=tier["icon"],
        tier_slug=tier["slug"],
        tier_group=tier["tier_group"],
        welcome_message=tier["welcome_message"],
        progress_percentage=progress,
        current_level_value_start=level_start,
        next_level_value_target=next_target,
        total_accumulated_value=total_experience,
        is_max_level=is_max_level,
        value_towards_next_level=total_experience - level_start,
        points_for_next_level=points_for_next,
    )


class LevelService:
    """Service for level queries and bonus-point balance changes"""

    def __init__(self, db: Session):
        self.db = db
        self.state_repo = UserStateRepository()

    def get_level_info(self, user_id: str) -> LevelInfo:
        state = self.state_repo.load(self.db, user_id)
        return resolve_level(state.total_experience)

    def add_bonus_points(self, user_id: str, amount: float) -> float:
        """Credit `amount` (may be negative) to the bonus accumulator. Returns the new balance."""
        state = self.state_repo.load(self.db, user_id, for_update=True)
        state.bonus_points += amount
        self.state_repo.save_fields(self.db, user_id, state, ["bonus_points"])
        logger.info(f"User {user_id}: bonus {amount:+} -> {state.bonus_points}")
        return state.bonus_points

    def deduct_bonus_points(self, user_id: str, amount: float) -> float:
        """Subtract abs(amount) from the bonus accumulator."""
        return self.add_bonus_points(user_id, -abs(amount))

    def award_tier_entry_bonuses(self, user_id: str) -> int:
        """
        Credit the entry bonus of every reached tier that has not been paid yet.

        Paid tiers are remembered in awardedTierBonuses, so repeated calls
        never pay twice. A credited bonus can lift the user into a further
        tier, which is then paid in the same call.

        Returns:
            Total bonus credited by this call
        """
        state = self.state_repo.load(self.db, user_id, for_update=True)
        awarded = 0
        changed = False

        while True:
            level = resolve_level(state.total_experience).current_level
            pending = [
                tier for tier in TIER_INFO
                if tier["min_level"] <= level and tier["slug"] not in state.awarded_tier_bonuses
            ]
            if not pending:
                break
            changed = True
            for tier in pending:
                state.awarded_tier_bonuses.append(tier["slug"])
                state.bonus_points += tier["tier_entry_bonus"]
                awarded += tier["tier_entry_bonus"]
                if tier["tier_entry_bonus"]:
                    logger.info(f"User {user_id}: entered {tier['name']}, bonus +{tier['tier_entry_bonus']}")

        if changed:
            self.state_repo.save_fields(self.db, user_id, state, ["bonus_points", "awarded_tier_bonuses"])
        return awarded
