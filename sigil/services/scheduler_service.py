"""
Background scheduler for the daily sweep.
Once a day, for every stored user:
- Penalties for overdue pacts, broken dark streaks and consistency breaches
- Goal evaluation for every task with a goal
- Streak milestone crystals, tier entry bonuses and achievements
Every step is idempotent, so a repeated or late run never pays or charges twice.
"""
import logging
import os
from datetime import date
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from sigil.constants import DEFAULT_SWEEP_TIME
from sigil.database import SessionLocal
from sigil.repositories.user_state_repository import UserStateRepository
from sigil.services.achievement_service import AchievementService
from sigil.services.date_service import DateService
from sigil.services.goal_service import GoalService
from sigil.services.level_service import LevelService
from sigil.services.penalty_service import PenaltyService

logger = logging.getLogger("sigil.scheduler")

SWEEP_TIME = os.getenv("SIGIL_SWEEP_TIME", DEFAULT_SWEEP_TIME)

scheduler = AsyncIOScheduler()


def sweep_user(db: Session, user_id: str, today: Optional[date] = None) -> dict:
    """Run every daily check for one user. Returns a summary of what changed."""
    state = UserStateRepository.load(db, user_id)
    today = today or DateService.get_effective_date(state.settings)

    penalties = PenaltyService(db)
    goals = GoalService(db)

    summary = {
        "pacts": len(penalties.check_overdue_pacts(user_id, today)),
        "dark_streaks": len(penalties.check_dark_streaks(user_id, today)),
        "consistency": penalties.check_consistency(user_id, today) is not None,
        "goals": 0,
    }

    for task in state.task_definitions:
        if task.goal is None:
            continue
        result = goals.evaluate_last_completed_period(user_id, task.id, today)
        if result is not None and not result.already_evaluated:
            summary["goals"] += 1

    summary["crystals"] = penalties.check_streak_milestones(user_id, today)
    summary["tier_bonus"] = LevelService(db).award_tier_entry_bonuses(user_id)
    summary["achievements"] = AchievementService(db).check_achievements(user_id, today)
    return summary


def run_daily_sweep() -> None:
    """Sweep all users; a failure for one user is logged and does not stop the rest."""
    db = SessionLocal()
    try:
        user_ids = UserStateRepository.list_user_ids(db)
        logger.info(f"Daily sweep started for {len(user_ids)} users")
        for user_id in user_ids:
            try:
                summary = sweep_user(db, user_id)
                logger.info(f"Sweep {user_id}: {summary}")
            except Exception as e:
                db.rollback()
                logger.error(f"Scheduler Error (sweep {user_id}): {e}")
    finally:
        db.close()


async def run_scheduled_sweep():
    run_daily_sweep()


def start_scheduler():
    """Start the scheduler with the daily sweep job"""
    if not scheduler.running:
        hour, minute = DateService.parse_time(SWEEP_TIME)
        scheduler.add_job(
            run_scheduled_sweep,
            CronTrigger(hour=hour, minute=minute),
            id="daily_sweep",
            replace_existing=True
        )
        scheduler.start()
        logger.info(f"APScheduler started, daily sweep at {hour:02d}:{minute:02d}")


def stop_scheduler():
    """Stop the scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("APScheduler stopped")
