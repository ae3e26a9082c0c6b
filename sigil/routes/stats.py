"""
Statistics, level, achievement and settings HTTP routes.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional

from sigil.auth import verify_api_key
from sigil.database import get_db
from sigil.schemas import (
    AchievementStatus, BonusAdjust, DailyTotal, DashboardResponse, LevelInfo,
    SettingsUpdate, TaskDistributionEntry, UserSettings, WeekdayEntry,
    WeeklyRollupEntry, WeekStats,
)
from sigil.services.achievement_service import AchievementService
from sigil.services.level_service import LevelService
from sigil.services.settings_service import SettingsService
from sigil.services.stats_service import StatsService

router = APIRouter(prefix="/api/users/{user_id}", tags=["stats"],
                   dependencies=[Depends(verify_api_key)])


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(user_id: str, db: Session = Depends(get_db)):
    """Level, streak, consistency and recent total in one call."""
    return StatsService(db).get_dashboard(user_id)


@router.get("/level", response_model=LevelInfo)
def get_level(user_id: str, db: Session = Depends(get_db)):
    return LevelService(db).get_level_info(user_id)


@router.get("/stats/aggregate")
def get_aggregate(
    user_id: str,
    start: date,
    end: date,
    task_id: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return {"total": StatsService(db).aggregate(user_id, start, end, task_id)}


@router.get("/stats/yearly")
def get_yearly(
    user_id: str,
    year: int = Query(..., ge=1970, le=9999),
    task_id: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return {"year": year, "total": StatsService(db).yearly(user_id, year, task_id)}


@router.get("/stats/distribution", response_model=List[TaskDistributionEntry])
def get_task_distribution(
    user_id: str,
    start: date,
    end: date,
    task_id: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return StatsService(db).distribution_by_task(user_id, start, end, task_id)


@router.get("/stats/weekdays", response_model=List[WeekdayEntry])
def get_weekday_distribution(
    user_id: str,
    start: date,
    end: date,
    task_id: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return StatsService(db).distribution_by_weekday(user_id, start, end, task_id)


@router.get("/stats/weekly", response_model=List[WeeklyRollupEntry])
def get_weekly_rollup(
    user_id: str,
    weeks: int = Query(4, ge=1, le=104),
    task_id: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return StatsService(db).weekly_rollup(user_id, weeks, task_id)


@router.get("/stats/completed-week", response_model=WeekStats)
def get_completed_week(
    user_id: str,
    offset: int = Query(0, ge=0, le=520),
    task_id: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Total for a completed week; offset 0 is last week."""
    return StatsService(db).completed_week(user_id, offset, task_id)


@router.get("/stats/daily", response_model=List[DailyTotal])
def get_daily_totals(
    user_id: str,
    start: date,
    end: date,
    task_id: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Per-day totals with contribution levels."""
    return StatsService(db).daily_totals(user_id, start, end, task_id)


@router.get("/achievements", response_model=List[AchievementStatus])
def list_achievements(user_id: str, db: Session = Depends(get_db)):
    return AchievementService(db).list_achievements(user_id)


@router.post("/achievements/check")
def check_achievements(user_id: str, db: Session = Depends(get_db)):
    return {"unlocked": AchievementService(db).check_achievements(user_id)}


@router.post("/bonus/tier-entry")
def award_tier_entry_bonuses(user_id: str, db: Session = Depends(get_db)):
    """Credit entry bonuses for newly reached tiers."""
    return {"awarded": LevelService(db).award_tier_entry_bonuses(user_id)}


@router.post("/bonus/deduct")
def deduct_bonus_points(user_id: str, body: BonusAdjust, db: Session = Depends(get_db)):
    return {"bonusPoints": LevelService(db).deduct_bonus_points(user_id, body.amount)}


@router.get("/settings", response_model=UserSettings)
def get_settings(user_id: str, db: Session = Depends(get_db)):
    return SettingsService(db).get(user_id)


@router.put("/settings", response_model=UserSettings)
def update_settings(user_id: str, settings: SettingsUpdate, db: Session = Depends(get_db)):
    return SettingsService(db).update(user_id, settings)
