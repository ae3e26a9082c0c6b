"""
Record aggregation.
Pure functions over a list of records: range sums, lifetime and yearly totals,
distributions, weekly rollups and contribution intensity.

All functions work at calendar-day granularity and return identity results
(0 or an empty list) for empty input. None of them touch the database.
"""
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence

from sigil.constants import (
    VALUE_THRESHOLDS, MAX_CONTRIBUTION_LEVEL, WEEKDAY_LABELS,
    UNASSIGNED_TASK_NAME, UNASSIGNED_TASK_COLOR,
)
from sigil.schemas import (
    RecordEntry, TaskDefinition, TaskDistributionEntry, WeekdayEntry,
    WeeklyRollupEntry, WeekStats, DailyTotal,
)
from sigil.services.date_service import DateService


def matches_task(record: RecordEntry, task_id: Optional[str]) -> bool:
    return task_id is None or record.task_type == task_id


def records_in_range(records: Iterable[RecordEntry], start: date, end: date) -> List[RecordEntry]:
    """Records dated within [start, end], both ends inclusive."""
    start, end = DateService.to_date(start), DateService.to_date(end)
    return [r for r in records if start <= r.date <= end]


def aggregate_sum(records: Iterable[RecordEntry], start: date, end: date, task_id: Optional[str] = None) -> float:
    return sum(r.value for r in records_in_range(records, start, end) if matches_task(r, task_id))


def lifetime_sum(records: Iterable[RecordEntry], task_id: Optional[str] = None) -> float:
    return sum(r.value for r in records if matches_task(r, task_id))


def yearly_sum(records: Iterable[RecordEntry], year: int, task_id: Optional[str] = None) -> float:
    return aggregate_sum(records, date(year, 1, 1), date(year, 12, 31), task_id)


def distribution_by_task(
    records: Iterable[RecordEntry],
    start: date,
    end: date,
    task_definitions: Sequence[TaskDefinition],
    task_id: Optional[str] = None,
) -> List[TaskDistributionEntry]:
    """
    Sum record values per task within [start, end].

    Records without a task, or pointing at a task that no longer exists,
    are grouped under "Unassigned". Groups keep first-seen order.
    """
    tasks = {t.id: t for t in task_definitions}
    groups: dict = {}

    for record in records_in_range(records, start, end):
        if not matches_task(record, task_id):
            continue
        task = tasks.get(record.task_type) if record.task_type else None
        key = task.id if task else None
        if key not in groups:
            groups[key] = TaskDistributionEntry(
                task_name=task.name if task else UNASSIGNED_TASK_NAME,
                value=0,
                color=task.color if task else UNASSIGNED_TASK_COLOR,
            )
        groups[key].value += record.value

    return list(groups.values())


def distribution_by_weekday(
    records: Iterable[RecordEntry], start: date, end: date, task_id: Optional[str] = None
) -> List[WeekdayEntry]:
    """Totals per weekday, Sunday first. Always seven entries."""
    totals = [0.0] * 7
    for record in records_in_range(records, start, end):
        if matches_task(record, task_id):
            # date.weekday() is Monday=0; shift so Sunday=0
            totals[(record.date.weekday() + 1) % 7] += record.value
    return [WeekdayEntry(day=label, total=total) for label, total in zip(WEEKDAY_LABELS, totals)]


def week_label(week_start: date) -> str:
    """Short label such as 'Oct 5'."""
    return f"{week_start.strftime('%b')} {week_start.day}"


def weekly_rollup(
    records: Iterable[RecordEntry], number_of_weeks: int, today: date, task_id: Optional[str] = None
) -> List[WeeklyRollupEntry]:
    """
    Totals for the last `number_of_weeks` Monday-start weeks, oldest first.
    The current week only counts records up to today.
    """
    records = list(records)
    current_week_start = DateService.week_start(today)
    rollup = []

    for offset in range(number_of_weeks - 1, -1, -1):
        week_start = current_week_start - timedelta(weeks=offset)
        week_end = min(week_start + timedelta(days=6), today)
        rollup.append(WeeklyRollupEntry(
            week_label=week_label(week_start),
            week_start=week_start,
            value=aggregate_sum(records, week_start, week_end, task_id),
        ))

    return rollup


def completed_week_stats(
    records: Iterable[RecordEntry], week_offset: int, today: date, task_id: Optional[str] = None
) -> WeekStats:
    """Total for the completed week `week_offset + 1` weeks before the current one."""
    start = DateService.week_start(today) - timedelta(weeks=week_offset + 1)
    end = start + timedelta(days=6)
    return WeekStats(total=aggregate_sum(records, start, end, task_id), start_date=start, end_date=end)


def contribution_level(value: Optional[float], thresholds: Optional[Sequence[float]] = None) -> int:
    """
    Map a day's value to an intensity level 0..MAX_CONTRIBUTION_LEVEL.

    Custom thresholds are used only when exactly four are given.
    """
    if value is None or value <= 0:
        return 0

    limits = thresholds if thresholds and len(thresholds) == 4 else VALUE_THRESHOLDS
    for index, limit in enumerate(limits):
        if value <= limit:
            return index + 1
    return MAX_CONTRIBUTION_LEVEL


def daily_totals(
    records: Iterable[RecordEntry],
    start: date,
    end: date,
    task_definitions: Sequence[TaskDefinition] = (),
    task_id: Optional[str] = None,
) -> List[DailyTotal]:
    """Per-day totals with contribution level for every day in [start, end]."""
    sums = defaultdict(float)
    for record in records_in_range(records, start, end):
        if matches_task(record, task_id):
            sums[record.date] += record.value

    thresholds = None
    if task_id is not None:
        task = next((t for t in task_definitions if t.id == task_id), None)
        thresholds = task.intensity_thresholds if task else None

    return [
        DailyTotal(date=day, value=sums[day], level=contribution_level(sums[day], thresholds))
        for day in DateService.iter_days(DateService.to_date(start), DateService.to_date(end))
    ]
