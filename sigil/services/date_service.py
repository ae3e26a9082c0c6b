"""
Date calculation and manipulation service.
Handles effective dates, day start time logic, and week/month boundaries.
"""
from datetime import datetime, timedelta, date
from typing import Iterator, Optional, Union

from sigil.exceptions import InvalidTimeFormatException
from sigil.schemas import UserSettings


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def get_effective_date(settings: Optional[UserSettings] = None, now: Optional[datetime] = None) -> date:
        """
        Get the effective current date based on the day_start_time setting.

        If day_start_enabled is True and current time is before day_start_time,
        returns yesterday's date. Otherwise returns today's date.

        Example: If day_start_time = "06:00" and current time is 03:00,
        the effective date is still yesterday because the user hasn't
        started their "new day" yet.

        Args:
            settings: Per-user settings holding the day_start configuration
            now: Current time (defaults to datetime.now())

        Returns:
            Effective date (today or yesterday)
        """
        now = now or datetime.now()
        today = now.date()

        if settings is None or not settings.day_start_enabled:
            return today

        try:
            day_start_hour, day_start_minute = DateService.parse_time(settings.day_start_time or "06:00")
        except InvalidTimeFormatException:
            return today

        current_minutes = now.hour * 60 + now.minute
        start_minutes = day_start_hour * 60 + day_start_minute

        if current_minutes < start_minutes:
            return today - timedelta(days=1)

        return today

    @staticmethod
    def parse_time(time_str: str) -> tuple[int, int]:
        """
        Parse time string into hour and minute.

        Accepts "HH:MM" as well as the compact "HHMM" form.

        Raises:
            InvalidTimeFormatException: If the string is not a valid time of day
        """
        try:
            digits = time_str.replace(":", "").zfill(4)
            hour, minute = int(digits[:2]), int(digits[2:])
        except (ValueError, AttributeError):
            raise InvalidTimeFormatException(str(time_str))

        if len(digits) != 4 or not (0 <= hour < 24 and 0 <= minute < 60):
            raise InvalidTimeFormatException(time_str)
        return hour, minute

    @staticmethod
    def to_date(value: Union[date, datetime, str]) -> date:
        """Normalize a date, datetime or ISO string to a calendar day."""
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        return date.fromisoformat(value[:10])

    @staticmethod
    def week_start(target_date: date) -> date:
        """Monday of the week containing target_date."""
        return target_date - timedelta(days=target_date.weekday())

    @staticmethod
    def week_range(target_date: date) -> tuple[date, date]:
        start = DateService.week_start(target_date)
        return start, start + timedelta(days=6)

    @staticmethod
    def month_range(target_date: date) -> tuple[date, date]:
        """First and last day of the month containing target_date."""
        start = target_date.replace(day=1)
        next_month = (start + timedelta(days=32)).replace(day=1)
        return start, next_month - timedelta(days=1)

    @staticmethod
    def previous_month_range(target_date: date) -> tuple[date, date]:
        last_day = target_date.replace(day=1) - timedelta(days=1)
        return last_day.replace(day=1), last_day

    @staticmethod
    def iter_days(start: date, end: date) -> Iterator[date]:
        """Yield every calendar day from start to end inclusive."""
        current = start
        while current <= end:
            yield current
            current += timedelta(days=1)

    @staticmethod
    def days_between(earlier: date, later: date) -> int:
        return (later - earlier).days
