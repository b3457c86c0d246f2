"""
Plant holiday calendar used by the planner and the mutation operators.
"""
from datetime import date, timedelta
from typing import Dict, Iterable, Mapping, Optional

from planview.scheduling.models import HolidayDetail, HolidayType


class HolidayCalendar:
    """Read-only date -> HolidayDetail lookup. Only full holidays block production."""

    def __init__(self, holidays: Optional[Mapping[date, HolidayDetail]] = None):
        self._holidays: Dict[date, HolidayDetail] = dict(holidays or {})

    @classmethod
    def from_full_days(cls, days: Iterable[date]) -> "HolidayCalendar":
        return cls({day: HolidayDetail(HolidayType.FULL) for day in days})

    def __contains__(self, day: date) -> bool:
        return day in self._holidays

    def __len__(self) -> int:
        return len(self._holidays)

    def get(self, day: date) -> Optional[HolidayDetail]:
        return self._holidays.get(day)

    def is_full_holiday(self, day: date) -> bool:
        detail = self._holidays.get(day)
        return detail is not None and detail.is_full

    def is_valid_start(self, day: date, today: date) -> bool:
        """A task may start today or later, and never on a full holiday."""
        return day >= today and not self.is_full_holiday(day)

    def next_valid_start(self, day: date, today: date) -> date:
        """First day on or after ``day`` that is neither past nor a full holiday."""
        candidate = max(day, today)
        while self.is_full_holiday(candidate):
            candidate += timedelta(days=1)
        return candidate

    def skip_full_holidays(self, day: date) -> date:
        """First day on or after ``day`` that is not a full holiday."""
        while self.is_full_holiday(day):
            day += timedelta(days=1)
        return day

    def to_dict(self):
        return {day.isoformat(): detail.to_dict() for day, detail in sorted(self._holidays.items())}
