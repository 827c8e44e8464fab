"""
RANGE SEGMENTER
Turn a validated date range into an ordered list of fetch units.

RULES:
- Short ranges (<= daily threshold days): one unit per day, Sundays skipped
- Long ranges: Monday–Saturday week slices, last slice capped at range end
- Pure: same range in, same units out
"""

from datetime import date, timedelta
from typing import List

from order_harvest.domain.models import DateRange, FetchUnit
from order_harvest.utils.dates import SUNDAY

DEFAULT_DAILY_MAX_DAYS = 7


class RangeSegmenter:
    """Daily/weekly segmentation policy for order queries."""

    def __init__(self, daily_max_days: int = DEFAULT_DAILY_MAX_DAYS):
        if daily_max_days < 1:
            raise ValueError("daily_max_days must be >= 1")
        self.daily_max_days = daily_max_days

    def segment(self, date_range: DateRange) -> List[FetchUnit]:
        if date_range.day_count <= self.daily_max_days:
            return self._daily_units(date_range)
        return self._weekly_units(date_range)

    @staticmethod
    def _daily_units(date_range: DateRange) -> List[FetchUnit]:
        units: List[FetchUnit] = []
        current = date_range.start
        while current <= date_range.end:
            if current.weekday() != SUNDAY:
                units.append(FetchUnit(date_from=current, date_to=current))
            current += timedelta(days=1)
        return units

    @staticmethod
    def _weekly_units(date_range: DateRange) -> List[FetchUnit]:
        units: List[FetchUnit] = []
        cursor = date_range.start
        while cursor <= date_range.end:
            monday = _segment_monday(cursor)
            saturday = monday + timedelta(days=5)
            capped = min(saturday, date_range.end)
            if monday <= capped:
                units.append(FetchUnit(date_from=monday, date_to=capped))
            cursor = saturday + timedelta(days=1)
        return units


def _segment_monday(cursor: date) -> date:
    # A Sunday cursor starts the following week instead of reaching back
    if cursor.weekday() == SUNDAY:
        return cursor + timedelta(days=1)
    return cursor - timedelta(days=cursor.weekday())


def segment(date_range: DateRange, daily_max_days: int = DEFAULT_DAILY_MAX_DAYS) -> List[FetchUnit]:
    return RangeSegmenter(daily_max_days).segment(date_range)
