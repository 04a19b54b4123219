"""
Streak computation - pure functions over sets of completion dates.

Dates are ISO strings (YYYY-MM-DD). Anything that does not parse is ignored
rather than raising, so a malformed row never breaks a streak display.
"""

from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence, Set

SATURDAY = 5


def parse_iso_date(value: str) -> Optional[date]:
    """Best-effort parse of a YYYY-MM-DD string"""
    try:
        return date.fromisoformat(str(value)[:10])
    except (TypeError, ValueError):
        return None


def unique_dates(completed_dates: Iterable[str]) -> Set[date]:
    """Deduplicated set of the parseable dates"""
    parsed = (parse_iso_date(d) for d in completed_dates)
    return {d for d in parsed if d is not None}


def current_streak(completed_dates: Iterable[str], today: Optional[date] = None) -> int:
    """
    Length of the run of consecutive days ending today or yesterday.

    A streak whose last completion was yesterday still counts, so a habit can
    be toggled off and on again before the day ends without losing its streak.
    """
    today = today or date.today()
    yesterday = today - timedelta(days=1)

    days = sorted((d for d in unique_dates(completed_dates) if d <= today), reverse=True)
    if not days:
        return 0
    if days[0] != today and days[0] != yesterday:
        return 0

    streak = 1
    previous = days[0]
    for day in days[1:]:
        if day != previous - timedelta(days=1):
            break
        streak += 1
        previous = day
    return streak


def streak_segments(completed_dates: Iterable[str]) -> List[int]:
    """Every maximal run of consecutive days in the full history, oldest first"""
    days = sorted(unique_dates(completed_dates))
    if not days:
        return []

    segments = []
    run = 1
    for previous, current in zip(days, days[1:]):
        if (current - previous).days == 1:
            run += 1
        else:
            segments.append(run)
            run = 1
    segments.append(run)
    return segments


def longest_streak(completed_dates: Iterable[str]) -> int:
    return max(streak_segments(completed_dates), default=0)


def repeat_count(segments: Sequence[int], threshold: int) -> int:
    """How many times a streak of `threshold` days fits into the segments"""
    if threshold <= 0:
        return 0
    return sum(length // threshold for length in segments)


def weekend_pairs(completed_dates: Iterable[str]) -> int:
    """Number of Saturdays whose following Sunday is also completed"""
    days = unique_dates(completed_dates)
    return sum(
        1 for day in days
        if day.weekday() == SATURDAY and day + timedelta(days=1) in days
    )
