"""Training cadence — which calendar days are active and their slot index.

A cadence is a number of active days per week, each mapped to a fixed set of
weekdays (Monday = 0). The slot index of an active day is its zero-based
ordinal among the active days since the plan started, and the slot index
picks the day's tag out of the split's rotation.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator, Optional

from fitarc.services.keys import normalize_key

ACTIVE_WEEKDAYS: dict[int, frozenset[int]] = {
    3: frozenset({0, 2, 4}),  # Mon / Wed / Fri
    4: frozenset({0, 1, 3, 5}),  # Mon / Tue / Thu / Sat
    5: frozenset({0, 1, 2, 3, 4}),  # Mon - Fri
    6: frozenset({0, 1, 2, 3, 4, 5}),  # Mon - Sat
}

SPLIT_TAGS: dict[str, tuple[str, ...]] = {
    "push_pull_legs": ("push", "pull", "legs"),
    "upper_lower": ("upper", "lower"),
    "bro_split": ("chest", "back", "shoulders", "arms", "legs"),
    "full_body": ("full_body",),
}

SPLIT_DAYS_PER_WEEK: dict[str, int] = {
    "full_body": 3,
    "upper_lower": 4,
    "push_pull_legs": 5,
    "bro_split": 5,
}

DEFAULT_CADENCE = 3


def infer_days_per_week(split: Optional[str]) -> int:
    """Usual cadence of a split; unknown splits train five days, no split three."""
    return SPLIT_DAYS_PER_WEEK.get(normalize_key(split), 5 if split else DEFAULT_CADENCE)


def resolve_cadence(split: Optional[str], days_per_week: Optional[int] = None) -> int:
    """Explicit days-per-week if supported, else the split's usual cadence."""
    if days_per_week in ACTIVE_WEEKDAYS:
        return days_per_week
    return infer_days_per_week(split)


def split_tags(split: Optional[str]) -> tuple[str, ...]:
    return SPLIT_TAGS.get(normalize_key(split), SPLIT_TAGS["full_body"])


def _weekdays(cadence: int) -> frozenset[int]:
    try:
        return ACTIVE_WEEKDAYS[cadence]
    except KeyError:
        raise ValueError(f"Unsupported cadence: {cadence} days per week") from None


def is_active_day(start_date: date, cadence: int, day: date) -> bool:
    if day < start_date:
        return False
    return day.weekday() in _weekdays(cadence)


def _active_days_through(start_date: date, cadence: int, day: date) -> int:
    """Count active days in [start_date, day]."""
    weekdays = _weekdays(cadence)
    span = (day - start_date).days + 1
    full_weeks, remainder = divmod(span, 7)
    count = full_weeks * len(weekdays)
    first = start_date.weekday()
    count += sum(1 for offset in range(remainder) if (first + offset) % 7 in weekdays)
    return count


def slot_index(start_date: date, cadence: int, day: date) -> Optional[int]:
    """Zero-based ordinal of ``day`` among active days since ``start_date``.

    None when the day precedes the start or is not an active day.
    """
    if not is_active_day(start_date, cadence, day):
        return None
    return _active_days_through(start_date, cadence, day) - 1


def tag_for_slot(split: Optional[str], index: int) -> str:
    tags = split_tags(split)
    return tags[index % len(tags)]


def iter_dates(first: date, last: date) -> Iterator[date]:
    cursor = first
    while cursor <= last:
        yield cursor
        cursor += timedelta(days=1)


def active_dates(start_date: date, cadence: int, first: date, last: date) -> list[date]:
    return [d for d in iter_dates(first, last) if is_active_day(start_date, cadence, d)]
