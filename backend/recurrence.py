"""Recurrence expansion for calendar event definitions.

Everything here works on calendar dates: datetimes are truncated with
``.date()`` before any comparison, and no time zone is ever consulted.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import FrozenSet, Iterable, List, Optional, Tuple

FREQ_DAILY = 'daily'
FREQ_WEEKLY = 'weekly'
FREQ_MONTHLY = 'monthly'
FREQUENCIES = (FREQ_DAILY, FREQ_WEEKLY, FREQ_MONTHLY)

OVERFLOW_CLAMP = 'clamp'
OVERFLOW_SKIP = 'skip'
OVERFLOW_POLICIES = (OVERFLOW_CLAMP, OVERFLOW_SKIP)


class InvalidWindowError(ValueError):
    """Raised when a window starts after it ends."""


@dataclass(frozen=True)
class EventDefinition:
    id: Optional[int]
    title: str
    start_date: datetime
    end_date: Optional[datetime]
    description: Optional[str] = None
    is_recurring: bool = False
    frequency: Optional[str] = None
    days_of_week: FrozenSet[int] = field(default_factory=frozenset)


@dataclass(frozen=True)
class Occurrence:
    """One calendar day on which an event definition shows up."""
    event_id: Optional[int]
    title: str
    description: Optional[str]
    start_date: datetime
    end_date: Optional[datetime]
    is_recurring: bool
    frequency: Optional[str]
    days_of_week: FrozenSet[int]
    display_date: date

    @classmethod
    def for_day(cls, definition, day_value):
        return cls(
            event_id=definition.id,
            title=definition.title,
            description=definition.description,
            start_date=definition.start_date,
            end_date=definition.end_date,
            is_recurring=definition.is_recurring,
            frequency=definition.frequency,
            days_of_week=definition.days_of_week,
            display_date=day_value,
        )

    def to_dict(self):
        return {
            'id': self.event_id,
            'title': self.title,
            'description': self.description,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'is_recurring': self.is_recurring,
            'frequency': self.frequency,
            'days_of_week': sorted(self.days_of_week),
            'display_date': self.display_date.isoformat(),
        }


def as_day(value) -> Optional[date]:
    """Truncate a date/datetime to its calendar date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def weekday_index(day_value: date) -> int:
    """Weekday with Sunday=0 ... Saturday=6."""
    return (day_value.weekday() + 1) % 7


def _monthly_target_day(anchor_dom, year, month, overflow):
    _, last_dom = calendar.monthrange(year, month)
    if anchor_dom <= last_dom:
        return anchor_dom
    if overflow == OVERFLOW_CLAMP:
        return last_dom
    return None


def _occurs_on(definition, day_value, anchor, overflow):
    freq = (definition.frequency or '').lower()
    if freq == FREQ_DAILY:
        return True
    if freq == FREQ_WEEKLY:
        return weekday_index(day_value) in (definition.days_of_week or ())
    if freq == FREQ_MONTHLY:
        target = _monthly_target_day(anchor.day, day_value.year, day_value.month, overflow)
        return target is not None and day_value.day == target
    # Unknown frequencies never match.
    return False


def expand(definition: EventDefinition, window_start, window_end,
           overflow: str = OVERFLOW_CLAMP) -> List[Occurrence]:
    """
    Expand one event definition into the occurrences inside an inclusive window.

    Non-recurring definitions yield their start day when it falls inside the
    window. Recurring definitions are walked one day at a time from
    ``max(start, window_start)`` to ``min(end, window_end)``. A monthly anchor
    day missing from a month resolves to the month's last day with
    ``overflow='clamp'`` and is dropped with ``overflow='skip'``.
    """
    if overflow not in OVERFLOW_POLICIES:
        raise ValueError(f'Unknown monthly overflow policy: {overflow!r}')
    first = as_day(window_start)
    last = as_day(window_end)
    if first is None or last is None:
        raise InvalidWindowError('Window start and end are required')
    if first > last:
        raise InvalidWindowError(f'Window start {first} is after window end {last}')

    start_day = as_day(definition.start_date)
    if start_day is None:
        return []

    if not definition.is_recurring:
        if first <= start_day <= last:
            return [Occurrence.for_day(definition, start_day)]
        return []

    end_day = as_day(definition.end_date)
    if end_day is not None and end_day < last:
        last = end_day

    occurrences = []
    current = max(start_day, first)
    while current <= last:
        if _occurs_on(definition, current, start_day, overflow) and current >= start_day:
            occurrences.append(Occurrence.for_day(definition, current))
        current += timedelta(days=1)
    return occurrences


def expand_range(definitions: Iterable[EventDefinition], window_start, window_end,
                 overflow: str = OVERFLOW_CLAMP) -> List[Occurrence]:
    """All occurrences of several definitions in one window, ordered by day."""
    occurrences = []
    for definition in definitions:
        occurrences.extend(expand(definition, window_start, window_end, overflow=overflow))
    # sorted() is stable, so same-day entries keep the definitions' order
    return sorted(occurrences, key=lambda occ: occ.display_date)


def month_window(year: int, month_index: int) -> Tuple[datetime, datetime]:
    """First instant and last second of a month; ``month_index`` is 0-based."""
    if not 0 <= month_index <= 11:
        raise ValueError(f'month_index must be between 0 and 11, got {month_index}')
    month = month_index + 1
    _, last_dom = calendar.monthrange(year, month)
    start = datetime.combine(date(year, month, 1), time.min)
    end = datetime.combine(date(year, month, last_dom), time(23, 59, 59))
    return start, end


def shift_month(year: int, month_index: int, delta: int) -> Tuple[int, int]:
    total = year * 12 + month_index + delta
    return total // 12, total % 12


def events_for_month(definitions: Iterable[EventDefinition], year: int, month_index: int,
                     overflow: str = OVERFLOW_CLAMP) -> List[Occurrence]:
    window_start, window_end = month_window(year, month_index)
    return expand_range(definitions, window_start, window_end, overflow=overflow)
