from datetime import date, datetime, timedelta

import pytest

from backend.recurrence import (
    EventDefinition,
    InvalidWindowError,
    events_for_month,
    expand,
    expand_range,
    month_window,
    shift_month,
    weekday_index,
)
from services.validation_service import parse_days_of_week


def make_event(start, end, recurring=False, frequency=None, days=(), event_id=1, title='Standup'):
    return EventDefinition(
        id=event_id,
        title=title,
        description=None,
        start_date=start,
        end_date=end,
        is_recurring=recurring,
        frequency=frequency,
        days_of_week=frozenset(days),
    )


def display_dates(occurrences):
    return [occ.display_date for occ in occurrences]


def test_one_time_event_inside_month_yields_single_occurrence():
    event = make_event(datetime(2024, 3, 10, 9, 30), datetime(2024, 3, 10, 10, 30))
    start, end = month_window(2024, 2)

    occurrences = expand(event, start, end)

    assert display_dates(occurrences) == [date(2024, 3, 10)]
    assert occurrences[0].event_id == 1
    assert occurrences[0].title == 'Standup'
    assert occurrences[0].start_date == datetime(2024, 3, 10, 9, 30)


def test_one_time_event_outside_window_yields_nothing():
    event = make_event(datetime(2024, 4, 1, 8, 0), datetime(2024, 4, 1, 9, 0))
    start, end = month_window(2024, 2)
    assert expand(event, start, end) == []


def test_one_time_event_late_on_last_day_is_included():
    event = make_event(datetime(2024, 3, 31, 23, 30), datetime(2024, 4, 1, 1, 0))
    start, end = month_window(2024, 2)
    assert display_dates(expand(event, start, end)) == [date(2024, 3, 31)]


def test_weekly_mon_wed_fri_in_leap_february():
    event = make_event(datetime(2024, 1, 15), datetime(2024, 12, 31), True, 'weekly', {1, 3, 5})
    start, end = month_window(2024, 1)

    dates = display_dates(expand(event, start, end))

    assert dates == [date(2024, 2, d) for d in (2, 5, 7, 9, 12, 14, 16, 19, 21, 23, 26, 28)]
    assert all(weekday_index(d) in {1, 3, 5} for d in dates)


def test_weekly_emits_every_matching_day_on_or_after_start():
    event = make_event(datetime(2024, 2, 14, 18, 0), datetime(2024, 3, 31), True, 'weekly', {0, 3})
    dates = display_dates(expand(event, date(2024, 2, 1), date(2024, 2, 29)))
    assert dates == [date(2024, 2, 14), date(2024, 2, 18), date(2024, 2, 21), date(2024, 2, 25), date(2024, 2, 28)]


def test_weekly_with_empty_days_string_yields_nothing():
    event = make_event(datetime(2024, 1, 1), datetime(2024, 12, 31), True, 'weekly',
                       parse_days_of_week(''))
    start, end = month_window(2024, 5)
    assert expand(event, start, end) == []


def test_daily_count_matches_overlap_of_ranges():
    event = make_event(datetime(2024, 1, 15), datetime(2024, 2, 10, 12, 0), True, 'daily')
    start, end = month_window(2024, 1)

    dates = display_dates(expand(event, start, end))

    assert len(dates) == 10
    assert dates[0] == date(2024, 2, 1)
    assert dates[-1] == date(2024, 2, 10)


def test_daily_starting_mid_window_ignores_time_of_day():
    event = make_event(datetime(2024, 2, 20, 14, 30), datetime(2024, 3, 31), True, 'daily')
    dates = display_dates(expand(event, date(2024, 2, 1), date(2024, 2, 29)))
    assert dates == [date(2024, 2, 20) + timedelta(days=i) for i in range(10)]


def test_daily_starting_after_window_yields_nothing():
    event = make_event(datetime(2024, 3, 5), datetime(2024, 3, 30), True, 'daily')
    start, end = month_window(2024, 1)
    assert expand(event, start, end) == []


def test_daily_ended_before_window_yields_nothing():
    event = make_event(datetime(2024, 1, 1), datetime(2024, 1, 31), True, 'daily')
    start, end = month_window(2024, 1)
    assert expand(event, start, end) == []


def test_monthly_matches_anchor_day_once_per_month():
    event = make_event(datetime(2024, 1, 15), datetime(2024, 6, 30), True, 'monthly')
    dates = display_dates(expand(event, date(2024, 1, 1), date(2024, 12, 31)))
    assert dates == [date(2024, m, 15) for m in range(1, 7)]


def test_monthly_anchor_31_clamps_to_leap_day():
    event = make_event(datetime(2024, 1, 31), datetime(2024, 12, 31), True, 'monthly')
    start, end = month_window(2024, 1)
    assert display_dates(expand(event, start, end)) == [date(2024, 2, 29)]


def test_monthly_anchor_31_skip_policy_drops_short_month():
    event = make_event(datetime(2024, 1, 31), datetime(2024, 12, 31), True, 'monthly')
    start, end = month_window(2024, 1)
    assert expand(event, start, end, overflow='skip') == []


def test_monthly_clamp_across_year():
    event = make_event(datetime(2023, 1, 31), datetime(2023, 12, 31), True, 'monthly')
    dates = display_dates(expand(event, date(2023, 1, 1), date(2023, 12, 31)))
    assert dates == [
        date(2023, 1, 31), date(2023, 2, 28), date(2023, 3, 31), date(2023, 4, 30),
        date(2023, 5, 31), date(2023, 6, 30), date(2023, 7, 31), date(2023, 8, 31),
        date(2023, 9, 30), date(2023, 10, 31), date(2023, 11, 30), date(2023, 12, 31),
    ]
    skipped = display_dates(expand(event, date(2023, 1, 1), date(2023, 12, 31), overflow='skip'))
    assert [d.month for d in skipped] == [1, 3, 5, 7, 8, 10, 12]


def test_unknown_frequency_yields_nothing():
    for frequency in ('yearly', None, ''):
        event = make_event(datetime(2024, 1, 1), datetime(2024, 12, 31), True, frequency)
        assert expand(event, date(2024, 2, 1), date(2024, 2, 29)) == []


def test_frequency_is_case_insensitive():
    event = make_event(datetime(2024, 2, 1), datetime(2024, 2, 3), True, 'DAILY')
    assert len(expand(event, date(2024, 2, 1), date(2024, 2, 29))) == 3


def test_inverted_window_raises():
    event = make_event(datetime(2024, 1, 1), datetime(2024, 1, 1))
    with pytest.raises(InvalidWindowError):
        expand(event, date(2024, 2, 2), date(2024, 2, 1))


def test_unknown_overflow_policy_raises():
    event = make_event(datetime(2024, 1, 1), datetime(2024, 1, 1))
    with pytest.raises(ValueError):
        expand(event, date(2024, 1, 1), date(2024, 1, 31), overflow='round')


def test_expand_is_idempotent_and_leaves_input_alone():
    event = make_event(datetime(2024, 1, 15), datetime(2024, 12, 31), True, 'weekly', {1, 3, 5})
    start, end = month_window(2024, 1)
    first = expand(event, start, end)
    second = expand(event, start, end)
    assert first == second
    assert event.days_of_week == frozenset({1, 3, 5})
    assert start == datetime(2024, 2, 1)


def test_occurrences_stay_within_bounds():
    event = make_event(datetime(2024, 2, 10), datetime(2024, 2, 20), True, 'daily')
    window_start, window_end = date(2024, 2, 15), date(2024, 3, 31)
    for occ in expand(event, window_start, window_end):
        assert max(date(2024, 2, 10), window_start) <= occ.display_date <= min(date(2024, 2, 20), window_end)


def test_occurrence_to_dict():
    event = make_event(datetime(2024, 3, 10, 9, 0), datetime(2024, 3, 10, 10, 0), True, 'weekly', {0})
    occ = expand(event, date(2024, 3, 1), date(2024, 3, 10))[0]
    assert occ.to_dict() == {
        'id': 1,
        'title': 'Standup',
        'description': None,
        'start_date': '2024-03-10T09:00:00',
        'end_date': '2024-03-10T10:00:00',
        'is_recurring': True,
        'frequency': 'weekly',
        'days_of_week': [0],
        'display_date': '2024-03-10',
    }


def test_month_window_bounds():
    assert month_window(2024, 1) == (datetime(2024, 2, 1), datetime(2024, 2, 29, 23, 59, 59))
    assert month_window(2023, 11) == (datetime(2023, 12, 1), datetime(2023, 12, 31, 23, 59, 59))
    with pytest.raises(ValueError):
        month_window(2024, 12)


def test_shift_month_rolls_over_years():
    assert shift_month(2024, 0, -1) == (2023, 11)
    assert shift_month(2024, 11, 1) == (2025, 0)
    assert shift_month(2024, 5, 0) == (2024, 5)


def test_events_for_month_orders_across_definitions():
    weekly = make_event(datetime(2024, 2, 1), datetime(2024, 2, 29), True, 'weekly', {5}, event_id=1)
    once = make_event(datetime(2024, 2, 9, 12, 0), datetime(2024, 2, 9, 13, 0), event_id=2, title='Lunch')

    occurrences = events_for_month([once, weekly], 2024, 1)

    assert [(o.display_date.day, o.event_id) for o in occurrences] == [
        (2, 1), (9, 2), (9, 1), (16, 1), (23, 1),
    ]


def test_expand_range_with_no_definitions():
    assert expand_range([], date(2024, 1, 1), date(2024, 1, 31)) == []
