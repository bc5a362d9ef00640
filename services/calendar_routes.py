"""Month grid and occurrence range handlers for the calendar view."""

import calendar
from datetime import date, timedelta

from flask import current_app, jsonify, request

from backend.recurrence import events_for_month, expand_range, month_window, shift_month
from services.event_store import get_event_store
from services.validation_service import parse_day_value
from text_helpers import DAY_NAMES, format_date_display

GRID_CELLS = 42  # 6 weeks x 7 days


def _parse_int_arg(name, default):
    raw = request.args.get(name)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def grid_start(year, month_index):
    """Sunday on/before the 1st; ValueError when the 42 cells leave the date range."""
    first = date(year, month_index + 1, 1)
    start_ordinal = first.toordinal() - (first.weekday() + 1) % 7
    if start_ordinal < date.min.toordinal() or start_ordinal + GRID_CELLS - 1 > date.max.toordinal():
        raise ValueError(f'Month grid for {year}-{month_index + 1:02d} is out of range')
    return date.fromordinal(start_ordinal)


def build_month_grid(occurrences, year, month_index, today=None):
    """42 day cells from the Sunday on/before the 1st; only in-month cells carry events."""
    today = today or date.today()
    first = date(year, month_index + 1, 1)
    start = grid_start(year, month_index)

    by_day = {}
    for occ in occurrences:
        by_day.setdefault(occ.display_date, []).append(occ.to_dict())

    cells = []
    for offset in range(GRID_CELLS):
        day_value = start + timedelta(days=offset)
        in_month = day_value.month == first.month and day_value.year == first.year
        cells.append({
            'date': day_value.isoformat(),
            'day': day_value.day,
            'label': format_date_display(day_value),
            'is_current_month': in_month,
            'is_today': day_value == today,
            'events': by_day.get(day_value, []) if in_month else [],
        })
    return cells


def calendar_month():
    today = date.today()
    year = _parse_int_arg('year', today.year)
    month = _parse_int_arg('month', today.month)
    if year is None or not 1 <= year <= 9999:
        return jsonify({'error': 'Invalid year'}), 400
    if month is None or not 1 <= month <= 12:
        return jsonify({'error': 'Invalid month'}), 400

    month_index = month - 1
    try:
        grid_start(year, month_index)
    except ValueError:
        return jsonify({'error': 'Month out of range'}), 400
    overflow = current_app.config['MONTHLY_OVERFLOW']
    definitions = get_event_store().definitions()
    occurrences = events_for_month(definitions, year, month_index, overflow=overflow)
    window_start, window_end = month_window(year, month_index)
    prev_year, prev_index = shift_month(year, month_index, -1)
    next_year, next_index = shift_month(year, month_index, 1)

    return jsonify({
        'year': year,
        'month': month,
        'month_name': calendar.month_name[month],
        'window': {'start': window_start.isoformat(), 'end': window_end.isoformat()},
        'prev': {'year': prev_year, 'month': prev_index + 1},
        'next': {'year': next_year, 'month': next_index + 1},
        'weekday_names': [DAY_NAMES[i] for i in range(7)],
        'days': build_month_grid(occurrences, year, month_index, today=today),
    })


def calendar_occurrences():
    """Flat list of occurrences for an inclusive start/end range."""
    start_raw = request.args.get('start')
    end_raw = request.args.get('end')
    if not start_raw or not end_raw:
        return jsonify({'error': 'start and end are required'}), 400
    start_day = parse_day_value(start_raw)
    if not start_day:
        return jsonify({'error': 'Invalid start date'}), 400
    end_day = parse_day_value(end_raw)
    if not end_day:
        return jsonify({'error': 'Invalid end date'}), 400
    if end_day < start_day:
        return jsonify({'error': 'end must be on/after start'}), 400

    occurrences = expand_range(
        get_event_store().definitions(),
        start_day,
        end_day,
        overflow=current_app.config['MONTHLY_OVERFLOW'],
    )
    return jsonify({
        'start': start_day.isoformat(),
        'end': end_day.isoformat(),
        'occurrences': [occ.to_dict() for occ in occurrences],
    })
