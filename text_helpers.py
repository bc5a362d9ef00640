from datetime import date, datetime

from services.validation_service import parse_days_of_week


DAY_NAMES = {0: "Sun", 1: "Mon", 2: "Tue", 3: "Wed", 4: "Thu", 5: "Fri", 6: "Sat"}


def _coerce_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00")).date()
    except (TypeError, ValueError):
        return None


def format_date_for_input(value):
    """Render a date as fixed-width YYYY-MM-DD for date input fields."""
    day = _coerce_date(value)
    if day is None:
        return ""
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def format_date_display(value):
    """Readable form such as 'Mon, Dec 25, 2024'."""
    day = _coerce_date(value)
    if day is None:
        return ""
    return f"{DAY_NAMES[(day.weekday() + 1) % 7]}, {day.strftime('%b')} {day.day}, {day.year}"


def format_day_names(days):
    """Turn a weekday set (or its '1,3,5' storage form) into 'Mon, Wed, Fri'."""
    if not days:
        return ""
    if isinstance(days, str):
        indices = parse_days_of_week(days)
    else:
        indices = {d for d in days if d in DAY_NAMES}
    return ", ".join(DAY_NAMES[d] for d in sorted(indices))
