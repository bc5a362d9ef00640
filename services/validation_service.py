from datetime import date, datetime, time

FREQUENCIES = {"daily", "weekly", "monthly"}


def parse_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ["1", "true", "yes", "on"]


def parse_days_of_week(raw):
    """Decode '1,3,5' or [1, 3, 5] into a frozenset of weekday indices (Sunday=0)."""
    if raw is None:
        return frozenset()
    if isinstance(raw, (list, tuple, set, frozenset)):
        values = raw
    else:
        values = str(raw).split(",")
    days = set()
    for val in values:
        if isinstance(val, bool):
            continue
        try:
            day = int(str(val).strip())
        except (TypeError, ValueError):
            continue
        if 0 <= day <= 6:
            days.add(day)
    return frozenset(days)


def encode_days_of_week(days):
    """Storage form of a weekday set; None when empty."""
    return ",".join(str(d) for d in sorted(parse_days_of_week(days))) or None


def parse_day_value(raw):
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    try:
        return datetime.strptime(str(raw), "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None


def parse_datetime_value(raw):
    """Accept YYYY-MM-DD or an ISO datetime; returns a naive datetime or None."""
    if isinstance(raw, datetime):
        return raw.replace(tzinfo=None)
    if isinstance(raw, date):
        return datetime.combine(raw, time.min)
    if not raw:
        return None
    text = str(raw).strip()
    day = parse_day_value(text)
    if day:
        return datetime.combine(day, time.min)
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed.replace(tzinfo=None)


def _pick(data, *keys):
    for key in keys:
        if key in data:
            return data.get(key)
    return None


def validate_event_payload(data):
    """
    Validate and normalize an event create/update body.

    Returns ``(fields, errors)``. ``fields`` holds column values ready for the
    store; ``errors`` maps field names to messages and is empty on success.
    """
    data = data or {}
    errors = {}

    title = str(_pick(data, "title") or "").strip()
    if not title:
        errors["title"] = "Title is required"
    elif len(title) > 200:
        errors["title"] = "Title must be 200 characters or fewer"

    start_raw = _pick(data, "start_date", "startDate")
    end_raw = _pick(data, "end_date", "endDate")
    start_date = parse_datetime_value(start_raw)
    end_date = parse_datetime_value(end_raw)
    if not start_raw:
        errors["start_date"] = "Start date is required"
    elif start_date is None:
        errors["start_date"] = "Invalid start date"
    if not end_raw:
        errors["end_date"] = "End date is required"
    elif end_date is None:
        errors["end_date"] = "Invalid end date"
    if start_date and end_date and end_date < start_date:
        errors["end_date"] = "End date must be after start date"

    is_recurring = parse_bool(_pick(data, "is_recurring", "isRecurring"))
    frequency = str(_pick(data, "frequency") or "").strip().lower() or None
    days_of_week = parse_days_of_week(_pick(data, "days_of_week", "daysOfWeek"))
    if is_recurring:
        if frequency not in FREQUENCIES:
            errors["frequency"] = "Frequency must be daily, weekly, or monthly"
        elif frequency == "weekly" and not days_of_week:
            errors["days_of_week"] = "Days of week are required for weekly recurring events"
    else:
        frequency = None
        days_of_week = frozenset()

    description = str(_pick(data, "description") or "").strip() or None

    fields = {
        "title": title,
        "description": description,
        "start_date": start_date,
        "end_date": end_date,
        "is_recurring": is_recurring,
        "frequency": frequency,
        "days_of_week": encode_days_of_week(days_of_week) if frequency == "weekly" else None,
    }
    return fields, errors
