"""Calendar file (.ics) export for event definitions."""

from datetime import datetime, timezone

from icalendar import Calendar as ICalCalendar, Event as ICalEvent

from backend.recurrence import FREQ_DAILY, FREQ_MONTHLY, FREQ_WEEKLY
from services.validation_service import parse_days_of_week

DEFAULT_PRODID = '-//Event Calendar//Event Calendar App//EN'
DEFAULT_UID_DOMAIN = 'event-calendar.com'
BYDAY_CODES = ['SU', 'MO', 'TU', 'WE', 'TH', 'FR', 'SA']


def _as_utc(value):
    """Stored datetimes are naive; export them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def recurrence_rule(event):
    """RRULE dict derived from the stored pattern, or None when there is none."""
    if not event.is_recurring:
        return None
    freq = (event.frequency or '').lower()
    if freq == FREQ_DAILY:
        return {'freq': 'DAILY'}
    if freq == FREQ_WEEKLY:
        days = sorted(parse_days_of_week(event.days_of_week))
        if not days:
            return None
        return {'freq': 'WEEKLY', 'byday': [BYDAY_CODES[d] for d in days]}
    if freq == FREQ_MONTHLY:
        return {'freq': 'MONTHLY'}
    return None


def build_ical_event(event, uid_domain=DEFAULT_UID_DOMAIN):
    created = _as_utc(event.created_at or datetime.utcnow())
    vevent = ICalEvent()
    vevent.add('uid', f'event-{event.id}@{uid_domain}')
    vevent.add('dtstamp', created)
    vevent.add('dtstart', _as_utc(event.start_date))
    vevent.add('dtend', _as_utc(event.end_date))
    vevent.add('summary', event.title)
    if event.description:
        vevent.add('description', event.description)
    vevent.add('created', created)
    if event.updated_at:
        vevent.add('last-modified', _as_utc(event.updated_at))
    rrule = recurrence_rule(event)
    if rrule:
        vevent.add('rrule', rrule)
    vevent.add('status', 'CONFIRMED')
    vevent.add('transp', 'OPAQUE')
    return vevent


def generate_multiple_ics(events, prodid=DEFAULT_PRODID, uid_domain=DEFAULT_UID_DOMAIN):
    cal = ICalCalendar()
    cal.add('prodid', prodid)
    cal.add('version', '2.0')
    cal.add('calscale', 'GREGORIAN')
    cal.add('method', 'PUBLISH')
    for event in events:
        cal.add_component(build_ical_event(event, uid_domain=uid_domain))
    return cal.to_ical().decode('utf-8')


def generate_ics(event, prodid=DEFAULT_PRODID, uid_domain=DEFAULT_UID_DOMAIN):
    return generate_multiple_ics([event], prodid=prodid, uid_domain=uid_domain)
