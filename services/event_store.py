"""Persistence for event definitions, handed to request handlers by the app."""

from flask import current_app

from models import Event

EXTENSION_KEY = 'event_store'


class EventNotFound(LookupError):
    def __init__(self, event_id):
        super().__init__(f'Event {event_id} not found')
        self.event_id = event_id


class EventStore:
    """CRUD over ``Event`` rows using a Flask-SQLAlchemy handle."""

    def __init__(self, db):
        self.db = db

    def list(self):
        return Event.query.order_by(Event.start_date.asc(), Event.id.asc()).all()

    def get(self, event_id):
        event = self.db.session.get(Event, event_id)
        if event is None:
            raise EventNotFound(event_id)
        return event

    def create(self, fields):
        event = Event(**fields)
        self.db.session.add(event)
        self.db.session.commit()
        return event

    def update(self, event_id, fields):
        event = self.get(event_id)
        for key, value in fields.items():
            setattr(event, key, value)
        self.db.session.commit()
        return event

    def delete(self, event_id):
        event = self.get(event_id)
        self.db.session.delete(event)
        self.db.session.commit()
        return event_id

    def definitions(self):
        return [event.to_definition() for event in self.list()]


def get_event_store():
    return current_app.extensions[EXTENSION_KEY]
