from flask_sqlalchemy import SQLAlchemy
from datetime import datetime

from backend.recurrence import EventDefinition
from services.validation_service import parse_days_of_week
from text_helpers import format_date_display, format_date_for_input, format_day_names

db = SQLAlchemy()


class Event(db.Model):
    """
    User-created calendar event, one-time or recurring.
    Dates are stored as naive datetimes in server local time; recurrence only
    looks at their calendar date.
    """
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    is_recurring = db.Column(db.Boolean, default=False, nullable=False)
    frequency = db.Column(db.String(20), nullable=True)  # daily | weekly | monthly
    days_of_week = db.Column(db.String(20), nullable=True)  # "1,3,5" with 0=Sunday
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def weekday_set(self):
        return parse_days_of_week(self.days_of_week)

    def to_definition(self):
        return EventDefinition(
            id=self.id,
            title=self.title,
            description=self.description,
            start_date=self.start_date,
            end_date=self.end_date,
            is_recurring=bool(self.is_recurring),
            frequency=self.frequency,
            days_of_week=self.weekday_set(),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'is_recurring': bool(self.is_recurring),
            'frequency': self.frequency,
            'days_of_week': sorted(self.weekday_set()),
            'days_label': format_day_names(self.weekday_set()),
            'start_input': format_date_for_input(self.start_date),
            'end_input': format_date_for_input(self.end_date),
            'start_label': format_date_display(self.start_date),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
