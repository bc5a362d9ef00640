import os

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

load_dotenv()

from backend.recurrence import OVERFLOW_POLICIES
from models import db
from services import calendar_routes, event_routes
from services.event_store import EXTENSION_KEY, EventStore


def _default_config():
    return {
        'SQLALCHEMY_DATABASE_URI': os.environ.get('DATABASE_URL', 'sqlite:///calendar.db'),
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'ICS_PRODID': os.environ.get('ICS_PRODID', '-//Event Calendar//Event Calendar App//EN'),
        'ICS_UID_DOMAIN': os.environ.get('ICS_UID_DOMAIN', 'event-calendar.com'),
        'MONTHLY_OVERFLOW': os.environ.get('MONTHLY_OVERFLOW', 'clamp').lower(),
        'LOG_LEVEL': os.environ.get('LOG_LEVEL', 'INFO').upper(),
    }


def _register_routes(app):
    app.add_url_rule('/api/events', view_func=event_routes.handle_events, methods=['GET', 'POST'])
    app.add_url_rule('/api/events/export.ics', view_func=event_routes.export_all_events)
    app.add_url_rule('/api/events/<int:event_id>', view_func=event_routes.event_detail,
                     methods=['GET', 'PUT', 'DELETE'])
    app.add_url_rule('/api/events/<int:event_id>/export.ics', view_func=event_routes.export_event)
    app.add_url_rule('/api/calendar/month', view_func=calendar_routes.calendar_month)
    app.add_url_rule('/api/calendar/occurrences', view_func=calendar_routes.calendar_occurrences)


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.update(_default_config())
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config['LOG_LEVEL'])
    if app.config['MONTHLY_OVERFLOW'] not in OVERFLOW_POLICIES:
        app.logger.warning("Unknown MONTHLY_OVERFLOW %r, falling back to clamp",
                           app.config['MONTHLY_OVERFLOW'])
        app.config['MONTHLY_OVERFLOW'] = 'clamp'

    db.init_app(app)
    app.extensions[EXTENSION_KEY] = EventStore(db)

    @app.errorhandler(Exception)
    def _handle_unexpected_error(exc):
        if isinstance(exc, HTTPException):
            return exc
        app.logger.exception("Unhandled error: %s", exc)
        db.session.rollback()
        return jsonify({'error': 'Internal server error'}), 500

    _register_routes(app)

    with app.app_context():
        db.create_all()

    return app


if __name__ == '__main__':
    create_app().run(host='0.0.0.0', debug=True)
