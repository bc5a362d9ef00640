"""Route handlers for event definition CRUD and calendar file export."""

from flask import Response, current_app, jsonify, request

from services.event_store import EventNotFound, get_event_store
from services.ics_export import generate_ics, generate_multiple_ics
from services.validation_service import validate_event_payload


def _not_found():
    return jsonify({'error': 'Event not found'}), 404


def _validation_failed(errors):
    current_app.logger.warning("Rejected event payload: %s", errors)
    first = next(iter(errors.values()))
    return jsonify({'error': first, 'errors': errors}), 400


def _ics_response(content, filename):
    return Response(
        content,
        mimetype='text/calendar',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )


def handle_events():
    store = get_event_store()

    if request.method == 'POST':
        fields, errors = validate_event_payload(request.get_json(silent=True))
        if errors:
            return _validation_failed(errors)
        event = store.create(fields)
        current_app.logger.info("Created event %s", event.id)
        return jsonify(event.to_dict()), 201

    return jsonify([ev.to_dict() for ev in store.list()])


def event_detail(event_id):
    """Get, update or delete a single event definition."""
    store = get_event_store()

    if request.method == 'DELETE':
        try:
            store.delete(event_id)
        except EventNotFound:
            return _not_found()
        current_app.logger.info("Deleted event %s", event_id)
        return jsonify({'message': 'Event deleted successfully', 'deleted_id': event_id})

    if request.method == 'PUT':
        fields, errors = validate_event_payload(request.get_json(silent=True))
        if errors:
            return _validation_failed(errors)
        try:
            event = store.update(event_id, fields)
        except EventNotFound:
            return _not_found()
        current_app.logger.info("Updated event %s", event_id)
        return jsonify(event.to_dict())

    try:
        event = store.get(event_id)
    except EventNotFound:
        return _not_found()
    return jsonify(event.to_dict())


def export_event(event_id):
    try:
        event = get_event_store().get(event_id)
    except EventNotFound:
        return _not_found()
    content = generate_ics(
        event,
        prodid=current_app.config['ICS_PRODID'],
        uid_domain=current_app.config['ICS_UID_DOMAIN'],
    )
    return _ics_response(content, f'event-{event.id}.ics')


def export_all_events():
    events = get_event_store().list()
    content = generate_multiple_ics(
        events,
        prodid=current_app.config['ICS_PRODID'],
        uid_domain=current_app.config['ICS_UID_DOMAIN'],
    )
    return _ics_response(content, 'events.ics')
