import pytest

from app import create_app


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'LOG_LEVEL': 'DEBUG',
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def weekly_payload():
    return {
        'title': 'Team meeting',
        'description': 'Weekly sync',
        'start_date': '2024-01-15',
        'end_date': '2024-12-31',
        'is_recurring': True,
        'frequency': 'weekly',
        'days_of_week': '1,3,5',
    }
