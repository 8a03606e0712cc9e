import pytest

from app import create_app
from models import db
from tests.helpers import CSRF, register


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test',
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'ledger.db'}",
        'BCRYPT_LOG_ROUNDS': 4,
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    client = app.test_client()
    with client.session_transaction() as sess:
        sess['csrf_token'] = CSRF
    return client


@pytest.fixture
def logged_in(client):
    register(client)
    return client
