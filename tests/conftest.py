import pytest

from tradebook import create_app, db
from tradebook.models import User

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SECRET_KEY': 'test-secret',
    'DEMO_USER_ID': 1,
    'DEMO_USER_EMAIL': 'demo@example.com',
    'DEMO_INITIAL_CAPITAL': 1000.0,
    'GEMINI_API_KEY': 'test-key',
    'AI_TIMEOUT': 5,
}


@pytest.fixture
def app():
    app = create_app(dict(TEST_CONFIG))
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def other_user(ctx):
    user = User(id=2, email='other@example.com', initial_capital=500)
    db.session.add(user)
    db.session.commit()
    return user


def trade_payload(**overrides):
    payload = {
        'stockName': 'COMI',
        'tradeType': 'buy',
        'entryDate': '2024-01-01',
        'exitDate': '2024-01-10',
        'entryPrice': 10,
        'exitPrice': 12,
        'quantity': 100,
        'commission': 5,
        'strategy': 'Technical analysis',
        'notes': '',
    }
    payload.update(overrides)
    return payload
