from datetime import date

import pytest

from app import create_app
from app.extensions import db
from app.records import ClientRecord
from app.services.client_store import ClientStore, OperatorContext

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "OPENAI_API_KEY": "",
    "PAYMENT_KEY": "pix-55-0000",
    "DEFAULT_CLIENT_PRICE": 35.0,
    "DEFAULT_OPERATOR_ID": "default",
    "LOG_LEVEL": "WARNING",
}


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def http(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return ClientStore(OperatorContext(owner_id="default"), default_price=35.0)


@pytest.fixture
def make_client():
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "id": f"c{counter['n']}",
            "name": f"Client {counter['n']}",
            "phone": "000-0000",
            "start_date": date(2024, 1, 1),
            "renewal_date": date(2024, 2, 1),
            "price": 35.0,
        }
        data.update(overrides)
        return ClientRecord(**data)

    return _make
