import pytest
from flask import Flask

from config import TestConfig
from extensions import db
from src.app_factory import create_app
from src.services.storage import RedisBackend


class InMemoryRedis:
    """Dict-backed stand-in for the three redis.Redis calls the blob backend makes."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value
        return True

    def delete(self, *keys):
        removed = 0
        for key in keys:
            removed += self.data.pop(key, None) is not None
        return removed


class RedisTestConfig(TestConfig):
    STORAGE_BACKEND = "redis"


@pytest.fixture(params=["sql", "redis"])
def app(request) -> Flask:
    if request.param == "sql":
        app = create_app(TestConfig)
    else:
        app = create_app(RedisTestConfig)
        app.extensions["clinic_store"] = RedisBackend(InMemoryRedis())

    with app.app_context():
        yield app
        if request.param == "sql":
            db.session.remove()
            db.drop_all()


@pytest.fixture
def sql_app() -> Flask:
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app: Flask):
    return app.test_client()


@pytest.fixture
def owner(app: Flask):
    from src.services import session_service

    return session_service.sign_up("clinic@example.com", "secret1", "Sonrisas")
