"""Shared fixtures: temporary SQLite database, in-process Redis double, HTTP client."""

import threading
import time
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.data.database import Database
from app.data.models.product import ProductModel
from app.data.models.user import UserModel
from app.main import create_app
from app.services.auth_service import create_access_token
from app.services.lock_service import LockService


class FakeRedis:
    """Thread-safe stand-in for the two Redis calls LockService makes (SET NX EX, EVAL)."""

    def __init__(self):
        self._data = {}
        self._expires = {}
        self._mutex = threading.Lock()

    def _purge(self, name):
        expires = self._expires.get(name)
        if expires is not None and expires <= time.monotonic():
            self._data.pop(name, None)
            self._expires.pop(name, None)

    def set(self, name, value, nx=False, ex=None):
        with self._mutex:
            self._purge(name)
            if nx and name in self._data:
                return None
            self._data[name] = value
            if ex is not None:
                self._expires[name] = time.monotonic() + ex
            return True

    def get(self, name):
        with self._mutex:
            self._purge(name)
            return self._data.get(name)

    def eval(self, script, numkeys, key, token):
        # compare-and-delete, same contract as the release script
        with self._mutex:
            self._purge(key)
            if self._data.get(key) == token:
                del self._data[key]
                self._expires.pop(key, None)
                return 1
            return 0


@pytest.fixture()
def fake_redis():
    return FakeRedis()


@pytest.fixture()
def lock_service(fake_redis):
    return LockService(client=fake_redis, ttl=30, wait_seconds=5, poll_interval=0.01)


@pytest.fixture()
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'shop.db'}"


@pytest.fixture()
def database(database_url):
    db = Database(database_url)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture()
def session(database):
    s = database.session()
    yield s
    s.close()


@pytest.fixture()
def make_user(session):
    counter = {"n": 0}

    def _make(username=None, role="user"):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        user = UserModel(
            username=username,
            email=f"{username}@example.com",
            password_hash="not-a-real-hash",
            role=role,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_product(session):
    def _make(name="Widget", price="10.00", description=""):
        product = ProductModel(name=name, description=description, price=Decimal(price))
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture()
def app(database_url, lock_service):
    return create_app(database_url=database_url, lock_service=lock_service)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def app_session(client, app):
    """Session on the app's own database (tables exist once the client started)."""
    s = app.state.db.session()
    yield s
    s.close()


@pytest.fixture()
def auth_headers(app_session):
    counter = {"n": 0}

    def _headers(role="user", username=None):
        counter["n"] += 1
        username = username or f"{role}{counter['n']}"
        user = UserModel(
            username=username,
            email=f"{username}@example.com",
            password_hash="not-a-real-hash",
            role=role,
        )
        app_session.add(user)
        app_session.commit()
        app_session.refresh(user)
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers


@pytest.fixture()
def api_product(app_session):
    def _make(name="Widget", price="10.00"):
        product = ProductModel(name=name, description=f"{name} description", price=Decimal(price))
        app_session.add(product)
        app_session.commit()
        app_session.refresh(product)
        return product

    return _make
