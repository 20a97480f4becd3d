import os
import sys
import pytest

# Ensure the backend root (containing the `gridduel` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from gridduel import create_app, db, socketio
from gridduel.services.games import GameHub, SessionStore
from gridduel.services.realtime import Broadcaster, ConnectionRegistry, DisconnectCoordinator


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    JWT_SECRET_KEY = 'test-jwt-secret-with-enough-length-for-hs256'
    JWT_ACCESS_TOKEN_EXPIRES = 3600
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = ['http://localhost:5173']
    RATING_DELTA = 25
    CHAT_MAX_LENGTH = 250
    GAME_ID_LENGTH = 6


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import gridduel.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_user(flask_app):
    from gridduel.models import User

    def _make(username, password='password'):
        user = User(username=username)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture()
def token_for(flask_app):
    from gridduel.services.auth import issue_token

    def _token(user):
        return issue_token(user)
    return _token


@pytest.fixture()
def sio_connect(flask_app, token_for):
    """Factory of authenticated Socket.IO test clients on '/ws'."""
    clients = []

    def _connect(user=None, token=None):
        if token is None and user is not None:
            token = token_for(user)
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/ws',
            query_string=f'token={token}' if token else None,
        )
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except Exception:
            pass


def received(test_client, name=None):
    """Drain the client's queue; return payloads, filtered by event name."""
    packets = test_client.get_received('/ws')
    return [p['args'][0] if p['args'] else None for p in packets if name is None or p['name'] == name]


class FakeHandle:
    """Transport handle that records what was sent to it."""

    def __init__(self, key, fail=False):
        self.key = key
        self.sent = []
        self.open = True
        self.fail = fail

    def is_open(self):
        return self.open

    def send(self, event, payload):
        if self.fail:
            raise IOError('broken pipe')
        self.sent.append((event, payload))

    def close(self):
        self.open = False

    def events(self, name=None):
        return [p for e, p in self.sent if name is None or e == name]


class FakeRatings:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def apply_rating_delta(self, user_id, delta):
        self.calls.append((user_id, delta))
        if self.fail:
            raise RuntimeError('rating store down')
        return True


class HubHarness:
    """A GameHub wired to fake handles, without Flask."""

    def __init__(self, ratings=None, spawn=None):
        self.store = SessionStore()
        self.registry = ConnectionRegistry()
        self.broadcaster = Broadcaster(self.registry)
        self.coordinator = DisconnectCoordinator(self.store, self.registry, self.broadcaster)
        self.ratings = ratings if ratings is not None else FakeRatings()
        self.hub = GameHub(self.store, self.registry, self.broadcaster, self.coordinator,
                           ratings=self.ratings, rating_delta=25, spawn=spawn)
        self.handles = {}

    def connect(self, client_id, user_id, fail=False):
        handle = FakeHandle(f"sid-{client_id}", fail=fail)
        self.handles[client_id] = handle
        self.hub.connect(client_id, user_id, handle)
        return handle


@pytest.fixture()
def harness():
    return HubHarness()
