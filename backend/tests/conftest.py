import os
import random
import sys
import pytest

# Ensure the backend root (containing the `sushigo` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from sushigo import create_app, socketio
from sushigo.services.sushi import MatchRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    ROUND_END_DELAY_SEC = 0
    MAX_PLAYERS = 4
    CORS_ORIGINS = ['http://localhost:5173']
    CLIENT_PORT = 5173
    LOG_LEVEL = 'WARNING'


@pytest.fixture()
def registry():
    return MatchRegistry(rng=random.Random(7))


@pytest.fixture()
def flask_app(registry):
    application = create_app(TestConfig, registry=registry)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def _connect(flask_app):
    return socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )


@pytest.fixture()
def sio_factory(flask_app):
    """Open extra Socket.IO connections; all are closed after the test."""
    opened = []

    def _open():
        test_client = _connect(flask_app)
        test_client.get_received('/ws')
        opened.append(test_client)
        return test_client

    yield _open
    for test_client in opened:
        if test_client.is_connected('/ws'):
            test_client.disconnect(namespace='/ws')


@pytest.fixture()
def sio_client(flask_app):
    test_client = _connect(flask_app)
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')

