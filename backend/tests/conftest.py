import os
import sys
import pytest

# Ensure the backend root (containing the `leaderboarder` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from leaderboarder import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    CREDIT_INTERVAL_SEC = 0
    LEADERBOARD_OVERFETCH = 10
    DEFAULT_MIN_USERS = 5
    STRICT_FILTER_KEYS = False
    CORS_ORIGINS = ['http://localhost:5173']


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import leaderboarder.models  # noqa: F401
        db.create_all()
    # No context is held here: requests must each get a fresh `g`
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def app_ctx(flask_app):
    with flask_app.app_context():
        yield flask_app


@pytest.fixture()
def file_app(tmp_path):
    """App backed by a file database so worker threads get their own connections."""

    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'ledger.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {'connect_args': {'timeout': 30, 'check_same_thread': False}}

    application = create_app(FileConfig)
    with application.app_context():
        import leaderboarder.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def make_account(app_ctx):
    from leaderboarder.services.accounts import create_account

    def _make(username, **kwargs):
        return create_account(username, kwargs.pop('password', 'password'), **kwargs)
    return _make


@pytest.fixture()
def auth_headers(client):
    """Register and log in through the HTTP layer; returns bearer headers."""

    def _login(username, password='password', **profile):
        res = client.post('/users', json={'username': username, 'password': password, **profile})
        assert res.status_code == 201
        token = client.post('/login', json={'username': username, 'password': password}).get_json()['token']
        return {'Authorization': f'Bearer {token}'}
    return _login
