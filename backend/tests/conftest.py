import os
import sys
from datetime import date
import pytest

# Ensure the backend root (containing the `colorgame` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from colorgame import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BASE_DAILY_ATTEMPTS = 5
    MAX_DAILY_ATTEMPTS = 10
    POINTS_PER_LEVEL = 1000
    LEADERBOARD_LIMIT = 100
    ATTEMPT_CLAIM_RETRIES = 3
    ATTEMPT_LOCK_TIMEOUT_SEC = 5


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import colorgame.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def file_app(tmp_path):
    """App on a file-backed sqlite database so worker threads get their own connections."""

    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'daily.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {'connect_args': {'timeout': 15}}

    application = create_app(FileConfig)
    with application.app_context():
        import colorgame.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


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
def today():
    return date.today()


@pytest.fixture()
def make_account():
    """Create and commit an account; works with whichever app context is active."""
    from colorgame.models import Account

    def _make(user_id, points=0, level=1, credits=0):
        account = Account(id=user_id, username=f'name-{user_id}', points=points, level=level, credits=credits)
        db.session.add(account)
        db.session.commit()
        return account

    return _make


@pytest.fixture()
def publish_color():
    from colorgame.models import DailyColor

    def _publish(day, r=0, g=123, b=167, name='Cerulean'):
        color = DailyColor(date=day, color_name=name, r=r, g=g, b=b)
        db.session.add(color)
        db.session.commit()
        return color

    return _publish


@pytest.fixture()
def scripted_scores(monkeypatch):
    """Make the ledger score attempts from a fixed list instead of by color distance."""
    from colorgame.services.daily import scoring

    def _script(values):
        remaining = list(values)

        def fake_score(target, submitted):
            return remaining.pop(0)

        monkeypatch.setattr(scoring, 'score', fake_score)
        return remaining

    return _script
