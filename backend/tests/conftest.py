import os
import sys
import pytest

# Ensure the backend root (containing the `livescore` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from livescore import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = ['http://localhost:5173']
    DEFAULT_MAX_SETS = 3
    MATCH_LOCK_TIMEOUT_SEC = 1.0
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD = 'admin123'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import livescore.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def teams(flask_app):
    from livescore.models import Team
    team_a = Team(name='Computer Science', short_code='CSE')
    team_b = Team(name='Mechanical', short_code='MECH')
    db.session.add_all([team_a, team_b])
    db.session.commit()
    return team_a.id, team_b.id


@pytest.fixture()
def admin_client(flask_app):
    from livescore.models import User
    admin = User(username='admin')
    admin.set_password('admin123')
    db.session.add(admin)
    db.session.commit()
    test_client = flask_app.test_client()
    res = test_client.post('/api/auth/login', json={'username': 'admin', 'password': 'admin123'})
    assert res.status_code == 200
    return test_client


@pytest.fixture()
def sio_client(flask_app, client):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=client,
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
