import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from college_events.database import get_db, init_db
from college_events.main import app
from college_events.config import settings
from college_events.services.auth_service import auth_service


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def tmp_data(tmp_path):
    data_path = tmp_path / "CollegeEvents"
    data_path.mkdir()
    return data_path


@pytest.fixture
def test_db(tmp_data):
    db_path = tmp_data / "db.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    init_db(db_path)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def fresh_auth_service():
    """Give each test an empty token table."""
    original = auth_service.__dict__.copy()
    auth_service._active_tokens = {}
    yield auth_service
    auth_service.__dict__.update(original)


@pytest.fixture
def data_settings(tmp_data):
    original_data_path = settings.data_path
    settings.data_path = tmp_data
    yield settings
    settings.data_path = original_data_path


@pytest.fixture
def client(data_settings, test_db, fresh_auth_service):
    return TestClient(app)


@pytest.fixture
def login(client):
    """Return a helper that registers a user, logs in and returns (user_id, auth headers)."""

    def _login(name="Alice", email="alice@example.com", password="correct-horse-1"):
        r = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert r.status_code == 201, r.text
        user_id = r.json()["id"]
        r = client.post("/api/auth/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        return user_id, {"Authorization": f"Bearer {r.json()['token']}"}

    return _login
