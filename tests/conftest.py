import sys, os, tempfile, pytest

# Always force tests to use an isolated SQLite database file under a temp dir.
# Do this before importing any orbit_core modules (especially orbit_core.db).
if "ORBIT_DB_URL" not in os.environ and "ORBIT_DATABASE_URL" not in os.environ:
    _test_db_dir = tempfile.mkdtemp(prefix="orbit_test_db_")
    os.environ["ORBIT_DB_URL"] = f"sqlite:///{os.path.join(_test_db_dir, 'test_orbit.db')}"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["ORBIT_JOBS_ENABLED"] = "0"
os.environ.pop("VAPID_PUBLIC_KEY", None)
os.environ.pop("VAPID_PRIVATE_KEY", None)

# Ensure core and api src dirs are on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
for _src in (os.path.join(ROOT, 'packages', 'core', 'src'), os.path.join(ROOT, 'apps', 'api', 'src')):
    if _src not in sys.path:
        sys.path.insert(0, _src)


@pytest.fixture
def clean_db():
    from orbit_core.db import Base, engine, SessionLocal
    from orbit_core.models import PushSubscription, UserProfileRow, User
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        session.query(PushSubscription).delete()
        session.query(UserProfileRow).delete()
        session.query(User).delete()
        session.commit()
    finally:
        session.close()
    yield


@pytest.fixture
def client(clean_db):
    from fastapi.testclient import TestClient
    from orbit_api.main import app
    return TestClient(app)


def register_and_login(client, username, password="pw-123456"):
    res = client.post("/auth/register", json={"username": username, "password": password})
    assert res.status_code == 201, res.text
    res = client.post("/auth/login", json={"username": username, "password": password})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['token']}"}


@pytest.fixture
def login(client):
    return lambda username, password="pw-123456": register_and_login(client, username, password)
