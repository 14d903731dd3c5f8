"""
Shared fixtures.

Every test gets its own SQLite file under tmp_path.
"""

import pytest
from fastapi.testclient import TestClient

from spaced.api.app import create_app
from spaced.auth import IdentityStore, SessionIssuer
from spaced.config import Settings
from spaced.services import QuestionStore
from spaced.storage import SqliteDatabase


ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin-secret"


@pytest.fixture
def anyio_backend():
    return "asyncio"


# =============================================================================
# Stores
# =============================================================================


@pytest.fixture
async def db(tmp_path):
    """Connected database with an empty schema."""
    database = SqliteDatabase(str(tmp_path / "test.sqlite"))
    await database.connect()
    yield database
    await database.close()


@pytest.fixture
def identities(db):
    return IdentityStore(db)


@pytest.fixture
def sessions(db, identities):
    return SessionIssuer(db, identities)


@pytest.fixture
def questions(db):
    return QuestionStore(db)


# =============================================================================
# HTTP
# =============================================================================


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_path=str(tmp_path / "api.sqlite"),
        admin_username=ADMIN_USERNAME,
        admin_password=ADMIN_PASSWORD,
        log_level="debug",
    )


@pytest.fixture
def client(settings):
    """Test client with the lifespan running (database open, admin seeded)."""
    with TestClient(create_app(settings)) as c:
        yield c


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register_and_login(client: TestClient, username: str, password: str) -> dict:
    """Register a user and log in; returns the presented identity with its token."""
    r = client.post("/api/users", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    r = client.post("/api/users/login", auth=(username, password))
    assert r.status_code == 200, r.text
    return r.json()


@pytest.fixture
def admin_token(client) -> str:
    r = client.post("/api/users/login", auth=(ADMIN_USERNAME, ADMIN_PASSWORD))
    assert r.status_code == 200, r.text
    return r.json()["token"]


@pytest.fixture
def user(client) -> dict:
    return register_and_login(client, "alice", "wonderland")
