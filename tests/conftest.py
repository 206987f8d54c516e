"""
Shared fixtures.

Every test gets its own SQLite file and cheap Argon2 parameters.
"""

import pytest
from fastapi.testclient import TestClient

from disregarded.api.app import create_app
from disregarded.auth import AuthContext, CredentialStore, PasswordHasher, TokenService
from disregarded.config import Settings
from disregarded.core.utils import utc_now
from disregarded.services.essays import EssayService
from disregarded.storage import create_sqlite_storage

SECRET = "test-signing-secret-0123456789abcdef"


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "jwt_secret": SECRET,
        "database_path": str(tmp_path / "test.db"),
        "argon2_memory_cost": 1024,
        "argon2_time_cost": 1,
        "registration_enabled": True,
        "max_essay_length": 500_000,
        "_env_file": None,
    }
    values.update(overrides)
    return Settings(**values)


# =============================================================================
# Service-level fixtures
# =============================================================================


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def storage(settings):
    return create_sqlite_storage(settings.database_path)


@pytest.fixture
def hasher():
    return PasswordHasher(memory_cost=1024, time_cost=1)


@pytest.fixture
def credentials(storage, hasher):
    return CredentialStore(storage.accounts, hasher)


@pytest.fixture
def tokens():
    return TokenService(SECRET, lifetime_seconds=3600)


@pytest.fixture
def essays(storage):
    return EssayService(storage.essays, max_length=20)


@pytest.fixture
def alice(storage):
    account = storage.accounts.create("alice", "not-a-real-hash", utc_now())
    return AuthContext(account_id=account.id, account_name=account.name)


@pytest.fixture
def bob(storage):
    account = storage.accounts.create("bob", "not-a-real-hash", utc_now())
    return AuthContext(account_id=account.id, account_name=account.name)


# =============================================================================
# HTTP fixtures
# =============================================================================


@pytest.fixture
def secret():
    return SECRET


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def make_client(tmp_path):
    """Build a client for an app with non-default settings."""
    
    def _make_client(**overrides) -> TestClient:
        overrides.setdefault("database_path", str(tmp_path / "custom.db"))
        return TestClient(create_app(make_settings(tmp_path, **overrides)))
    
    return _make_client


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def register(client):
    """Register an account over HTTP and return its bearer headers."""
    
    def _register(name: str, password: str = "secret1") -> dict[str, str]:
        response = client.post("/auth/register", json={"name": name, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}
    
    return _register
