import os
import tempfile

from cryptography.fernet import Fernet

# Environment must be in place before any serenai module is imported
_TMP_DIR = tempfile.mkdtemp(prefix="serenai-tests-")
os.environ["ENV"] = "production"  # no .env loading
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'serenai-test.db')}"
os.environ["FERNET_SECRET"] = Fernet.generate_key().decode()
os.environ["AUTH_JWT_SECRET"] = "test-secret"
os.environ["AUTH_JWT_ALGORITHM"] = "HS256"
os.environ.pop("AUTH_JWT_AUDIENCE", None)
os.environ.pop("AUTH_JWT_ISSUER", None)
os.environ["OPENAI_API_KEY"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["APP_TIMEZONE"] = "UTC"

import pytest
from fastapi.testclient import TestClient

from serenai.main import app
from serenai.models import database
from serenai.models.user import User
from serenai.utils.jwt_utils import create_access_token


def make_headers(external_id: str, **claims) -> dict:
    token = create_access_token({"sub": external_id, **claims})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
def reset_tables():
    database.Base.metadata.drop_all(bind=database.engine)
    database.Base.metadata.create_all(bind=database.engine)
    yield


@pytest.fixture(autouse=True)
def offline_llm(monkeypatch):
    """Every provider call fails unless a test patches the helper it needs."""
    def _offline(path, payload):
        raise RuntimeError(f"LLM offline in tests: {path}")

    monkeypatch.setattr("serenai.services.openai_service._post", _offline)


@pytest.fixture
def db():
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def create_user(db, external_id="user_test_1", **fields) -> User:
    user = User(external_id=external_id, email=f"{external_id}@example.com", name="Test User", **fields)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db):
    return create_user(db)


@pytest.fixture
def other_user(db):
    return create_user(db, external_id="user_test_2")


@pytest.fixture
def auth_headers(user):
    return make_headers(user.external_id)


@pytest.fixture
def other_headers(other_user):
    return make_headers(other_user.external_id)
