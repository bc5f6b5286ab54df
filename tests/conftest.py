import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SEED_DEFAULT_DATA"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from shopledger.core.hashing import hash_password
from shopledger.core.jwt import create_access_token
from shopledger.database import Base, build_engine, get_db
from shopledger.main import app
from shopledger.models.users import User


@pytest.fixture
def engine():
    """Fresh in-memory database with foreign keys enforced."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, username: str, role: str, password: str = "secret123") -> User:
    user = User(username=username, password_hash=hash_password(password), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    token = create_access_token(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner(db):
    return make_user(db, "owner1", "owner")


@pytest.fixture
def staff(db):
    return make_user(db, "staff1", "staff")


@pytest.fixture
def owner_headers(owner):
    return auth_headers(owner)


@pytest.fixture
def staff_headers(staff):
    return auth_headers(staff)
