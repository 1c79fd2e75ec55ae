import os

# Settings are read at import time; keep tests off the real database and fast at hashing
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "polly-test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from polly.core.constants import AuthConfig
from polly.core.revalidation import view_revalidator
from polly.core.security import create_access_token, get_password_hash
from polly.db.database import Base, create_db_engine, get_db
from polly.models.polls import Poll, PollOption
from polly.models.user import User
from polly.services.validation import normalize_option_text

# Test database - in-memory SQLite
TEST_DB_URL = "sqlite://"


@pytest.fixture(scope="function")
def db_engine():
    """In-memory engine configured like the application's (foreign keys on, immediate transactions)"""
    engine = create_db_engine(TEST_DB_URL)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a test database session for direct database tests"""
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def file_engine(tmp_path):
    """File-backed SQLite engine; several connections can really run concurrently against it"""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'polly-test.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


def _create_user(session, name="Test User", email="test@example.com", role=AuthConfig.ROLE_USER,
                 password="testpass123", is_active=True):
    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash(password),
        role=role,
        is_active=is_active,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def _create_poll(session, owner, title="Lang?", options=("Go", "Rust"), description=None):
    """Insert a poll directly, bypassing the service layer"""
    poll = Poll(title=title, description=description, owner_id=owner.id)
    session.add(poll)
    session.flush()
    session.add_all([
        PollOption(poll_id=poll.id, text=text, normalized_text=normalize_option_text(text))
        for text in options
    ])
    session.commit()
    session.refresh(poll)
    return poll


def _auth_headers(user):
    token = create_access_token({"sub": str(user.id), "email": user.email})
    return {"Authorization": f"Bearer {token}"}


# Database fixtures
@pytest.fixture
def test_user(db_session):
    return _create_user(db_session)


@pytest.fixture
def test_user2(db_session):
    return _create_user(db_session, name="Second User", email="test2@example.com")


@pytest.fixture
def admin_user(db_session):
    return _create_user(db_session, name="Admin", email="admin@example.com", role=AuthConfig.ROLE_ADMIN)


@pytest.fixture
def test_poll(db_session, test_user):
    """'Lang?' with the options Go and Rust, owned by test_user"""
    return _create_poll(db_session, test_user)


@pytest.fixture
def revalidated_paths():
    """Collect every view path revalidated during the test"""
    paths = []
    view_revalidator.subscribe(paths.append)
    try:
        yield paths
    finally:
        view_revalidator.unsubscribe(paths.append)


@pytest.fixture
def api_client(db_session):
    """TestClient on the real application, with every request using the test session"""
    from main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Factory for extra users: make_user(name=..., email=..., role=...)"""
    def factory(**kwargs):
        return _create_user(db_session, **kwargs)
    return factory


@pytest.fixture
def make_poll(db_session):
    """Factory for extra polls: make_poll(owner, title=..., options=[...])"""
    def factory(owner, **kwargs):
        return _create_poll(db_session, owner, **kwargs)
    return factory


@pytest.fixture
def auth_headers():
    """Bearer headers for a user: auth_headers(user)"""
    return _auth_headers
