"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real database. Tables are created before each test and dropped
after it, so no test data persists.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from wallet_ledger.config import Settings
from wallet_ledger.main import app
from wallet_ledger.models.base import Base, get_db
from wallet_ledger.schemas.account import AccountCreate
from wallet_ledger.services.account_service import AccountService
from wallet_ledger.services.transfer_engine import TransferEngine


# A file database rather than :memory: so that worker threads in
# the concurrency tests each get their own connection.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class FixedRandom:
    """Random source that always draws the same value."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


# Never falls below a failure rate in (0, 1)
NEVER_FAIL = FixedRandom(0.999999)


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fixed_random():
    """The FixedRandom class, for tests that pick their own draw."""
    return FixedRandom


@pytest.fixture
def session_factory():
    """Session factory for tests that need one session per thread."""
    return TestSessionLocal


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def settings():
    """Engine settings with fault injection switched off."""
    return Settings(SIMULATE_FAILURE_RATE=0.0, HANDLE_DOMAIN="qp")


@pytest.fixture
def make_engine(db_session, settings):
    """
    Build a TransferEngine on the test session.

    failure_rate=None keeps the fixture settings (no fault
    injection); rng defaults to a source that never fails.
    """
    def _make(session=None, failure_rate=None, rng=None, **kwargs):
        engine_settings = settings
        if failure_rate is not None:
            engine_settings = Settings(
                SIMULATE_FAILURE_RATE=failure_rate, HANDLE_DOMAIN="qp"
            )
        return TransferEngine(
            session or db_session,
            settings=engine_settings,
            rng=rng or NEVER_FAIL,
            **kwargs,
        )
    return _make


@pytest.fixture
def make_account(db_session, settings):
    """Create and commit an account with a zero balance."""
    def _make(display_name, email=None, session=None):
        session = session or db_session
        service = AccountService(session, settings)
        email = email or f"{display_name.replace(' ', '.').lower()}@example.com"
        account = service.create_account(AccountCreate(
            display_name=display_name, email=email,
        ))
        session.commit()
        return account
    return _make


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    We override the get_db dependency so the FastAPI app
    uses our test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
