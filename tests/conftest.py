"""
Shared test fixtures.

Sets up an isolated SQLite test database so tests never touch
the real database. Tables are created before each test and
dropped after it, so no test data persists.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from billing_ledger.main import app
from billing_ledger.models.base import Base, get_db, enable_sqlite_savepoints


TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)
# The import runs each row in a SAVEPOINT
enable_sqlite_savepoints(engine)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)

TENANT_ID = 1


@pytest.fixture(autouse=True)
def setup_database():
    """Give every test an empty schema."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Session shared by service tests and, through client, by the API."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db_session):
    """
    TestClient acting for tenant 1 on the test session.

    get_db is overridden so that routers commit on db_session and
    tests can inspect the same rows directly.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app, headers={"X-Tenant-Id": str(TENANT_ID)})
    app.dependency_overrides.clear()
