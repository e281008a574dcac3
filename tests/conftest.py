"""
Test infrastructure for the Simple Article API.

Strategy
--------
- SQLite in-memory via aiosqlite removes the need for a running Postgres
  instance, keeping the suite fast and self-contained.
- StaticPool forces all async tasks to share the same in-memory database
  connection, which is required because SQLite in-memory databases are
  connection-scoped; a new connection would see an empty database.
- The app's get_db dependency is overridden so every test-time request uses
  the test session factory rather than the production one.
- All tables are created fresh before each test and dropped after, giving
  each test a clean isolated state.
- bcrypt runs with the minimum cost factor so registering and logging in
  stay cheap.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from article_api.database import Base, get_db, session_scope  # noqa: E402
from article_api.main import app  # noqa: E402
from article_api.middleware import install_query_counter  # noqa: E402
from article_api.models import Category, User  # noqa: E402
from article_api.security import create_access_token, hash_password  # noqa: E402

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)

TEST_PASSWORD = "secret123"  # password of the ``user`` fixture


# ---------------------------------------------------------------------------
# Dependency override: replace production get_db with the test session factory
# ---------------------------------------------------------------------------

async def override_get_db():
    async with session_scope(async_session_test) as session:
        yield session


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def session_factory() -> async_sessionmaker[AsyncSession]:
    """The test session factory, for tests that manage their own sessions."""
    return async_session_test


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """
    Yield a live AsyncSession for tests that call services or repositories
    directly.
    """
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def user() -> User:
    """A committed user whose password is ``TEST_PASSWORD``."""
    async with async_session_test() as session:
        user = User(name="Riana", email="riana@example.com", password=hash_password(TEST_PASSWORD))
        session.add(user)
        await session.commit()
        return user


@pytest_asyncio.fixture
async def category() -> Category:
    """A committed, live category."""
    async with async_session_test() as session:
        category = Category(name="Technology")
        session.add(category)
        await session.commit()
        return category


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """Unauthenticated httpx.AsyncClient wired to the app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def auth_client(user: User) -> AsyncClient:
    """Client that sends a valid bearer token for ``user`` on every request."""
    transport = ASGITransport(app=app)
    headers = {"Authorization": f"Bearer {create_access_token(user.id)}"}
    async with AsyncClient(transport=transport, base_url="http://test", headers=headers) as client:
        yield client
