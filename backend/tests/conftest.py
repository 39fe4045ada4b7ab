"""Shared test fixtures.

Every test gets its own central SQLite file and its own per-user store
directory under ``tmp_path``, so tests never share state.
"""

import uuid
from collections.abc import AsyncGenerator, Iterator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from timereport.core.config import settings
from timereport.core.database import create_engine
from timereport.core.rate_limiting import limiter
from timereport.core.tokens import TokenClaims, create_access_token
from timereport.core.user_store import UserStoreRegistry
from timereport.models import Base, User
from timereport.services.auth_service import AuthService

TEST_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
TEST_USER_EMAIL = "test@example.com"

# Security: test-only secrets. Production reads real secrets from env.
TEST_JWT_SECRET = "test-access-secret-that-is-at-least-32-chars"  # nosec B105
TEST_JWT_REFRESH_SECRET = "test-refresh-secret-that-is-at-least-32-chars"  # nosec B105


class SentCodes:
    """Captures login codes instead of emailing them."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def __call__(self, *, to_email: str, code: str) -> None:
        self.sent.append((to_email, code))

    def last_code_for(self, email: str) -> str:
        """Most recent code sent to an address."""
        for to_email, code in reversed(self.sent):
            if to_email == email:
                return code
        msg = f"No code sent to {email}"
        raise AssertionError(msg)


def create_test_access_token(
    user_id: uuid.UUID = TEST_USER_ID, email: str = TEST_USER_EMAIL
) -> str:
    """Signed access token for test authentication."""
    return create_access_token(TokenClaims(user_id=user_id, email=email))


@pytest.fixture(autouse=True)
def auth_settings() -> Iterator[None]:
    """Install test signing secrets and disable rate limiting."""
    original_secret = settings.jwt_secret
    original_refresh_secret = settings.jwt_refresh_secret
    original_limiter_enabled = limiter.enabled
    settings.jwt_secret = SecretStr(TEST_JWT_SECRET)
    settings.jwt_refresh_secret = SecretStr(TEST_JWT_REFRESH_SECRET)
    limiter.enabled = False

    yield

    settings.jwt_secret = original_secret
    settings.jwt_refresh_secret = original_refresh_secret
    limiter.enabled = original_limiter_enabled


@pytest_asyncio.fixture
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Central store engine on a fresh SQLite file."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Central store session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def user_stores(tmp_path: Path) -> AsyncGenerator[UserStoreRegistry, None]:
    """Per-user store registry rooted in the test's tmp directory."""
    registry = UserStoreRegistry(tmp_path / "users")
    yield registry
    await registry.dispose_all()


@pytest.fixture
def sent_codes() -> SentCodes:
    return SentCodes()


@pytest.fixture
def auth_service(
    db_session: AsyncSession,
    user_stores: UserStoreRegistry,
    sent_codes: SentCodes,
) -> AuthService:
    """AuthService wired to the test stores, capturing sent codes."""
    return AuthService(db_session, user_stores, send_code=sent_codes)


@pytest_asyncio.fixture
async def test_user(
    db_session: AsyncSession, user_stores: UserStoreRegistry
) -> User:
    """A user with a materialized per-user store."""
    user = User(id=TEST_USER_ID, email=TEST_USER_EMAIL)
    db_session.add(user)
    await db_session.commit()
    await user_stores.create_store(user.id)
    return user


@pytest_asyncio.fixture
async def store_session(
    test_user: User, user_stores: UserStoreRegistry
) -> AsyncGenerator[AsyncSession, None]:
    """Session on the test user's per-user store."""
    factory = await user_stores.get_store(test_user.id)
    async with factory() as session:
        yield session
        await session.rollback()


# =============================================================================
# API Test Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def app_client_factory(
    db_engine: AsyncEngine,
    user_stores: UserStoreRegistry,
    sent_codes: SentCodes,
) -> AsyncGenerator:
    """Build AsyncClients against the app with test dependencies.

    Overrides the central session and the auth service (so codes are
    captured), and installs the test store registry on app state.
    """
    from timereport.api.deps import get_auth_service
    from timereport.core.database import get_db
    from timereport.main import app

    test_session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with test_session_factory() as session:
            yield session

    async def override_get_auth_service() -> AsyncGenerator[AuthService, None]:
        async with test_session_factory() as session:
            yield AuthService(session, user_stores, send_code=sent_codes)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_auth_service] = override_get_auth_service
    original_stores = getattr(app.state, "user_stores", None)
    app.state.user_stores = user_stores

    clients: list[AsyncClient] = []

    def make_client(cookies: dict[str, str] | None = None) -> AsyncClient:
        client = AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            cookies=cookies,
        )
        clients.append(client)
        return client

    yield make_client

    for client in clients:
        await client.aclose()
    app.state.user_stores = original_stores
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(
    app_client_factory,
    test_user: User,  # noqa: ARG001 - ensures user and store exist
) -> AsyncClient:
    """Async HTTP client authenticated as the test user."""
    return app_client_factory(
        cookies={settings.access_cookie_name: create_test_access_token()}
    )


@pytest_asyncio.fixture
async def unauthenticated_client(app_client_factory) -> AsyncClient:
    """Async HTTP client without auth cookies."""
    return app_client_factory()
