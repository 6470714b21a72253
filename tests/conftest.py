"""Pytest configuration and fixtures for site metrics tests."""

from collections.abc import AsyncGenerator, Iterable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from sitemetrics.core.security import create_access_token, hash_password
from sitemetrics.models import Base
from sitemetrics.models.user import User, UserRole
from sitemetrics.services.data_source import SqlDialect
from sitemetrics.services.features import FeatureRegistry

# Test database URL - use SQLite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeDataSource:
    """In-memory wiki data source returning canned month and day rows.

    Rows are ``(bucket_key, count)`` pairs, newest first, exactly as the
    wiki queries would return them.
    """

    def __init__(
        self,
        month_rows: Iterable[tuple] = (),
        day_rows: Iterable[tuple] = (),
        tables: Iterable[str] = (),
        dialect: SqlDialect = SqlDialect.MYSQL,
        error: Exception | None = None,
    ):
        self.month_rows = list(month_rows)
        self.day_rows = list(day_rows)
        self.tables = set(tables)
        self.sql_dialect = dialect
        self.error = error
        self.queries: list[str] = []
        self.checked_tables: list[str] = []

    def dialect(self) -> SqlDialect:
        return self.sql_dialect

    async def table_exists(self, name: str) -> bool:
        self.checked_tables.append(name)
        return name in self.tables

    async def execute(self, sql: str) -> list[dict]:
        self.queries.append(sql)
        if self.error is not None:
            raise self.error
        is_day = "%d" in sql or "dd'" in sql
        rows = self.day_rows if is_day else self.month_rows
        return [{"the_date": bucket, "the_count": count} for bucket, count in rows]


@pytest.fixture
async def engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_factory() as session:
        yield session
        await session.rollback()


# ============================================================================
# Wiki Fixtures
# ============================================================================


@pytest.fixture
def fake_data_source() -> FakeDataSource:
    """Wiki data source with a few months and days of edits."""
    return FakeDataSource(
        month_rows=[("21 05", 10), ("21 04", 4), ("21 03", 4)],
        day_rows=[("21 05 02", 7), ("21 05 01", 3)],
    )


@pytest.fixture
def data_source_factory():
    """Factory for data sources with custom rows, tables or dialect."""
    return FakeDataSource


@pytest.fixture
def features() -> FeatureRegistry:
    """Feature registry with no optional extensions installed."""
    return FeatureRegistry()


@pytest.fixture
async def client(
    engine,
    db_session: AsyncSession,
    fake_data_source: FakeDataSource,
    features: FeatureRegistry,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client with dependency overrides."""
    from sitemetrics.core.database import get_db
    from sitemetrics.core.deps import get_data_source, get_feature_registry
    from sitemetrics.main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_data_source] = lambda: fake_data_source
    app.dependency_overrides[get_feature_registry] = lambda: features

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# User Fixtures
# ============================================================================


async def _create_user(
    db_session: AsyncSession,
    email: str,
    password: str,
    role: UserRole,
    is_blocked: bool = False,
) -> User:
    user = User(
        email=email,
        password_hash=hash_password(password),
        role=role,
        is_blocked=is_blocked,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


def _token_for(user: User) -> str:
    return create_access_token(
        data={
            "sub": str(user.id),
            "email": user.email,
            "role": user.role.value,
        }
    )


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create an admin user for testing."""
    return await _create_user(db_session, "admin@example.com", "adminpass123", UserRole.ADMIN)


@pytest.fixture
async def staff_user(db_session: AsyncSession) -> User:
    """Create a staff user for testing."""
    return await _create_user(db_session, "staff@example.com", "staffpass123", UserRole.STAFF)


@pytest.fixture
async def viewer_user(db_session: AsyncSession) -> User:
    """Create a viewer user (no metricsview right) for testing."""
    return await _create_user(db_session, "viewer@example.com", "viewerpass123", UserRole.VIEWER)


@pytest.fixture
async def blocked_user(db_session: AsyncSession) -> User:
    """Create a blocked staff user for testing."""
    return await _create_user(
        db_session, "blocked@example.com", "blockedpass123", UserRole.STAFF, is_blocked=True
    )


@pytest.fixture
def admin_token(admin_user: User) -> str:
    """Create a JWT token for the admin user."""
    return _token_for(admin_user)


@pytest.fixture
def admin_headers(admin_token: str) -> dict[str, str]:
    """HTTP headers with admin authentication."""
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def staff_headers(staff_user: User) -> dict[str, str]:
    """HTTP headers with staff authentication."""
    return {"Authorization": f"Bearer {_token_for(staff_user)}"}


@pytest.fixture
def viewer_headers(viewer_user: User) -> dict[str, str]:
    """HTTP headers with viewer authentication."""
    return {"Authorization": f"Bearer {_token_for(viewer_user)}"}


@pytest.fixture
def blocked_headers(blocked_user: User) -> dict[str, str]:
    """HTTP headers with blocked user authentication."""
    return {"Authorization": f"Bearer {_token_for(blocked_user)}"}
