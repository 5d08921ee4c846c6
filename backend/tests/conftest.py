"""
Redbard IDM - PyTest Configuration

Test fixtures for:
- Database sessions with in-memory SQLite
- User factories (ADMIN, CLIENT)
- Token factories (valid, expired, invalid, role-less)
- HTTP client against the ASGI app
- A recording fake user service
"""

import os
import tempfile

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "idm-test.log"))

import pytest
from datetime import datetime, timedelta
from typing import AsyncGenerator, List, Optional
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from uuid import uuid4

from idm.core.database import Base, get_db
from idm.auth.security import get_password_hash, create_access_token
from idm.models.user import User, UserRole
from idm.schemas.user import UserDTO
from idm.services.user_service import get_user_service
from idm.main import app


# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Standard test password
TEST_PASSWORD = "TestPassword123!"

BASE_URL = "http://test"


# ============================================================================
# CORE FIXTURES
# ============================================================================

@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create test database session

    Each test gets a fresh database
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    TestingSessionLocal = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with TestingSessionLocal() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
def override_get_db(db_session: AsyncSession):
    """Override get_db dependency for testing"""
    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def client(override_get_db) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client wired to the app and the test database"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL) as ac:
        yield ac


# ============================================================================
# USER FACTORIES
# ============================================================================

async def make_user(
    db_session: AsyncSession,
    username: str,
    roles: List[UserRole],
    **fields,
) -> User:
    user = User(
        id=str(uuid4()),
        username=username,
        email=f"{username}@redbard.io",
        hashed_password=get_password_hash(TEST_PASSWORD),
        roles=[r.value for r in roles],
        social_links=fields.pop("social_links", []),
        created_at=datetime.utcnow(),
        **fields,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create ADMIN for tests"""
    return await make_user(db_session, "admin", [UserRole.ADMIN], first_name="Ada")


@pytest.fixture
async def client_user(db_session: AsyncSession) -> User:
    """Create CLIENT for tests"""
    return await make_user(db_session, "client", [UserRole.CLIENT], first_name="Carl")


# ============================================================================
# TOKEN FACTORIES
# ============================================================================

def token_for(user_id: str, username: str, roles: List[UserRole], expires_delta: Optional[timedelta] = None) -> str:
    return create_access_token(
        {"sub": user_id, "username": username, "roles": [r.value for r in roles]},
        expires_delta=expires_delta,
    )


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_token(admin_user: User) -> str:
    """Generate valid JWT token for ADMIN"""
    return token_for(admin_user.id, admin_user.username, [UserRole.ADMIN])


@pytest.fixture
def client_token(client_user: User) -> str:
    """Generate valid JWT token for CLIENT"""
    return token_for(client_user.id, client_user.username, [UserRole.CLIENT])


@pytest.fixture
def roleless_token() -> str:
    """Valid token whose holder has no roles at all"""
    return token_for(str(uuid4()), "nobody", [])


@pytest.fixture
def expired_token() -> str:
    """
    Generate expired JWT token

    Expired 1 hour ago
    """
    return token_for(str(uuid4()), "admin", [UserRole.ADMIN], expires_delta=timedelta(hours=-1))


@pytest.fixture
def invalid_token() -> str:
    """
    Generate malformed JWT token

    Invalid signature
    """
    return "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9.INVALID.SIGNATURE"


# ============================================================================
# FAKE USER SERVICE
# ============================================================================

class FakeUserService:
    """
    In-memory stand-in for UserService that records every call

    Used to check what the endpoint layer does (and does not) ask of the
    service.
    """

    def __init__(self, users: Optional[List[UserDTO]] = None, total: Optional[int] = None):
        self.users = {u.id: u for u in users or []}
        self.total = total
        self.calls = []

    async def get_all_users(self, page: int, size: int) -> List[UserDTO]:
        self.calls.append(("get_all_users", page, size))
        return list(self.users.values())[page * size:(page + 1) * size]

    async def get_total_count(self) -> int:
        self.calls.append(("get_total_count",))
        return self.total if self.total is not None else len(self.users)

    async def get_user_by_id(self, user_id: str) -> Optional[UserDTO]:
        self.calls.append(("get_user_by_id", user_id))
        return self.users.get(user_id)

    async def create_user(self, user: UserDTO) -> UserDTO:
        self.calls.append(("create_user", user.username))
        created = user.model_copy(update={"id": f"id-{user.username}"})
        self.users[created.id] = created
        return created

    async def update_user(self, user_id: str, user: UserDTO) -> Optional[UserDTO]:
        self.calls.append(("update_user", user_id))
        if user_id not in self.users:
            return None
        updated = self.users[user_id].model_copy(update=user.model_dump(exclude_unset=True))
        self.users[user_id] = updated
        return updated

    async def authenticate_user(self, username: str, password: str) -> UserDTO:
        self.calls.append(("authenticate_user", username))
        return UserDTO(id=f"id-{username}", username=username, token="fake-token")


@pytest.fixture
def fake_service() -> FakeUserService:
    return FakeUserService(users=[
        UserDTO(id=f"u{i}", username=f"user{i}", roles=[UserRole.CLIENT]) for i in range(5)
    ])


@pytest.fixture
async def fake_client(fake_service: FakeUserService) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose endpoints talk to the fake service"""
    app.dependency_overrides[get_user_service] = lambda: fake_service
    async with AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL) as ac:
        yield ac
    app.dependency_overrides.clear()


# ============================================================================
# AUTH HEADERS
# ============================================================================

@pytest.fixture
def admin_headers(admin_token: str) -> dict:
    return bearer(admin_token)


@pytest.fixture
def client_headers(client_token: str) -> dict:
    return bearer(client_token)


@pytest.fixture
def roleless_headers(roleless_token: str) -> dict:
    return bearer(roleless_token)


@pytest.fixture
def fake_admin_headers() -> dict:
    """ADMIN credentials that need no database user"""
    return bearer(token_for(str(uuid4()), "root", [UserRole.ADMIN]))


@pytest.fixture
def fake_client_headers() -> dict:
    """CLIENT credentials that need no database user"""
    return bearer(token_for(str(uuid4()), "guest", [UserRole.CLIENT]))
