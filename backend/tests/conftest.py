"""
ProConnect - Test Configuration and Fixtures
"""
import os
import tempfile
from datetime import datetime
from typing import AsyncGenerator, Awaitable, Callable

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from faker import Faker

# Set testing environment before the app reads its settings
os.environ['TESTING'] = 'true'
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['LOG_FILE'] = ''
os.environ['UPLOADS_DIR'] = tempfile.mkdtemp(prefix='proconnect-uploads-')

from app.main import app
from app.core.clock import FrozenClock, get_contest_clock
from app.core.config import settings
from app.core.database import Base, create_engine_for_url, get_db
from app.core.security import get_password_hash, create_user_token
from app.models.project import Project, ProjectVisibility
from app.models.user import User, UserRole, user_friends

fake = Faker()

TEST_PASSWORD = 'testpassword123'

# Contest-local noon on a Saturday (week 24 of 2024)
SATURDAY = datetime(2024, 6, 15, 12, 0)


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite schema per test"""
    test_engine = create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and checking results outside the app"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def contest_clock() -> FrozenClock:
    """Pinned to a Saturday so contest registration is open"""
    return FrozenClock(SATURDAY)


@pytest.fixture
def uploads_dir(tmp_path, monkeypatch):
    path = tmp_path / 'uploads'
    monkeypatch.setattr(settings, 'UPLOADS_DIR', str(path))
    return path


@pytest.fixture
async def client(session_factory, contest_clock, uploads_dir) -> AsyncGenerator[AsyncClient, None]:
    """Test client; every request gets its own session like in production"""
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                if session.new or session.dirty or session.deleted:
                    await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_contest_clock] = lambda: contest_clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory for users stored directly in the database"""
    async def _make_user(role: UserRole = UserRole.USER, **overrides) -> User:
        email = overrides.pop('email', None) or fake.unique.email()
        user = User(
            name=overrides.pop('name', None) or fake.name(),
            email=email,
            hashed_password=get_password_hash(TEST_PASSWORD),
            section=overrides.pop('section', 'CSE-A'),
            role=role,
            avatar_url=settings.default_avatar_url(email),
            **overrides
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_project(db_session: AsyncSession) -> Callable[..., Awaitable[Project]]:
    async def _make_project(owner: User, **overrides) -> Project:
        project = Project(
            owner_id=owner.id,
            title=overrides.pop('title', None) or fake.catch_phrase(),
            description=overrides.pop('description', None) or fake.paragraph(),
            tech_stack=overrides.pop('tech_stack', ['Python', 'FastAPI']),
            visibility=overrides.pop('visibility', ProjectVisibility.PUBLIC),
            **overrides
        )
        db_session.add(project)
        await db_session.commit()
        return project

    return _make_project


def _headers_for(user: User) -> dict:
    return {'Authorization': f'Bearer {create_user_token(user)}'}


@pytest.fixture
def headers_for() -> Callable[[User], dict]:
    """Bearer headers for any user"""
    return _headers_for


@pytest.fixture
async def test_user(make_user) -> User:
    return await make_user(name='Asha Rao')


@pytest.fixture
async def other_user(make_user) -> User:
    return await make_user(name='Vikram Iyer')


@pytest.fixture
async def admin_user(make_user) -> User:
    return await make_user(role=UserRole.ADMIN, name='Admin')


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    return _headers_for(test_user)


@pytest.fixture
def other_headers(other_user: User) -> dict:
    return _headers_for(other_user)


@pytest.fixture
def admin_auth_headers(admin_user: User) -> dict:
    return _headers_for(admin_user)


@pytest.fixture
async def test_project(make_project, test_user: User) -> Project:
    return await make_project(test_user, title='Campus Navigator')


@pytest.fixture
def befriend(db_session: AsyncSession) -> Callable[..., Awaitable[None]]:
    """Make two users friends both ways without a request"""
    async def _befriend(user: User, friend: User) -> None:
        await db_session.execute(
            insert(user_friends),
            [
                {'user_id': user.id, 'friend_id': friend.id},
                {'user_id': friend.id, 'friend_id': user.id},
            ],
        )
        await db_session.commit()

    return _befriend
