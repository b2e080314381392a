"""Service test fixtures — async DB, collaborator fakes, seed records, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db, get_identity_provider, get_email_sender and get_settings overridden in the client
    - db_manager patched so the readiness check sees the test engine
    - fetch() reads through a fresh session: never a stale identity-map copy

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for service and route tests
      (PostgreSQL-specific features are not used)
    - Fakes over mocks: the identity provider and mailer are Protocols, fakes need no patching
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from tbi_portal.api.deps import get_email_sender, get_identity_provider
from tbi_portal.config import Settings, get_settings
from tbi_portal.core.domain_types import Role
from tbi_portal.core.onboarding import initial_progress
from tbi_portal.db.base import Base
from tbi_portal.infrastructure.database import get_db, DatabaseSessionManager
from tbi_portal.infrastructure.tokens import TokenSigner
from tbi_portal.models.mentor import Mentor
from tbi_portal.models.mentor_request import MentorRequest
from tbi_portal.models.submission import Submission
from tbi_portal.models.user_account import UserAccount
import tbi_portal.infrastructure.database as db_module
import tbi_portal.models  # noqa: F401
from tbi_portal.main import app

from tests.services.fakes import MENTOR_EMAIL, FakeEmailSender, FakeIdentityProvider


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def fetch(test_session_factory):
    """Load one row through a fresh session."""
    async def _fetch(model, key):
        async with test_session_factory() as session:
            return await session.get(model, key)
    return _fetch


# ─── Collaborators ───────────────────────────────────────────────

@pytest.fixture
def settings():
    return Settings(
        secret_key="test-secret-key",
        app_url="http://portal.tbi.org",
        cleanup_api_key="cleanup-key",
        resend_api_key="",
    )


@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
def mailer():
    return FakeEmailSender()


@pytest.fixture
def signer(settings):
    return TokenSigner(settings.secret_key)


# ─── Seeds ───────────────────────────────────────────────────────

@pytest.fixture
def make_account(test_db, identity):
    """Create identity + user record; returns (user, session token)."""
    async def _make(role: Role = Role.USER, email: str | None = None, name: str = "Test User"):
        email = email or f"{role.value}-{len(identity.accounts)}@tbi.org"
        account_id = identity.add_account(email)
        user = UserAccount(
            id=account_id, email=email.lower(), name=name,
            role=role.value, status="active", email_notifications=True,
            **initial_progress(),
        )
        test_db.add(user)
        await test_db.commit()
        return user, identity.session_for(account_id)
    return _make


@pytest.fixture
async def seed_submission(test_db):
    submission = Submission(
        id="s1", name="Ada", email="a@x.com",
        idea="A marketplace for lab equipment sharing",
        campus_status="campus", status="pending",
    )
    test_db.add(submission)
    await test_db.commit()
    return submission


@pytest.fixture
async def seed_mentor(test_db, identity):
    """Mentor with identity, primary record and mentor user record."""
    account_id = identity.add_account(MENTOR_EMAIL)
    mentor = Mentor(
        id=account_id, name="Grace Hopper", email=MENTOR_EMAIL,
        designation="Rear Admiral", expertise="Compilers",
        bio="Pioneer of machine-independent programming languages.",
        status="active",
    )
    test_db.add(mentor)
    test_db.add(UserAccount(
        id=account_id, email=MENTOR_EMAIL, name="Grace Hopper",
        role=Role.MENTOR.value, status="active", email_notifications=True,
        **initial_progress(),
    ))
    await test_db.commit()
    return mentor


@pytest.fixture
def make_request(test_db, seed_mentor):
    """Insert a mentor request in a given status."""
    async def _make(request_id: str, status: str = "pending", user_id: str = "u1"):
        request = MentorRequest(
            id=request_id, user_id=user_id, user_name="Ada", user_email="a@x.com",
            mentor_id=seed_mentor.id, mentor_name=seed_mentor.name,
            mentor_email=seed_mentor.email,
            request_message="Please help me with my compiler startup.",
            status=status,
        )
        test_db.add(request)
        await test_db.commit()
        return request
    return _make


# ─── HTTP client ─────────────────────────────────────────────────

@pytest.fixture
async def client(test_engine, test_session_factory, identity, mailer, settings):
    """FastAPI test client with DB and collaborators overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = lambda: identity
    app.dependency_overrides[get_email_sender] = lambda: mailer
    app.dependency_overrides[get_settings] = lambda: settings

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager