"""
Pytest configuration and fixtures.
"""

from datetime import datetime, timezone
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from src.models import (
    AffiliateBonding,
    Base,
    Lead,
    LinkClick,
    MarketingLink,
    ReferrerProfile,
    ReferrerRole,
    TaxIntakeLead,
)


# Test database URL (use SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def now():
    """Fixed reference time for attribution windows."""
    return datetime.now(timezone.utc)


class Factory:
    """Creates rows in the test session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._link_seq = 0

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def profile(
        self,
        username: Optional[str],
        role: ReferrerRole = ReferrerRole.AFFILIATE,
        **kwargs,
    ) -> ReferrerProfile:
        return await self._save(
            ReferrerProfile(
                short_link_username=username,
                role=role,
                display_name=kwargs.pop("display_name", username),
                is_active=kwargs.pop("is_active", True),
                **kwargs,
            )
        )

    async def bonding(
        self,
        affiliate: ReferrerProfile,
        preparer: ReferrerProfile,
        structure: Optional[dict],
        is_active: bool = True,
    ) -> AffiliateBonding:
        affiliate.affiliate_bonded_to_preparer_id = preparer.id
        return await self._save(
            AffiliateBonding(
                affiliate_id=affiliate.id,
                preparer_id=preparer.id,
                commission_structure=structure,
                is_active=is_active,
            )
        )

    async def link(self, creator: ReferrerProfile, code: Optional[str] = None) -> MarketingLink:
        self._link_seq += 1
        return await self._save(
            MarketingLink(
                code=code or f"link-{creator.id}-{self._link_seq}",
                creator_id=creator.id,
                creator_type=creator.role.value,
            )
        )

    async def click(
        self,
        link: MarketingLink,
        clicked_at: datetime,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        ip: Optional[str] = None,
    ) -> LinkClick:
        return await self._save(
            LinkClick(
                link_id=link.id,
                clicked_at=clicked_at,
                user_email=email,
                user_phone=phone,
                ip_address=ip,
            )
        )

    async def lead(self, **kwargs) -> Lead:
        return await self._save(Lead(**kwargs))

    async def intake(self, **kwargs) -> TaxIntakeLead:
        return await self._save(TaxIntakeLead(**kwargs))


@pytest_asyncio.fixture
async def factory(db_session):
    return Factory(db_session)


class BrokenSession:
    """Session stand-in whose every query fails like an unreachable database."""

    def __init__(self):
        self.rolled_back = False

    def _fail(self):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    async def execute(self, *args, **kwargs):
        self._fail()

    async def get(self, *args, **kwargs):
        self._fail()

    async def scalar(self, *args, **kwargs):
        self._fail()

    async def flush(self, *args, **kwargs):
        self._fail()

    async def refresh(self, *args, **kwargs):
        self._fail()

    def add(self, obj):
        pass

    async def rollback(self):
        self.rolled_back = True


@pytest.fixture
def broken_session():
    return BrokenSession()


@pytest_asyncio.fixture
async def client(db_session):
    """HTTP client bound to the app with get_db pointed at the test session."""
    from src.db import get_db
    from src.main import app

    async def _get_test_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_test_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as http_client:
        yield http_client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def broken_client(broken_session):
    """HTTP client whose database calls all fail."""
    from src.db import get_db
    from src.main import app

    async def _get_broken_db():
        yield broken_session

    app.dependency_overrides[get_db] = _get_broken_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as http_client:
        yield http_client

    app.dependency_overrides.clear()
