import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401  registers every table on SQLModel.metadata
from config import ApplicationConfig
from src.app.services.external_action import ExternalActionResult
from src.app.services.lead_search_service import LeadSearchService
from src.app.services.phone_enrichment_service import PhoneEnrichmentService
from src.depends import get_lead_search_service, get_phone_enrichment_service, get_session


class FakeLeadSearchService(LeadSearchService):
    """Actor platform double: returns run ids in order, or raises"""

    def __init__(self):
        self.calls = []
        self.error = None
        self.run_ids = iter(f"run_{n}" for n in range(1, 1000))

    async def start_search(self, filters, fetch_count):
        self.calls.append((filters, fetch_count))
        if self.error:
            raise self.error
        return ExternalActionResult.ok(run_id=next(self.run_ids))


class FakePhoneEnrichmentService(PhoneEnrichmentService):
    """Contact enrichment double keyed by email"""

    def __init__(self):
        self.phones = {}
        self.error = None

    async def reveal_phone(self, email):
        if self.error:
            raise self.error
        phone = self.phones.get(email)
        if phone is None:
            return ExternalActionResult.failed("PHONE_NOT_FOUND", f"No phone number found for {email}")
        return ExternalActionResult.ok(phone=phone, person={"email": email})


class IntegrationConfig(ApplicationConfig):
    ENABLE_SENTRY = 0
    ENABLE_LOGGING_MIDDLEWARE = True
    WEBHOOK_SECRET = ""
    EXTERNAL_CALL_TIMEOUT_SECONDS = 5.0
    DEFAULT_LEAD_FETCH_COUNT = 10


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create test database engine on a throwaway SQLite file"""
    test_db_url = f"sqlite+aiosqlite:///{tmp_path / 'outreach_test.db'}"

    engine = create_async_engine(test_db_url, echo=False, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    """Session factory for tests that need one session per concurrent caller"""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
def lead_search_service():
    return FakeLeadSearchService()


@pytest_asyncio.fixture
def phone_service():
    return FakePhoneEnrichmentService()


@pytest_asyncio.fixture
def app_config():
    return IntegrationConfig


@pytest_asyncio.fixture
async def client(session_factory, lead_search_service, phone_service, app_config):
    """Create test client with database session and provider overrides"""
    from src.api.app import create_app

    app = create_app(app_config)

    # One session per request, like the production dependency
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_lead_search_service] = lambda: lead_search_service
    app.dependency_overrides[get_phone_enrichment_service] = lambda: phone_service

    # Use ASGITransport for httpx AsyncClient
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
