"""Test configuration and fixtures."""

import os

# Settings are read at import time; point them at an in-memory database first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("ENABLE_WORKERS", "false")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import date, timedelta  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tourcrm.core.database import Base, get_db  # noqa: E402
from tourcrm.core.security import create_access_token, hash_password  # noqa: E402
from tourcrm.models import *  # noqa: E402,F403 - Import all models
from tourcrm.models import Client, ExchangeRate, Lead, Tenant, User  # noqa: E402
from tourcrm.models.enums import Currency, LeadStatus, UserRole  # noqa: E402
from tourcrm.services.exchange_rate_service import clear_rate_cache  # noqa: E402

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def reset_rate_cache():
    """Exchange rate lookups are cached per process; start every test empty."""
    clear_rate_cache()
    yield
    clear_rate_cache()


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session):
    """Create a test FastAPI application."""
    from fastapi import FastAPI
    from fastapi.exceptions import RequestValidationError

    from tourcrm.core.exceptions import (
        ProblemDetailsException,
        generic_exception_handler,
        problem_details_handler,
        request_validation_handler,
    )
    from tourcrm.core.middleware import setup_middleware
    from tourcrm.routers import api_routers

    # Create a simplified test app without lifespan
    app = FastAPI(
        title="Tour Operator CRM API (Test)",
        description="Test version of the API",
        version="1.0.0-test",
    )

    setup_middleware(app, enable_logging=False)

    # Register exception handlers
    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    for router in api_routers:
        app.include_router(router)

    # Override database dependency
    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# Tenancy

async def make_tenant(session: AsyncSession, slug: str) -> Tenant:
    tenant = Tenant(name=slug.replace("-", " ").title(), slug=slug, default_currency=Currency.EUR)
    session.add(tenant)
    await session.commit()
    return tenant


@pytest_asyncio.fixture
async def tenant(test_session):
    """The tenant most tests act in."""
    return await make_tenant(test_session, "anatolia-tours")


@pytest_asyncio.fixture
async def other_tenant(test_session):
    """A second tenant, used to check isolation."""
    return await make_tenant(test_session, "aegean-travel")


@pytest_asyncio.fixture
async def admin_user(test_session, tenant):
    """An ADMIN with a known password."""
    user = User(
        tenant_id=tenant.id,
        email="admin@anatolia.example",
        name="Admin User",
        password_hash=hash_password(TEST_PASSWORD),
        role=UserRole.ADMIN,
    )
    test_session.add(user)
    await test_session.commit()
    return user


def token_for(tenant: Tenant, role: UserRole, user_id: str = None) -> str:
    from uuid import uuid4

    return create_access_token(
        user_id=user_id or str(uuid4()),
        tenant_id=str(tenant.id),
        role=role.value,
    )


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(tenant, admin_user):
    return auth_headers(token_for(tenant, UserRole.ADMIN, str(admin_user.id)))


@pytest.fixture
def owner_headers(tenant):
    return auth_headers(token_for(tenant, UserRole.OWNER))


@pytest.fixture
def agent_headers(tenant):
    return auth_headers(token_for(tenant, UserRole.AGENT))


@pytest.fixture
def operations_headers(tenant):
    return auth_headers(token_for(tenant, UserRole.OPERATIONS))


@pytest.fixture
def accounting_headers(tenant):
    return auth_headers(token_for(tenant, UserRole.ACCOUNTING))


@pytest.fixture
def guide_headers(tenant):
    return auth_headers(token_for(tenant, UserRole.GUIDE))


@pytest.fixture
def other_tenant_headers(other_tenant):
    return auth_headers(token_for(other_tenant, UserRole.ADMIN))


# Domain data

@pytest_asyncio.fixture
async def client_record(test_session, tenant):
    """A client with an email address, so quotations can be sent."""
    client = Client(
        tenant_id=tenant.id,
        name="Ayse Demir",
        email="ayse@example.com",
        nationality="TR",
    )
    test_session.add(client)
    await test_session.commit()
    return client


@pytest_asyncio.fixture
async def lead_record(test_session, tenant, client_record):
    lead = Lead(
        tenant_id=tenant.id,
        client_id=client_record.id,
        source="website",
        destination="Cappadocia",
        pax_adults=2,
        status=LeadStatus.NEW,
    )
    test_session.add(lead)
    await test_session.commit()
    return lead


@pytest_asyncio.fixture
async def try_eur_rate(test_session, tenant):
    """35.5 TRY per EUR, dated yesterday."""
    rate = ExchangeRate(
        tenant_id=tenant.id,
        from_currency=Currency.TRY,
        to_currency=Currency.EUR,
        rate=35.5,
        rate_date=date.today() - timedelta(days=1),
        source="test",
    )
    test_session.add(rate)
    await test_session.commit()
    return rate


@pytest.fixture
def sample_quotation_items():
    """Line items stored in a quotation's custom_json."""
    return [
        {
            "item_type": "HOTEL",
            "description": "Cave hotel, 2 nights",
            "service_date": (date.today() + timedelta(days=30)).isoformat(),
            "qty": 2,
            "unit_cost_try": 4000,
            "unit_price_eur": 150,
        },
        {
            "item_type": "TRANSFER",
            "description": "Airport transfer",
            "service_date": (date.today() + timedelta(days=32)).isoformat(),
            "qty": 1,
            "unit_cost_try": 1500,
            "unit_price_eur": 60,
        },
    ]
