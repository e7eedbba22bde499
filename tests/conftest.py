"""Pytest fixtures for VendorIQ tests."""

from collections.abc import AsyncGenerator
from datetime import datetime

import pytest
import pytest_asyncio
import structlog
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from factories import FIXED_NOW
from vendoriq.api.app import create_app
from vendoriq.config.settings import EngineConfig, Settings
from vendoriq.db.models.base import Base
from vendoriq.repository import (
    AssetProfile,
    InMemoryHistoryRepository,
    RelationshipProfile,
    VendorProfile,
)
from vendoriq.risk.engine import RiskIntelligenceEngine


# =============================================================================
# Structlog Configuration Fixture
# =============================================================================


@pytest.fixture(scope="function", autouse=True)
def reset_structlog_after_test():
    """Reset structlog configuration after each test.

    This ensures tests that modify structlog global state
    don't affect other tests.
    """
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


# =============================================================================
# Settings and Time
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Create settings for testing."""
    return Settings(
        ENVIRONMENT="test",
        DEBUG=True,
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        log_level="DEBUG",
        engine=EngineConfig(repository_timeout_seconds=0.5),
    )


@pytest.fixture
def now() -> datetime:
    """Fixed reference time used by the engine clock."""
    return FIXED_NOW


# =============================================================================
# Sample Profiles and History
# =============================================================================


@pytest.fixture
def sample_asset() -> AssetProfile:
    """Asset matching the documented worked example (scores 78, high)."""
    return AssetProfile(
        asset_id="asset-1",
        criticality="critical",
        business_impact="high",
        data_classification="confidential",
        compliance_requirements=["GDPR"],
        security_controls=[],
        organization_id="org-1",
    )


@pytest.fixture
def sample_vendor() -> VendorProfile:
    """Approved financial vendor with partial compliance."""
    return VendorProfile(
        vendor_id="vendor-1",
        name="Acme Payments",
        industry="Financial",
        compliance_status="partial",
        risk_score=55.0,
        organization_id="org-1",
    )


@pytest.fixture
def sample_relationship() -> RelationshipProfile:
    """Relationship between the sample asset and vendor."""
    return RelationshipProfile(
        relationship_id="rel-1",
        asset_id="asset-1",
        vendor_id="vendor-1",
        criticality_to_asset="high",
        data_access_level="read_write",
        integration_type="api",
    )


# =============================================================================
# Repository and Engine
# =============================================================================


@pytest.fixture
def repository(
    sample_asset: AssetProfile,
    sample_vendor: VendorProfile,
    sample_relationship: RelationshipProfile,
) -> InMemoryHistoryRepository:
    """In-memory repository seeded with the sample profiles."""
    repo = InMemoryHistoryRepository()
    repo.add_asset(sample_asset)
    repo.add_vendor(sample_vendor)
    repo.add_relationship(sample_relationship)
    return repo


@pytest.fixture
def engine(repository: InMemoryHistoryRepository, now: datetime) -> RiskIntelligenceEngine:
    """Engine over the seeded in-memory repository with a fixed clock."""
    return RiskIntelligenceEngine(
        repository,
        config=EngineConfig(repository_timeout_seconds=0.5),
        clock=lambda: now,
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory over a fresh in-memory SQLite database."""
    db_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    await db_engine.dispose()


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
def test_app(test_settings: Settings, engine: RiskIntelligenceEngine) -> FastAPI:
    """Create a test FastAPI application over the in-memory engine."""
    return create_app(settings=test_settings, engine=engine)


@pytest_asyncio.fixture
async def test_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for the test application."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
