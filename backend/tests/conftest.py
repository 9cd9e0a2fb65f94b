"""Pytest configuration and shared fixtures.

This module provides centralized test fixtures for:
- A throwaway SQLite profile store (one database file per test)
- A local cache slot in a temp directory
- Profile factories and failing-store doubles
- HTTP client for API testing with all services wired to the above
"""

import os

# Keep the application engine off PostgreSQL during tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
# Summaries fall back to the local formatter unless a test injects a client
os.environ["OPENAI_API_KEY"] = ""

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from hajjcare import models  # noqa: F401  (registers tables on Base.metadata)
from hajjcare.database import Base
from hajjcare.dependencies import (
    get_editor,
    get_link_builder,
    get_resolver,
    get_share_channel,
    get_summary_service,
)
from hajjcare.main import app
from hajjcare.schemas.profile import (
    BloodPressureReading,
    BloodSugarReading,
    MedicalHistory,
    Medication,
    PilgrimProfile,
    VitalSigns,
)
from hajjcare.services.background import BackgroundSync
from hajjcare.services.links import ShareLinkBuilder
from hajjcare.services.local_cache import LocalProfileCache
from hajjcare.services.profile_editor import ProfileEditor
from hajjcare.services.remote_store import RemoteProfileStore, StoreUnavailable
from hajjcare.services.resolver import ProfileResolver
from hajjcare.services.summary import EmergencySummaryService

TEST_ORIGIN = "https://care.example"


# =============================================================================
# Profile Fixtures
# =============================================================================


def build_profile(profile_id: str = "H-2024-1111", **overrides) -> PilgrimProfile:
    """Build a fully populated, edited (non-template) profile."""
    data = {
        "id": profile_id,
        "full_name": "Test User",
        "nationality": "Pakistani",
        "native_language": "اردو",
        "passport_id": "P1234567",
        "emergency_contact_name": "Al-Noor Campaign",
        "emergency_phone": "+966500000001",
        "red_crescent_phone": "997",
        "security_code": "4821",
        "medical_history": MedicalHistory(
            chronic_diseases=["Type 2 diabetes", "ذیابیطس"],
            allergies=["Penicillin"],
            previous_surgeries=[],
        ),
        "medication_history": [
            Medication(name="Metformin", dosage="500mg", frequency="twice daily"),
        ],
        "vital_signs": VitalSigns(
            blood_type="B+",
            blood_sugar_readings=[
                BloodSugarReading(
                    value=162,
                    measured_at=datetime(2024, 6, 10, 7, 45, tzinfo=timezone.utc),
                    note="fasting",
                ),
            ],
            blood_pressure_readings=[
                BloodPressureReading(
                    systolic=142,
                    diastolic=88,
                    pulse=78,
                    measured_at=datetime(2024, 6, 10, 8, 0, tzinfo=timezone.utc),
                ),
            ],
        ),
    }
    data.update(overrides)
    return PilgrimProfile(**data)


@pytest.fixture
def profile_factory():
    """Factory for edited profiles: ``profile_factory("H-2024-2222", full_name=...)``."""
    return build_profile


@pytest.fixture
def sample_profile() -> PilgrimProfile:
    """A single edited profile with id H-2024-1111."""
    return build_profile()


# =============================================================================
# Store / Cache Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """SQLite engine with the profile schema created.

    Uses one database file per test, so tests never share documents.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'profiles.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def store(session_maker) -> RemoteProfileStore:
    """Remote profile store over the test database."""
    return RemoteProfileStore(session_maker, timeout=5.0)


@pytest.fixture
def cache(tmp_path) -> LocalProfileCache:
    """Empty local cache slot in a temp directory."""
    return LocalProfileCache(tmp_path / "cache" / "active_profile.json")


class UnavailableStore:
    """Store double whose every call fails like an unreachable backend."""

    def __init__(self):
        self.get_calls: list[str] = []
        self.put_calls: list[str] = []

    async def get(self, profile_id: str) -> PilgrimProfile | None:
        self.get_calls.append(profile_id)
        raise StoreUnavailable("connection refused")

    async def put(self, profile_id: str, profile: PilgrimProfile) -> bool:
        self.put_calls.append(profile_id)
        raise StoreUnavailable("connection refused")


@pytest.fixture
def unavailable_store() -> UnavailableStore:
    """Store that always raises StoreUnavailable."""
    return UnavailableStore()


# =============================================================================
# HTTP Client Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def client(store, cache):
    """Async test client for the FastAPI app.

    Overrides every service dependency so the app uses the test store, the
    temp cache slot and a summary service without an OpenAI client.
    """
    sync = BackgroundSync(store)
    resolver = ProfileResolver(store, cache, sync)
    editor = ProfileEditor(cache, sync, mirror_on_save=True)
    links = ShareLinkBuilder(TEST_ORIGIN, store)
    summaries = EmergencySummaryService(client=None)

    app.dependency_overrides[get_resolver] = lambda: resolver
    app.dependency_overrides[get_editor] = lambda: editor
    app.dependency_overrides[get_link_builder] = lambda: links
    app.dependency_overrides[get_share_channel] = lambda: None
    app.dependency_overrides[get_summary_service] = lambda: summaries

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    await sync.drain()

    # Clean up overrides
    app.dependency_overrides.clear()
