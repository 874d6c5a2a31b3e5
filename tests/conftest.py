"""
Test Configuration
==================

Pytest fixtures for assurance tests.
"""

import os
from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["ENVIRONMENT"] = "testing"
os.environ["STORAGE_BACKEND"] = "memory"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest_asyncio.fixture
async def storage() -> AsyncGenerator[Any, None]:
    """
    In-memory storage seeded with project P1, active standard S1 and
    profession F1, plus inactive standard S9 and profession F9.
    """
    from services.assurance.storage import InMemoryAssuranceStorage
    from shared.models import Profession, Project, ServiceStandard

    store = InMemoryAssuranceStorage()

    await store.projects.create(Project(id="P1", name="Apply for a licence"))
    await store.standards.create(
        ServiceStandard(id="S1", number=1, name="Understand users and their needs")
    )
    await store.standards.create(
        ServiceStandard(id="S2", number=2, name="Solve a whole problem for users")
    )
    await store.standards.create(
        ServiceStandard(id="S9", number=9, name="Retired standard", is_active=False)
    )
    await store.professions.create(Profession(id="F1", name="Delivery"))
    await store.professions.create(Profession(id="F2", name="Architecture"))
    await store.professions.create(
        Profession(id="F9", name="Retired profession", is_active=False)
    )

    yield store


@pytest.fixture
def handler(storage):
    """Assessment handler over the seeded storage."""
    from services.assurance.services import AssessmentHandler

    return AssessmentHandler(storage)


@pytest_asyncio.fixture
async def assurance_client(storage) -> AsyncGenerator[AsyncClient, None]:
    """Create test client for the Assurance Service over seeded storage."""
    from services.assurance.main import app
    from services.assurance.storage import reset_storage, set_storage

    set_storage(storage)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    reset_storage()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Generate admin authentication headers."""
    from shared.auth import create_access_token

    token = create_access_token({
        "sub": "test-user-id",
        "email": "test@assurance.local",
        "roles": ["user", "admin"],
    })
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def viewer_headers() -> dict[str, str]:
    """Generate authentication headers without the admin role."""
    from shared.auth import create_access_token

    token = create_access_token({"sub": "viewer-id", "roles": ["user"]})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def submission_data() -> dict[str, str]:
    """Sample assessment body, as sent by clients."""
    return {
        "status": "GREEN",
        "commentary": "ok",
        "changedBy": "alice",
    }
