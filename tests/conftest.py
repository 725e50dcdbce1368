"""
Pytest fixtures - stores, service, HTTP client.
The durable store runs on a throwaway SQLite file; the ``store`` fixture runs a test
against both backends.
"""

from collections.abc import Callable
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from user_directory.core.dependencies import get_directory_service
from user_directory.db.session import create_engine
from user_directory.db.stores import MemoryUserStore, SqlUserStore
from user_directory.db.stores.sql_store import prepare_schema
from user_directory.main import app
from user_directory.services.directory_service import DirectoryService

HOBBY_CYCLE = ["reading", "chess", "hiking", "painting"]


def build_payload(n: int, **overrides: Any) -> dict[str, Any]:
    """Valid create payload for user number ``n``; unique email and phone per n."""
    payload = {
        "name": f"User {n:02d}",
        "email": f"user{n}@example.com",
        "phone": f"555000{n:04d}",
        "countryCode": "+1",
        "place": ["Berlin", "Lisbon", "Austin"][n % 3],
        "gender": ["female", "male"][n % 2],
        "hobbies": [HOBBY_CYCLE[n % len(HOBBY_CYCLE)]],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    return build_payload


async def _sql_store(tmp_path) -> SqlUserStore:
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await prepare_schema(engine)
    return SqlUserStore(engine)


@pytest.fixture
def memory_store() -> MemoryUserStore:
    return MemoryUserStore()


@pytest_asyncio.fixture
async def sql_store(tmp_path):
    store = await _sql_store(tmp_path)
    yield store
    await store.close()


@pytest_asyncio.fixture(params=["volatile", "durable"])
async def store(request, tmp_path):
    """Each test using this fixture runs once per backend."""
    if request.param == "volatile":
        backend = MemoryUserStore()
    else:
        backend = await _sql_store(tmp_path)
    yield backend
    await backend.close()


@pytest.fixture
def service(store) -> DirectoryService:
    return DirectoryService(store)


async def _client_for(directory: DirectoryService):
    app.dependency_overrides[get_directory_service] = lambda: directory
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(memory_store: MemoryUserStore):
    async for ac in _client_for(DirectoryService(memory_store)):
        yield ac


@pytest_asyncio.fixture
async def durable_client(sql_store: SqlUserStore):
    async for ac in _client_for(DirectoryService(sql_store)):
        yield ac
