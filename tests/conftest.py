from collections.abc import AsyncIterator, Iterator

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.services import session_store


@pytest.fixture(autouse=True)
def _clear_sessions() -> Iterator[None]:
    session_store.clear_sessions()
    yield
    session_store.clear_sessions()


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
