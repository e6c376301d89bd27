import sys
from contextlib import asynccontextmanager
from pathlib import Path

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from shakenet.domain.network import service, sockets
from shakenet.domain.network.store import InMemoryFriendStore
from shakenet.infra import postgres
from shakenet.main import app
from shakenet.settings import settings


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from shakenet.infra.redis import set_redis_client

	client = FakeRedis(decode_responses=True)
	original = set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


class _FakeConnection:
	async def execute(self, query: str, *args):
		return "SELECT 1"


class _FakePool:
	def __init__(self) -> None:
		self.closed = False

	@asynccontextmanager
	async def acquire(self):
		yield _FakeConnection()

	async def close(self) -> None:
		self.closed = True


@pytest.fixture(autouse=True)
def fake_pool():
	"""Installed pool means init_pool never dials Postgres; close_pool just drops it."""
	pool = _FakePool()
	postgres.set_pool(pool)
	try:
		yield pool
	finally:
		postgres.set_pool(None)


@pytest.fixture(autouse=True)
def force_test_settings():
	"""API tests authenticate via X-User-Id, which is only accepted in dev mode."""
	original_env = settings.environment
	settings.environment = "dev"
	try:
		yield
	finally:
		settings.environment = original_env


@pytest.fixture
def friend_store():
	"""U1 lists U2 and U3, U2 lists U1 and U4; U5 has no friends at all."""
	store = InMemoryFriendStore(
		{
			"U1": ["U2", "U3"],
			"U2": ["U1", "U4"],
			"U3": [],
			"U4": [],
			"U5": [],
		}
	)
	original = service.get_store()
	service.set_store(store)
	try:
		yield store
	finally:
		service.set_store(original)


@pytest.fixture
def emitted(monkeypatch):
	events: list[tuple[str, dict]] = []

	async def fake_emit(user_id: str, payload: dict) -> None:
		events.append((user_id, payload))

	monkeypatch.setattr(sockets, "emit_meet_new", fake_emit)
	return events


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client
