"""Read-side access to users and their friend lists.

The graph builder only needs two reads: every known user id, and the friend ids
recorded under one user. Friendships are stored directionally (one row per owner),
so the same pair can show up from both sides.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Protocol

import asyncpg

from shakenet.domain.network.exceptions import BackendUnavailable
from shakenet.infra.postgres import get_pool


class FriendStore(Protocol):
	async def list_user_ids(self) -> List[str]:
		...

	async def list_friend_ids(self, user_id: str) -> List[str]:
		...


_LIST_USERS_SQL = """
SELECT id::text AS id
FROM users
WHERE deleted_at IS NULL
ORDER BY created_at, id
"""

_LIST_FRIENDS_SQL = """
SELECT friend_id::text AS friend_id
FROM friendships
WHERE user_id = $1 AND status = 'accepted'
"""

_STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class PostgresFriendStore:
	"""Friend store backed by the `users` and `friendships` tables."""

	def __init__(self, pool_getter: Callable[[], Awaitable[asyncpg.pool.Pool]] = get_pool) -> None:
		self._pool_getter = pool_getter

	async def list_user_ids(self) -> List[str]:
		try:
			pool = await self._pool_getter()
			async with pool.acquire() as conn:
				rows = await conn.fetch(_LIST_USERS_SQL)
		except _STORE_ERRORS as exc:
			raise BackendUnavailable("users_read_failed") from exc
		return [row["id"] for row in rows]

	async def list_friend_ids(self, user_id: str) -> List[str]:
		try:
			pool = await self._pool_getter()
			async with pool.acquire() as conn:
				rows = await conn.fetch(_LIST_FRIENDS_SQL, user_id)
		except _STORE_ERRORS as exc:
			raise BackendUnavailable("friends_read_failed") from exc
		return [row["friend_id"] for row in rows]


class InMemoryFriendStore:
	"""Dict-backed store for tests and local tooling."""

	def __init__(self, friends: Optional[Mapping[str, Iterable[str]]] = None) -> None:
		self._friends: Dict[str, List[str]] = {}
		for user_id, friend_ids in (friends or {}).items():
			self._friends[user_id] = list(friend_ids)

	def add_user(self, user_id: str) -> None:
		self._friends.setdefault(user_id, [])

	def add_friend(self, user_id: str, friend_id: str) -> None:
		self._friends.setdefault(user_id, []).append(friend_id)

	async def list_user_ids(self) -> List[str]:
		return list(self._friends)

	async def list_friend_ids(self, user_id: str) -> List[str]:
		return list(self._friends.get(user_id, []))
