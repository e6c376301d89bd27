"""Redis access for rate-limit counters and the meet event stream.

`redis_client` is a module-level proxy. The connection behind it is opened on
first use and can be swapped (fakeredis in tests) without touching modules that
imported the proxy.
"""

from __future__ import annotations

from typing import Any, Optional

import redis.asyncio as redis

from shakenet.settings import settings


class RedisProxy:
	def __init__(self, url: str) -> None:
		self._url = url
		self._client: Optional[redis.Redis] = None

	@property
	def client(self) -> redis.Redis:
		if self._client is None:
			self._client = redis.from_url(self._url, decode_responses=True)
		return self._client

	def swap(self, client: Optional[redis.Redis]) -> Optional[redis.Redis]:
		"""Install `client` and return the one it replaces (None if never opened)."""
		previous, self._client = self._client, client
		return previous

	async def close(self) -> None:
		client, self._client = self._client, None
		if client is not None:
			await client.aclose()

	def __getattr__(self, item: str) -> Any:
		return getattr(self.client, item)


redis_client = RedisProxy(settings.redis_url)


def set_redis_client(client: Optional[redis.Redis]) -> Optional[redis.Redis]:
	return redis_client.swap(client)
