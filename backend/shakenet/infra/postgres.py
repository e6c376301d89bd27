"""Shared asyncpg pool for friend-list reads."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import asyncpg

from shakenet.settings import settings

logger = logging.getLogger(__name__)

_pool: Optional[asyncpg.pool.Pool] = None
# Graph builds read many friend lists at once; only one of them may open the pool.
_pool_lock = asyncio.Lock()


async def init_pool() -> asyncpg.pool.Pool:
	global _pool
	async with _pool_lock:
		if _pool is None:
			_pool = await asyncpg.create_pool(
				dsn=settings.postgres_url,
				min_size=settings.postgres_min_pool_size,
				max_size=settings.postgres_max_pool_size,
				command_timeout=settings.postgres_command_timeout,
				server_settings={"application_name": settings.service_name},
			)
			logger.info("postgres pool opened", extra={"max_size": settings.postgres_max_pool_size})
	return _pool


async def get_pool() -> asyncpg.pool.Pool:
	if _pool is not None:
		return _pool
	return await init_pool()


def set_pool(pool: Optional[asyncpg.pool.Pool]) -> None:
	global _pool
	_pool = pool


async def close_pool() -> None:
	global _pool
	pool, _pool = _pool, None
	if pool is not None:
		await pool.close()
		logger.info("postgres pool closed")
