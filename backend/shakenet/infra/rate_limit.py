"""Fixed-window counters in Redis."""

from __future__ import annotations

import time
from typing import Optional

from shakenet.infra.redis import redis_client


class RateLimitExceeded(Exception):
	"""Raised when an actor has used up the budget of the current window."""

	def __init__(self, reason: str = "rate_limited", *, retry_after: Optional[int] = None) -> None:
		super().__init__(reason)
		self.reason = reason
		self.retry_after = retry_after


def _window_slot(window: int, now: float) -> int:
	return int(now // window)


def seconds_until_reset(window_seconds: int, now: Optional[float] = None) -> int:
	window = max(1, int(window_seconds))
	current = time.time() if now is None else now
	return max(1, int((_window_slot(window, current) + 1) * window - current))


async def hit(kind: str, actor_id: str, *, window_seconds: int = 60, now: Optional[float] = None) -> int:
	"""Count one attempt in the current window and return the window's total so far."""
	window = max(1, int(window_seconds))
	current = time.time() if now is None else now
	key = f"rl:{kind}:{actor_id}:{window}:{_window_slot(window, current)}"
	async with redis_client.pipeline(transaction=True) as pipe:
		pipe.incr(key)
		pipe.expire(key, window)
		count, _ = await pipe.execute()
	return int(count)


async def allow(
	kind: str,
	actor_id: str,
	*,
	limit: int,
	window_seconds: int = 60,
	now: Optional[float] = None,
) -> bool:
	if limit <= 0:
		return False
	return await hit(kind, actor_id, window_seconds=window_seconds, now=now) <= limit
