"""Liveness, readiness and startup probes."""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Awaitable, Callable, Dict, Tuple

from shakenet.infra import postgres
from shakenet.infra.redis import redis_client
from shakenet.obs import metrics
from shakenet.settings import settings

LOGGER = logging.getLogger(__name__)

Probe = Tuple[int, Dict[str, Any]]


async def _ping_redis() -> None:
	await redis_client.ping()


async def _ping_postgres() -> None:
	pool = await postgres.get_pool()
	async with pool.acquire() as conn:
		await conn.execute("SELECT 1")


async def _check(
	name: str,
	ping: Callable[[], Awaitable[None]],
	mark: Callable[..., None],
	timeout: float,
) -> Dict[str, Any]:
	start = perf_counter()
	try:
		await asyncio.wait_for(ping(), timeout=timeout)
	except Exception as exc:  # pragma: no cover - depends on runtime
		mark(False)
		LOGGER.warning("%s readiness check failed", name, exc_info=True)
		return {"ok": False, "error": str(exc) or exc.__class__.__name__}
	latency = perf_counter() - start
	mark(True, latency_seconds=latency)
	return {"ok": True, "latency_ms": round(latency * 1000, 2)}


async def liveness() -> Dict[str, Any]:
	return {"status": "ok"}


async def readiness() -> Probe:
	# Graph builds need the friend store; meets also need Redis for limits and audit.
	redis_state, postgres_state = await asyncio.gather(
		_check("redis", _ping_redis, metrics.mark_redis, 0.2),
		_check("postgres", _ping_postgres, metrics.mark_postgres, 0.3),
	)
	ok = bool(redis_state["ok"] and postgres_state["ok"])
	payload = {
		"status": "ok" if ok else "degraded",
		"checks": {"redis": redis_state, "postgres": postgres_state},
	}
	return (200 if ok else 503), payload


async def startup() -> Probe:
	if settings.obs_tracing_enabled and not settings.otel_exporter_otlp_endpoint:
		return 503, {"status": "error", "error": "missing_otlp_endpoint"}
	return 200, {"status": "ok", "service": settings.service_name, "commit": settings.git_commit}
