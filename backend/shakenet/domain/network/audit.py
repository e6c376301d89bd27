"""Audit trail for meet requests."""

from __future__ import annotations

from typing import Dict

from shakenet.infra.redis import redis_client
from shakenet.obs import metrics as obs_metrics

MEET_EVENTS_STREAM = "x:meets.events"


async def log_meet_event(event: str, fields: Dict[str, str]) -> None:
	payload = {"event": event, **fields}
	await redis_client.xadd(MEET_EVENTS_STREAM, payload)


def inc_meet(result: str) -> None:
	obs_metrics.inc_meet(result)
