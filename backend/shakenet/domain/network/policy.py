"""Guards applied before a meet request is delivered."""

from __future__ import annotations

from shakenet.domain.network.exceptions import MeetRateLimitExceeded, MeetSelfError, MeetTooFar
from shakenet.domain.network.models import UNREACHED
from shakenet.infra import rate_limit
from shakenet.settings import settings

MEET_WINDOW_SECONDS = 60


def guard_not_self(sender_id: str, target_id: str) -> None:
	if sender_id == target_id:
		raise MeetSelfError()


def guard_within_reach(distance: int, max_distance: int | None = None) -> None:
	limit = settings.meet_max_distance if max_distance is None else max_distance
	if distance == UNREACHED or distance > limit:
		raise MeetTooFar()


async def enforce_meet_limits(sender_id: str) -> None:
	if not await rate_limit.allow("meet", sender_id, limit=settings.meet_per_minute, window_seconds=MEET_WINDOW_SECONDS):
		raise MeetRateLimitExceeded(
			"per_minute",
			retry_after=rate_limit.seconds_until_reset(MEET_WINDOW_SECONDS),
		)
