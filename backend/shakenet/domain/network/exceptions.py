"""Domain-level exceptions for the network graph and meet requests."""

from __future__ import annotations

from shakenet.infra.rate_limit import RateLimitExceeded


class NetworkError(Exception):
	"""Base class for network graph errors."""

	reason: str = "unknown"
	retryable: bool = False

	def __init__(self, reason: str | None = None) -> None:
		super().__init__(reason or self.reason)
		if reason:
			self.reason = reason


class Unauthenticated(NetworkError):
	reason = "unauthenticated"


class NetworkForbidden(NetworkError):
	reason = "forbidden"


class BackendUnavailable(NetworkError):
	"""The friend store could not be read. Callers may retry."""

	reason = "backend_unavailable"
	retryable = True


class MalformedResponse(NetworkError):
	reason = "malformed_response"


class MeetError(NetworkError):
	reason = "meet_rejected"


class MeetSelfError(MeetError):
	reason = "self_meet"


class MeetTooFar(MeetError):
	reason = "too_far"


class MeetRateLimitExceeded(RateLimitExceeded):
	"""Raised when meet sending hits a quota."""
