"""REST API surface for the network graph and meet requests."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from shakenet.domain.network import audit, service
from shakenet.domain.network.exceptions import (
	BackendUnavailable,
	MeetRateLimitExceeded,
	MeetSelfError,
	MeetTooFar,
	NetworkForbidden,
	Unauthenticated,
)
from shakenet.domain.network.schemas import GraphRequest, MeetSendRequest, MeetSummary, NetworkGraphResponse
from shakenet.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/network")


def _map_error(exc: Exception) -> HTTPException:
	reason = getattr(exc, "reason", None)
	if isinstance(exc, Unauthenticated):
		return HTTPException(status.HTTP_401_UNAUTHORIZED, detail=reason or "unauthenticated")
	if isinstance(exc, (NetworkForbidden, MeetTooFar)):
		return HTTPException(status.HTTP_403_FORBIDDEN, detail=reason or "forbidden")
	if isinstance(exc, MeetSelfError):
		return HTTPException(status.HTTP_409_CONFLICT, detail=reason or "conflict")
	if isinstance(exc, MeetRateLimitExceeded):
		headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
		return HTTPException(status.HTTP_429_TOO_MANY_REQUESTS, detail=reason or "rate_limit", headers=headers)
	if isinstance(exc, BackendUnavailable):
		return HTTPException(
			status.HTTP_503_SERVICE_UNAVAILABLE,
			detail=reason or "backend_unavailable",
			headers={"Retry-After": "1"},
		)
	return HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post("/graph", response_model=NetworkGraphResponse)
async def get_graph(
	payload: GraphRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> NetworkGraphResponse:
	try:
		return await service.get_network_graph(auth_user, payload.user_id)
	except (Unauthenticated, NetworkForbidden, BackendUnavailable) as exc:
		raise _map_error(exc) from None


@router.post("/meet", response_model=MeetSummary, response_model_by_alias=True)
async def send_meet(
	payload: MeetSendRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> MeetSummary:
	try:
		return await service.send_meet(auth_user, payload.to_user_id, payload.message)
	except (MeetSelfError, MeetTooFar, MeetRateLimitExceeded) as exc:
		audit.inc_meet(exc.reason)
		raise _map_error(exc) from None
	except (Unauthenticated, BackendUnavailable) as exc:
		raise _map_error(exc) from None
