"""Service layer for network graph requests and meet delivery."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from shakenet.domain.network import audit, builder, paths, policy, sockets
from shakenet.domain.network.exceptions import NetworkError, NetworkForbidden, Unauthenticated
from shakenet.domain.network.models import NetworkNode, SocialGraph, Vector
from shakenet.domain.network.schemas import MeetSummary, NetworkGraphResponse
from shakenet.domain.network.store import FriendStore, PostgresFriendStore
from shakenet.infra.auth import AuthenticatedUser
from shakenet.obs import metrics as obs_metrics
from shakenet.obs import tracing
from shakenet.settings import settings

logger = logging.getLogger(__name__)

_store: FriendStore = PostgresFriendStore()


def set_store(store: FriendStore) -> None:
	global _store
	_store = store


def get_store() -> FriendStore:
	return _store


def graph_from_response(response: NetworkGraphResponse) -> SocialGraph:
	graph = SocialGraph()
	for node in response.nodes:
		graph.add_node(NetworkNode(id=node.id, position=Vector(node.x, node.y)))
	for edge in response.edges:
		graph.add_edge(edge.source, edge.target)
	return graph


async def get_network_graph(
	auth_user: Optional[AuthenticatedUser],
	user_id: str,
	*,
	store: Optional[FriendStore] = None,
) -> NetworkGraphResponse:
	if auth_user is None or not auth_user.id:
		obs_metrics.record_graph_build("unauthenticated")
		raise Unauthenticated()
	if str(user_id) != str(auth_user.id):
		obs_metrics.record_graph_build("forbidden")
		raise NetworkForbidden()

	start = time.perf_counter()
	try:
		with tracing.span("network.graph.build", requester_id=auth_user.id):
			response = await builder.build_graph(
				store or _store,
				auth_user.id,
				concurrency=settings.graph_fetch_concurrency,
			)
	except NetworkError as exc:
		obs_metrics.record_graph_build(exc.reason)
		raise
	obs_metrics.record_graph_build(
		"ok",
		duration_seconds=time.perf_counter() - start,
		nodes=len(response.nodes),
	)
	return response


async def send_meet(
	auth_user: AuthenticatedUser,
	to_user_id: str,
	message: str,
	*,
	store: Optional[FriendStore] = None,
) -> MeetSummary:
	sender_id = str(auth_user.id)
	target_id = str(to_user_id)
	text = message.strip()[: settings.meet_message_max_length] or "meet!!"

	policy.guard_not_self(sender_id, target_id)
	await policy.enforce_meet_limits(sender_id)

	with tracing.span("network.meet.reach", sender_id=sender_id, target_id=target_id):
		response = await builder.build_graph(
			store or _store,
			sender_id,
			concurrency=settings.graph_fetch_concurrency,
		)
		distance = paths.distance_between(graph_from_response(response), sender_id, target_id)
	policy.guard_within_reach(distance)

	summary = MeetSummary(
		from_user_id=sender_id,
		to_user_id=target_id,
		message=text,
		distance=distance,
		sent_at=datetime.now(timezone.utc),
	)
	await audit.log_meet_event(
		"meet.sent",
		{"from_user_id": sender_id, "to_user_id": target_id, "distance": str(distance)},
	)
	await sockets.emit_meet_new(target_id, summary.model_dump(mode="json", by_alias=True))
	audit.inc_meet("sent")
	logger.info("meet sent", extra={"from_user_id": sender_id, "to_user_id": target_id, "distance": distance})
	return summary
