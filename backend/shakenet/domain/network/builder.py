"""Server-side construction of the social network graph.

Every user's friend list is read, first-seen ids get a coordinate derived from the
id alone, reverse-direction friend records collapse into one undirected edge, and
users without any edge are left out of the response.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from shakenet.domain.network.exceptions import BackendUnavailable, Unauthenticated
from shakenet.domain.network.models import edge_key
from shakenet.domain.network.schemas import GraphEdgePayload, GraphNodePayload, NetworkGraphResponse
from shakenet.domain.network.store import FriendStore

logger = logging.getLogger(__name__)

_HASH_MASK = 0xFFFFFFFF
COORD_SPAN = 400
COORD_OFFSET = 200


def _utf16_units(text: str) -> List[int]:
	raw = text.encode("utf-16-be")
	return [(raw[i] << 8) | raw[i + 1] for i in range(0, len(raw), 2)]


def id_hash(node_id: str) -> int:
	"""Unsigned 32-bit `hash * 31 + code` fold over the id's UTF-16 code units."""
	value = 0
	for unit in _utf16_units(node_id):
		value = (value * 31 + unit) & _HASH_MASK
	return value


def pseudo_random_coord(node_id: str) -> Tuple[float, float]:
	"""Deterministic initial position in [-200, 200) on both axes."""
	value = id_hash(node_id)
	x = ((value >> 3) % COORD_SPAN) - COORD_OFFSET
	y = ((value >> 5) % COORD_SPAN) - COORD_OFFSET
	return float(x), float(y)


async def _gather_friend_lists(
	store: FriendStore,
	user_ids: List[str],
	concurrency: int,
) -> List[List[str]]:
	semaphore = asyncio.Semaphore(max(1, concurrency))

	async def _fetch(user_id: str) -> List[str]:
		async with semaphore:
			return await store.list_friend_ids(user_id)

	return await asyncio.gather(*(_fetch(user_id) for user_id in user_ids))


async def build_graph(
	store: FriendStore,
	requester_id: Optional[str],
	*,
	concurrency: int = 16,
) -> NetworkGraphResponse:
	if not requester_id or not str(requester_id).strip():
		raise Unauthenticated()

	try:
		user_ids = await store.list_user_ids()
		friend_lists = await _gather_friend_lists(store, user_ids, concurrency)
	except BackendUnavailable:
		raise
	except Exception as exc:
		raise BackendUnavailable("store_read_failed") from exc

	positions: Dict[str, Tuple[float, float]] = {}
	edges: Dict[Tuple[str, str], GraphEdgePayload] = {}

	def _ensure_node(node_id: str) -> None:
		if node_id not in positions:
			positions[node_id] = pseudo_random_coord(node_id)

	for user_id, friend_ids in zip(user_ids, friend_lists):
		_ensure_node(user_id)
		for friend_id in friend_ids:
			if not friend_id:
				continue
			_ensure_node(friend_id)
			if friend_id == user_id:
				continue
			key = edge_key(user_id, friend_id)
			if key not in edges:
				edges[key] = GraphEdgePayload(source=key[0], target=key[1])

	connected = set()
	for source, target in edges:
		connected.add(source)
		connected.add(target)

	nodes = [
		GraphNodePayload(id=node_id, x=x, y=y)
		for node_id, (x, y) in positions.items()
		if node_id in connected
	]
	logger.info(
		"network graph built",
		extra={
			"requester_id": requester_id,
			"users_scanned": len(user_ids),
			"nodes": len(nodes),
			"edges": len(edges),
			"isolated_dropped": len(positions) - len(nodes),
		},
	)
	return NetworkGraphResponse(nodes=nodes, edges=list(edges.values()))
