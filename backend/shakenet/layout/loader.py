"""Client-side loading of the network graph.

`parse_graph_payload` accepts the service response as-is and keeps whatever it
can: an entry missing a field or carrying a non-numeric coordinate is skipped
with a warning instead of failing the whole load.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Optional

import httpx

from shakenet.domain.network.exceptions import (
	BackendUnavailable,
	MalformedResponse,
	NetworkError,
	NetworkForbidden,
	Unauthenticated,
)
from shakenet.domain.network.models import NetworkNode, SocialGraph, Vector
from shakenet.domain.network.paths import compute_distances
from shakenet.layout.profiles import ProfileDirectory

logger = logging.getLogger(__name__)


def _coordinate(value: Any) -> Optional[float]:
	if isinstance(value, bool) or not isinstance(value, (int, float)):
		return None
	try:
		number = float(value)
	except OverflowError:
		return None
	return number if math.isfinite(number) else None


def _non_empty_str(value: Any) -> Optional[str]:
	if isinstance(value, str) and value:
		return value
	return None


def parse_graph_payload(payload: Any, current_user_id: Optional[str] = None) -> SocialGraph:
	if not isinstance(payload, dict):
		raise MalformedResponse("payload_not_object")
	node_entries = payload.get("nodes")
	edge_entries = payload.get("edges")
	if not isinstance(node_entries, list) or not isinstance(edge_entries, list):
		raise MalformedResponse("missing_nodes_or_edges")

	graph = SocialGraph()
	for entry in node_entries:
		node_id = _non_empty_str(entry.get("id")) if isinstance(entry, dict) else None
		x = _coordinate(entry.get("x")) if isinstance(entry, dict) else None
		y = _coordinate(entry.get("y")) if isinstance(entry, dict) else None
		if node_id is None or x is None or y is None:
			logger.warning("skipping malformed node entry", extra={"entry": entry})
			continue
		graph.add_node(
			NetworkNode(
				id=node_id,
				position=Vector(x, y),
				is_current_user=node_id == current_user_id,
			)
		)

	for entry in edge_entries:
		source = _non_empty_str(entry.get("source")) if isinstance(entry, dict) else None
		target = _non_empty_str(entry.get("target")) if isinstance(entry, dict) else None
		if source is None or target is None:
			logger.warning("skipping malformed edge entry", extra={"entry": entry})
			continue
		graph.add_edge(source, target)
	return graph


class GraphClient:
	"""HTTP client for the network graph service."""

	def __init__(self, client: httpx.AsyncClient, *, token: Optional[str] = None) -> None:
		self._client = client
		self._token = token

	def _headers(self) -> dict[str, str]:
		if not self._token:
			return {}
		return {"Authorization": f"Bearer {self._token}"}

	async def _post(self, path: str, body: dict[str, Any]) -> Any:
		try:
			response = await self._client.post(path, json=body, headers=self._headers())
		except httpx.TransportError as exc:
			raise BackendUnavailable("transport_error") from exc
		if response.status_code == 401:
			raise Unauthenticated()
		if response.status_code == 403:
			raise NetworkForbidden(_detail(response) or "forbidden")
		if response.status_code >= 500:
			raise BackendUnavailable(_detail(response) or "backend_unavailable")
		if response.status_code >= 400:
			raise NetworkError(_detail(response) or f"http_{response.status_code}")
		try:
			return response.json()
		except ValueError as exc:
			raise MalformedResponse("invalid_json") from exc

	async def fetch_graph(self, user_id: str) -> Any:
		return await self._post("/network/graph", {"userId": user_id})

	async def send_meet(self, to_user_id: str, message: str = "meet!!") -> Any:
		return await self._post("/network/meet", {"toUserId": to_user_id, "message": message})


def _detail(response: httpx.Response) -> Optional[str]:
	try:
		body = response.json()
	except ValueError:
		return None
	detail = body.get("detail") if isinstance(body, dict) else None
	return detail if isinstance(detail, str) else None


class LoadState(str, Enum):
	IDLE = "idle"
	LOADING = "loading"
	READY = "ready"
	EMPTY = "empty"
	ERROR = "error"


class GraphLoader:
	"""Holds the graph shown on the network screen and its loading state."""

	def __init__(self, client: GraphClient, profiles: Optional[ProfileDirectory] = None) -> None:
		self._client = client
		self._profiles = profiles or ProfileDirectory()
		self.graph = SocialGraph()
		self.state = LoadState.IDLE
		self.error_message: Optional[str] = None
		self.retryable = False

	async def load(self, user_id: str) -> SocialGraph:
		self.state = LoadState.LOADING
		self.error_message = None
		self.retryable = False
		try:
			payload = await self._client.fetch_graph(user_id)
			graph = parse_graph_payload(payload, current_user_id=user_id)
		except NetworkError as exc:
			logger.warning("network graph load failed", extra={"reason": exc.reason})
			self.state = LoadState.ERROR
			self.error_message = exc.reason
			self.retryable = exc.retryable
			return self.graph

		# A user without friends is absent from the graph even when others are connected.
		reachable = compute_distances(graph, user_id)
		self._profiles.populate(graph)
		self.graph = graph
		self.state = LoadState.READY if reachable else LoadState.EMPTY
		logger.info("network graph loaded", extra={"nodes": len(graph), "edges": graph.edge_count()})
		return graph

	async def send_meet(self, to_user_id: str, message: str = "meet!!") -> bool:
		try:
			await self._client.send_meet(to_user_id, message)
		except NetworkError as exc:
			logger.warning("meet failed", extra={"to_user_id": to_user_id, "reason": exc.reason})
			return False
		return True
