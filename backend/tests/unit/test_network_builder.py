import asyncio

import pytest

from shakenet.domain.network import builder
from shakenet.domain.network.exceptions import BackendUnavailable, Unauthenticated
from shakenet.domain.network.store import InMemoryFriendStore


def _edge_set(response):
	return {(edge.source, edge.target) for edge in response.edges}


def test_pseudo_random_coord_is_deterministic():
	assert builder.pseudo_random_coord("U1") == builder.pseudo_random_coord("U1")
	assert builder.pseudo_random_coord("U1") == (135.0, -117.0)


def test_id_hash_wraps_to_32_bits():
	long_id = "x" * 500
	value = builder.id_hash(long_id)
	assert 0 <= value <= 0xFFFFFFFF
	x, y = builder.pseudo_random_coord(long_id)
	assert -200 <= x < 200
	assert -200 <= y < 200


def test_pseudo_random_coord_spread_for_many_ids():
	for idx in range(200):
		x, y = builder.pseudo_random_coord(f"user-{idx}")
		assert -200 <= x < 200
		assert -200 <= y < 200


def test_id_hash_uses_utf16_code_units():
	# U+1F600 is a surrogate pair: two code units folded in order.
	expected = (0xD83D * 31 + 0xDE00) & 0xFFFFFFFF
	assert builder.id_hash("\U0001F600") == expected


@pytest.mark.asyncio
async def test_build_graph_end_to_end_scenario():
	store = InMemoryFriendStore({"U1": ["U2", "U3"], "U2": ["U1", "U4"], "U3": [], "U4": []})

	response = await builder.build_graph(store, "U1")

	assert {node.id for node in response.nodes} == {"U1", "U2", "U3", "U4"}
	assert _edge_set(response) == {("U1", "U2"), ("U1", "U3"), ("U2", "U4")}
	assert len(response.edges) == 3


@pytest.mark.asyncio
async def test_build_graph_drops_isolated_users():
	store = InMemoryFriendStore({"A": ["B"], "B": [], "LONER": []})

	response = await builder.build_graph(store, "A")

	node_ids = [node.id for node in response.nodes]
	assert "LONER" not in node_ids
	connected = {endpoint for edge in response.edges for endpoint in (edge.source, edge.target)}
	assert set(node_ids) <= connected


@pytest.mark.asyncio
async def test_build_graph_deduplicates_and_drops_self_edges():
	store = InMemoryFriendStore({"A": ["B", "B", "A"], "B": ["A"], "C": ["A"]})

	response = await builder.build_graph(store, "A")

	assert _edge_set(response) == {("A", "B"), ("A", "C")}
	assert len(response.edges) == 2
	assert len({node.id for node in response.nodes}) == len(response.nodes)
	assert all(edge.source != edge.target for edge in response.edges)


@pytest.mark.asyncio
async def test_build_graph_includes_friends_missing_from_user_list():
	store = InMemoryFriendStore({"A": ["GHOST"]})

	response = await builder.build_graph(store, "A")

	assert {node.id for node in response.nodes} == {"A", "GHOST"}
	ghost = next(node for node in response.nodes if node.id == "GHOST")
	assert (ghost.x, ghost.y) == builder.pseudo_random_coord("GHOST")


@pytest.mark.asyncio
async def test_build_graph_rejects_missing_requester():
	store = InMemoryFriendStore({"A": ["B"]})
	with pytest.raises(Unauthenticated):
		await builder.build_graph(store, "")
	with pytest.raises(Unauthenticated):
		await builder.build_graph(store, None)


@pytest.mark.asyncio
async def test_build_graph_wraps_store_failures():
	class BrokenStore:
		async def list_user_ids(self):
			return ["A", "B"]

		async def list_friend_ids(self, user_id):
			raise RuntimeError("connection reset")

	with pytest.raises(BackendUnavailable) as exc_info:
		await builder.build_graph(BrokenStore(), "A")
	assert exc_info.value.retryable is True
	assert isinstance(exc_info.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_build_graph_bounds_friend_list_fan_out():
	in_flight = 0
	peak = 0

	class SlowStore:
		async def list_user_ids(self):
			return [f"u{idx}" for idx in range(10)]

		async def list_friend_ids(self, user_id):
			nonlocal in_flight, peak
			in_flight += 1
			peak = max(peak, in_flight)
			await asyncio.sleep(0.001)
			in_flight -= 1
			return ["hub"]

	response = await builder.build_graph(SlowStore(), "u0", concurrency=2)

	assert peak <= 2
	assert len(response.edges) == 10
