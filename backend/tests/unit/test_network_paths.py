from shakenet.domain.network import paths
from shakenet.domain.network.models import UNREACHED, NetworkNode, SocialGraph, Vector


def _graph(node_ids, edges):
	graph = SocialGraph()
	for idx, node_id in enumerate(node_ids):
		graph.add_node(NetworkNode(id=node_id, position=Vector(float(idx), 0.0)))
	for source, target in edges:
		graph.add_edge(source, target)
	return graph


def test_compute_distances_on_path():
	graph = _graph(["A", "B", "C"], [("A", "B"), ("B", "C")])

	assert paths.compute_distances(graph, "A") is True

	assert {node.id: node.distance for node in graph} == {"A": 0, "B": 1, "C": 2}


def test_compute_distances_leaves_other_components_unreached():
	graph = _graph(["A", "B", "X", "Y"], [("A", "B"), ("X", "Y")])

	paths.compute_distances(graph, "A")

	assert graph.get("X").distance == UNREACHED
	assert graph.get("Y").distance == UNREACHED


def test_compute_distances_resets_previous_run():
	graph = _graph(["A", "B", "C"], [("A", "B"), ("B", "C")])
	paths.compute_distances(graph, "A")

	paths.compute_distances(graph, "C")

	assert {node.id: node.distance for node in graph} == {"A": 2, "B": 1, "C": 0}


def test_compute_distances_missing_root():
	graph = _graph(["A", "B"], [("A", "B")])
	graph.get("A").distance = 0

	assert paths.compute_distances(graph, "missing") is False
	assert all(node.distance == UNREACHED for node in graph)


def test_compute_distances_takes_shortest_route():
	graph = _graph(
		["A", "B", "C", "D", "E"],
		[("A", "B"), ("B", "C"), ("C", "D"), ("D", "E"), ("A", "E")],
	)

	paths.compute_distances(graph, "A")

	assert graph.get("D").distance == 2
	assert graph.get("E").distance == 1


def test_empty_graph():
	graph = SocialGraph()

	assert paths.compute_distances(graph, "A") is False
	assert paths.find_connected_components(graph) == []
	largest = paths.extract_largest_component(graph)
	assert len(largest) == 0
	assert largest.edge_count() == 0


def test_find_connected_components():
	graph = _graph(["A", "B", "C", "D", "E"], [("A", "B"), ("C", "D")])

	components = paths.find_connected_components(graph)

	assert [sorted(component) for component in components] == [["A", "B"], ["C", "D"], ["E"]]
	seen = [node_id for component in components for node_id in component]
	assert sorted(seen) == ["A", "B", "C", "D", "E"]


def test_extract_largest_component():
	graph = _graph(
		["A", "B", "C", "D", "E", "X", "Y"],
		[("A", "B"), ("B", "C"), ("C", "D"), ("D", "E"), ("X", "Y")],
	)

	largest = paths.extract_largest_component(graph)

	assert set(largest.nodes) == {"A", "B", "C", "D", "E"}
	assert set(largest.edges()) == {("A", "B"), ("B", "C"), ("C", "D"), ("D", "E")}


def test_extract_largest_component_tie_keeps_first():
	graph = _graph(["A", "B", "X", "Y"], [("A", "B"), ("X", "Y")])

	largest = paths.extract_largest_component(graph)

	assert set(largest.nodes) == {"A", "B"}


def test_extract_largest_component_copies_nodes():
	graph = _graph(["A", "B"], [("A", "B")])

	largest = paths.extract_largest_component(graph)
	largest.get("A").position = Vector(99.0, 99.0)

	assert graph.get("A").position == Vector(0.0, 0.0)


def test_distance_between_does_not_touch_stored_distances():
	graph = _graph(["A", "B", "C"], [("A", "B"), ("B", "C")])
	paths.compute_distances(graph, "C")

	assert paths.distance_between(graph, "A", "C") == 2
	assert paths.distance_between(graph, "A", "missing") == UNREACHED
	assert graph.get("C").distance == 0
	assert graph.get("A").distance == 2


def test_graph_ignores_dangling_edges_and_self_loops():
	graph = _graph(["A", "B"], [])

	assert graph.add_edge("A", "ghost") is False
	assert graph.add_edge("A", "A") is False
	assert graph.add_edge("B", "A") is True
	assert graph.add_edge("A", "B") is True

	assert graph.edges() == [("A", "B")]
	assert graph.edge_count() == 1
	assert graph.neighbors("A") == {"B"}
	assert graph.neighbors("B") == {"A"}
