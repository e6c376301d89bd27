"""Hop distances and connected components over a SocialGraph."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import replace
from typing import Iterable, List, Set

from shakenet.domain.network.models import UNREACHED, NetworkNode, SocialGraph

logger = logging.getLogger(__name__)


def compute_distances(graph: SocialGraph, root_id: str) -> bool:
	"""Breadth-first hop counts from `root_id`, written onto each node's `distance`.

	Every node is reset to UNREACHED first. Returns False, leaving all nodes
	unreached, when the root is not in the graph.
	"""
	for node in graph.nodes.values():
		node.distance = UNREACHED

	root = graph.nodes.get(root_id)
	if root is None:
		if graph.nodes:
			logger.warning("distance root not in graph", extra={"root_id": root_id})
		return False

	root.distance = 0
	queue = deque([root_id])
	while queue:
		current_id = queue.popleft()
		next_distance = graph.nodes[current_id].distance + 1
		for neighbor_id in graph.neighbors(current_id):
			neighbor = graph.nodes.get(neighbor_id)
			if neighbor is not None and neighbor.distance == UNREACHED:
				neighbor.distance = next_distance
				queue.append(neighbor_id)
	return True


def find_connected_components(graph: SocialGraph) -> List[List[str]]:
	"""Partition node ids into components, in discovery order."""
	components: List[List[str]] = []
	visited: Set[str] = set()
	for start_id in graph.nodes:
		if start_id in visited:
			continue
		visited.add(start_id)
		component: List[str] = []
		queue = deque([start_id])
		while queue:
			current_id = queue.popleft()
			component.append(current_id)
			for neighbor_id in graph.neighbors(current_id):
				if neighbor_id not in visited and neighbor_id in graph.nodes:
					visited.add(neighbor_id)
					queue.append(neighbor_id)
		components.append(component)
	return components


def extract_subgraph(graph: SocialGraph, node_ids: Iterable[str]) -> SocialGraph:
	"""New graph holding copies of the given nodes and the edges between them."""
	keep = set(node_ids)
	subgraph = SocialGraph()
	for node_id, node in graph.nodes.items():
		if node_id in keep:
			subgraph.add_node(replace(node))
	for source, target in graph.edges():
		if source in keep and target in keep:
			subgraph.add_edge(source, target)
	return subgraph


def extract_largest_component(graph: SocialGraph) -> SocialGraph:
	"""Subgraph of the biggest component; the first one found wins ties."""
	largest: List[str] = []
	for component in find_connected_components(graph):
		if len(component) > len(largest):
			largest = component
	if not largest:
		return SocialGraph()
	subgraph = extract_subgraph(graph, largest)
	logger.debug("largest component extracted", extra={"nodes": len(subgraph)})
	return subgraph


def distance_between(graph: SocialGraph, source_id: str, target_id: str) -> int:
	"""Hop count between two nodes without touching the graph's stored distances."""
	if source_id not in graph.nodes or target_id not in graph.nodes:
		return UNREACHED
	scratch = SocialGraph(
		nodes={node_id: NetworkNode(id=node_id) for node_id in graph.nodes},
		adjacency=graph.adjacency,
	)
	compute_distances(scratch, source_id)
	return scratch.nodes[target_id].distance
