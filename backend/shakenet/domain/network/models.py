"""Domain models for the social network graph."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

UNREACHED = -1


@dataclass(frozen=True, slots=True)
class Vector:
	"""Immutable 2D vector used for positions, velocities and forces."""

	x: float = 0.0
	y: float = 0.0

	def __add__(self, other: "Vector") -> "Vector":
		return Vector(self.x + other.x, self.y + other.y)

	def __sub__(self, other: "Vector") -> "Vector":
		return Vector(self.x - other.x, self.y - other.y)

	def __mul__(self, factor: float) -> "Vector":
		return Vector(self.x * factor, self.y * factor)

	__rmul__ = __mul__

	def __neg__(self) -> "Vector":
		return Vector(-self.x, -self.y)

	def length(self) -> float:
		return math.hypot(self.x, self.y)

	def is_finite(self) -> bool:
		return math.isfinite(self.x) and math.isfinite(self.y)


ZERO = Vector()


@dataclass(slots=True)
class NetworkNode:
	"""One participant in the social graph.

	`position` is owned by the layout engine while a simulation runs. `velocity`
	and `force` only mean something inside an active simulation. Display metadata
	(`name`, `icon`) is filled in afterwards from the profile directory.
	"""

	id: str
	position: Vector = ZERO
	name: str = ""
	icon: str = ""
	distance: int = UNREACHED
	is_current_user: bool = False
	velocity: Vector = ZERO
	force: Vector = ZERO
	is_dragging: bool = False

	def __hash__(self) -> int:
		return hash(self.id)

	def __eq__(self, other: object) -> bool:
		if not isinstance(other, NetworkNode):
			return NotImplemented
		return self.id == other.id


def edge_key(source: str, target: str) -> Tuple[str, str]:
	"""Canonical key of an undirected edge: the sorted id pair."""
	return (source, target) if source <= target else (target, source)


@dataclass(slots=True)
class SocialGraph:
	"""Nodes keyed by id plus a symmetric adjacency structure."""

	nodes: Dict[str, NetworkNode] = field(default_factory=dict)
	adjacency: Dict[str, Set[str]] = field(default_factory=dict)

	def __len__(self) -> int:
		return len(self.nodes)

	def __contains__(self, node_id: object) -> bool:
		return node_id in self.nodes

	def get(self, node_id: str) -> Optional[NetworkNode]:
		return self.nodes.get(node_id)

	def add_node(self, node: NetworkNode) -> None:
		self.nodes[node.id] = node
		self.adjacency.setdefault(node.id, set())

	def add_edge(self, source: str, target: str) -> bool:
		"""Add an undirected edge; dangling ids and self-loops are ignored."""
		if source not in self.nodes or target not in self.nodes:
			logger.warning("skipping edge with unknown node id", extra={"source": source, "target": target})
			return False
		if source == target:
			logger.warning("skipping self-loop edge", extra={"source": source})
			return False
		self.adjacency[source].add(target)
		self.adjacency[target].add(source)
		return True

	def neighbors(self, node_id: str) -> Set[str]:
		return self.adjacency.get(node_id, set())

	def edges(self) -> List[Tuple[str, str]]:
		"""Every undirected edge exactly once, as a sorted id pair."""
		seen: List[Tuple[str, str]] = []
		for source, targets in self.adjacency.items():
			for target in targets:
				if source < target:
					seen.append((source, target))
		return seen

	def edge_count(self) -> int:
		return sum(len(targets) for targets in self.adjacency.values()) // 2

	def __iter__(self) -> Iterator[NetworkNode]:
		return iter(self.nodes.values())

	def copy(self) -> "SocialGraph":
		return SocialGraph(
			nodes={node_id: replace(node) for node_id, node in self.nodes.items()},
			adjacency={node_id: set(targets) for node_id, targets in self.adjacency.items()},
		)
