"""Force-directed layout for the social graph.

One call to `step` advances the simulation by one frame: pairwise Coulomb
repulsion, a Hooke spring per edge, a weak pull toward the viewport center,
then damped Euler integration and clamping to the viewport. Nodes being dragged
are left out of all of it; their position belongs to the pointer.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List

from shakenet.domain.network.models import ZERO, SocialGraph, Vector


@dataclass(frozen=True, slots=True)
class Viewport:
	width: float
	height: float

	@property
	def center(self) -> Vector:
		return Vector(self.width / 2, self.height / 2)

	def is_empty(self) -> bool:
		return self.width <= 0 or self.height <= 0


@dataclass(frozen=True, slots=True)
class LayoutConfig:
	k_repulsion: float = 10000.0
	k_attraction: float = 0.5
	rest_length: float = 100.0
	damping: float = 0.9
	time_step: float = 0.5
	# Nodes beyond `stable_distance` hops move sluggishly: heavier damping, smaller step.
	far_damping: float = 0.98
	far_time_step: float = 0.1
	stable_distance: int = 3
	gravity_strength: float = 0.005
	min_distance: float = 1.0
	padding: float = 50.0
	node_size: float = 60.0
	current_user_node_size: float = 80.0
	tick_hz: float = 60.0
	flush_interval: float = 0.10
	movement_threshold: float = 0.5
	stabilization_frames: int = 30


DEFAULT_CONFIG = LayoutConfig()
MIN_FIT_SCALE = 0.01


@dataclass(frozen=True, slots=True)
class StepStats:
	moved: int = 0
	total_movement: float = 0.0

	@property
	def mean_movement(self) -> float:
		return self.total_movement / self.moved if self.moved else 0.0


def fit_to_viewport(graph: SocialGraph, viewport: Viewport, config: LayoutConfig = DEFAULT_CONFIG) -> bool:
	"""Scale and center every node so the graph fills the viewport minus padding.

	Uniform scale keeps the aspect ratio. Velocities are reset. Returns False when
	there is nothing to fit.
	"""
	if viewport.is_empty() or not graph.nodes:
		return False

	xs = [node.position.x for node in graph.nodes.values()]
	ys = [node.position.y for node in graph.nodes.values()]
	min_x, max_x = min(xs), max(xs)
	min_y, max_y = min(ys), max(ys)

	width = max(max_x - min_x, 1.0)
	height = max(max_y - min_y, 1.0)
	scale_x = (viewport.width - config.padding * 2) / width
	scale_y = (viewport.height - config.padding * 2) / height
	# A viewport narrower than its padding would give a negative scale and mirror the graph.
	scale = max(min(scale_x, scale_y), MIN_FIT_SCALE)

	offset = Vector(
		viewport.width / 2 - (min_x + max_x) / 2 * scale,
		viewport.height / 2 - (min_y + max_y) / 2 * scale,
	)
	for node in graph.nodes.values():
		node.position = node.position * scale + offset
		node.velocity = ZERO
	return True


def _direction(source: Vector, target: Vector, min_distance: float) -> tuple[float, float, float]:
	dx = target.x - source.x
	dy = target.y - source.y
	distance = max(math.hypot(dx, dy), min_distance)
	return dx, dy, distance


def step(graph: SocialGraph, viewport: Viewport, config: LayoutConfig = DEFAULT_CONFIG) -> StepStats:
	free = [node for node in graph.nodes.values() if not node.is_dragging]
	if not free:
		return StepStats()

	forces: Dict[str, Vector] = {node.id: ZERO for node in free}

	# Repulsion between every unordered pair of free nodes.
	for i, first in enumerate(free):
		for second in free[i + 1:]:
			dx, dy, distance = _direction(first.position, second.position, config.min_distance)
			magnitude = config.k_repulsion / (distance * distance)
			push = Vector(magnitude * dx / distance, magnitude * dy / distance)
			forces[first.id] = forces[first.id] - push
			forces[second.id] = forces[second.id] + push

	# Springs along edges whose endpoints are both free.
	for source_id, target_id in graph.edges():
		if source_id not in forces or target_id not in forces:
			continue
		source = graph.nodes[source_id]
		target = graph.nodes[target_id]
		dx, dy, distance = _direction(source.position, target.position, config.min_distance)
		magnitude = config.k_attraction * (distance - config.rest_length)
		pull = Vector(magnitude * dx / distance, magnitude * dy / distance)
		forces[source_id] = forces[source_id] + pull
		forces[target_id] = forces[target_id] - pull

	center = viewport.center

	moved: List[float] = []
	for node in free:
		force = forces[node.id] + (center - node.position) * config.gravity_strength
		node.force = force
		if node.distance > config.stable_distance:
			damping, dt = config.far_damping, config.far_time_step
		else:
			damping, dt = config.damping, config.time_step
		node.velocity = (node.velocity + force * dt) * damping
		previous = node.position
		position = previous + node.velocity * dt
		node.position = clamp_to_viewport(position, viewport, config)
		moved.append((node.position - previous).length())

	return StepStats(moved=len(moved), total_movement=sum(moved))


def clamp_to_viewport(position: Vector, viewport: Viewport, config: LayoutConfig = DEFAULT_CONFIG) -> Vector:
	half = config.node_size / 2
	return Vector(
		min(max(position.x, half), max(half, viewport.width - half)),
		min(max(position.y, half), max(half, viewport.height - half)),
	)
