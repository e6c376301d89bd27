"""Distance-gated rendering policy for graph nodes.

Deeper social connections are progressively anonymised: friends show their icon,
friends-of-friends only a blurred name, and anything five or more hops away (or
not reachable at all) is not drawn.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from shakenet.domain.network.models import UNREACHED, NetworkNode, SocialGraph
from shakenet.layout.engine import DEFAULT_CONFIG, LayoutConfig
from shakenet.settings import settings

PLACEHOLDER_ICON = "person.circle.fill"
MAX_VISIBLE_DISTANCE = 4


@dataclass(frozen=True, slots=True)
class NodeAppearance:
	show_icon: bool
	show_name: bool
	blur_radius: float
	opacity: float
	size: float


_HIDDEN = NodeAppearance(show_icon=False, show_name=False, blur_radius=0.0, opacity=0.0, size=0.0)


def blur_radius(distance: int) -> float:
	if distance <= 1:
		return 0.0
	if distance == 2:
		return 2.0
	if distance == 3:
		return 5.0
	return 10.0


def appearance_for(node: NetworkNode, config: LayoutConfig = DEFAULT_CONFIG) -> NodeAppearance:
	distance = node.distance
	if distance == UNREACHED or distance > MAX_VISIBLE_DISTANCE:
		return _HIDDEN
	size = config.current_user_node_size if node.is_current_user else config.node_size
	return NodeAppearance(
		show_icon=distance <= 1,
		show_name=True,
		blur_radius=blur_radius(distance),
		opacity=1.0,
		size=size,
	)


def render_order(graph: SocialGraph) -> List[NetworkNode]:
	"""Nodes nearest the local user first; unreached nodes last."""
	def _key(node: NetworkNode) -> tuple[int, int]:
		return (1, 0) if node.distance == UNREACHED else (0, node.distance)

	return sorted(graph.nodes.values(), key=_key)


class TapAction(str, Enum):
	SELF = "self"
	MEET = "meet"
	TOO_FAR = "too_far"


def tap_action(node: NetworkNode, max_distance: Optional[int] = None) -> TapAction:
	"""What tapping `node` does. The reach limit is the one the meet endpoint enforces."""
	limit = settings.meet_max_distance if max_distance is None else max_distance
	if node.is_current_user or node.distance == 0:
		return TapAction.SELF
	if node.distance == UNREACHED or node.distance > limit:
		return TapAction.TOO_FAR
	return TapAction.MEET
