"""Display metadata lookup for graph nodes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from shakenet.domain.network.models import NetworkNode, SocialGraph
from shakenet.layout.rendering import PLACEHOLDER_ICON


@dataclass(frozen=True, slots=True)
class Profile:
	id: str
	name: str
	icon: str = ""


def placeholder_name(node_id: str) -> str:
	return f"User {node_id[-4:]}"


class ProfileDirectory:
	"""Name and icon lookup keyed by user id, with the local user's own profile."""

	def __init__(self, current_user: Optional[Profile] = None, friends: Iterable[Profile] = ()) -> None:
		self._current_user = current_user
		self._friends: Dict[str, Profile] = {profile.id: profile for profile in friends}

	def update_friends(self, friends: Iterable[Profile]) -> None:
		self._friends = {profile.id: profile for profile in friends}

	def lookup(self, node: NetworkNode) -> Optional[Profile]:
		if node.is_current_user and self._current_user is not None:
			return self._current_user
		return self._friends.get(node.id)

	def resolve(self, node: NetworkNode) -> None:
		profile = self.lookup(node)
		if profile is not None:
			node.name = profile.name or placeholder_name(node.id)
			node.icon = profile.icon or PLACEHOLDER_ICON
			return
		if not node.name:
			node.name = placeholder_name(node.id)
		if not node.icon:
			node.icon = PLACEHOLDER_ICON

	def populate(self, graph: SocialGraph) -> None:
		for node in graph.nodes.values():
			self.resolve(node)
