import pytest

from shakenet.domain.network.models import UNREACHED, NetworkNode, SocialGraph
from shakenet.layout import rendering
from shakenet.layout.profiles import Profile, ProfileDirectory, placeholder_name
from shakenet.layout.rendering import PLACEHOLDER_ICON, TapAction
from shakenet.settings import settings


@pytest.mark.parametrize(
	"distance, show_icon, show_name, blur, opacity",
	[
		(0, True, True, 0.0, 1.0),
		(1, True, True, 0.0, 1.0),
		(2, False, True, 2.0, 1.0),
		(3, False, True, 5.0, 1.0),
		(4, False, True, 10.0, 1.0),
		(5, False, False, 0.0, 0.0),
		(UNREACHED, False, False, 0.0, 0.0),
	],
)
def test_appearance_tiers(distance, show_icon, show_name, blur, opacity):
	appearance = rendering.appearance_for(NetworkNode(id="n", distance=distance))

	assert appearance.show_icon is show_icon
	assert appearance.show_name is show_name
	assert appearance.blur_radius == blur
	assert appearance.opacity == opacity


def test_current_user_is_drawn_larger():
	me = rendering.appearance_for(NetworkNode(id="me", distance=0, is_current_user=True))
	friend = rendering.appearance_for(NetworkNode(id="f", distance=1))

	assert me.size == 80.0
	assert friend.size == 60.0


@pytest.mark.parametrize(
	"distance, is_current_user, expected",
	[
		(0, True, TapAction.SELF),
		(0, False, TapAction.SELF),
		(1, False, TapAction.MEET),
		(4, False, TapAction.MEET),
		(5, False, TapAction.TOO_FAR),
		(UNREACHED, False, TapAction.TOO_FAR),
	],
)
def test_tap_action(distance, is_current_user, expected):
	node = NetworkNode(id="n", distance=distance, is_current_user=is_current_user)
	assert rendering.tap_action(node) is expected


def test_render_order_nearest_first_unreached_last():
	graph = SocialGraph()
	for node_id, distance in [("far", 3), ("lost", UNREACHED), ("me", 0), ("friend", 1)]:
		graph.add_node(NetworkNode(id=node_id, distance=distance))

	assert [node.id for node in rendering.render_order(graph)] == ["me", "friend", "far", "lost"]


def test_profiles_fill_placeholders():
	graph = SocialGraph()
	graph.add_node(NetworkNode(id="user-1234", is_current_user=True))
	graph.add_node(NetworkNode(id="user-5678"))
	graph.add_node(NetworkNode(id="user-9999"))
	directory = ProfileDirectory(
		current_user=Profile(id="user-1234", name="Ada", icon="ada.png"),
		friends=[Profile(id="user-5678", name="", icon="")],
	)

	directory.populate(graph)

	assert graph.get("user-1234").name == "Ada"
	assert graph.get("user-1234").icon == "ada.png"
	assert graph.get("user-5678").name == "User 5678"
	assert graph.get("user-5678").icon == PLACEHOLDER_ICON
	assert graph.get("user-9999").name == placeholder_name("user-9999") == "User 9999"


def test_profiles_update_friends():
	directory = ProfileDirectory()
	node = NetworkNode(id="ab")
	directory.update_friends([Profile(id="ab", name="Bea", icon="bea.png")])

	directory.resolve(node)

	assert node.name == "Bea"
	assert node.icon == "bea.png"
	assert placeholder_name("ab") == "User ab"


def test_tap_action_follows_meet_reach_setting(monkeypatch):
	node = NetworkNode(id="n", distance=3)
	assert rendering.tap_action(node) is TapAction.MEET

	monkeypatch.setattr(settings, "meet_max_distance", 2)

	assert rendering.tap_action(node) is TapAction.TOO_FAR
	assert rendering.tap_action(node, max_distance=3) is TapAction.MEET
