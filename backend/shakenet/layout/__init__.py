"""Client-side layout: payload loading, force simulation and rendering policy."""

from .engine import LayoutConfig, StepStats, Viewport, fit_to_viewport, step  # noqa: F401
from .loader import GraphClient, GraphLoader, LoadState, parse_graph_payload  # noqa: F401
from .profiles import Profile, ProfileDirectory  # noqa: F401
from .rendering import NodeAppearance, TapAction, appearance_for, render_order, tap_action  # noqa: F401
from .simulation import LayoutSimulation  # noqa: F401
