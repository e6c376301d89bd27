"""Network graph domain exports."""

from . import audit, builder, paths, policy, service, sockets  # noqa: F401
from .models import UNREACHED, NetworkNode, SocialGraph, Vector  # noqa: F401
from .schemas import GraphEdgePayload, GraphNodePayload, NetworkGraphResponse  # noqa: F401
