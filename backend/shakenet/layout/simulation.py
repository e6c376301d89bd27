"""Live physics loop driving a graph on screen.

One asyncio task ticks `engine.step` at `tick_hz` until the owning view stops
it. Drag gestures, resizes and reloads are plain method calls on the same event
loop, so they never race a tick. Starting always cancels the previous task first:
a graph is driven by at most one loop.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import suppress
from typing import Callable, Optional

from shakenet.domain.network.models import ZERO, NetworkNode, SocialGraph, Vector
from shakenet.layout import engine
from shakenet.layout.engine import DEFAULT_CONFIG, LayoutConfig, StepStats, Viewport

logger = logging.getLogger(__name__)

FrameListener = Callable[[SocialGraph], None]


class LayoutSimulation:
	def __init__(
		self,
		graph: SocialGraph,
		viewport: Viewport,
		*,
		config: LayoutConfig = DEFAULT_CONFIG,
		on_frame: Optional[FrameListener] = None,
		clock: Callable[[], float] = time.monotonic,
	) -> None:
		self.graph = graph
		self.viewport = viewport
		self.config = config
		self._on_frame = on_frame
		self._clock = clock
		self._task: Optional[asyncio.Task] = None
		# Set once the owning view stops the loop; only an explicit start() clears it.
		self._closed = False
		self._last_flush: Optional[float] = None
		self._drag_node_id: Optional[str] = None
		self._drag_origin: Vector = ZERO
		self.frames = 0
		self.quiet_frames = 0
		self.last_stats = StepStats()

	@property
	def is_running(self) -> bool:
		return self._task is not None and not self._task.done()

	@property
	def is_settled(self) -> bool:
		return self.quiet_frames >= self.config.stabilization_frames

	@property
	def dragging_node_id(self) -> Optional[str]:
		return self._drag_node_id

	def start(self) -> None:
		"""(Re)start the loop; must be called from inside the event loop."""
		self._closed = False
		self._restart()

	def _restart(self) -> None:
		self.cancel()
		self.quiet_frames = 0
		self._task = asyncio.get_running_loop().create_task(self._run(), name="layout-simulation")
		logger.debug("layout simulation started", extra={"nodes": len(self.graph)})

	def cancel(self) -> None:
		task, self._task = self._task, None
		if task is not None and not task.done():
			task.cancel()

	async def stop(self) -> None:
		self._closed = True
		task, self._task = self._task, None
		if task is None:
			return
		task.cancel()
		with suppress(asyncio.CancelledError):
			await task
		logger.debug("layout simulation stopped", extra={"frames": self.frames})

	def fit(self) -> bool:
		return engine.fit_to_viewport(self.graph, self.viewport, self.config)

	def resize(self, viewport: Viewport) -> None:
		self.viewport = viewport
		if self.fit():
			self._resume()

	def reload(self, graph: SocialGraph) -> None:
		self.cancel()
		self._drag_node_id = None
		self.graph = graph
		if self.fit():
			self._resume()

	def tick(self) -> StepStats:
		"""Advance one frame. Returns the movement statistics of that frame."""
		stats = engine.step(self.graph, self.viewport, self.config)
		self.frames += 1
		self.last_stats = stats
		if stats.moved and stats.mean_movement < self.config.movement_threshold:
			self.quiet_frames += 1
		else:
			self.quiet_frames = 0
		self._maybe_flush()
		return stats

	def _maybe_flush(self, *, force: bool = False) -> None:
		if self._on_frame is None:
			return
		now = self._clock()
		if not force and self._last_flush is not None and now - self._last_flush < self.config.flush_interval:
			return
		self._last_flush = now
		self._on_frame(self.graph)

	async def _run(self) -> None:
		interval = 1.0 / max(self.config.tick_hz, 1.0)
		me = asyncio.current_task()
		while self._task is me:
			if not self.graph.nodes:
				self._task = None
				logger.debug("layout simulation stopped on empty graph")
				return
			self.tick()
			await asyncio.sleep(interval)

	# Drag gestures: Idle -> Dragging -> Idle, one node at a time.

	def begin_drag(self, node_id: str) -> bool:
		node = self.graph.get(node_id)
		if node is None or self._drag_node_id is not None:
			return False
		node.is_dragging = True
		node.velocity = ZERO
		node.force = ZERO
		self._drag_node_id = node_id
		self._drag_origin = node.position
		return True

	def drag(self, translation: Vector) -> None:
		node = self._active_drag_node()
		if node is not None:
			node.position = self._drag_origin + translation

	def end_drag(self, translation: Vector) -> None:
		node = self._active_drag_node()
		self._drag_node_id = None
		if node is None:
			return
		node.position = self._drag_origin + translation
		node.is_dragging = False
		node.velocity = ZERO
		self._maybe_flush(force=True)
		self._resume()

	def _resume(self) -> None:
		"""Restart after a gesture or resize unless the view has stopped the loop."""
		if not self._closed and self.graph.nodes:
			self._restart()

	def _active_drag_node(self) -> Optional[NetworkNode]:
		if self._drag_node_id is None:
			return None
		return self.graph.get(self._drag_node_id)
