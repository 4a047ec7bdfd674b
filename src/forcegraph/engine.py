"""
GraphEngine: the host-facing facade.

Wires the continuity layer, force simulation, interaction controller and
render projector together behind the frame-driven interface a UI shell
talks to: replace the graph, forward pointer and wheel events, call
`tick()` once per frame and draw what comes back.
"""

from __future__ import annotations

import logging
import math
import time
from typing import TYPE_CHECKING, Any, Callable, Iterator, Optional

import numpy as np

if TYPE_CHECKING:
    from typing_extensions import Self

from .config import EngineConfig
from .continuity import ContinuityManager, PositionCache, WorkingGraph
from .force import CenteringForce, ChargeForce, CollisionForce, ForceModel, LinkForce
from .interaction import CameraTransform, InteractionController
from .render import DrawList, RenderProjector
from .simulation import ForceSimulation
from .spatial.quadtree import QuadTree
from .types import EventCallback, EventType, GraphSnapshot, NodeState
from .validation import validate_viewport_size

logger = logging.getLogger(__name__)


class GraphEngine:
    """
    Incremental force-directed layout engine.

    The caller replaces the whole graph on every edit; the engine keeps
    the picture continuous by carrying positions over by node id and only
    reheating when the structure changed.

    Example:
        engine = GraphEngine(EngineConfig(width=800, height=600), on_render=draw)
        engine.set_graph({"nodes": [...], "edges": [...]})

        # once per animation frame
        engine.tick()

        # pointer input from the host
        node_id = engine.pick(x, y)
        engine.on_pointer_down(node_id, x, y)
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        on_render: Optional[Callable[[DrawList], None]] = None,
        on_node_clicked: Optional[Callable[[str], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            config: Engine configuration (defaults if None)
            on_render: Called with a fresh DrawList whenever the picture changed
            on_node_clicked: Called with the node id on a click
            clock: Time source for pointer events without a timestamp
        """
        self._config = (config if config is not None else EngineConfig()).validate()
        cfg = self._config
        self.on_render = on_render

        self._size: tuple[float, float] = (float(cfg.width), float(cfg.height))
        self._last_center: tuple[float, float] = (0.0, 0.0)
        center = self._viewport_center()
        if center is not None:
            self._last_center = center

        self._continuity = ContinuityManager(
            jitter=cfg.jitter,
            random_seed=cfg.random_seed,
            collision_radius=cfg.collision_radius,
            node_radius=cfg.node_radius,
        )
        model = ForceModel(
            link=LinkForce(distance=cfg.link_distance, strength=cfg.link_strength),
            charge=ChargeForce(
                strength=cfg.charge_strength,
                min_distance=cfg.charge_min_distance,
                max_distance=cfg.charge_max_distance,
                theta=cfg.barnes_hut_theta,
                barnes_hut_threshold=cfg.barnes_hut_threshold,
            ),
            center=CenteringForce(center=center, strength=cfg.center_strength),
            collide=CollisionForce(
                strength=cfg.collision_strength,
                barnes_hut_threshold=cfg.barnes_hut_threshold,
            ),
        )
        self._simulation = ForceSimulation(
            model=model,
            velocity_damping=cfg.velocity_damping,
            time_step=cfg.time_step,
            max_velocity=cfg.max_velocity,
            alpha=cfg.alpha,
            alpha_min=cfg.alpha_min,
            alpha_decay=cfg.alpha_decay,
            iterations=cfg.iterations,
        )
        self._controller = InteractionController(
            self._simulation,
            CameraTransform(),
            scale_extent=(cfg.min_scale, cfg.max_scale),
            reheat_alpha=cfg.reheat_alpha,
            click_distance=cfg.click_distance,
            click_duration=cfg.click_duration,
            clock=clock,
            on_node_clicked=on_node_clicked,
        )
        self._projector = RenderProjector(
            node_label_offset=cfg.node_label_offset,
            edge_label_offset=cfg.edge_label_offset,
            show_edge_labels=cfg.show_edge_labels,
        )
        self._structure: Optional[tuple[frozenset, frozenset]] = None

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def simulation(self) -> ForceSimulation:
        return self._simulation

    @property
    def controller(self) -> InteractionController:
        return self._controller

    @property
    def camera(self) -> CameraTransform:
        """The camera; changed only through pointer, wheel and pan input."""
        return self._controller.camera

    @property
    def cache(self) -> PositionCache:
        return self._continuity.cache

    @property
    def graph(self) -> WorkingGraph:
        """The current working graph."""
        return self._simulation.graph

    @property
    def positions(self) -> dict[str, tuple[float, float]]:
        """Copy of the last known position of every node, by id."""
        return self._continuity.cache.as_dict()

    @property
    def node_states(self) -> list[NodeState]:
        return self._simulation.graph.node_states()

    @property
    def size(self) -> tuple[float, float]:
        """Viewport size as (width, height)."""
        return self._size

    @property
    def on_node_clicked(self) -> Optional[Callable[[str], None]]:
        return self._controller.on_node_clicked

    @on_node_clicked.setter
    def on_node_clicked(self, callback: Optional[Callable[[str], None]]) -> None:
        self._controller.on_node_clicked = callback

    @property
    def is_settled(self) -> bool:
        return self._simulation.is_settled

    # -------------------------------------------------------------------------
    # Graph replacement
    # -------------------------------------------------------------------------

    def set_graph(self, snapshot: Any) -> Self:
        """
        Replace the working graph with a new snapshot.

        Known ids keep their cached positions. The simulation is reheated
        to full alpha when no node came from the cache, to `change_alpha`
        when the node or edge set changed, and not at all otherwise.
        A fresh layout first runs `warmup_ticks` steps without rendering.

        Args:
            snapshot: A GraphSnapshot or data accepted by GraphSnapshot.from_data

        Returns:
            self (for chaining)
        """
        snapshot = GraphSnapshot.from_data(snapshot)
        graph = self._continuity.merge(snapshot, self._seed_center())
        structure = graph.structure
        from_cache = graph.node_count - len(graph.new_ids)

        self._simulation.set_graph(graph)
        if graph.node_count and from_cache == 0:
            self._simulation.reheat(self._config.alpha)
            for _ in range(self._config.warmup_ticks):
                if self._simulation.tick():
                    break
        elif structure != self._structure:
            self._simulation.reheat(self._config.change_alpha)
        self._structure = structure

        self._continuity.capture(graph)
        logger.debug(
            "Graph replaced: %d nodes (%d new), %d edges (%d dropped)",
            graph.node_count,
            len(graph.new_ids),
            graph.edge_count,
            len(graph.dropped_edges),
        )
        self._emit_render()
        return self

    # -------------------------------------------------------------------------
    # Frame loop
    # -------------------------------------------------------------------------

    def tick(self) -> bool:
        """
        Advance the simulation by one step (the per-frame callback).

        Returns:
            True if the layout is settled.
        """
        if self._simulation.is_settled:
            return True
        settled = self._simulation.tick()
        self._continuity.capture(self._simulation.graph)
        self._emit_render()
        return settled

    def run(self, max_ticks: Optional[int] = None) -> Self:
        """
        Tick synchronously until settled.

        Args:
            max_ticks: Upper bound on ticks (the iteration budget if None)

        Returns:
            self (for chaining)
        """
        limit = self._simulation.iterations if max_ticks is None else max(0, int(max_ticks))
        for _ in range(limit):
            if self.tick():
                break
        return self

    def frames(self, max_ticks: Optional[int] = None) -> Iterator[DrawList]:
        """
        Yield one DrawList per tick until settled.

        Lets cooperative hosts interleave layout with other work; stopping
        iteration cancels the loop.
        """
        count = 0
        while max_ticks is None or count < max_ticks:
            if self._simulation.is_settled:
                return
            settled = self.tick()
            count += 1
            yield self.render()
            if settled:
                return

    def reheat(self, alpha: Optional[float] = None) -> Self:
        """Restart the simulation at `alpha` (change_alpha if None)."""
        self._simulation.reheat(self._config.change_alpha if alpha is None else alpha)
        return self

    def stop(self) -> Self:
        self._simulation.stop()
        return self

    def on(self, event: EventType | str, callback: EventCallback) -> Self:
        """Subscribe to a simulation event (start, tick or end)."""
        self._simulation.on(event, callback)
        return self

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    def on_pointer_down(
        self,
        node_id: Optional[str],
        screen_x: float,
        screen_y: float,
        *,
        pointer_id: int = 0,
        timestamp: Optional[float] = None,
    ) -> bool:
        """Start dragging `node_id`, or panning if it is None."""
        return self._controller.pointer_down(
            node_id, screen_x, screen_y, pointer_id=pointer_id, timestamp=timestamp
        )

    def on_pointer_move(
        self,
        node_id: Optional[str],
        screen_x: float,
        screen_y: float,
        *,
        pointer_id: int = 0,
        timestamp: Optional[float] = None,
    ) -> None:
        """Move the dragged node or pan the camera."""
        dragging = self._controller.is_dragging
        panned = self._controller.pointer_move(
            node_id, screen_x, screen_y, pointer_id=pointer_id, timestamp=timestamp
        )
        if dragging:
            self._continuity.capture(self._simulation.graph)
        if panned or dragging:
            self._emit_render()

    def on_pointer_up(
        self,
        node_id: Optional[str],
        screen_x: float,
        screen_y: float,
        *,
        pointer_id: int = 0,
        timestamp: Optional[float] = None,
    ) -> bool:
        """
        End the pointer's drag or pan.

        Returns:
            True if the release was a click on a node.
        """
        return self._controller.pointer_up(
            node_id, screen_x, screen_y, pointer_id=pointer_id, timestamp=timestamp
        )

    def on_wheel(self, delta_scale: float, screen_x: float, screen_y: float) -> None:
        """Zoom by `delta_scale` about the pointer."""
        if self._controller.wheel(delta_scale, screen_x, screen_y):
            self._emit_render()

    def pan_by(self, dx: float, dy: float) -> None:
        """Translate the camera by a screen offset."""
        if self._controller.pan_by(dx, dy):
            self._emit_render()

    def on_viewport_resize(self, width: float, height: float) -> None:
        """
        Update the canvas bounds and the centering target.

        A zero width or height suspends centering until a valid size
        arrives.

        Raises:
            InvalidViewportError: If a dimension is negative or not finite.
        """
        self._size = validate_viewport_size((width, height))
        center = self._viewport_center()
        previous = self._simulation.center
        self._simulation.center = center
        if center is None:
            logger.debug("Viewport collapsed to %s; centering suspended", self._size)
            return
        self._last_center = center
        if center != previous and self._simulation.graph.node_count:
            self._simulation.reheat(self._config.change_alpha)

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def render(self) -> DrawList:
        """Project the current state through the camera."""
        graph = self._simulation.graph
        return self._projector.project(graph.node_states(), graph.edges, self.camera)

    def pick(self, screen_x: float, screen_y: float) -> Optional[str]:
        """
        Id of the node drawn under a screen point, or None.

        A point inside several glyphs resolves to the nearest center.
        """
        graph = self._simulation.graph
        if graph.node_count == 0 or not (math.isfinite(screen_x) and math.isfinite(screen_y)):
            return None
        wx, wy = self.camera.invert(screen_x, screen_y)
        reach = float(graph.draw_radius.max())
        tree = QuadTree.from_positions(graph.x, graph.y)

        i = tree.find(wx, wy, radius=reach)
        if i is None:
            return None
        if math.hypot(graph.x[i] - wx, graph.y[i] - wy) <= graph.draw_radius[i]:
            return graph.ids[i]

        # nearest center lies outside its own (smaller) glyph
        hits = [
            j
            for j in tree.query_radius(wx, wy, reach)
            if math.hypot(graph.x[j] - wx, graph.y[j] - wy) <= graph.draw_radius[j]
        ]
        if not hits:
            return None
        d = np.hypot(graph.x[hits] - wx, graph.y[hits] - wy)
        return graph.ids[hits[int(np.argmin(d))]]

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _viewport_center(self) -> Optional[tuple[float, float]]:
        width, height = self._size
        if width <= 0 or height <= 0:
            return None
        return width / 2, height / 2

    def _seed_center(self) -> tuple[float, float]:
        center = self._viewport_center()
        return center if center is not None else self._last_center

    def _emit_render(self) -> None:
        if self.on_render is not None:
            self.on_render(self.render())


__all__ = ["GraphEngine"]
