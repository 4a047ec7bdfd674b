"""
Damped semi-implicit Euler integrator for the force model.

Every step computes the net force per node, updates velocities with
damping, moves the nodes, and snaps pinned nodes back onto their pins.
The simulation only ever works on a WorkingGraph; snapshots and the
position cache are handled by the continuity layer.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Mapping, Optional

import numpy as np

if TYPE_CHECKING:
    from typing_extensions import Self

from .base import IterativeSimulation
from .config import DEFAULT_ALPHA_DECAY
from .continuity import WorkingGraph
from .force import ForceModel
from .types import EventCallback

logger = logging.getLogger(__name__)


class ForceSimulation(IterativeSimulation):
    """
    Damped force integration over a working graph.

    Per step:
        v = (v + F * dt) * (1 - damping), speed capped at max_velocity
        p = p + v * dt
        pinned nodes are set to their pin with zero velocity

    Pins are held by node id, so they survive `set_graph()`.

    Example:
        sim = ForceSimulation(model=ForceModel())
        sim.set_graph(graph)
        sim.center = (400, 300)
        sim.kick()
    """

    def __init__(
        self,
        *,
        graph: Optional[WorkingGraph] = None,
        model: Optional[ForceModel] = None,
        velocity_damping: float = 0.4,
        time_step: float = 1.0,
        max_velocity: Optional[float] = 100.0,
        alpha: float = 1.0,
        alpha_min: float = 0.001,
        alpha_decay: float = DEFAULT_ALPHA_DECAY,
        iterations: int = 300,
        on_start: Optional[EventCallback] = None,
        on_tick: Optional[EventCallback] = None,
        on_end: Optional[EventCallback] = None,
    ) -> None:
        """
        Initialize the simulation.

        Args:
            graph: Working graph to simulate (empty if None)
            model: Force contributors (defaults if None)
            velocity_damping: Fraction of velocity lost per step (0 to 1)
            time_step: Integration step dt
            max_velocity: Speed cap per node, None for no cap
            alpha: Initial alpha
            alpha_min: Settlement threshold
            alpha_decay: Alpha decay rate per step
            iterations: Step budget until settled
            on_start: Callback for start event
            on_tick: Callback for tick event
            on_end: Callback for end event
        """
        super().__init__(
            alpha=alpha,
            alpha_min=alpha_min,
            alpha_decay=alpha_decay,
            iterations=iterations,
            on_start=on_start,
            on_tick=on_tick,
            on_end=on_end,
        )
        self._model = model if model is not None else ForceModel()
        self._velocity_damping = max(0.0, min(1.0, float(velocity_damping)))
        self._time_step = max(0.0, float(time_step))
        self._max_velocity = float(max_velocity) if max_velocity is not None else None
        self._pins: dict[str, tuple[float, float]] = {}
        self._graph = WorkingGraph.empty()
        self.set_graph(graph if graph is not None else WorkingGraph.empty())

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def graph(self) -> WorkingGraph:
        """The working graph being simulated."""
        return self._graph

    @property
    def model(self) -> ForceModel:
        return self._model

    @property
    def velocity_damping(self) -> float:
        return self._velocity_damping

    @velocity_damping.setter
    def velocity_damping(self, value: float) -> None:
        """Set damping, clamped to [0, 1]."""
        self._velocity_damping = max(0.0, min(1.0, float(value)))

    @property
    def time_step(self) -> float:
        return self._time_step

    @time_step.setter
    def time_step(self, value: float) -> None:
        self._time_step = max(0.0, float(value))

    @property
    def max_velocity(self) -> Optional[float]:
        return self._max_velocity

    @max_velocity.setter
    def max_velocity(self, value: Optional[float]) -> None:
        self._max_velocity = float(value) if value is not None else None

    @property
    def center(self) -> Optional[tuple[float, float]]:
        """Centering target, None while centering is suspended."""
        return self._model.center.center

    @center.setter
    def center(self, value: Optional[tuple[float, float]]) -> None:
        self._model.center.center = value

    @property
    def pins(self) -> Mapping[str, tuple[float, float]]:
        """Current pins by node id."""
        return dict(self._pins)

    # -------------------------------------------------------------------------
    # Graph and pins
    # -------------------------------------------------------------------------

    def set_graph(self, graph: WorkingGraph) -> Self:
        """
        Replace the simulated graph.

        Existing pins are re-applied to the new graph by id.

        Returns:
            self (for chaining)
        """
        self._graph = graph
        graph.set_pins(self._pins)
        self._snap_pins()
        self._model.initialize(graph)
        return self

    def pin(self, node_id: str, x: float, y: float) -> bool:
        """
        Pin a node at (x, y) and move it there at once.

        Returns:
            True if the node is in the current graph.
        """
        self._pins[node_id] = (float(x), float(y))
        self._graph.set_pins(self._pins)
        if node_id not in self._graph.index:
            return False
        self._snap_pins()
        return True

    def unpin(self, node_id: str) -> None:
        """Release a pin; unknown ids are ignored."""
        if self._pins.pop(node_id, None) is not None:
            self._graph.set_pins(self._pins)

    def is_pinned(self, node_id: str) -> bool:
        return node_id in self._pins

    def _snap_pins(self) -> None:
        g = self._graph
        fixed = g.fixed
        g.x[fixed] = g.pin_x[fixed]
        g.y[fixed] = g.pin_y[fixed]
        g.vx[fixed] = 0.0
        g.vy[fixed] = 0.0

    # -------------------------------------------------------------------------
    # Integration
    # -------------------------------------------------------------------------

    def _integrate(self) -> Optional[float]:
        g = self._graph
        if g.node_count == 0:
            return None

        x0, y0 = g.x.copy(), g.y.copy()
        vx0, vy0 = g.vx.copy(), g.vy.copy()
        dt = self._time_step
        keep = 1.0 - self._velocity_damping

        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            fx, fy = self._model.compute(g, self._alpha)
            g.vx = (g.vx + fx * dt) * keep
            g.vy = (g.vy + fy * dt) * keep

            if self._max_velocity is not None:
                speed = np.hypot(g.vx, g.vy)
                fast = speed > self._max_velocity
                if np.any(fast):
                    scale = self._max_velocity / speed[fast]
                    g.vx[fast] *= scale
                    g.vy[fast] *= scale

            g.x = g.x + g.vx * dt
            g.y = g.y + g.vy * dt
        self._snap_pins()

        finite = np.isfinite(g.x) & np.isfinite(g.y) & np.isfinite(g.vx) & np.isfinite(g.vy)
        if not np.all(finite):
            logger.warning(
                "Non-finite positions for %d node(s) at iteration %d; step rolled back",
                int(np.count_nonzero(~finite)),
                self._iteration,
            )
            g.x, g.y = x0, y0
            g.vx = np.zeros_like(vx0)
            g.vy = np.zeros_like(vy0)
            return 0.0

        return float(np.hypot(g.x - x0, g.y - y0).mean())


__all__ = ["ForceSimulation"]
