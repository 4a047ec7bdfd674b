"""
Pointer and wheel handling: node drags, background pans and zoom.

The controller owns the camera. Dragging a node pins it in simulation
coordinates; panning and zooming only change the camera, never the
simulation.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from .simulation import ForceSimulation
from .validation import validate_scale_extent

logger = logging.getLogger(__name__)


@dataclass
class CameraTransform:
    """
    Affine map from simulation to screen coordinates.

    screen = world * scale + translate
    """

    translate_x: float = 0.0
    translate_y: float = 0.0
    scale: float = 1.0

    def apply(self, x: float, y: float) -> tuple[float, float]:
        """Map a simulation point to the screen."""
        return x * self.scale + self.translate_x, y * self.scale + self.translate_y

    def invert(self, screen_x: float, screen_y: float) -> tuple[float, float]:
        """Map a screen point back to simulation coordinates."""
        return (
            (screen_x - self.translate_x) / self.scale,
            (screen_y - self.translate_y) / self.scale,
        )

    def translate_by(self, dx: float, dy: float) -> None:
        self.translate_x += dx
        self.translate_y += dy

    def zoom_about(
        self,
        factor: float,
        screen_x: float,
        screen_y: float,
        scale_extent: tuple[float, float] = (0.1, 8.0),
    ) -> None:
        """
        Multiply the scale by `factor`, keeping the world point under
        (screen_x, screen_y) in place. The scale is clamped to scale_extent.
        """
        wx, wy = self.invert(screen_x, screen_y)
        lo, hi = scale_extent
        self.scale = max(lo, min(hi, self.scale * factor))
        self.translate_x = screen_x - wx * self.scale
        self.translate_y = screen_y - wy * self.scale

    def copy(self) -> CameraTransform:
        return CameraTransform(self.translate_x, self.translate_y, self.scale)


@dataclass
class _PointerSession:
    node_id: Optional[str]  # None for a background pan
    start_x: float
    start_y: float
    last_x: float
    last_y: float
    started_at: float
    travelled: float = 0.0
    # world offset from the pointer to the grabbed node center
    offset_x: float = 0.0
    offset_y: float = 0.0


def _finite(*values: float) -> bool:
    try:
        return all(math.isfinite(float(v)) for v in values)
    except (TypeError, ValueError):
        return False


class InteractionController:
    """
    Turns pointer input into pins, reheats and camera changes.

    Each pointer id has its own session, so several nodes can be dragged
    at once. A node held by one pointer ignores the others.

    Example:
        controller = InteractionController(sim, on_node_clicked=print)
        controller.pointer_down("v1", 120, 80)
        controller.pointer_move("v1", 160, 90)
        controller.pointer_up("v1", 160, 90)
        controller.wheel(1.1, 400, 300)
    """

    def __init__(
        self,
        simulation: ForceSimulation,
        camera: Optional[CameraTransform] = None,
        *,
        scale_extent: Sequence[float] = (0.1, 8.0),
        reheat_alpha: float = 0.3,
        click_distance: float = 3.0,
        click_duration: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
        on_node_clicked: Optional[Callable[[str], None]] = None,
    ) -> None:
        """
        Args:
            simulation: Simulation whose nodes are dragged
            camera: Camera to control (identity if None)
            scale_extent: (min_scale, max_scale)
            reheat_alpha: Alpha held while any drag is active
            click_distance: Max pointer travel in pixels for a click
            click_duration: Max press duration in seconds for a click
            clock: Time source for events without a timestamp
            on_node_clicked: Called with the node id on a click
        """
        self._simulation = simulation
        self._camera = camera if camera is not None else CameraTransform()
        self._scale_extent = validate_scale_extent(scale_extent)
        self._reheat_alpha = max(0.0, min(1.0, float(reheat_alpha)))
        self._click_distance = max(0.0, float(click_distance))
        self._click_duration = max(0.0, float(click_duration))
        self._clock = clock
        self.on_node_clicked = on_node_clicked
        self._sessions: dict[int, _PointerSession] = {}

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def camera(self) -> CameraTransform:
        return self._camera

    @property
    def simulation(self) -> ForceSimulation:
        return self._simulation

    @simulation.setter
    def simulation(self, value: ForceSimulation) -> None:
        self._simulation = value

    @property
    def scale_extent(self) -> tuple[float, float]:
        return self._scale_extent

    @scale_extent.setter
    def scale_extent(self, value: Sequence[float]) -> None:
        """Set the scale range and clamp the current scale into it."""
        self._scale_extent = validate_scale_extent(value)
        lo, hi = self._scale_extent
        self._camera.scale = max(lo, min(hi, self._camera.scale))

    @property
    def reheat_alpha(self) -> float:
        return self._reheat_alpha

    @reheat_alpha.setter
    def reheat_alpha(self, value: float) -> None:
        self._reheat_alpha = max(0.0, min(1.0, float(value)))

    @property
    def dragged_nodes(self) -> list[str]:
        """Ids currently held by a pointer."""
        return [s.node_id for s in self._sessions.values() if s.node_id is not None]

    @property
    def is_dragging(self) -> bool:
        return any(s.node_id is not None for s in self._sessions.values())

    # -------------------------------------------------------------------------
    # Pointer events
    # -------------------------------------------------------------------------

    def pointer_down(
        self,
        node_id: Optional[str],
        screen_x: float,
        screen_y: float,
        *,
        pointer_id: int = 0,
        timestamp: Optional[float] = None,
    ) -> bool:
        """
        Start a drag on `node_id`, or a pan if it is None.

        Returns:
            True if a session started.
        """
        if not _finite(screen_x, screen_y):
            logger.debug("Ignoring pointer down with non-finite coordinates")
            return False
        if pointer_id in self._sessions:
            self._end_session(pointer_id)

        now = self._clock() if timestamp is None else float(timestamp)
        sx, sy = float(screen_x), float(screen_y)

        session = _PointerSession(node_id, sx, sy, sx, sy, now)
        if node_id is not None:
            if node_id in self.dragged_nodes:
                logger.debug("Node %r is already dragged by another pointer", node_id)
                return False
            position = self._simulation.graph.position_of(node_id)
            if position is None:
                logger.debug("Ignoring pointer down on unknown node %r", node_id)
                return False
            self._simulation.pin(node_id, *position)
            self._simulation.alpha_target = self._reheat_alpha
            self._simulation.reheat(self._reheat_alpha)
            wx, wy = self._camera.invert(sx, sy)
            session.offset_x, session.offset_y = position[0] - wx, position[1] - wy

        self._sessions[pointer_id] = session
        return True

    def pointer_move(
        self,
        node_id: Optional[str],
        screen_x: float,
        screen_y: float,
        *,
        pointer_id: int = 0,
        timestamp: Optional[float] = None,
    ) -> bool:
        """
        Move the dragged node with the pointer, or pan the camera.

        `node_id` is informational; the session decides what moves.

        Returns:
            True if the camera changed (a pan).
        """
        session = self._sessions.get(pointer_id)
        if session is None:
            return False
        if not _finite(screen_x, screen_y):
            logger.debug("Ignoring pointer move with non-finite coordinates")
            return False

        sx, sy = float(screen_x), float(screen_y)
        session.travelled = max(
            session.travelled, math.hypot(sx - session.start_x, sy - session.start_y)
        )

        if session.node_id is None:
            self._camera.translate_by(sx - session.last_x, sy - session.last_y)
            session.last_x, session.last_y = sx, sy
            return True

        session.last_x, session.last_y = sx, sy
        wx, wy = self._camera.invert(sx, sy)
        self._simulation.pin(session.node_id, wx + session.offset_x, wy + session.offset_y)
        # the budget restarts on every drag move
        self._simulation.restart()
        return False

    def pointer_up(
        self,
        node_id: Optional[str],
        screen_x: float,
        screen_y: float,
        *,
        pointer_id: int = 0,
        timestamp: Optional[float] = None,
    ) -> bool:
        """
        End the pointer's session, releasing its pin.

        Returns:
            True if the release counted as a click on the node.
        """
        session = self._sessions.get(pointer_id)
        if session is None:
            return False

        if _finite(screen_x, screen_y):
            session.travelled = max(
                session.travelled,
                math.hypot(float(screen_x) - session.start_x, float(screen_y) - session.start_y),
            )
        now = self._clock() if timestamp is None else float(timestamp)
        self._end_session(pointer_id)

        clicked = (
            session.node_id is not None
            and session.travelled < self._click_distance
            and now - session.started_at <= self._click_duration
        )
        if clicked and self.on_node_clicked is not None:
            self.on_node_clicked(session.node_id)
        return clicked

    def cancel(self) -> None:
        """Drop every session without firing clicks."""
        for pointer_id in list(self._sessions):
            self._end_session(pointer_id)

    def _end_session(self, pointer_id: int) -> None:
        session = self._sessions.pop(pointer_id)
        if session.node_id is not None:
            self._simulation.unpin(session.node_id)
            if not self.is_dragging:
                self._simulation.alpha_target = 0.0

    # -------------------------------------------------------------------------
    # Camera
    # -------------------------------------------------------------------------

    def wheel(self, delta_scale: float, screen_x: float, screen_y: float) -> bool:
        """
        Zoom by `delta_scale` about the pointer.

        Returns:
            True if the camera changed.
        """
        if not _finite(delta_scale, screen_x, screen_y) or float(delta_scale) <= 0:
            logger.debug("Ignoring wheel event (factor=%r)", delta_scale)
            return False
        before = self._camera.copy()
        self._camera.zoom_about(
            float(delta_scale), float(screen_x), float(screen_y), self._scale_extent
        )
        return self._camera != before

    def pan_by(self, dx: float, dy: float) -> bool:
        """Translate the camera by a screen offset."""
        if not _finite(dx, dy):
            logger.debug("Ignoring non-finite pan")
            return False
        self._camera.translate_by(float(dx), float(dy))
        return True


__all__ = ["CameraTransform", "InteractionController"]
