"""
Base class for iterative simulations.

This module provides the shared machinery of a cooling simulation:

- Event system (start/tick/end events)
- Alpha (temperature) management and decay toward alpha_target
- Iteration budget and settlement
- Reheating after the simulation has settled
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from typing_extensions import Self

from .config import DEFAULT_ALPHA_DECAY
from .types import Event, EventCallback, EventType


class IterativeSimulation(ABC):
    """
    Abstract base for simulations advanced one tick at a time.

    Subclasses implement `_integrate()`, which moves the state forward
    by one step using the current alpha. `tick()` wraps it with alpha
    decay, iteration counting and events.

    Example:
        sim = SomeSimulation(alpha_min=0.001, iterations=300)
        sim.on("end", lambda event: print("settled"))
        while not sim.tick():
            draw()
    """

    def __init__(
        self,
        *,
        alpha: float = 1.0,
        alpha_min: float = 0.001,
        alpha_decay: float = DEFAULT_ALPHA_DECAY,
        alpha_target: float = 0.0,
        iterations: int = 300,
        on_start: Optional[EventCallback] = None,
        on_tick: Optional[EventCallback] = None,
        on_end: Optional[EventCallback] = None,
    ) -> None:
        """
        Initialize the simulation.

        Args:
            alpha: Initial alpha/temperature (0 to 1)
            alpha_min: Settlement threshold
            alpha_decay: Fraction of the gap to alpha_target closed per tick (0 to 1)
            alpha_target: Value alpha decays toward
            iterations: Tick budget until the simulation counts as settled
            on_start: Callback for start event
            on_tick: Callback for tick event
            on_end: Callback for end event
        """
        self._alpha: float = max(0.0, min(1.0, float(alpha)))
        self._alpha_min: float = float(alpha_min)
        self._alpha_decay: float = max(0.0, min(1.0, float(alpha_decay)))
        self._alpha_target: float = max(0.0, min(1.0, float(alpha_target)))
        self._iterations: int = max(1, int(iterations))
        self._iteration: int = 0
        self._running: bool = False
        self._events: dict[EventType, EventCallback] = {}

        if on_start:
            self._events[EventType.start] = on_start
        if on_tick:
            self._events[EventType.tick] = on_tick
        if on_end:
            self._events[EventType.end] = on_end

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def alpha(self) -> float:
        """Get current alpha (temperature/energy)."""
        return self._alpha

    @alpha.setter
    def alpha(self, value: float) -> None:
        """Set alpha (temperature/energy), clamped to [0, 1]."""
        self._alpha = max(0.0, min(1.0, float(value)))

    @property
    def alpha_min(self) -> float:
        """Get minimum alpha (settlement threshold)."""
        return self._alpha_min

    @alpha_min.setter
    def alpha_min(self, value: float) -> None:
        self._alpha_min = float(value)

    @property
    def alpha_decay(self) -> float:
        """Get alpha decay rate."""
        return self._alpha_decay

    @alpha_decay.setter
    def alpha_decay(self, value: float) -> None:
        """Set alpha decay rate, clamped to [0, 1]."""
        self._alpha_decay = max(0.0, min(1.0, float(value)))

    @property
    def alpha_target(self) -> float:
        """Value alpha decays toward; raised while the user drags."""
        return self._alpha_target

    @alpha_target.setter
    def alpha_target(self, value: float) -> None:
        self._alpha_target = max(0.0, min(1.0, float(value)))

    @property
    def iterations(self) -> int:
        """Get the tick budget."""
        return self._iterations

    @iterations.setter
    def iterations(self, value: int) -> None:
        """Set the tick budget (minimum 1)."""
        self._iterations = max(1, int(value))

    @property
    def iteration(self) -> int:
        """Ticks performed since the last reheat or restart."""
        return self._iteration

    @property
    def is_settled(self) -> bool:
        """True once alpha is below alpha_min or the budget is used up."""
        return self._alpha < self._alpha_min or self._iteration >= self._iterations

    @property
    def running(self) -> bool:
        """True between a start event and the matching end event."""
        return self._running

    # -------------------------------------------------------------------------
    # Event System
    # -------------------------------------------------------------------------

    def on(self, event: EventType | str, callback: EventCallback) -> Self:
        """
        Subscribe to a simulation event.

        Args:
            event: Event type (EventType enum or string name)
            callback: Function to call when event fires

        Returns:
            self (for chaining)
        """
        if isinstance(event, str):
            event = EventType[event]
        self._events[event] = callback
        return self

    def trigger(self, event: Event) -> None:
        """Call the callback registered for this event's type, if any."""
        event_type = event.get("type")
        if event_type is not None and event_type in self._events:
            self._events[event_type](event)

    # -------------------------------------------------------------------------
    # Lifecycle Methods
    # -------------------------------------------------------------------------

    @abstractmethod
    def _integrate(self) -> Optional[float]:
        """
        Advance the state by one step at the current alpha.

        Returns:
            Mean per-node displacement of the step, or None if nothing moved.
        """
        pass

    def tick(self) -> bool:
        """
        Perform one iteration.

        A settled simulation is left untouched.

        Returns:
            True if settled, False if more ticks are needed.
        """
        if self.is_settled:
            return True

        if not self._running:
            self._running = True
            self.trigger({"type": EventType.start, "alpha": self._alpha})

        movement = self._integrate()
        self._alpha += (self._alpha_target - self._alpha) * self._alpha_decay
        self._iteration += 1

        self.trigger(
            {
                "type": EventType.tick,
                "alpha": self._alpha,
                "iteration": self._iteration,
                "movement": movement,
            }
        )

        if self.is_settled:
            self._running = False
            self.trigger({"type": EventType.end, "alpha": self._alpha})
            return True
        return False

    def step(self) -> bool:
        """Alias of tick()."""
        return self.tick()

    def kick(self) -> None:
        """Run tick() repeatedly until settled."""
        for _ in range(self._iterations):
            if self.tick():
                break

    def reheat(self, alpha: float = 0.3) -> Self:
        """
        Raise alpha to at least `alpha` and reset the iteration budget.

        Returns:
            self (for chaining)
        """
        self._alpha = max(self._alpha, max(0.0, min(1.0, float(alpha))))
        self._iteration = 0
        return self

    def restart(self) -> Self:
        """Reset the iteration budget without touching alpha."""
        self._iteration = 0
        return self

    def stop(self) -> Self:
        """Settle immediately."""
        self._alpha = 0.0
        self._running = False
        return self


__all__ = ["IterativeSimulation"]
