"""
Base classes for layout components.

This module provides abstract base classes that define the common interface
shared by the tree layout solver and the force simulation:

- BaseLayout: Abstract base with event system and viewport size management
- IterativeLayout: For tick-driven layouts with alpha (energy) management
- StaticLayout: For single-pass layouts (tidy trees)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from typing_extensions import Self

from .types import Event, EventCallback, EventType, SizeType
from .validation import validate_viewport_size


class BaseLayout(ABC):
    """
    Abstract base class for layout components.

    Provides shared infrastructure:
    - Event system (start/tick/end events)
    - Viewport size management
    """

    def __init__(
        self,
        *,
        size: SizeType = (1.0, 1.0),
        on_start: Optional[EventCallback] = None,
        on_tick: Optional[EventCallback] = None,
        on_end: Optional[EventCallback] = None,
    ) -> None:
        """
        Initialize layout with configuration.

        Args:
            size: Viewport size as (width, height)
            on_start: Callback for start event
            on_tick: Callback for tick event (iterative layouts)
            on_end: Callback for end event
        """
        self._viewport_size: tuple[float, float] = (1.0, 1.0)
        self._events: dict[EventType, EventCallback] = {}

        self.size = size

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
    def size(self) -> tuple[float, float]:
        """Get viewport size as (width, height)."""
        return self._viewport_size

    @size.setter
    def size(self, value: SizeType) -> None:
        """
        Set viewport size.

        Raises:
            InvalidViewportSizeError: If width or height is not positive.
        """
        self._viewport_size = validate_viewport_size(value)

    # -------------------------------------------------------------------------
    # Event System
    # -------------------------------------------------------------------------

    def on(self, event: EventType | str, callback: Optional[EventCallback]) -> Self:
        """
        Subscribe to a layout event. Passing None removes the listener.

        Args:
            event: Event type (EventType enum or string name)
            callback: Function to call when event fires

        Returns:
            self (for chaining)
        """
        if isinstance(event, str):
            event = EventType[event]
        if callback is None:
            self._events.pop(event, None)
        else:
            self._events[event] = callback
        return self

    def trigger(self, event: Event) -> None:
        """
        Trigger an event, calling the registered callback.

        Args:
            event: Event payload with type and optional data
        """
        event_type = event.get("type")
        if event_type is not None and event_type in self._events:
            self._events[event_type](event)


class IterativeLayout(BaseLayout):
    """
    Base class for tick-driven layouts.

    Provides:
    - Alpha (energy) management with a target the alpha decays toward
    - Running flag driven by restart()/stop()
    - Bounded run-to-convergence via kick()
    """

    def __init__(
        self,
        *,
        size: SizeType = (1.0, 1.0),
        on_start: Optional[EventCallback] = None,
        on_tick: Optional[EventCallback] = None,
        on_end: Optional[EventCallback] = None,
        alpha: float = 1.0,
        alpha_min: float = 0.001,
        alpha_decay: Optional[float] = None,
        alpha_target: float = 0.0,
        iterations: int = 300,
    ) -> None:
        """
        Initialize iterative layout.

        Args:
            size: Viewport size as (width, height)
            on_start: Callback for start event
            on_tick: Callback for tick event
            on_end: Callback for end event
            alpha: Initial alpha/energy (0 to 1)
            alpha_min: Alpha below which the layout stops
            alpha_decay: Fraction of the gap to alpha_target closed per tick.
                Defaults to the rate reaching alpha_min in `iterations` ticks.
            alpha_target: Value alpha decays toward (raised while dragging)
            iterations: Maximum ticks for kick()
        """
        super().__init__(size=size, on_start=on_start, on_tick=on_tick, on_end=on_end)
        self._iterations: int = max(1, int(iterations))
        self._alpha: float = max(0.0, min(1.0, float(alpha)))
        self._alpha_min: float = float(alpha_min)
        if alpha_decay is None:
            alpha_decay = 1 - self._alpha_min ** (1 / self._iterations)
        self._alpha_decay: float = max(0.0, min(1.0, float(alpha_decay)))
        self._alpha_target: float = max(0.0, min(1.0, float(alpha_target)))
        self._running: bool = False

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def alpha(self) -> float:
        """Get current alpha (energy)."""
        return self._alpha

    @alpha.setter
    def alpha(self, value: float) -> None:
        """Set alpha, clamped to [0, 1]."""
        self._alpha = max(0.0, min(1.0, float(value)))

    @property
    def alpha_min(self) -> float:
        """Get minimum alpha (convergence threshold)."""
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
        """Get the value alpha decays toward."""
        return self._alpha_target

    @alpha_target.setter
    def alpha_target(self, value: float) -> None:
        self._alpha_target = max(0.0, min(1.0, float(value)))

    @property
    def iterations(self) -> int:
        """Get maximum iterations for kick()."""
        return self._iterations

    @iterations.setter
    def iterations(self, value: int) -> None:
        self._iterations = max(1, int(value))

    @property
    def running(self) -> bool:
        """True between restart() and stop()/convergence."""
        return self._running

    # -------------------------------------------------------------------------
    # Lifecycle Methods
    # -------------------------------------------------------------------------

    @abstractmethod
    def tick(self) -> bool:
        """
        Perform one iteration of the layout.

        Returns:
            True if converged, False if more iterations are needed.
        """
        pass

    def kick(self) -> Self:
        """Run tick() repeatedly until convergence or max iterations."""
        for _ in range(self._iterations):
            if self.tick():
                break
        return self

    def restart(self) -> Self:
        """Mark the layout as running so the external driver keeps stepping it."""
        if not self._running:
            self._running = True
            self.trigger({"type": EventType.start, "alpha": self._alpha})
        return self

    def stop(self) -> Self:
        """Stop stepping; alpha is left untouched so a restart resumes smoothly."""
        self._running = False
        return self


class StaticLayout(BaseLayout):
    """
    Base class for single-pass layouts.

    These layouts compute positions in one pass without iteration.
    """

    def run(self, **kwargs: Any) -> Any:
        """
        Run the layout algorithm.

        Fires start event, computes layout, fires end event.

        Args:
            **kwargs: Arguments passed to _compute()

        Returns:
            Whatever _compute() produces
        """
        self.trigger({"type": EventType.start, "alpha": 1.0})
        result = self._compute(**kwargs)
        self.trigger({"type": EventType.end, "alpha": 0.0})
        return result

    @abstractmethod
    def _compute(self, **kwargs: Any) -> Any:
        """Compute positions. Subclasses implement the actual algorithm."""
        pass


__all__ = [
    "BaseLayout",
    "IterativeLayout",
    "StaticLayout",
]
