"""
Cooperative Event Loop
======================
Single-threaded timer and listener host with a simulated clock.

Handles:
- Periodic timers (set_interval / clear_interval)
- Window-level listeners (add_listener / remove_listener / dispatch)
- Deterministic time advance: due timers fire in time order, ties in
  registration order

Every registration returns a handle; releasing it is the only way to
stop the callback. Registering the same callback twice for one event
type is rejected.
"""

import itertools
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional


@dataclass(frozen=True)
class KeyEvent:
    key: str


@dataclass(frozen=True)
class PointerEvent:
    x: float
    y: float


@dataclass(frozen=True)
class WheelEvent:
    delta_y: float


@dataclass(frozen=True)
class TimerHandle:
    id: int
    name: str
    period_ms: float


@dataclass(frozen=True)
class ListenerHandle:
    id: int
    event_type: str


@dataclass
class _Timer:
    handle: TimerHandle
    callback: Callable[[], None]
    next_due: float
    fired: int = 0


@dataclass
class _Listener:
    handle: ListenerHandle
    callback: Callable = field(repr=False)


class EventLoop:
    """
    Host event queue for the landscape component.

    Time only moves through advance(); nothing here blocks or sleeps.
    """

    def __init__(self, verbose: bool = False):
        self.now = 0.0  # ms
        self.verbose = verbose
        self._ids = itertools.count(1)
        self._timers: Dict[int, _Timer] = {}
        self._listeners: Dict[str, List[_Listener]] = {}

    # =========================================================================
    # TIMERS
    # =========================================================================

    def set_interval(self,
                     callback: Callable[[], None],
                     period_ms: float,
                     name: Optional[str] = None) -> TimerHandle:
        """Fire callback every period_ms of simulated time."""
        if period_ms <= 0:
            raise ValueError(f"Timer period must be positive, got {period_ms}")
        timer_id = next(self._ids)
        handle = TimerHandle(timer_id, name or f"timer-{timer_id}", float(period_ms))
        self._timers[timer_id] = _Timer(handle, callback, self.now + period_ms)
        if self.verbose:
            print(f"[LOOP] Timer registered: {handle.name} every {period_ms}ms")
        return handle

    def clear_interval(self, handle: TimerHandle):
        """Stop a timer. Raises KeyError for an unknown or already cleared handle."""
        if handle.id not in self._timers:
            raise KeyError(f"Timer not registered: {handle.name}")
        del self._timers[handle.id]
        if self.verbose:
            print(f"[LOOP] Timer cleared: {handle.name}")

    @property
    def timer_count(self) -> int:
        return len(self._timers)

    def timer_names(self) -> List[str]:
        return [t.handle.name for t in self._timers.values()]

    def fired_count(self, handle: TimerHandle) -> int:
        return self._timers[handle.id].fired

    def _next_due(self, limit: float) -> Optional[_Timer]:
        due = [t for t in self._timers.values() if t.next_due <= limit]
        if not due:
            return None
        # Dict preserves registration order, min() keeps the first on ties
        return min(due, key=lambda t: t.next_due)

    def advance(self, ms: float) -> int:
        """
        Move the clock forward, firing due timers along the way.

        Returns the number of callbacks fired.
        """
        target = self.now + ms
        fired = 0
        while True:
            timer = self._next_due(target)
            if timer is None:
                break
            self.now = timer.next_due
            timer.next_due += timer.handle.period_ms
            timer.fired += 1
            timer.callback()
            fired += 1
        self.now = target
        return fired

    # =========================================================================
    # LISTENERS
    # =========================================================================

    def add_listener(self, event_type: str, callback: Callable) -> ListenerHandle:
        """Register a window-level listener."""
        listeners = self._listeners.setdefault(event_type, [])
        if any(l.callback == callback for l in listeners):
            raise ValueError(f"Callback already registered for '{event_type}'")
        handle = ListenerHandle(next(self._ids), event_type)
        listeners.append(_Listener(handle, callback))
        return handle

    def remove_listener(self, handle: ListenerHandle):
        """Deregister a listener. Raises KeyError if it is not registered."""
        listeners = self._listeners.get(handle.event_type, [])
        for i, listener in enumerate(listeners):
            if listener.handle.id == handle.id:
                del listeners[i]
                return
        raise KeyError(f"Listener not registered: {handle.event_type}#{handle.id}")

    def listener_count(self, event_type: Optional[str] = None) -> int:
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return sum(len(l) for l in self._listeners.values())

    def dispatch(self, event_type: str, event=None) -> int:
        """
        Deliver an event to every listener of its type, synchronously.

        Returns the number of listeners invoked.
        """
        # Copy so a listener may deregister itself mid-dispatch
        listeners = list(self._listeners.get(event_type, []))
        for listener in listeners:
            listener.callback(event)
        return len(listeners)
