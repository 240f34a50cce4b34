# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# queues.py
# -----------------------------------------------------------------------------
# Purpose:
#   Minimal discrete-event kernel: Event handles and Env, a virtual clock with
#   a Future Event List (FEL) kept as a min-heap.
#
# Design notes:
#   - Events are ordered by (time, insertion sequence). Events scheduled for
#     the same virtual time fire in the order they were scheduled, so a run is
#     reproducible for a fixed seed.
#   - Cancellation is lazy: the handle is flagged and skipped when popped.
#   - Live events are dispatched to a single handler callable supplied by
#     the model (see checkout_sim.simulation).
#
# Usage:
#   env = Env(handler); h = env.schedule(2.0, payload); env.cancel(h)
#   env.run_until(T_end)
# -----------------------------------------------------------------------------

from __future__ import annotations
import heapq, itertools
from typing import Any, Callable, List

class Event:
    """Scheduled payload on the FEL; doubles as the cancellation handle."""
    __slots__ = ("t", "seq", "payload", "cancelled")
    def __init__(self, t: float, seq: int, payload: Any):
        self.t = t; self.seq = seq; self.payload = payload
        self.cancelled = False
    def __lt__(self, other: "Event"):
        return (self.t, self.seq) < (other.t, other.seq)
    def __repr__(self):
        state = " cancelled" if self.cancelled else ""
        return f"<Event t={self.t:.4f} #{self.seq} {type(self.payload).__name__}{state}>"

class Env:
    """Simulation environment holding the clock and the FEL.

    Attributes
    ----------
    t : float
        Simulation time (seconds).
    FEL : list[Event]
        Min-heap of scheduled events.
    handler : callable
        Called with each live Event in virtual-time order.
    """
    def __init__(self, handler: Callable[["Event"], None]):
        self.t: float = 0.0
        self.FEL: List[Event] = []
        self.handler = handler
        self.processed = 0
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        return self.t

    def schedule(self, delay: float, payload: Any) -> Event:
        if delay < 0:
            raise ValueError(f"cannot schedule into the past (delay={delay})")
        ev = Event(self.t + delay, next(self._seq), payload)
        heapq.heappush(self.FEL, ev)
        return ev

    def schedule_at(self, t: float, payload: Any) -> Event:
        return self.schedule(t - self.t, payload)

    def cancel(self, ev: Event):
        ev.cancelled = True

    def pending(self) -> int:
        return sum(1 for ev in self.FEL if not ev.cancelled)

    def run_until(self, T_end: float):
        """Process every event with t <= T_end, then park the clock at T_end."""
        while self.FEL and self.FEL[0].t <= T_end:
            ev = heapq.heappop(self.FEL)
            if ev.cancelled:
                continue
            self.t = ev.t
            self.processed += 1
            self.handler(ev)
        if T_end > self.t:
            self.t = T_end
