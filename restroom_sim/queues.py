# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# queues.py
# -----------------------------------------------------------------------------
# Purpose:
#   Minimal discrete-event primitives: EventKind, Event, the EventQueue
#   (binary min-heap FEL), Env (clock + FEL + router hook), and Station, a
#   FIFO resource class with c identical servers.
#
# Design notes:
#   - Event handling is delegated to env.router (defined in restroom_sim.network).
#   - Stations integrate busy server-seconds each time their busy count
#     changes, clipped to the measurement window [start, end].
#
# Usage:
#   from restroom_sim.queues import Env, Event, EventKind, Station
# -----------------------------------------------------------------------------

from __future__ import annotations
import bisect, heapq, itertools
from collections import deque
from enum import Enum
from typing import Deque, List, Optional, Tuple

class EventKind(Enum):
    ARRIVE = "ARRIVE"
    ENTER_FIXTURE = "ENTER_FIXTURE"        # after the walk to the fixture
    TRY_START_STALL = "TRY_START_STALL"
    TRY_START_URINAL = "TRY_START_URINAL"
    END_STALL = "END_STALL"
    END_URINAL = "END_URINAL"
    ENTER_SINK = "ENTER_SINK"              # after the walk to the sink
    TRY_START_SINK = "TRY_START_SINK"
    END_SINK = "END_SINK"

class Event:
    """Minimal event object for the Future Event List (FEL)."""
    __slots__ = ("t", "kind", "cid", "seq")
    def __init__(self, t: float, kind: EventKind, cid: int, seq: int = 0):
        self.t = t; self.kind = kind; self.cid = cid; self.seq = seq
    def __lt__(self, other: "Event"):
        return (self.t, self.seq) < (other.t, other.seq)
    def __repr__(self):
        return f"Event(t={self.t:.3f}, kind={self.kind.name}, cid={self.cid})"

class EventQueue:
    """
    Binary min-heap keyed on event time.

    Equal timestamps pop in insertion order; callers should only rely on
    every event at time t being popped before any event later than t.
    """
    def __init__(self):
        self._heap: List[Event] = []
        self._counter = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def push(self, ev: Event):
        ev.seq = next(self._counter)
        heapq.heappush(self._heap, ev)

    def pop(self) -> Optional[Event]:
        if not self._heap:
            return None
        return heapq.heappop(self._heap)

    def peek(self) -> Optional[Event]:
        return self._heap[0] if self._heap else None

class Env:
    """Simulation environment holding the clock, FEL, and a router hook.

    Attributes
    ----------
    t : float
        Simulation time (seconds).
    FEL : EventQueue
        Scheduled events.
    router : object
        Object with a dispatch(env, event) method (see restroom_sim.network).
    processed : int
        Number of events handled so far.
    """
    def __init__(self, router):
        self.t: float = 0.0
        self.FEL = EventQueue()
        self.router = router
        self.processed: int = 0

    def schedule(self, t: float, kind: EventKind, cid: int):
        self.FEL.push(Event(t, kind, cid))

    def run_until(self, T_end: float):
        # events past T_end stay in the FEL unprocessed
        while self.FEL:
            if self.FEL.peek().t > T_end:
                break
            ev = self.FEL.pop()
            self.t = ev.t
            self.router.dispatch(self, ev)
            self.processed += 1

class Station:
    """FIFO resource class with c parallel servers and an unbounded queue.

    Parameters
    ----------
    name : str
        Resource class name ('stall', 'urinal', 'sink').
    c : int
        Number of parallel servers; 0 means nobody is ever admitted.
    window : tuple[float, float]
        Measurement window (seconds) for busy-time integration.
    keep_history : bool
        Keep busy-integral breakpoints so busy_seconds() can be asked for a
        window start chosen after the run (auto warm-up).
    """
    def __init__(self, name: str, c: int, window: Tuple[float, float], keep_history: bool = False):
        self.name = name
        self.c = c
        self.window_start, self.window_end = window
        self.queue: Deque[int] = deque()
        self.in_service: int = 0
        self.busy_time: float = 0.0
        self.last_change: float = 0.0
        self._prev_in_service: int = 0
        self._history: Optional[List[Tuple[float, float, int]]] = [(0.0, 0.0, 0)] if keep_history else None

    def join(self, cid: int):
        self.queue.append(cid)

    def head(self) -> Optional[int]:
        return self.queue[0] if self.queue else None

    def has_free_server(self) -> bool:
        return self.in_service < self.c

    def start(self, now: float) -> int:
        """Admit the queue head into service; caller checked head and capacity."""
        cid = self.queue.popleft()
        self.in_service += 1
        self._mark_busy(now)
        return cid

    def release(self, now: float):
        self.in_service = max(0, self.in_service - 1)
        self._mark_busy(now)

    def close(self, now: float):
        """Integrate the busy count up to `now` (end of run)."""
        self._mark_busy(now)

    def busy_seconds(self, start: Optional[float] = None) -> float:
        """Busy server-seconds over [start, window_end]; start defaults to the window start."""
        if start is None or start <= self.window_start:
            return self.busy_time
        if self._history is None:
            raise ValueError(f"station {self.name!r} kept no history; cannot re-window at {start}")
        return max(0.0, self.busy_time - self._integral_at(min(start, self.window_end)))

    def _integral_at(self, x: float) -> float:
        hist = self._history
        i = bisect.bisect_right(hist, (x, float("inf"), 0)) - 1
        t, cum, busy = hist[i]
        lo = max(t, self.window_start)
        return cum + busy * max(0.0, x - lo)

    def _mark_busy(self, now: float):
        # Integrate busy server-seconds over the part of [last_change, now] inside the window
        lo = max(self.last_change, self.window_start)
        hi = min(now, self.window_end)
        if hi > lo:
            self.busy_time += self._prev_in_service * (hi - lo)
        self.last_change = now
        self._prev_in_service = self.in_service
        if self._history is not None:
            self._history.append((now, self.busy_time, self.in_service))
