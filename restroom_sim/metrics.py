# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# metrics.py
# -----------------------------------------------------------------------------
# Purpose:
#   Collect and summarize per-replication KPIs: per-customer waits and time in
#   system, per-class utilization, and throughput, all after the warm-up.
#
# Design notes:
#   - note_* methods are the instrumentation hooks called by the router.
#   - Every completion is logged unfiltered; the warm-up cut is applied in
#     summary(), because in auto mode the boundary is only known after the run.
#
# Usage:
#   M = Metrics(horizon_sec); ...; rep = M.summary(warmup_sec, stations)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging, math
from dataclasses import dataclass, field
from typing import Dict, List, Sequence
from .entities import CompletedCustomer, Customer, STALL, URINAL
from .queues import Station
from .stations import SINK
from .warmup import WaitWindowTracker

log = logging.getLogger(__name__)

def percentile(sorted_asc: Sequence[float], p: float) -> float:
    """Linear-interpolation percentile (p in [0, 1]) of ascending data; 0.0 when empty."""
    if not sorted_asc:
        return 0.0
    idx = (len(sorted_asc) - 1) * p
    lo, hi = int(math.floor(idx)), int(math.ceil(idx))
    if lo == hi:
        return sorted_asc[lo]
    return sorted_asc[lo] + (sorted_asc[hi] - sorted_asc[lo]) * (idx - lo)

def clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))

@dataclass
class PerCustomer:
    gender: List[str] = field(default_factory=list)
    fixture_kind: List[str] = field(default_factory=list)
    wait_fixture_sec: List[float] = field(default_factory=list)
    wait_sink_sec: List[float] = field(default_factory=list)
    time_in_system_sec: List[float] = field(default_factory=list)
    t_exit_sec: List[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.gender)

    def append(self, c: CompletedCustomer):
        self.gender.append(c.gender)
        self.fixture_kind.append(c.fixture_kind)
        self.wait_fixture_sec.append(c.wait_fixture_sec)
        self.wait_sink_sec.append(c.wait_sink_sec)
        self.time_in_system_sec.append(c.time_in_system_sec)
        self.t_exit_sec.append(c.t_exit)

    def extend(self, other: "PerCustomer"):
        self.gender.extend(other.gender)
        self.fixture_kind.extend(other.fixture_kind)
        self.wait_fixture_sec.extend(other.wait_fixture_sec)
        self.wait_sink_sec.extend(other.wait_sink_sec)
        self.time_in_system_sec.extend(other.time_in_system_sec)
        self.t_exit_sec.extend(other.t_exit_sec)

    def wait_totals(self) -> List[float]:
        return [f + s for f, s in zip(self.wait_fixture_sec, self.wait_sink_sec)]

    def to_dict(self) -> Dict[str, list]:
        return {
            "gender": list(self.gender),
            "fixtureKind": list(self.fixture_kind),
            "waitFixtureSec": list(self.wait_fixture_sec),
            "waitSinkSec": list(self.wait_sink_sec),
            "timeInSystemSec": list(self.time_in_system_sec),
            "tExitSec": list(self.t_exit_sec),
        }

@dataclass
class RepMetrics:
    """Outputs of one replication (post warm-up)."""
    per_customer: PerCustomer
    util_stall: float
    util_urinal: float
    util_sink: float
    throughput_per_hour: float
    warmup_sec: float
    arrivals: int                # ARRIVE events admitted before the horizon
    completed_total: int         # END_SINK reached, warm-up included
    completed_post_warmup: int
    notes: List[str] = field(default_factory=list)

    @property
    def in_flight(self) -> int:
        return self.arrivals - self.completed_total

class Metrics:
    def __init__(self, horizon_sec: float):
        self.horizon_sec = horizon_sec
        self.arrivals = 0
        self.completions: List[CompletedCustomer] = []
        self.windows = WaitWindowTracker()

    def note_arrival(self, cust: Customer):
        self.arrivals += 1

    def note_completion(self, cust: Customer, t_exit: float, t_now: float):
        rec = CompletedCustomer(
            gender=cust.gender,
            fixture_kind=cust.fixture,
            wait_fixture_sec=cust.wait_fixture,
            wait_sink_sec=cust.wait_sink,
            time_in_system_sec=t_exit - cust.t_arrive,
            t_exit=t_exit,
        )
        self.completions.append(rec)
        # Warm-up windows are keyed by the sink departure time
        self.windows.add(t_now, rec.wait_total_sec)

    def summary(self, warmup_sec: float, stations: Dict[str, Station]) -> RepMetrics:
        out = PerCustomer()
        for rec in self.completions:
            if rec.t_exit > warmup_sec:
                out.append(rec)
        window_sec = max(0.0, self.horizon_sec - warmup_sec)

        def util(name: str) -> float:
            st = stations[name]
            if st.c == 0 or window_sec <= 0:
                return 0.0
            return clamp01(st.busy_seconds(warmup_sec) / (window_sec * max(1, st.c)))

        throughput = (len(out) / window_sec) * 3600.0 if window_sec > 0 else 0.0
        notes: List[str] = []
        if len(out) == 0 and self.arrivals > 0:
            msg = (f"no customers completed after warm-up (arrivals={self.arrivals}, "
                   f"completed={len(self.completions)}, warmup={warmup_sec:.1f}s, horizon={self.horizon_sec:.1f}s)")
            log.warning(msg)
            notes.append(msg)
        return RepMetrics(
            per_customer=out,
            util_stall=util(STALL),
            util_urinal=util(URINAL),
            util_sink=util(SINK),
            throughput_per_hour=throughput,
            warmup_sec=warmup_sec,
            arrivals=self.arrivals,
            completed_total=len(self.completions),
            completed_post_warmup=len(out),
            notes=notes,
        )
