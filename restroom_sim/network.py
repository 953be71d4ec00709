# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# network.py
# -----------------------------------------------------------------------------
# Purpose:
#   Router and network wiring for the two-stage restroom: entrance ->
#   fixture (stall | urinal) -> sink -> exit. One handler per EventKind.
#
# Design notes:
#   - Each handler schedules its customer's successor event, which keeps
#     every customer's events in causal order.
#   - A TRY_START_* only admits the customer at the head of its queue when a
#     server is free, then re-triggers a try for the new head so several
#     customers can start within the same instant.
#
# Usage:
#   router = Router(params, stations, metrics, streams)
#   env = Env(router)
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict
from .entities import Customer, FEMALE, STALL, URINAL
from .metrics import Metrics
from .params import BatchParams
from .queues import Env, Event, EventKind, Station
from .rng import Mulberry32
from .stations import SINK

@dataclass
class Streams:
    """Independent sub-streams of one replication."""
    arrivals_f: Mulberry32
    arrivals_m: Mulberry32
    svc_stall: Mulberry32
    svc_urinal: Mulberry32
    svc_sink: Mulberry32
    route: Mulberry32

_TRY_KIND = {STALL: EventKind.TRY_START_STALL, URINAL: EventKind.TRY_START_URINAL, SINK: EventKind.TRY_START_SINK}
_END_KIND = {STALL: EventKind.END_STALL, URINAL: EventKind.END_URINAL, SINK: EventKind.END_SINK}

class Router:
    def __init__(self, params: BatchParams, stations: Dict[str, Station], metrics: Metrics, streams: Streams):
        self.p = params
        self.S = stations
        self.M = metrics
        self.rng = streams
        self.people: Dict[int, Customer] = {}
        u = params.usage_times
        self._svc = {
            STALL: lambda c: (u.female if c.gender == FEMALE else u.male).sample(streams.svc_stall),
            URINAL: lambda c: u.urinal.sample(streams.svc_urinal),
            SINK: lambda c: u.sink.sample(streams.svc_sink),
        }
        self._handlers: Dict[EventKind, Callable[[Env, Customer], None]] = {
            EventKind.ARRIVE: self.on_arrive,
            EventKind.ENTER_FIXTURE: self.on_enter_fixture,
            EventKind.TRY_START_STALL: lambda env, c: self._try_start(env, c, STALL),
            EventKind.TRY_START_URINAL: lambda env, c: self._try_start(env, c, URINAL),
            EventKind.END_STALL: lambda env, c: self._end_fixture(env, c, STALL),
            EventKind.END_URINAL: lambda env, c: self._end_fixture(env, c, URINAL),
            EventKind.ENTER_SINK: self.on_enter_sink,
            EventKind.TRY_START_SINK: lambda env, c: self._try_start(env, c, SINK),
            EventKind.END_SINK: self.on_end_sink,
        }
        missing = set(EventKind) - set(self._handlers)
        if missing:
            raise RuntimeError(f"no handler for event kinds {sorted(k.name for k in missing)}")

    def admit(self, env: Env, cust: Customer):
        """Register a customer and schedule its arrival."""
        self.people[cust.cid] = cust
        self.M.note_arrival(cust)
        env.schedule(cust.t_arrive, EventKind.ARRIVE, cust.cid)

    def dispatch(self, env: Env, ev: Event):
        cust = self.people.get(ev.cid)
        if cust is None:
            return
        self._handlers[ev.kind](env, cust)

    def on_arrive(self, env: Env, cust: Customer):
        env.schedule(env.t + self.p.delays.walk_to_fixture_sec, EventKind.ENTER_FIXTURE, cust.cid)

    def on_enter_fixture(self, env: Env, cust: Customer):
        cust.t_join_fixture = env.t
        self._join(env, cust, cust.fixture)

    def on_enter_sink(self, env: Env, cust: Customer):
        cust.t_join_sink = env.t
        self._join(env, cust, SINK)

    def on_end_sink(self, env: Env, cust: Customer):
        cust.t_leave_sink = env.t
        self.S[SINK].release(env.t)
        t_exit = env.t + self.p.delays.walk_to_exit_sec
        self.M.note_completion(cust, t_exit, env.t)
        del self.people[cust.cid]
        self._kick(env, SINK)

    def _join(self, env: Env, cust: Customer, name: str):
        self.S[name].join(cust.cid)
        self._kick(env, name)

    def _kick(self, env: Env, name: str):
        # Schedule a start attempt for whoever heads the queue now
        head = self.S[name].head()
        if head is not None:
            env.schedule(env.t, _TRY_KIND[name], head)

    def _try_start(self, env: Env, cust: Customer, name: str):
        st = self.S[name]
        if st.head() != cust.cid or not st.has_free_server():
            return
        st.start(env.t)
        if name == SINK:
            cust.t_enter_sink = env.t
        else:
            cust.t_enter_fixture = env.t
        env.schedule(env.t + self._svc[name](cust), _END_KIND[name], cust.cid)
        self._kick(env, name)

    def _end_fixture(self, env: Env, cust: Customer, name: str):
        cust.t_leave_fixture = env.t
        self.S[name].release(env.t)
        env.schedule(env.t + self.p.delays.walk_to_sink_sec, EventKind.ENTER_SINK, cust.cid)
        self._kick(env, name)
