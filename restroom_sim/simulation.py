# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# simulation.py
# -----------------------------------------------------------------------------
# Purpose:
#   Simulate a single replication: derive the sub-streams, build stations and
#   router, schedule arrivals, run the event loop to the horizon, detect the
#   warm-up when asked to, and return the replication metrics.
#
# Design notes:
#   - The six sub-streams come from the replication seed in a fixed order
#     (female arrivals, male arrivals, stall, urinal, sink, routing), so
#     changing how one of them is consumed leaves the others untouched.
#   - Batch-level warm-up handling lives in restroom_sim.batch.
#
# Usage:
#   from restroom_sim.simulation import run_one_replication
#   rep = run_one_replication(params, seed=12345)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from typing import Optional
from .arrivals import generate_nhpp, merge_by_gender
from .entities import Customer
from .metrics import Metrics, RepMetrics
from .network import Router, Streams
from .params import BatchParams
from .policies import choose_fixture
from .queues import Env
from .rng import derive_seed, new_rng
from .stations import make_stations
from .warmup import detect_warmup

log = logging.getLogger(__name__)

def make_streams(seed: int) -> Streams:
    master = new_rng(seed)
    # order matters: it fixes which child seed each concern receives
    return Streams(
        arrivals_f=new_rng(derive_seed(master)),
        arrivals_m=new_rng(derive_seed(master)),
        svc_stall=new_rng(derive_seed(master)),
        svc_urinal=new_rng(derive_seed(master)),
        svc_sink=new_rng(derive_seed(master)),
        route=new_rng(derive_seed(master)),
    )

def run_one_replication(params: BatchParams, seed: int, warmup_sec: Optional[float] = None) -> RepMetrics:
    """
    Run one replication from time 0 to the horizon.

    Parameters
    ----------
    params : BatchParams
        Model inputs; replications and the master seed are ignored here.
    seed : int
        Replication seed.
    warmup_sec : float, optional
        Warm-up to apply; defaults to params.warmup_min, and None together
        with params.warmup_min == 0 means detect it from this run.
    """
    horizon_sec = params.horizon_sec
    if warmup_sec is None and not params.auto_warmup:
        warmup_sec = params.warmup_min * 60.0
    detect = warmup_sec is None

    streams = make_streams(seed)
    # In detect mode integrate from 0 and re-window once the warm-up is known
    window = (0.0 if detect else warmup_sec, horizon_sec)
    stations = make_stations(params.caps, window, keep_history=detect)
    M = Metrics(horizon_sec)
    router = Router(params, stations, M, streams)
    env = Env(router)

    f_min = generate_nhpp(params.arrivals.female, params.horizon_min, streams.arrivals_f)
    m_min = generate_nhpp(params.arrivals.male, params.horizon_min, streams.arrivals_m)
    cid = 0
    for t_min, gender in merge_by_gender(f_min, m_min):
        t = t_min * 60.0
        if t >= horizon_sec:
            break
        cid += 1
        fixture = choose_fixture(gender, params.arrivals.p_male_urinal, params.caps.c_urinal, streams.route)
        router.admit(env, Customer(cid, gender, fixture, t))

    env.run_until(horizon_sec)
    for st in stations.values():
        st.close(horizon_sec)

    if detect:
        warmup_sec = detect_warmup(M.windows.windows(), horizon_sec)
        log.debug("detected warm-up %.1fs (seed=%d)", warmup_sec, seed)
    rep = M.summary(warmup_sec, stations)
    log.debug("replication seed=%d: %d events, %d arrivals, %d completed (%d post warm-up)",
              seed, env.processed, rep.arrivals, rep.completed_total, rep.completed_post_warmup)
    return rep
