# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# batch.py
# -----------------------------------------------------------------------------
# Purpose:
#   Run R independent replications, pool their post-warm-up per-customer
#   observations, and compute per-replication summary statistics.
#
# Design notes:
#   - All replication seeds are drawn sequentially from one master stream
#     before any replication runs, so the batch is reproducible from `seed`
#     alone and can be dispatched to worker processes without changing it.
#   - With warmup_min == 0 a throw-away replication fixes the warm-up, and
#     that same value then applies to every replication of the batch.
#   - Confidence intervals are left to callers (see experiments/).
#
# Usage:
#   from restroom_sim.batch import run_batch
#   result = run_batch(params)            # or run_batch(params, processes=4)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging, multiprocessing
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from .metrics import PerCustomer, RepMetrics, percentile
from .params import BatchParams
from .rng import derive_seed, new_rng
from .simulation import run_one_replication

log = logging.getLogger(__name__)

@dataclass
class PerReplication:
    avg_wait_total_sec: List[float] = field(default_factory=list)
    p95_wait_total_sec: List[float] = field(default_factory=list)
    util_stall: List[float] = field(default_factory=list)
    util_urinal: List[float] = field(default_factory=list)
    util_sink: List[float] = field(default_factory=list)
    throughput_per_hour: List[float] = field(default_factory=list)

    def add(self, rep: RepMetrics):
        totals = sorted(rep.per_customer.wait_totals())
        self.avg_wait_total_sec.append(sum(totals) / len(totals) if totals else 0.0)
        self.p95_wait_total_sec.append(percentile(totals, 0.95))
        self.util_stall.append(rep.util_stall)
        self.util_urinal.append(rep.util_urinal)
        self.util_sink.append(rep.util_sink)
        self.throughput_per_hour.append(rep.throughput_per_hour)

    def to_dict(self) -> Dict[str, List[float]]:
        return {
            "avgWaitTotalSec": list(self.avg_wait_total_sec),
            "p95WaitTotalSec": list(self.p95_wait_total_sec),
            "utilStall": list(self.util_stall),
            "utilUrinal": list(self.util_urinal),
            "utilSink": list(self.util_sink),
            "throughputPerHour": list(self.throughput_per_hour),
        }

@dataclass
class BatchResult:
    per_customer: PerCustomer
    per_replication: PerReplication
    meta: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        """The host-facing struct: perCustomer / perReplication / meta."""
        return {
            "perCustomer": self.per_customer.to_dict(),
            "perReplication": self.per_replication.to_dict(),
            "meta": dict(self.meta),
        }

def replication_seeds(master_seed: int, count: int) -> List[int]:
    stream = new_rng(master_seed)
    return [derive_seed(stream) for _ in range(count)]

def _run_rep(args: Tuple[BatchParams, int, float]) -> RepMetrics:
    params, seed, warmup_sec = args
    return run_one_replication(params, seed, warmup_sec)

def run_batch(params: BatchParams, processes: Optional[int] = None) -> BatchResult:
    """
    Run params.replications replications and pool their outputs.

    Parameters
    ----------
    params : BatchParams
        Model inputs and run controls.
    processes : int, optional
        When > 1, replications run in a multiprocessing.Pool of that size;
        results are identical to sequential execution.
    """
    seeds = replication_seeds(params.seed, params.replications)
    notes: List[str] = []

    if params.auto_warmup:
        probe = run_one_replication(params, seeds[0])
        warmup_sec = probe.warmup_sec
        log.info("auto warm-up: %.2f min (probe seed %d)", warmup_sec / 60.0, seeds[0])
    else:
        warmup_sec = params.warmup_min * 60.0
    detected_warmup_min = warmup_sec / 60.0

    jobs = [(params, s, warmup_sec) for s in seeds]
    if processes and processes > 1 and len(jobs) > 1:
        with multiprocessing.Pool(processes=processes) as pool:
            reps = pool.map(_run_rep, jobs)
    else:
        reps = [_run_rep(job) for job in jobs]

    per_customer = PerCustomer()
    per_rep = PerReplication()
    for r, rep in enumerate(reps):
        per_customer.extend(rep.per_customer)
        per_rep.add(rep)
        notes.extend(f"replication {r}: {n}" for n in rep.notes)

    log.info("batch done: %d replications, %d customers pooled", params.replications, len(per_customer))
    return BatchResult(
        per_customer=per_customer,
        per_replication=per_rep,
        meta={
            "warmupMin": detected_warmup_min,
            "horizonMin": params.horizon_min,
            "replications": params.replications,
            "detectedWarmupMin": detected_warmup_min,
            "notes": notes,
        },
    )
