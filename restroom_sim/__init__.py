"""
restroom_sim package initializer.

This package contains the discrete-event Monte-Carlo engine for a restroom
queueing network (fixture stage: stall/urinal; hygiene stage: sink): PRNG and
samplers, NHPP arrivals, the event queue and stations, routing, warm-up
detection, metric collection, and the batch runner.
"""
__all__ = [
    "rng", "distributions", "params", "entities", "arrivals", "queues",
    "stations", "policies", "network", "warmup", "metrics", "simulation", "batch",
    "BatchParams", "BatchResult", "load_params", "run_batch", "run_one_replication",
]

from .params import BatchParams, load_params
from .batch import BatchResult, run_batch
from .simulation import run_one_replication
