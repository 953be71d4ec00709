# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# params.py
# -----------------------------------------------------------------------------
# Purpose:
#   Input data model for a batch: arrival rate segments, usage-time
#   distributions, capacities, walking delays, and run controls.
#
# Design notes:
#   - Invalid values raise ValueError at construction; nothing is clamped.
#     Rate segments may overlap and come in any order. A segment that ends
#     before it starts or has a negative rate is rejected here; zero-rate and
#     zero-length segments are valid and simply produce no arrivals.
#   - from_dict() accepts the camelCase struct exchanged with hosts (UI,
#     worker, YAML config); load_params() reads the same struct from YAML.
#
# Usage:
#   from restroom_sim.params import BatchParams, load_params
#   params = load_params("config/baseline.yaml")
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import yaml
from .distributions import ServiceDist, dist_from_dict

MAX_SEED = 0xFFFFFFFF    # seeds are 32-bit generator states

def _require(cond: bool, msg: str):
    if not cond:
        raise ValueError(msg)

def _as_int(name: str, val: Any) -> int:
    # integral floats (2.0) are fine, fractional ones (2.7) are not
    if isinstance(val, bool):
        raise ValueError(f"{name} must be an integer, got {val!r}")
    if isinstance(val, int):
        return val
    try:
        f = float(val)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be an integer, got {val!r}") from exc
    _require(f.is_integer(), f"{name} must be an integer, got {val!r}")
    return int(f)

@dataclass(frozen=True)
class RateSegment:
    t_start_min: float
    t_end_min: float
    lambda_per_min: float

    def __post_init__(self):
        _require(self.t_end_min >= self.t_start_min,
                 f"rate segment ends before it starts: [{self.t_start_min}, {self.t_end_min}]")
        _require(self.lambda_per_min >= 0, f"arrival rate must be >= 0, got {self.lambda_per_min}")

@dataclass(frozen=True)
class ArrivalSpec:
    female: List[RateSegment] = field(default_factory=list)
    male: List[RateSegment] = field(default_factory=list)
    p_male_urinal: float = 0.0

    def __post_init__(self):
        _require(0.0 <= self.p_male_urinal <= 1.0,
                 f"p_male_urinal must lie in [0, 1], got {self.p_male_urinal}")

@dataclass(frozen=True)
class UsageTimeSpec:
    female: ServiceDist    # women's stall usage
    male: ServiceDist      # men's stall usage
    urinal: ServiceDist
    sink: ServiceDist

@dataclass(frozen=True)
class Capacities:
    c_stall: int
    c_urinal: int
    c_sink: int

    def __post_init__(self):
        for name in ("c_stall", "c_urinal", "c_sink"):
            val = getattr(self, name)
            _require(isinstance(val, int) and not isinstance(val, bool),
                     f"{name} must be an integer, got {val!r}")
            _require(val >= 0, f"{name} must be >= 0, got {val}")

@dataclass(frozen=True)
class Delays:
    walk_to_fixture_sec: float = 0.0
    walk_to_sink_sec: float = 0.0
    walk_to_exit_sec: float = 0.0

    def __post_init__(self):
        for name in ("walk_to_fixture_sec", "walk_to_sink_sec", "walk_to_exit_sec"):
            val = getattr(self, name)
            _require(math.isfinite(val) and val >= 0, f"{name} must be a finite value >= 0, got {val}")

@dataclass(frozen=True)
class BatchParams:
    """
    Everything one batch needs.

    warmup_min == 0 asks the engine to detect the warm-up itself; otherwise
    it must be smaller than horizon_min so the measurement window is non-empty.
    """
    arrivals: ArrivalSpec
    usage_times: UsageTimeSpec
    caps: Capacities
    delays: Delays
    warmup_min: float
    horizon_min: float
    replications: int = 1
    seed: int = 0

    def __post_init__(self):
        _require(math.isfinite(self.horizon_min) and self.horizon_min > 0,
                 f"horizon_min must be > 0, got {self.horizon_min}")
        _require(self.warmup_min >= 0, f"warmup_min must be >= 0, got {self.warmup_min}")
        _require(self.warmup_min < self.horizon_min,
                 f"warmup_min ({self.warmup_min}) must be smaller than horizon_min ({self.horizon_min})")
        _require(isinstance(self.replications, int) and self.replications >= 1,
                 f"replications must be a positive integer, got {self.replications!r}")
        _require(isinstance(self.seed, int) and 0 <= self.seed <= MAX_SEED,
                 f"seed must be an integer in [0, {MAX_SEED}], got {self.seed!r}")

    @property
    def horizon_sec(self) -> float:
        return self.horizon_min * 60.0

    @property
    def auto_warmup(self) -> bool:
        return self.warmup_min == 0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BatchParams":
        """Build from the camelCase host struct (see config/baseline.yaml)."""
        try:
            arr = d["arrivals"]
            usage = d["usageTimes"]
            caps = d["caps"]
            delays = d["delays"]
            return cls(
                arrivals=ArrivalSpec(
                    female=_segments(arr.get("female", [])),
                    male=_segments(arr.get("male", [])),
                    p_male_urinal=float(arr.get("pMaleUrinal", 0.0)),
                ),
                usage_times=UsageTimeSpec(
                    female=dist_from_dict(usage["female"]),
                    male=dist_from_dict(usage["male"]),
                    urinal=dist_from_dict(usage["urinal"]),
                    sink=dist_from_dict(usage["sink"]),
                ),
                caps=Capacities(
                    _as_int("cStall", caps["cStall"]),
                    _as_int("cUrinal", caps["cUrinal"]),
                    _as_int("cSink", caps["cSink"]),
                ),
                delays=Delays(
                    float(delays.get("walkToFixtureSec", 0.0)),
                    float(delays.get("walkToSinkSec", 0.0)),
                    float(delays.get("walkToExitSec", 0.0)),
                ),
                warmup_min=float(d.get("warmupMin", 0.0)),
                horizon_min=float(d["horizonMin"]),
                replications=_as_int("replications", d.get("replications", 1)),
                seed=_as_int("seed", d.get("seed", 0)),
            )
        except KeyError as exc:
            raise ValueError(f"batch parameters are missing field {exc.args[0]!r}") from exc

    def to_dict(self) -> Dict[str, Any]:
        def segs(ss: List[RateSegment]):
            return [{"tStartMin": s.t_start_min, "tEndMin": s.t_end_min, "lambdaPerMin": s.lambda_per_min} for s in ss]
        return {
            "arrivals": {
                "female": segs(self.arrivals.female),
                "male": segs(self.arrivals.male),
                "pMaleUrinal": self.arrivals.p_male_urinal,
            },
            "usageTimes": {
                "female": self.usage_times.female.to_dict(),
                "male": self.usage_times.male.to_dict(),
                "urinal": self.usage_times.urinal.to_dict(),
                "sink": self.usage_times.sink.to_dict(),
            },
            "caps": {"cStall": self.caps.c_stall, "cUrinal": self.caps.c_urinal, "cSink": self.caps.c_sink},
            "delays": {
                "walkToFixtureSec": self.delays.walk_to_fixture_sec,
                "walkToSinkSec": self.delays.walk_to_sink_sec,
                "walkToExitSec": self.delays.walk_to_exit_sec,
            },
            "warmupMin": self.warmup_min,
            "horizonMin": self.horizon_min,
            "replications": self.replications,
            "seed": self.seed,
        }

def _segments(raw: List[Dict[str, float]]) -> List[RateSegment]:
    return [
        RateSegment(float(s["tStartMin"]), float(s["tEndMin"]), float(s["lambdaPerMin"]))
        for s in raw
    ]

def load_params(path: str, overrides: Optional[Dict[str, Any]] = None) -> BatchParams:
    """Read BatchParams from YAML; the struct may sit at the top or under `params`."""
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    raw = raw.get("params", raw)
    if overrides:
        raw = {**raw, **overrides}
    return BatchParams.from_dict(raw)
