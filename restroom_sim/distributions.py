# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# distributions.py
# -----------------------------------------------------------------------------
# Purpose:
#   Service-time distributions (seconds) for stalls, urinals and sinks:
#   lognormal{mu, sigma}, gamma{k, theta} and fixed{seconds}.
#
# Design notes:
#   - The tag is resolved once, when parameters are parsed; each variant
#     carries its own sample(rng) so the engine never re-branches per draw.
#   - Parameters are validated on construction and never clamped.
#
# Usage:
#   from restroom_sim.distributions import dist_from_dict
#   d = dist_from_dict({"dist": "gamma", "k": 2.0, "theta": 6.0})
#   secs = d.sample(rng)
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Dict, Union
from .rng import Mulberry32, sample_gamma, sample_lognormal

@dataclass(frozen=True)
class LognormalDist:
    mu: float
    sigma: float

    def __post_init__(self):
        if not math.isfinite(self.mu):
            raise ValueError(f"lognormal mu must be finite, got {self.mu}")
        if not self.sigma > 0:
            raise ValueError(f"lognormal sigma must be > 0, got {self.sigma}")

    @property
    def mean(self) -> float:
        return math.exp(self.mu + 0.5 * self.sigma ** 2)

    def sample(self, rng: Mulberry32) -> float:
        return sample_lognormal(self.mu, self.sigma, rng)

    def to_dict(self) -> Dict[str, float]:
        return {"dist": "lognormal", "mu": self.mu, "sigma": self.sigma}

@dataclass(frozen=True)
class GammaDist:
    k: float
    theta: float

    def __post_init__(self):
        if not self.k > 0:
            raise ValueError(f"gamma shape k must be > 0, got {self.k}")
        if not self.theta > 0:
            raise ValueError(f"gamma scale theta must be > 0, got {self.theta}")

    @property
    def mean(self) -> float:
        return self.k * self.theta

    def sample(self, rng: Mulberry32) -> float:
        return sample_gamma(self.k, self.theta, rng)

    def to_dict(self) -> Dict[str, float]:
        return {"dist": "gamma", "k": self.k, "theta": self.theta}

@dataclass(frozen=True)
class FixedDist:
    """Deterministic service time (M/D/c validation runs)."""
    seconds: float

    def __post_init__(self):
        if not self.seconds > 0:
            raise ValueError(f"fixed service time must be > 0, got {self.seconds}")

    @property
    def mean(self) -> float:
        return self.seconds

    def sample(self, rng: Mulberry32) -> float:
        return self.seconds

    def to_dict(self) -> Dict[str, float]:
        return {"dist": "fixed", "seconds": self.seconds}

ServiceDist = Union[LognormalDist, GammaDist, FixedDist]

def dist_from_dict(spec: Dict) -> ServiceDist:
    """Resolve a tagged mapping such as {"dist": "lognormal", "mu": .., "sigma": ..}."""
    if isinstance(spec, (LognormalDist, GammaDist, FixedDist)):
        return spec
    tag = spec.get("dist")
    try:
        if tag == "lognormal":
            return LognormalDist(float(spec["mu"]), float(spec["sigma"]))
        if tag == "gamma":
            return GammaDist(float(spec["k"]), float(spec["theta"]))
        if tag == "fixed":
            return FixedDist(float(spec["seconds"]))
    except KeyError as exc:
        raise ValueError(f"{tag} distribution is missing parameter {exc.args[0]!r}") from exc
    raise ValueError(f"unknown service distribution tag {tag!r}")
