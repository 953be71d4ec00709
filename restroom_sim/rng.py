# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# rng.py
# -----------------------------------------------------------------------------
# Purpose:
#   Seedable 32-bit PRNG (mulberry32) plus the variate samplers used by the
#   restroom DES: standard normal, lognormal, gamma, exponential.
#
# Design notes:
#   - Every generator is an explicit object built from a seed and handed to
#     exactly one consumer; the engine never touches the global `random`.
#   - Mulberry32 reproduces the JavaScript scheme bit for bit, so a seed gives
#     the same stream here as in the browser build of the model.
#
# Usage:
#   from restroom_sim.rng import new_rng, sample_lognormal
#   rng = new_rng(42); sample_lognormal(math.log(60), 0.5, rng)
# -----------------------------------------------------------------------------

from __future__ import annotations
import math

_MASK32 = 0xFFFFFFFF
_GOLDEN = 0x6D2B79F5

def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32

class Mulberry32:
    """Mulberry32 generator: period ~2**32, uniform floats in [0, 1)."""
    __slots__ = ("_state",)

    def __init__(self, seed: int):
        self._state = int(seed) & _MASK32

    def random(self) -> float:
        self._state = (self._state + _GOLDEN) & _MASK32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296.0

def new_rng(seed: int) -> Mulberry32:
    return Mulberry32(seed)

def derive_seed(rng: Mulberry32) -> int:
    """Draw a child seed from a parent stream (replications and sub-streams)."""
    return int(math.floor(rng.random() * 1e9))

def normal01(rng: Mulberry32) -> float:
    """Standard normal via Box-Muller; zero uniforms are redrawn (log(0))."""
    u = 0.0
    while u == 0.0:
        u = rng.random()
    v = 0.0
    while v == 0.0:
        v = rng.random()
    return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)

def sample_lognormal(mu: float, sigma: float, rng: Mulberry32) -> float:
    return math.exp(mu + sigma * normal01(rng))

def sample_gamma(k: float, theta: float, rng: Mulberry32) -> float:
    """
    Gamma(k, theta) with mean k*theta.

    Marsaglia-Tsang squeeze/rejection for k >= 1. For k < 1 the boosting
    identity Gamma(k) = Gamma(1+k) * U**(1/k) is applied. The rejection loop
    has no cap: its acceptance probability is bounded well away from zero.
    """
    if k < 1.0:
        u = 0.0
        while u == 0.0:
            u = rng.random()
        return sample_gamma(1.0 + k, theta, rng) * u ** (1.0 / k)
    d = k - 1.0 / 3.0
    c = 1.0 / math.sqrt(9.0 * d)
    while True:
        z = normal01(rng)
        x = 1.0 + c * z
        if x <= 0.0:
            continue
        x = x * x * x
        u = rng.random()
        if u < 1.0 - 0.0331 * (z * z) * (z * z):
            return theta * d * x
        if math.log(u) < 0.5 * z * z + d * (1.0 - x + math.log(x)):
            return theta * d * x

def sample_exponential(rate: float, rng: Mulberry32) -> float:
    # inverse CDF; 1-u keeps the argument of log in (0, 1]
    return -math.log(1.0 - rng.random()) / rate
