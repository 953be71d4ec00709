# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# arrivals.py
# -----------------------------------------------------------------------------
# Purpose:
#   Generate exogenous arrivals per gender from piecewise-constant
#   nonhomogeneous Poisson (NHPP) rate segments, and merge the two streams.
#
# Design notes:
#   - Each segment is an exact homogeneous Poisson process (exponential gaps),
#     so no thinning is needed for piecewise-constant rates.
#   - Segments may overlap or come unsorted; their arrivals are pooled and
#     sorted, which superposes overlapping rates.
#
# Usage:
#   times = generate_nhpp(spec.female, horizon_min, rng)   # minutes
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Iterable, List, Tuple
from .entities import FEMALE, MALE
from .params import RateSegment
from .rng import Mulberry32, sample_exponential

def generate_homogeneous_poisson(start_min: float, end_min: float, lam_per_min: float,
                                 rng: Mulberry32) -> List[float]:
    out: List[float] = []
    if lam_per_min <= 0 or end_min <= start_min:
        return out
    t = start_min
    while True:
        t += sample_exponential(lam_per_min, rng)
        if t >= end_min:
            break
        out.append(t)
    return out

def generate_nhpp(segments: Iterable[RateSegment], horizon_min: float, rng: Mulberry32) -> List[float]:
    """
    Arrival times (minutes, ascending) over [0, horizon_min].

    Parameters
    ----------
    segments : iterable of RateSegment
        Piecewise-constant rates; each is clipped to [0, horizon_min] and
        skipped when the clipped span is empty or its rate is not positive.
    horizon_min : float
        End of the simulated period.
    rng : Mulberry32
        Dedicated stream; the same stream state yields the same arrivals.
    """
    times: List[float] = []
    for seg in segments:
        start = max(0.0, seg.t_start_min)
        end = min(horizon_min, seg.t_end_min)
        if end <= start or seg.lambda_per_min <= 0:
            continue
        times.extend(generate_homogeneous_poisson(start, end, seg.lambda_per_min, rng))
    times.sort()
    return times

def merge_by_gender(f_times: List[float], m_times: List[float]) -> List[Tuple[float, str]]:
    """Two-way merge of sorted streams into (t, gender); females first on ties."""
    merged: List[Tuple[float, str]] = []
    i = j = 0
    while i < len(f_times) or j < len(m_times):
        if j >= len(m_times) or (i < len(f_times) and f_times[i] <= m_times[j]):
            merged.append((f_times[i], FEMALE)); i += 1
        else:
            merged.append((m_times[j], MALE)); j += 1
    return merged
