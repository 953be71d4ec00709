# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# warmup.py
# -----------------------------------------------------------------------------
# Purpose:
#   Detect the end of the initial transient (warm-up) from the waits observed
#   during a run, when the caller did not supply a warm-up.
#
# Design notes:
#   - Completions are bucketed into fixed windows (1 minute) by exit time and
#     averaged. A window counts once a later completion has closed it, so the
#     last, partial window never enters the test.
#   - A run of >= 3 consecutive windows spanning >= 5 minutes whose
#     coefficient of variation is < 5% (or whose variance is tiny) marks
#     steady state, and the run's first window is the warm-up boundary.
#   - Without a stable run we fall back to min(10% of horizon, 2 minutes).
#
# Usage:
#   tracker = WaitWindowTracker(); tracker.add(t_exit, wait)
#   warmup_sec = detect_warmup(tracker.windows(), horizon_sec)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging, math
from dataclasses import dataclass
from typing import Dict, List, Sequence

log = logging.getLogger(__name__)

WINDOW_SEC = 60.0
SPAN_SEC = 300.0
CV_TOLERANCE = 0.05
VARIANCE_FLOOR = 0.01
MIN_FALLBACK_SEC = 60.0

@dataclass(frozen=True)
class WaitWindow:
    t: float            # window start (seconds)
    avg_wait: float
    count: int

class WaitWindowTracker:
    """Running per-window mean of total wait, keyed by completion time."""
    def __init__(self, window_sec: float = WINDOW_SEC):
        self.window_sec = window_sec
        self._sums: Dict[int, float] = {}
        self._counts: Dict[int, int] = {}

    def add(self, t: float, wait: float):
        idx = int(math.floor(t / self.window_sec))
        self._sums[idx] = self._sums.get(idx, 0.0) + wait
        self._counts[idx] = self._counts.get(idx, 0) + 1

    def windows(self, include_open: bool = False) -> List[WaitWindow]:
        """Closed windows in time order; the window holding the latest completion
        is still open and only reported with include_open=True."""
        idxs = sorted(self._counts)
        if idxs and not include_open:
            idxs = idxs[:-1]
        return [
            WaitWindow(idx * self.window_sec, self._sums[idx] / self._counts[idx], self._counts[idx])
            for idx in idxs
        ]

def fallback_warmup(horizon_sec: float, have_data: bool) -> float:
    w = min(0.1 * horizon_sec, 120.0)
    if have_data:
        w = max(w, MIN_FALLBACK_SEC)
    return min(max(w, 0.0), horizon_sec)

def _is_stable(waits: Sequence[float], tolerance: float, variance_floor: float) -> bool:
    mean = sum(waits) / len(waits)
    variance = sum((w - mean) ** 2 for w in waits) / len(waits)
    cv = math.sqrt(variance) / mean if mean > 0 else 1.0
    return cv < tolerance or variance < variance_floor

def detect_warmup(windows: Sequence[WaitWindow], horizon_sec: float,
                  span_sec: float = SPAN_SEC, tolerance: float = CV_TOLERANCE,
                  variance_floor: float = VARIANCE_FLOOR) -> float:
    """
    Return the warm-up boundary in seconds, clamped to [0, horizon_sec].

    Parameters
    ----------
    windows : sequence of WaitWindow
        Mean total wait per window; order does not matter.
    horizon_sec : float
        Run length, used for clamping and the fallback.
    span_sec : float
        Minimum time covered by a candidate run of windows.
    tolerance : float
        Coefficient-of-variation threshold.
    variance_floor : float
        Absolute variance threshold (catches runs of near-zero waits).
    """
    if len(windows) < 3:
        return fallback_warmup(horizon_sec, have_data=bool(windows))
    ordered = sorted(windows, key=lambda w: w.t)
    n = len(ordered)
    for j in range(n - 2):
        start = ordered[j].t
        # grow from a triple until the run spans span_sec
        i = j + 2
        while i < n and ordered[i].t - start < span_sec:
            i += 1
        if i >= n:
            break
        waits = [w.avg_wait for w in ordered[j:i + 1]]
        if _is_stable(waits, tolerance, variance_floor):
            log.debug("steady state from t=%.1fs (windows %d..%d)", start, j, i)
            return min(max(start, 0.0), horizon_sec)
    return fallback_warmup(horizon_sec, have_data=True)
