"""
experiments/scenarios.py

Holds scenario definitions (resource allocations and demand patterns) to sweep
during experiments. Each scenario's overrides are merged onto the `params`
section of config/baseline.yaml; lists (rate segments) replace the baseline's.
"""

from __future__ import annotations

BASELINE = {
    "name": "baseline",
    "overrides": {},  # override params keys here per scenario
}

# Same floor space, urinals swapped for stalls usable by anyone.
PARITY_STALLS = {
    "name": "parity_stalls",
    "overrides": {
        "caps": {"cStall": 5, "cUrinal": 0, "cSink": 1},
    },
}

EXTRA_SINK = {
    "name": "extra_sink",
    "overrides": {
        "caps": {"cSink": 2},
    },
}

# Theatre-style rush: a 15 minute surge on top of the baseline demand.
INTERMISSION_PEAK = {
    "name": "intermission_peak",
    "overrides": {
        "arrivals": {
            "female": [
                {"tStartMin": 0, "tEndMin": 60, "lambdaPerMin": 0.6},
                {"tStartMin": 20, "tEndMin": 35, "lambdaPerMin": 1.5},
            ],
            "male": [
                {"tStartMin": 0, "tEndMin": 60, "lambdaPerMin": 0.6},
                {"tStartMin": 20, "tEndMin": 35, "lambdaPerMin": 1.5},
            ],
        },
        "warmupMin": 5,
    },
}

SCENARIOS = [BASELINE, PARITY_STALLS, EXTRA_SINK, INTERMISSION_PEAK]
