# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# stations.py
# -----------------------------------------------------------------------------
# Purpose:
#   Build the three resource classes of the restroom (stall, urinal, sink)
#   as Station instances from the configured capacities.
#
# Design notes:
#   - Stalls are shared by both genders; urinals are male-only by routing,
#     not by the station itself.
#
# Usage:
#   from restroom_sim.stations import make_stations
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Dict, Tuple
from .entities import STALL, URINAL
from .params import Capacities
from .queues import Station

SINK = "sink"

def make_stations(caps: Capacities, window: Tuple[float, float], keep_history: bool = False) -> Dict[str, Station]:
    """
    Create all stations for one replication.

    Parameters
    ----------
    caps : Capacities
        Server counts per class.
    window : tuple[float, float]
        (warm-up, horizon) in seconds; busy time outside it is discarded.
    keep_history : bool
        True when the warm-up is detected after the run.

    Returns
    -------
    dict[str, Station]
        Mapping class name -> Station instance.
    """
    return {
        STALL: Station(STALL, caps.c_stall, window, keep_history),
        URINAL: Station(URINAL, caps.c_urinal, window, keep_history),
        SINK: Station(SINK, caps.c_sink, window, keep_history),
    }
