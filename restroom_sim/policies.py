# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# policies.py
# -----------------------------------------------------------------------------
# Purpose:
#   Routing policy: which fixture class a customer heads for.
#
# Design notes:
#   - Keep pure functions to ease testing (inputs -> decision).
#   - The decision is made once, at arrival; releases never re-decide it, so
#     a server is always returned to the class it was taken from.
#
# Usage:
#   from restroom_sim.policies import choose_fixture
# -----------------------------------------------------------------------------

from __future__ import annotations
from .entities import MALE, STALL, URINAL
from .rng import Mulberry32

def choose_fixture(gender: str, p_male_urinal: float, c_urinal: int, rng: Mulberry32) -> str:
    """
    Men take a urinal with probability p_male_urinal when any urinal exists;
    everyone else uses a stall. The routing stream is only consumed for men
    in a restroom that has urinals.
    """
    if gender == MALE and c_urinal > 0:
        return URINAL if rng.random() < p_male_urinal else STALL
    return STALL
