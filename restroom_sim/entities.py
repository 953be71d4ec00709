# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# entities.py
# -----------------------------------------------------------------------------
# Purpose:
#   Entity definitions for the restroom DES: Customer (live, per replication)
#   and CompletedCustomer (one line of the completion log).
#
# Design notes:
#   - A Customer is owned by the replication that created it and only mutated
#     by the handlers of its own events.
#   - The fixture kind is committed at arrival and never re-decided.
#
# Usage:
#   from restroom_sim.entities import Customer, CompletedCustomer
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

FEMALE = "F"
MALE = "M"
STALL = "stall"
URINAL = "urinal"

@dataclass
class Customer:
    cid: int
    gender: str                      # 'F' | 'M'
    fixture: str                     # 'stall' | 'urinal', chosen at arrival
    t_arrive: float                  # seconds
    t_join_fixture: Optional[float] = None   # reached the fixture queue (after walking)
    t_enter_fixture: Optional[float] = None
    t_leave_fixture: Optional[float] = None
    t_join_sink: Optional[float] = None
    t_enter_sink: Optional[float] = None
    t_leave_sink: Optional[float] = None

    @property
    def wait_fixture(self) -> float:
        if self.t_enter_fixture is None or self.t_join_fixture is None:
            return 0.0
        return max(0.0, self.t_enter_fixture - self.t_join_fixture)

    @property
    def wait_sink(self) -> float:
        if self.t_enter_sink is None or self.t_join_sink is None:
            return 0.0
        return max(0.0, self.t_enter_sink - self.t_join_sink)

@dataclass(frozen=True)
class CompletedCustomer:
    gender: str
    fixture_kind: str
    wait_fixture_sec: float
    wait_sink_sec: float
    time_in_system_sec: float
    t_exit: float

    @property
    def wait_total_sec(self) -> float:
        return self.wait_fixture_sec + self.wait_sink_sec
