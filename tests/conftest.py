import math
import os

import pytest

from restroom_sim.distributions import FixedDist, GammaDist, LognormalDist
from restroom_sim.params import ArrivalSpec, BatchParams, Capacities, Delays, RateSegment, UsageTimeSpec

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
BASELINE_YAML = os.path.join(ROOT, "config", "baseline.yaml")

def default_usage():
    return UsageTimeSpec(
        female=LognormalDist(math.log(75), 0.6),
        male=LognormalDist(math.log(60), 0.5),
        urinal=LognormalDist(math.log(28), 0.4),
        sink=GammaDist(2.2, 3.2),
    )

def fixed_usage(stall=60.0, urinal=30.0, sink=10.0):
    return UsageTimeSpec(FixedDist(stall), FixedDist(stall), FixedDist(urinal), FixedDist(sink))

def build_params(female=0.6, male=0.6, p_male_urinal=0.85, caps=(3, 2, 1), usage=None,
                 delays=(5.0, 4.0, 4.0), warmup_min=5.0, horizon_min=60.0, replications=1, seed=7):
    def segs(rate):
        return [RateSegment(0.0, horizon_min, rate)] if rate > 0 else []
    return BatchParams(
        arrivals=ArrivalSpec(segs(female), segs(male), p_male_urinal),
        usage_times=usage or default_usage(),
        caps=Capacities(*caps),
        delays=Delays(*delays),
        warmup_min=warmup_min,
        horizon_min=horizon_min,
        replications=replications,
        seed=seed,
    )

@pytest.fixture
def make_params():
    return build_params

@pytest.fixture
def fixed():
    return fixed_usage

@pytest.fixture
def baseline_yaml():
    return BASELINE_YAML
