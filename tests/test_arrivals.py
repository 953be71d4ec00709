import pytest

from restroom_sim.arrivals import generate_homogeneous_poisson, generate_nhpp, merge_by_gender
from restroom_sim.params import RateSegment
from restroom_sim.rng import new_rng

def test_empty_and_zero_rate_segments_produce_nothing():
    rng = new_rng(1)
    assert generate_nhpp([], 60, rng) == []
    assert generate_nhpp([RateSegment(0, 60, 0.0)], 60, rng) == []
    assert generate_nhpp([RateSegment(70, 90, 5.0)], 60, rng) == []
    assert generate_homogeneous_poisson(10, 10, 3.0, rng) == []

def test_segments_are_clipped_to_horizon():
    times = generate_nhpp([RateSegment(-10, 500, 3.0)], 20, new_rng(2))
    assert times
    assert all(0.0 <= t < 20.0 for t in times)

def test_output_is_sorted_for_unsorted_overlapping_segments():
    segs = [RateSegment(30, 60, 2.0), RateSegment(0, 40, 1.0)]
    times = generate_nhpp(segs, 60, new_rng(3))
    assert times == sorted(times)
    assert any(t < 30 for t in times) and any(t > 40 for t in times)

def test_count_matches_rate():
    times = generate_nhpp([RateSegment(0, 1000, 2.0)], 1000, new_rng(4))
    assert len(times) == pytest.approx(2000, abs=200)

def test_piecewise_rates_shape_the_stream():
    segs = [RateSegment(0, 100, 0.5), RateSegment(100, 200, 4.0)]
    times = generate_nhpp(segs, 200, new_rng(5))
    early = sum(1 for t in times if t < 100)
    late = len(times) - early
    assert late > 4 * early

def test_same_stream_same_arrivals():
    segs = [RateSegment(0, 60, 1.5)]
    assert generate_nhpp(segs, 60, new_rng(6)) == generate_nhpp(segs, 60, new_rng(6))

def test_merge_by_gender_keeps_time_order():
    merged = merge_by_gender([1.0, 3.0], [2.0, 3.0, 4.0])
    assert merged == [(1.0, "F"), (2.0, "M"), (3.0, "F"), (3.0, "M"), (4.0, "M")]
    assert merge_by_gender([], []) == []
