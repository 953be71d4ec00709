import pytest

from restroom_sim.queues import Env, Event, EventKind, EventQueue, Station

def test_event_queue_pops_in_time_order():
    q = EventQueue()
    for t in [5.0, 1.0, 3.0, 0.5, 9.0, 3.0]:
        q.push(Event(t, EventKind.ARRIVE, int(t * 10)))
    assert len(q) == 6
    assert q.peek().t == 0.5
    out = []
    while q:
        out.append(q.pop().t)
    assert out == sorted(out)
    assert q.pop() is None
    assert q.peek() is None

def test_equal_times_pop_in_insertion_order():
    q = EventQueue()
    for cid in range(5):
        q.push(Event(2.0, EventKind.TRY_START_STALL, cid))
    assert [q.pop().cid for _ in range(5)] == [0, 1, 2, 3, 4]

class Recorder:
    def __init__(self):
        self.seen = []
    def dispatch(self, env, ev):
        self.seen.append((ev.t, ev.kind))
        if ev.kind is EventKind.ARRIVE:
            env.schedule(env.t + 10.0, EventKind.ENTER_FIXTURE, ev.cid)

def test_run_until_stops_before_events_past_horizon():
    router = Recorder()
    env = Env(router)
    env.schedule(0.0, EventKind.ARRIVE, 1)
    env.schedule(95.0, EventKind.ARRIVE, 2)
    env.run_until(100.0)
    assert router.seen == [(0.0, EventKind.ARRIVE), (10.0, EventKind.ENTER_FIXTURE), (95.0, EventKind.ARRIVE)]
    assert env.processed == 3
    assert len(env.FEL) == 1          # the ENTER_FIXTURE at 105 s is left unprocessed
    assert env.t == 95.0

def test_station_fifo_and_capacity():
    st = Station("stall", 1, (0.0, 100.0))
    st.join(7); st.join(8)
    assert st.head() == 7
    assert st.has_free_server()
    assert st.start(0.0) == 7
    assert not st.has_free_server()
    assert st.head() == 8

def test_zero_capacity_station_never_has_a_free_server():
    st = Station("urinal", 0, (0.0, 100.0))
    st.join(1)
    assert not st.has_free_server()

def test_busy_time_is_clipped_to_window():
    st = Station("stall", 2, (10.0, 100.0))
    st.join(1); st.start(0.0)
    st.release(50.0)                  # 40 s inside the window
    st.join(2); st.start(60.0)
    st.close(200.0)                   # 40 s more, up to the window end
    assert st.busy_seconds() == pytest.approx(80.0)

def test_busy_time_counts_parallel_servers():
    st = Station("sink", 2, (0.0, 100.0))
    st.join(1); st.join(2)
    st.start(0.0); st.start(0.0)
    st.release(30.0)
    st.close(100.0)
    assert st.busy_seconds() == pytest.approx(2 * 30.0 + 70.0)

def test_history_allows_late_window_start():
    st = Station("stall", 1, (0.0, 100.0), keep_history=True)
    st.join(1); st.start(0.0)
    st.release(50.0)
    st.join(2); st.start(60.0)
    st.close(100.0)
    assert st.busy_seconds() == pytest.approx(90.0)
    assert st.busy_seconds(30.0) == pytest.approx(60.0)
    assert st.busy_seconds(55.0) == pytest.approx(40.0)
    assert st.busy_seconds(100.0) == pytest.approx(0.0)

def test_late_window_start_needs_history():
    st = Station("stall", 1, (0.0, 100.0))
    st.close(100.0)
    with pytest.raises(ValueError):
        st.busy_seconds(10.0)
