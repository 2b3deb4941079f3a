from pathlib import Path

import pytest

from uic406.core.builder import build_network
from uic406.core.ean import ActivityKind, EventActivityNetwork, EventKind
from uic406.core.errors import CyclicNetworkError
from uic406.core.headway import constant_headway, segment_headway
from uic406.core.longest_path import constraint_violations, critical_path, solve_longest_paths
from uic406.core.models import Segment, Train
from uic406.store.loader import read_repository

DATA_DIR = Path(__file__).parents[1] / "Data"


def _slot(arr, dep):
    return {"arrival": arr, "departure": dep}


def _times(net):
    return [e.compressed_time for e in net.events]


def _sample_network():
    repo = read_repository(DATA_DIR)
    return build_network(repo.trains, repo.segments, segment_headway())


def test_running_and_dwelling_chain_accumulates():
    s1 = Segment(id="S1", from_station="A", to_station="B")
    s2 = Segment(id="S2", from_station="B", to_station="C")
    t = Train(
        id="T1",
        route=["S1", "S2"],
        timetable={"A": _slot(100, 100), "B": _slot(110, 120), "C": _slot(130, 130)},
        min_stopping={"B": 3},
    )
    net = solve_longest_paths(build_network([t], [s1, s2]))

    chain = [e.compressed_time for e in net.events if e.kind != EventKind.ORIGIN]
    # entering S1, leaving S1, entering S2 (after 3 dwell), leaving S2
    assert chain == [0, 10, 13, 23]


def test_headway_pushes_second_train():
    seg = Segment(id="S1", from_station="A", to_station="B")
    a = Train(id="A", route=["S1"], timetable={"A": _slot(0, 0), "B": _slot(10, 10)})
    b = Train(id="B", route=["S1"], timetable={"A": _slot(2, 2), "B": _slot(12, 12)})

    net = solve_longest_paths(build_network([a, b], [seg], constant_headway(6)))

    ev = {(e.train_id, e.kind): e.compressed_time for e in net.events if e.kind != EventKind.ORIGIN}
    assert ev[("A", EventKind.ENTERING)] == 0
    assert ev[("A", EventKind.LEAVING)] == 10
    # originally only 2 apart
    assert ev[("B", EventKind.ENTERING)] >= ev[("A", EventKind.ENTERING)] + 6
    assert ev[("B", EventKind.ENTERING)] == 6
    assert ev[("B", EventKind.LEAVING)] == 16


@pytest.mark.parametrize("strategy", ["topological", "stack"])
def test_sample_timetable_constraints_hold_and_are_tight(strategy):
    net = solve_longest_paths(_sample_network(), strategy=strategy)

    assert constraint_violations(net) == []
    for e in net.events:
        if e.kind == EventKind.ORIGIN:
            assert e.compressed_time == 0
            continue
        # minimality: some incoming activity is tight
        assert any(
            net.source_of(a).compressed_time + a.min_duration == e.compressed_time for a in net.incoming(e)
        ), e.label()
    assert max(_times(net)) == 52


def test_strategies_agree_on_generated_timetable():
    import random
    from scripts.generate_large_scenario import build_scenario

    random.seed(7)
    repo = build_scenario(n_trains=5, n_stations=6, route_len=3, stagger=20)
    topo = solve_longest_paths(build_network(repo.trains, repo.segments, segment_headway()), "topological")
    stack = solve_longest_paths(build_network(repo.trains, repo.segments, segment_headway()), "stack")

    assert _times(topo) == _times(stack)
    assert constraint_violations(topo) == []


def test_resolving_is_idempotent():
    net = solve_longest_paths(_sample_network())
    before = _times(net)

    solve_longest_paths(net)
    assert _times(net) == before
    solve_longest_paths(net, strategy="stack")
    assert _times(net) == before


def test_critical_path_spans_the_compressed_timetable():
    net = solve_longest_paths(_sample_network())
    path = critical_path(net)

    assert net.source_of(path[0]) is net.origin
    assert sum(a.min_duration for a in path) == max(_times(net))
    for prev, cur in zip(path, path[1:]):
        assert prev.target == cur.source
    assert [a.kind for a in path] == [
        ActivityKind.ORIGIN,
        ActivityKind.RUNNING,
        ActivityKind.DWELLING,
        ActivityKind.HEADWAY,
        ActivityKind.RUNNING,
        ActivityKind.HEADWAY,
        ActivityKind.DWELLING,
        ActivityKind.RUNNING,
    ]
    assert net.target_of(path[-1]).label() == "T3|S3|Leaving"


def test_critical_path_of_empty_network():
    assert critical_path(EventActivityNetwork()) == []


def test_cycle_is_detected():
    net = EventActivityNetwork()
    a = net.add_event(EventKind.ENTERING, "T1", "S1", "A", 0)
    b = net.add_event(EventKind.LEAVING, "T1", "S1", "B", 5)
    net.add_activity(ActivityKind.ORIGIN, net.origin, a, 0)
    net.add_activity(ActivityKind.RUNNING, a, b, 5)
    net.add_activity(ActivityKind.DWELLING, b, a, 1)

    assert net.has_cycle()
    assert {e.index for e in net.find_cycle()} == {a.index, b.index}
    with pytest.raises(CyclicNetworkError) as exc:
        solve_longest_paths(net, strategy="topological")
    assert {e.index for e in exc.value.events} == {a.index, b.index}


@pytest.mark.parametrize("strategy", ["topological", "stack"])
def test_inconsistent_timetable_cycle_rejected_by_both_strategies(strategy):
    segs = [
        Segment(id="S1", from_station="A", to_station="B"),
        Segment(id="S2", from_station="B", to_station="C"),
        Segment(id="S3", from_station="C", to_station="A"),
    ]
    trains = [
        # departs B before arriving there
        Train(id="T1", route=["S1", "S2"], timetable={"A": _slot(0, 0), "B": _slot(10, 5), "C": _slot(15, 15)}),
        Train(id="T2", route=["S2", "S3", "S1"], timetable={"B": _slot(9, 6), "C": _slot(7, 7), "A": _slot(8, 8)}),
    ]
    net = build_network(trains, segs, constant_headway(0))
    assert net.has_cycle()

    with pytest.raises(CyclicNetworkError) as exc:
        solve_longest_paths(net, strategy=strategy)
    assert exc.value.events


def test_unknown_strategy_rejected():
    with pytest.raises(ValueError):
        solve_longest_paths(EventActivityNetwork(), strategy="dijkstra")
