from pathlib import Path

import pytest

from uic406.core import compressor as compressor_mod
from uic406.core.builder import build_network
from uic406.core.compressor import CompressionMethod, compress_timetable
from uic406.core.headway import segment_headway
from uic406.core.ilp_compressor import solve_network_ilp
from uic406.core.longest_path import solve_longest_paths
from uic406.store.loader import read_repository
from uic406.store.writer import DEBUG_ACTIVITY_FILE, DEBUG_COMPRESSED_FILE, DEBUG_EVENT_FILE

DATA_DIR = Path(__file__).parents[1] / "Data"


def test_compress_sample_timetable():
    repo = read_repository(DATA_DIR)
    result = compress_timetable(repo)

    assert result.method == CompressionMethod.EVENT_ACTIVITY_NETWORK
    assert result.summary["original_span"] == 85
    assert result.summary["compressed_span"] == 52
    assert result.summary["total_trains"] == 3

    t3 = repo.train_by_id("T3")
    assert t3.timetable["B"] == {"arrival": 25, "departure": 25}
    assert t3.timetable["C"] == {"arrival": 37, "departure": 39}
    assert t3.timetable["D"] == {"arrival": 52, "departure": 52}
    t1 = repo.train_by_id("T1")
    assert t1.timetable["B"] == {"arrival": 10, "departure": 13}


def test_ilp_matches_longest_path():
    repo = read_repository(DATA_DIR)
    lp_net = solve_longest_paths(build_network(repo.trains, repo.segments, segment_headway()))
    ilp_net = solve_network_ilp(build_network(repo.trains, repo.segments, segment_headway()))

    assert [e.compressed_time for e in ilp_net.events] == [e.compressed_time for e in lp_net.events]


def test_ilp_method_through_facade():
    repo = read_repository(DATA_DIR)
    result = compress_timetable(repo, method="ilp")

    assert result.method == CompressionMethod.INTEGER_PROGRAMMING
    assert result.summary["compressed_span"] == 52


def test_ilp_failure_falls_back_to_event_activity_network(monkeypatch):
    def broken(network, time_limit=None):
        raise RuntimeError("solver unavailable")

    monkeypatch.setattr(compressor_mod, "solve_network_ilp", broken)
    repo = read_repository(DATA_DIR)
    result = compress_timetable(repo, method="ilp")

    assert result.method == CompressionMethod.EVENT_ACTIVITY_NETWORK
    assert result.summary["compressed_span"] == 52


def test_unknown_method_rejected():
    with pytest.raises(ValueError):
        compress_timetable(read_repository(DATA_DIR), method="maxplus")


def test_debug_traces_only_with_output_level(tmp_path):
    quiet = tmp_path / "quiet"
    compress_timetable(read_repository(DATA_DIR), output_level=0, debug_dir=quiet)
    assert not quiet.exists()

    loud = tmp_path / "loud"
    compress_timetable(read_repository(DATA_DIR), output_level=1, debug_dir=loud)
    events = (loud / DEBUG_EVENT_FILE).read_text().splitlines()
    assert events[0] == "TrainID,SegmentID,EventType,OriginalTime"
    assert events[1] == "null,null,Origin,0"
    activities = (loud / DEBUG_ACTIVITY_FILE).read_text().splitlines()
    assert activities[0] == "FromEvent,ToEvent,ActivityType,MinDuration"
    assert "T1|S1|Entering,T1|S1|Leaving,Running,10" in activities
    compressed = (loud / DEBUG_COMPRESSED_FILE).read_text().splitlines()
    assert compressed[0] == "Event,OriginalTime,CompressedTime"
    assert "T3|S3|Leaving,85,52" in compressed
