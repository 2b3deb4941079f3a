from pathlib import Path

from uic406.core.builder import build_network
from uic406.core.ean import EventActivityNetwork
from uic406.core.headway import segment_headway
from uic406.core.longest_path import solve_longest_paths
from uic406.sim.occupancy import summarize_compression
from uic406.store.loader import read_repository

DATA_DIR = Path(__file__).parents[1] / "Data"


def _solved():
    repo = read_repository(DATA_DIR)
    return solve_longest_paths(build_network(repo.trains, repo.segments, segment_headway()))


def test_summary_against_original_span():
    k = summarize_compression(_solved())
    assert k["total_trains"] == 3
    assert k["events"] == 16
    assert k["original_span"] == 85
    assert k["compressed_span"] == 52
    assert k["capacity_consumption"] == 61.18
    assert k["compression_ratio"] == 0.6118


def test_summary_against_time_window():
    k = summarize_compression(_solved(), time_window=104)
    assert k["capacity_consumption"] == 50.0


def test_summary_of_empty_network():
    k = summarize_compression(EventActivityNetwork())
    assert k["events"] == 0
    assert k["capacity_consumption"] == 0.0
