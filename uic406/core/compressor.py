import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from uic406.core.builder import build_network
from uic406.core.ean import Activity, EventActivityNetwork
from uic406.core.headway import HeadwayPolicy, segment_headway
from uic406.core.ilp_compressor import solve_network_ilp
from uic406.core.longest_path import critical_path, solve_longest_paths
from uic406.core.mapping import apply_compressed_times
from uic406.core.models import Repository
from uic406.sim.occupancy import summarize_compression
from uic406.store.writer import write_debug_compressed_times, write_debug_network

logger = logging.getLogger(__name__)


class CompressionMethod(str, Enum):
    EVENT_ACTIVITY_NETWORK = "ean"
    INTEGER_PROGRAMMING = "ilp"


@dataclass
class CompressionResult:
    network: EventActivityNetwork
    method: CompressionMethod
    summary: Dict[str, Any] = field(default_factory=dict)
    critical_path: List[Activity] = field(default_factory=list)


def compress_timetable(
    repository: Repository,
    method: str = "ean",
    strategy: str = "topological",
    headway: Optional[HeadwayPolicy] = None,
    output_level: int = 0,
    debug_dir: Optional[Path] = None,
    time_window: Optional[int] = None,
    milp_time_limit: Optional[int] = None,
) -> CompressionResult:
    """Compress the repository's timetable in place and return the solved network."""
    chosen = CompressionMethod(method)
    logger.info("compressing timetable of %d trains (method: %s)", len(repository.trains), chosen.value)

    network = build_network(repository.trains, repository.segments_used(), headway or segment_headway())
    debug = output_level > 0 and debug_dir is not None
    if debug:
        write_debug_network(network, debug_dir)

    if chosen == CompressionMethod.INTEGER_PROGRAMMING:
        try:
            solve_network_ilp(network, time_limit=milp_time_limit)
        except Exception as exc:
            # Fall back to the longest-path method if the ILP solver is unavailable or not optimal
            logger.warning("ILP compression failed (%s); falling back to event-activity network", exc)
            network.reset_compressed_times()
            chosen = CompressionMethod.EVENT_ACTIVITY_NETWORK
    if chosen == CompressionMethod.EVENT_ACTIVITY_NETWORK:
        solve_longest_paths(network, strategy=strategy)

    if debug:
        write_debug_compressed_times(network, debug_dir)

    summary = summarize_compression(network, time_window=time_window)
    path = critical_path(network)
    apply_compressed_times(network, repository.trains)
    logger.info(
        "timetable compressed: span %s -> %s (%.2f%% capacity consumption)",
        summary["original_span"], summary["compressed_span"], summary["capacity_consumption"],
    )
    return CompressionResult(network=network, method=chosen, summary=summary, critical_path=path)
