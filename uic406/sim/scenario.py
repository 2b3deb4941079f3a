from typing import Any, Dict, List, Optional

from uic406.core.compressor import CompressionResult, compress_timetable
from uic406.core.ean import Activity, EventActivityNetwork
from uic406.core.headway import segment_headway, DEFAULT_MIN_HEADWAY
from uic406.store.loader import repository_from_dict
from uic406.store.writer import timetable_rows


def run_scenario(
    payload: Dict[str, Any],
    method: str = "ean",
    strategy: str = "topological",
    time_window: Optional[int] = None,
) -> Dict[str, Any]:
    repository = repository_from_dict(payload)
    min_headway = payload.get("min_headway")
    min_headway = DEFAULT_MIN_HEADWAY if min_headway is None else int(min_headway)
    result = compress_timetable(
        repository,
        method=method,
        strategy=strategy,
        headway=segment_headway(min_headway),
        time_window=time_window,
    )
    return {
        "result": result,
        "timetable": timetable_rows(repository.trains),
    }


def critical_path_json(result: CompressionResult) -> List[Dict[str, Any]]:
    return [activity_json(result.network, a) for a in result.critical_path]


def activity_json(network: EventActivityNetwork, a: Activity) -> Dict[str, Any]:
    return {
        "from": network.source_of(a).label(),
        "to": network.target_of(a).label(),
        "type": a.kind.value,
        "min_duration": a.min_duration,
    }


def network_json(network: EventActivityNetwork) -> Dict[str, Any]:
    return {
        "events": [
            {
                "event": e.label(),
                "train_id": e.train_id,
                "segment_id": e.segment_id,
                "type": e.kind.value,
                "original_time": e.original_time,
                "compressed_time": e.compressed_time,
            }
            for e in network.events
        ],
        "activities": [activity_json(network, a) for a in network.activities],
    }
