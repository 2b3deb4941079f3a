from typing import Dict, Optional

from uic406.core.ean import EventActivityNetwork, EventKind

# Capacity KPIs of a compressed timetable (UIC 406): the compressed span is the
# infrastructure occupancy time, compared against the original timetable's
# span or an explicit time window.


def summarize_compression(network: EventActivityNetwork, time_window: Optional[int] = None) -> Dict[str, float]:
    events = [e for e in network.events if e.kind != EventKind.ORIGIN]
    if not events:
        return {
            "total_trains": 0,
            "events": 0,
            "activities": len(network.activities),
            "original_span": 0,
            "compressed_span": 0,
            "capacity_consumption": 0.0,
            "compression_ratio": 0.0,
        }
    original_span = max(e.original_time for e in events) - min(e.original_time for e in events)
    compressed_span = max(e.compressed_time for e in events) - min(e.compressed_time for e in events)
    window = time_window if time_window else original_span
    consumption = 100.0 * compressed_span / window if window > 0 else 0.0
    ratio = compressed_span / original_span if original_span > 0 else 0.0
    return {
        "total_trains": len({e.train_id for e in events}),
        "events": len(events),
        "activities": len(network.activities),
        "original_span": original_span,
        "compressed_span": compressed_span,
        "capacity_consumption": round(consumption, 2),
        "compression_ratio": round(ratio, 4),
    }
