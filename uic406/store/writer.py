import csv
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

from uic406.core.ean import EventActivityNetwork, EventKind
from uic406.core.models import ARRIVAL, DEPARTURE, Repository, Station, Train
from uic406.store.loader import (
    ROUTE_SEPARATOR,
    SEGMENT_FILE,
    SEGMENT_PARA_FILE,
    STATION_FILE,
    TIMETABLE_FILE as ORG_TIMETABLE_FILE,
    TRAIN_FILE,
    TRAIN_OPERATION_FILE,
)

TIMETABLE_FILE = "CompressedTimetable.csv"
SUMMARY_FILE = "Summary.json"
DEBUG_EVENT_FILE = "debug_event.csv"
DEBUG_ACTIVITY_FILE = "debug_activity.csv"
DEBUG_COMPRESSED_FILE = "debug_compressedEventTime.csv"


def _ensure_dir(directory: Path) -> Path:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def timetable_rows(trains: Iterable[Train]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for tr in trains:
        for station, slot in tr.timetable.items():
            rows.append({
                "TrainID": tr.id,
                "StationID": station,
                "Arrival": slot.get(ARRIVAL),
                "Departure": slot.get(DEPARTURE),
            })
    return rows


def write_timetable(trains: Iterable[Train], directory: Path) -> Path:
    path = _ensure_dir(directory) / TIMETABLE_FILE
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=["TrainID", "StationID", "Arrival", "Departure"])
        w.writeheader()
        w.writerows(timetable_rows(trains))
    return path


def write_summary(summary: Dict[str, Any], directory: Path) -> Path:
    path = _ensure_dir(directory) / SUMMARY_FILE
    path.write_text(json.dumps(summary, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def write_repository(repository: Repository, directory: Path) -> Path:
    """Write a repository in the data directory layout ``loader.read_repository`` reads."""
    directory = _ensure_dir(directory)

    def dump(name: str, header: List[str], rows: Iterable[List[Any]]) -> None:
        with (directory / name).open("w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(header)
            w.writerows(rows)

    stations = repository.stations or _stations_of(repository)
    dump(STATION_FILE, ["StationID", "Name"], ([s.id, s.name or ""] for s in stations))
    dump(
        SEGMENT_FILE, ["SegmentID", "FromStation", "ToStation"],
        ([s.id, s.from_station, s.to_station] for s in repository.segments),
    )
    dump(
        SEGMENT_PARA_FILE, ["SegmentID", "MinHeadway"],
        ([s.id, s.min_headway] for s in repository.segments if s.min_headway is not None),
    )
    dump(TRAIN_FILE, ["TrainID", "Route"], ([t.id, ROUTE_SEPARATOR.join(t.route)] for t in repository.trains))
    dump(
        TRAIN_OPERATION_FILE, ["TrainID", "StationID", "MinStoppingTime"],
        ([t.id, st, v] for t in repository.trains for st, v in (t.min_stopping or {}).items()),
    )
    dump(
        ORG_TIMETABLE_FILE, ["TrainID", "StationID", "Arrival", "Departure"],
        ([r["TrainID"], r["StationID"], r["Arrival"], r["Departure"]] for r in timetable_rows(repository.trains)),
    )
    return directory


def _stations_of(repository: Repository) -> List[Station]:
    seen: Dict[str, Station] = {}
    for s in repository.segments:
        for sid in (s.from_station, s.to_station):
            seen.setdefault(sid, Station(id=sid))
    return list(seen.values())


def write_debug_network(network: EventActivityNetwork, directory: Path) -> List[Path]:
    directory = _ensure_dir(directory)
    event_path = directory / DEBUG_EVENT_FILE
    with event_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["TrainID", "SegmentID", "EventType", "OriginalTime"])
        for e in network.events:
            w.writerow([e.train_id or "null", e.segment_id or "null", e.kind.value, e.original_time])

    activity_path = directory / DEBUG_ACTIVITY_FILE
    with activity_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["FromEvent", "ToEvent", "ActivityType", "MinDuration"])
        for a in network.activities:
            w.writerow([
                network.source_of(a).label(), network.target_of(a).label(), a.kind.value, a.min_duration,
            ])
    return [event_path, activity_path]


def write_debug_compressed_times(network: EventActivityNetwork, directory: Path) -> Path:
    path = _ensure_dir(directory) / DEBUG_COMPRESSED_FILE
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["Event", "OriginalTime", "CompressedTime"])
        for e in network.events:
            if e.kind == EventKind.ORIGIN:
                continue
            w.writerow([e.label(), e.original_time, e.compressed_time])
    return path
