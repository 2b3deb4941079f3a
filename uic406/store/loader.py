"""Read infrastructure, service and timetable data into a ``Repository``.

A data directory holds:

* ``Station.csv``          StationID,Name
* ``SegmentTrack.csv``     SegmentID,FromStation,ToStation
* ``SegmentTrackPara.csv`` SegmentID,MinHeadway               (optional)
* ``Train.csv``            TrainID,Route   (segment ids joined by ``|``)
* ``TrainOperation.csv``   TrainID,StationID,MinStoppingTime  (optional)
* ``OrgTimetable.csv``     TrainID,StationID,Arrival,Departure
* ``Config.json``          run configuration overrides        (optional)
"""
import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Tuple

from uic406.core.models import ARRIVAL, DEPARTURE, Repository, Segment, Station, Train

logger = logging.getLogger(__name__)

STATION_FILE = "Station.csv"
SEGMENT_FILE = "SegmentTrack.csv"
SEGMENT_PARA_FILE = "SegmentTrackPara.csv"
TRAIN_FILE = "Train.csv"
TRAIN_OPERATION_FILE = "TrainOperation.csv"
TIMETABLE_FILE = "OrgTimetable.csv"
CONFIG_FILE = "Config.json"

ROUTE_SEPARATOR = "|"


class DataLoadError(ValueError):
    pass


def _rows(path: Path, required: Tuple[str, ...]) -> Iterator[Tuple[int, Dict[str, str]]]:
    with path.open(newline="", encoding="utf-8-sig") as f:
        r = csv.DictReader(f)
        missing = [c for c in required if c not in (r.fieldnames or [])]
        if missing:
            raise DataLoadError(f"{path.name}: missing columns {', '.join(missing)}")
        for lineno, row in enumerate(r, start=2):
            if not any((v or "").strip() for v in row.values()):
                continue
            yield lineno, {k: (v or "").strip() for k, v in row.items() if k is not None}


def _int(path: Path, lineno: int, column: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise DataLoadError(f"{path.name}:{lineno}: {column} must be an integer, got {value!r}") from None


def _slot(train_id: str, station: str, arrival: int, departure: int) -> Dict[str, int]:
    if departure < arrival:
        raise DataLoadError(f"train {train_id} departs {station} at {departure} before arriving at {arrival}")
    return {ARRIVAL: arrival, DEPARTURE: departure}


def read_stations(path: Path) -> List[Station]:
    return [Station(id=row["StationID"], name=row.get("Name") or None) for _, row in _rows(path, ("StationID",))]


def read_segments(path: Path, para_path: Path, stations: List[Station]) -> List[Segment]:
    known = {s.id for s in stations}
    segments: List[Segment] = []
    for lineno, row in _rows(path, ("SegmentID", "FromStation", "ToStation")):
        for col in ("FromStation", "ToStation"):
            if known and row[col] not in known:
                raise DataLoadError(f"{path.name}:{lineno}: unknown station {row[col]!r}")
        segments.append(Segment(id=row["SegmentID"], from_station=row["FromStation"], to_station=row["ToStation"]))

    if para_path.exists():
        by_id = {s.id: s for s in segments}
        for lineno, row in _rows(para_path, ("SegmentID", "MinHeadway")):
            seg = by_id.get(row["SegmentID"])
            if seg is None:
                raise DataLoadError(f"{para_path.name}:{lineno}: unknown segment {row['SegmentID']!r}")
            if row["MinHeadway"]:
                seg.min_headway = _int(para_path, lineno, "MinHeadway", row["MinHeadway"])
    return segments


def read_trains(train_path: Path, operation_path: Path, timetable_path: Path, segments: List[Segment]) -> List[Train]:
    known_segments = {s.id for s in segments}
    trains: List[Train] = []
    by_id: Dict[str, Train] = {}
    for lineno, row in _rows(train_path, ("TrainID", "Route")):
        route = [sid.strip() for sid in row["Route"].split(ROUTE_SEPARATOR) if sid.strip()]
        unknown = [sid for sid in route if sid not in known_segments]
        if unknown:
            raise DataLoadError(f"{train_path.name}:{lineno}: unknown segments {', '.join(unknown)}")
        if row["TrainID"] in by_id:
            raise DataLoadError(f"{train_path.name}:{lineno}: duplicate train {row['TrainID']!r}")
        tr = Train(id=row["TrainID"], route=route)
        trains.append(tr)
        by_id[tr.id] = tr

    def train_for(path: Path, lineno: int, tid: str) -> Train:
        tr = by_id.get(tid)
        if tr is None:
            raise DataLoadError(f"{path.name}:{lineno}: unknown train {tid!r}")
        return tr

    for lineno, row in _rows(timetable_path, ("TrainID", "StationID", "Arrival", "Departure")):
        tr = train_for(timetable_path, lineno, row["TrainID"])
        arrival = _int(timetable_path, lineno, "Arrival", row["Arrival"])
        departure = _int(timetable_path, lineno, "Departure", row["Departure"])
        try:
            tr.timetable[row["StationID"]] = _slot(tr.id, row["StationID"], arrival, departure)
        except DataLoadError as exc:
            raise DataLoadError(f"{timetable_path.name}:{lineno}: {exc}") from None

    if operation_path.exists():
        for lineno, row in _rows(operation_path, ("TrainID", "StationID", "MinStoppingTime")):
            tr = train_for(operation_path, lineno, row["TrainID"])
            if tr.min_stopping is None:
                tr.min_stopping = {}
            tr.min_stopping[row["StationID"]] = _int(operation_path, lineno, "MinStoppingTime", row["MinStoppingTime"])

    for tr in trains:
        if not tr.timetable:
            logger.warning("train %s has no timetable entries", tr.id)
    return trains


def read_repository(directory: Path) -> Repository:
    directory = Path(directory)
    for name in (STATION_FILE, SEGMENT_FILE, TRAIN_FILE, TIMETABLE_FILE):
        if not (directory / name).exists():
            raise FileNotFoundError(f"Required data file {directory / name} not found")

    stations = read_stations(directory / STATION_FILE)
    segments = read_segments(directory / SEGMENT_FILE, directory / SEGMENT_PARA_FILE, stations)
    trains = read_trains(
        directory / TRAIN_FILE, directory / TRAIN_OPERATION_FILE, directory / TIMETABLE_FILE, segments
    )
    logger.info(
        "loaded %d stations, %d segments, %d trains from %s", len(stations), len(segments), len(trains), directory
    )
    return Repository(segments=segments, trains=trains, stations=stations)


def read_config(directory: Path) -> Dict[str, Any]:
    path = Path(directory) / CONFIG_FILE
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise DataLoadError(f"{path.name}: invalid JSON ({exc})") from exc
    if not isinstance(data, dict):
        raise DataLoadError(f"{path.name}: expected a JSON object")
    return data


def repository_from_dict(payload: Dict[str, Any]) -> Repository:
    """Build a repository from the JSON scenario shape used by the HTTP API.

    ``{"stations": [...], "segments": [{id, from_station, to_station, min_headway?}],
    "trains": [{id, route, timetable: {station: {arrival, departure}}, min_stopping?}]}``
    """
    if not isinstance(payload, dict):
        raise DataLoadError("scenario must be a JSON object")
    try:
        stations = [Station(**s) for s in payload.get("stations") or []]
        segments = [Segment(**s) for s in payload.get("segments") or []]
        trains = []
        for t in payload.get("trains") or []:
            timetable = {
                str(st): _slot(t["id"], str(st), int(slot[ARRIVAL]), int(slot[DEPARTURE]))
                for st, slot in (t.get("timetable") or {}).items()
            }
            trains.append(Train(
                id=t["id"],
                route=list(t.get("route") or []),
                timetable=timetable,
                min_stopping={str(k): int(v) for k, v in t["min_stopping"].items()} if t.get("min_stopping") else None,
            ))
    except DataLoadError:
        raise
    except (KeyError, TypeError, ValueError) as exc:
        raise DataLoadError(f"malformed scenario: {exc}") from exc
    return Repository(segments=segments, trains=trains, stations=stations)
