from dataclasses import dataclass, field
from typing import List, Optional, Dict

Time = int

ARRIVAL = "arrival"
DEPARTURE = "departure"


@dataclass
class Station:
    id: str
    name: Optional[str] = None


@dataclass
class Segment:
    id: str
    from_station: str  # segment origin (trains depart here)
    to_station: str  # segment destination (trains arrive here)
    # Optional minimum separation between two movements at either boundary of the segment
    min_headway: Optional[Time] = None


@dataclass
class Train:
    id: str
    route: List[str]  # ordered segment ids
    # station_id -> {"arrival": t, "departure": t}
    timetable: Dict[str, Dict[str, Time]] = field(default_factory=dict)
    # station_id -> minimum stopping time; stations not listed are passed without a required stop
    min_stopping: Optional[Dict[str, Time]] = None

    def time_at(self, station_id: str, operation: str) -> Optional[Time]:
        slot = self.timetable.get(station_id)
        if slot is None:
            return None
        return slot.get(operation)

    def set_time(self, station_id: str, operation: str, value: Time) -> None:
        self.timetable.setdefault(station_id, {})[operation] = value

    def min_stop_at(self, station_id: str) -> Time:
        if not self.min_stopping:
            return 0
        return int(self.min_stopping.get(station_id, 0))


@dataclass
class Repository:
    segments: List[Segment]
    trains: List[Train]
    stations: List[Station] = field(default_factory=list)

    def segment_by_id(self, sid: str) -> Segment:
        for s in self.segments:
            if s.id == sid:
                return s
        raise KeyError(f"Segment {sid} not found")

    def train_by_id(self, tid: str) -> Train:
        for t in self.trains:
            if t.id == tid:
                return t
        raise KeyError(f"Train {tid} not found")

    def segments_used(self) -> List[Segment]:
        used = {sid for t in self.trains for sid in t.route}
        return [s for s in self.segments if s.id in used]
