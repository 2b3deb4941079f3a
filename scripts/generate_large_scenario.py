"""Random timetable generator writing a data directory for the compression CLI."""
import argparse, random, os, sys
from typing import List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from uic406.core.models import Repository, Segment, Station, Train  # type: ignore
from uic406.store.writer import write_repository  # type: ignore


def build_line(n_stations: int, headway_range=(4, 8)) -> Repository:
    # a single-direction line S1: ST1 -> ST2, S2: ST2 -> ST3, ...
    stations = [Station(id=f"ST{i+1}") for i in range(n_stations)]
    segments: List[Segment] = []
    for i in range(n_stations - 1):
        segments.append(Segment(
            id=f"S{i+1}",
            from_station=stations[i].id,
            to_station=stations[i + 1].id,
            min_headway=random.randint(*headway_range),
        ))
    return Repository(segments=segments, trains=[], stations=stations)


def build_trains(n: int, line: Repository, avg_len: int, stagger: int) -> List[Train]:
    trains: List[Train] = []
    segs = line.segments
    for i in range(n):
        if avg_len >= len(segs):
            route = segs[:]
        else:
            length = max(1, min(len(segs), int(random.gauss(avg_len, 1))))
            start = random.randint(0, max(0, len(segs) - length))
            route = segs[start:start + length]
        t = i * 15 + random.randint(0, stagger)
        tr = Train(id=f"T{i+1}", route=[s.id for s in route], min_stopping={})
        tr.timetable[route[0].from_station] = {"arrival": t, "departure": t}
        for k, seg in enumerate(route):
            t += random.randint(8, 20)
            arrival = t
            if k < len(route) - 1 and random.random() < 0.4:
                min_stop = random.randint(1, 3)
                tr.min_stopping[seg.to_station] = min_stop
                t += min_stop + random.randint(0, 3)
            tr.timetable[seg.to_station] = {"arrival": arrival, "departure": t}
        trains.append(tr)
    return trains


def build_scenario(n_trains: int, n_stations: int, route_len: int, stagger: int) -> Repository:
    line = build_line(n_stations)
    line.trains = build_trains(n_trains, line, route_len, stagger)
    return line


def main():
    p = argparse.ArgumentParser()
    p.add_argument('-Trains', type=int, default=50)
    p.add_argument('-Stations', type=int, default=12)
    p.add_argument('-RouteLen', type=int, default=6)
    p.add_argument('-Stagger', type=int, default=60)
    p.add_argument('-Seed', type=int, default=42)
    p.add_argument('-Out', type=str, default='LargeData')
    a = p.parse_args()

    random.seed(a.Seed)
    repo = build_scenario(a.Trains, a.Stations, a.RouteLen, a.Stagger)
    write_repository(repo, a.Out)
    print(f"Wrote {len(repo.segments)} segments & {len(repo.trains)} trains -> {a.Out}")


if __name__ == '__main__':
    main()
