import logging
from typing import Dict, Iterable, Set, Tuple

from uic406.core.ean import EventActivityNetwork, EventKind
from uic406.core.errors import DataIntegrityError
from uic406.core.models import ARRIVAL, DEPARTURE, Train

logger = logging.getLogger(__name__)

_OPERATION = {EventKind.ENTERING: DEPARTURE, EventKind.LEAVING: ARRIVAL}


def apply_compressed_times(network: EventActivityNetwork, trains: Iterable[Train]) -> Dict[str, Train]:
    """Write every event's compressed time into its train's timetable.

    Entering events set the departure at the segment origin, Leaving events the
    arrival at the segment destination. Slots no event covers (arrival at the
    first station, departure at the terminus) follow the mapped slot of the
    same station. Stations without any event (off the route, or on a skipped
    leg) are dropped.
    """
    by_id: Dict[str, Train] = {t.id: t for t in trains}
    mapped: Set[Tuple[str, str, str]] = set()

    for ev in network.events:
        if ev.kind == EventKind.ORIGIN:
            continue
        tr = by_id.get(ev.train_id)
        if tr is None:
            raise DataIntegrityError(f"event {ev.label()} refers to unknown train {ev.train_id}")
        if ev.station_id not in tr.timetable:
            raise DataIntegrityError(
                f"event {ev.label()}: station {ev.station_id} missing from timetable of train {tr.id}"
            )
        op = _OPERATION[ev.kind]
        tr.set_time(ev.station_id, op, ev.compressed_time)
        mapped.add((tr.id, ev.station_id, op))

    for tr in by_id.values():
        unmapped = []
        for station, slot in tr.timetable.items():
            has_arr = (tr.id, station, ARRIVAL) in mapped
            has_dep = (tr.id, station, DEPARTURE) in mapped
            if not has_arr and not has_dep:
                unmapped.append(station)
            elif has_dep and not has_arr:
                slot[ARRIVAL] = slot[DEPARTURE]
            elif has_arr and not has_dep:
                slot[DEPARTURE] = slot[ARRIVAL]
        if unmapped:
            logger.warning(
                "train %s: no scheduled movement at %s, dropped from the compressed timetable",
                tr.id, ", ".join(unmapped),
            )
            for station in unmapped:
                del tr.timetable[station]

    logger.debug("mapped %d compressed event times onto %d trains", len(mapped), len(by_id))
    return by_id
