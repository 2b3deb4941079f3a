import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from uic406.core.ean import ActivityKind, Event, EventActivityNetwork, EventKind
from uic406.core.errors import DataIntegrityError
from uic406.core.headway import HeadwayPolicy, constant_headway
from uic406.core.models import ARRIVAL, DEPARTURE, Segment, Train

logger = logging.getLogger(__name__)

# Network construction:
# - per train, in route order: Entering/Leaving events per segment joined by a Running activity
# - Dwelling activity from each arrival to the next departure from the same station
# - Origin activity from the network origin to the train's first event
# - afterwards, per segment and event kind: Headway activities between consecutive events


def build_network(
    trains: Sequence[Train],
    segments: Iterable[Segment],
    headway: Optional[HeadwayPolicy] = None,
) -> EventActivityNetwork:
    policy = headway or constant_headway()
    segment_list = list(segments)
    by_id: Dict[str, Segment] = {s.id: s for s in segment_list}
    network = EventActivityNetwork()
    # (segment_id, kind) -> events in creation order
    boundary_events: Dict[Tuple[str, EventKind], List[Event]] = {}

    for tr in trains:
        train_events = _add_train(network, tr, by_id, boundary_events)
        logger.debug("train %s: %d events", tr.id, len(train_events))

    for seg in segment_list:
        for kind in (EventKind.ENTERING, EventKind.LEAVING):
            _add_headway_activities(network, seg, boundary_events.get((seg.id, kind), []), policy)

    logger.info(
        "built event-activity network: %d events, %d activities (%d trains, %d segments)",
        len(network.events), len(network.activities), len(trains), len(segment_list),
    )
    return network


def _add_train(
    network: EventActivityNetwork,
    tr: Train,
    segments: Dict[str, Segment],
    boundary_events: Dict[Tuple[str, EventKind], List[Event]],
) -> List[Event]:
    events: List[Event] = []
    # Leaving event of the previous scheduled segment, reset when a leg is skipped
    previous: Optional[Event] = None

    for sid in tr.route:
        seg = segments.get(sid)
        if seg is None:
            logger.warning("train %s: segment %s on route is unknown, skipping", tr.id, sid)
            previous = None
            continue
        dep = tr.time_at(seg.from_station, DEPARTURE)
        arr = tr.time_at(seg.to_station, ARRIVAL)
        if dep is None or arr is None:
            missing = seg.from_station if dep is None else seg.to_station
            logger.warning(
                "train %s: no timetable entry for station %s on segment %s, skipping", tr.id, missing, sid
            )
            previous = None
            continue
        running = arr - dep
        if running < 0:
            raise DataIntegrityError(
                f"train {tr.id}: negative running time {running} on segment {sid} "
                f"(departs {seg.from_station} at {dep}, arrives {seg.to_station} at {arr})"
            )

        entering = network.add_event(EventKind.ENTERING, tr.id, sid, seg.from_station, dep)
        leaving = network.add_event(EventKind.LEAVING, tr.id, sid, seg.to_station, arr)
        network.add_activity(ActivityKind.RUNNING, entering, leaving, running)
        # each stop joins the arrival to the departure that follows it on the route
        if previous is not None and previous.station_id == seg.from_station:
            network.add_activity(ActivityKind.DWELLING, previous, entering, tr.min_stop_at(seg.from_station))

        events.extend((entering, leaving))
        previous = leaving
        boundary_events.setdefault((sid, EventKind.ENTERING), []).append(entering)
        boundary_events.setdefault((sid, EventKind.LEAVING), []).append(leaving)

    if not events:
        logger.warning("train %s: no segment of its route could be scheduled", tr.id)
        return events

    # Normally only the first event lacks a predecessor; a route broken by
    # missing data gets one origin link per disconnected leg.
    first = min(events, key=lambda e: (e.original_time, e.index))
    network.add_activity(ActivityKind.ORIGIN, network.origin, first, 0)
    for ev in events:
        if ev is not first and not network.incoming(ev):
            network.add_activity(ActivityKind.ORIGIN, network.origin, ev, 0)
    return events


def _add_headway_activities(
    network: EventActivityNetwork, seg: Segment, events: List[Event], policy: HeadwayPolicy
) -> None:
    # ties on original time: train id, then creation order
    ordered = sorted(events, key=lambda e: (e.original_time, e.train_id or "", e.index))
    for prev, cur in zip(ordered, ordered[1:]):
        network.add_activity(ActivityKind.HEADWAY, prev, cur, policy(seg, prev, cur))
