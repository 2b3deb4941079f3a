"""Event-activity network (EAN) of a timetable.

Events are time points (a train entering or leaving a track segment, plus one
synthetic origin per network). Activities are minimum-duration constraints
between two events. The network owns both in flat lists; adjacency is kept as
lists of activity indices per event, so events never hold references to each
other.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from uic406.core.errors import CyclicNetworkError, DataIntegrityError


class EventKind(str, Enum):
    ORIGIN = "Origin"
    ENTERING = "Entering"  # train enters a segment (departs from its origin station)
    LEAVING = "Leaving"  # train leaves a segment (arrives at its destination station)


class ActivityKind(str, Enum):
    RUNNING = "Running"
    DWELLING = "Dwelling"
    HEADWAY = "Headway"
    ORIGIN = "Origin"


@dataclass
class Event:
    index: int
    kind: EventKind
    train_id: Optional[str] = None
    segment_id: Optional[str] = None
    station_id: Optional[str] = None
    original_time: int = 0
    compressed_time: int = 0

    def label(self) -> str:
        return f"{self.train_id or 'null'}|{self.segment_id or 'null'}|{self.kind.value}"


@dataclass
class Activity:
    index: int
    kind: ActivityKind
    source: int  # event index
    target: int  # event index
    min_duration: int


class EventActivityNetwork:
    def __init__(self) -> None:
        self.events: List[Event] = []
        self.activities: List[Activity] = []
        self._outgoing: List[List[int]] = []
        self._incoming: List[List[int]] = []
        self.origin: Event = self.add_event(EventKind.ORIGIN)

    def __len__(self) -> int:
        return len(self.events)

    def add_event(
        self,
        kind: EventKind,
        train_id: Optional[str] = None,
        segment_id: Optional[str] = None,
        station_id: Optional[str] = None,
        original_time: int = 0,
    ) -> Event:
        ev = Event(
            index=len(self.events),
            kind=kind,
            train_id=train_id,
            segment_id=segment_id,
            station_id=station_id,
            original_time=int(original_time),
        )
        self.events.append(ev)
        self._outgoing.append([])
        self._incoming.append([])
        return ev

    def add_activity(self, kind: ActivityKind, source: Event, target: Event, min_duration: int) -> Activity:
        if min_duration < 0:
            raise DataIntegrityError(
                f"{kind.value} activity {source.label()} -> {target.label()} has negative duration {min_duration}"
            )
        act = Activity(
            index=len(self.activities),
            kind=kind,
            source=source.index,
            target=target.index,
            min_duration=int(min_duration),
        )
        self.activities.append(act)
        self._outgoing[source.index].append(act.index)
        self._incoming[target.index].append(act.index)
        return act

    def outgoing(self, event: Event) -> List[Activity]:
        return [self.activities[i] for i in self._outgoing[event.index]]

    def incoming(self, event: Event) -> List[Activity]:
        return [self.activities[i] for i in self._incoming[event.index]]

    def source_of(self, activity: Activity) -> Event:
        return self.events[activity.source]

    def target_of(self, activity: Activity) -> Event:
        return self.events[activity.target]

    def events_of(self, kind: EventKind) -> List[Event]:
        return [e for e in self.events if e.kind == kind]

    def activities_of(self, kind: ActivityKind) -> List[Activity]:
        return [a for a in self.activities if a.kind == kind]

    def reset_compressed_times(self) -> None:
        for e in self.events:
            e.compressed_time = 0

    def find_cycle(self, start: Optional[Iterable[Event]] = None) -> Optional[List[Event]]:
        """Depth-first search for a directed cycle.

        Searches from ``start`` (default: the origin, then every other event)
        and returns the events of the first cycle found in path order, or
        ``None`` when the network is acyclic.
        """
        roots = list(start) if start is not None else self.events
        WHITE, GREY, BLACK = 0, 1, 2
        color = [WHITE] * len(self.events)
        parent: Dict[int, int] = {}

        for root in roots:
            if color[root.index] != WHITE:
                continue
            color[root.index] = GREY
            stack = [(root.index, iter(self._outgoing[root.index]))]
            while stack:
                node, edges = stack[-1]
                advanced = False
                for aidx in edges:
                    nxt = self.activities[aidx].target
                    if color[nxt] == WHITE:
                        color[nxt] = GREY
                        parent[nxt] = node
                        stack.append((nxt, iter(self._outgoing[nxt])))
                        advanced = True
                        break
                    if color[nxt] == GREY:
                        # back edge: unwind parents from node to nxt
                        cycle = [node]
                        while cycle[-1] != nxt:
                            cycle.append(parent[cycle[-1]])
                        cycle.reverse()
                        return [self.events[i] for i in cycle]
                if not advanced:
                    color[node] = BLACK
                    stack.pop()
        return None

    def has_cycle(self) -> bool:
        return self.find_cycle() is not None

    def topological_order(self) -> List[Event]:
        """Kahn's algorithm over the whole network.

        Ties are released in event index order, so the result is deterministic.
        """
        indegree = [len(ins) for ins in self._incoming]
        ready = deque(i for i, d in enumerate(indegree) if d == 0)
        order: List[int] = []
        while ready:
            node = ready.popleft()
            order.append(node)
            for aidx in self._outgoing[node]:
                nxt = self.activities[aidx].target
                indegree[nxt] -= 1
                if indegree[nxt] == 0:
                    ready.append(nxt)
        if len(order) != len(self.events):
            stuck = [self.events[i] for i, d in enumerate(indegree) if d > 0]
            raise CyclicNetworkError(
                f"Event-activity network contains a cycle through {len(stuck)} events "
                f"(e.g. {', '.join(e.label() for e in stuck[:3])})",
                events=stuck,
            )
        return [self.events[i] for i in order]
