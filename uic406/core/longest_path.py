"""Longest paths from the network origin (earliest feasible event times).

Every event ends up with the length of the longest ``min_duration`` path from
the root, which is the earliest time at which all of its preceding
constraints can be met. Two traversal strategies give identical values:

* ``"topological"`` relaxes each event once in Kahn order, O(V + E).
* ``"stack"`` keeps a LIFO work list seeded with the root and re-pushes the
  target of every outgoing activity after relaxing it. It needs no ordering
  but revisits an event once per path reaching it, so it is only practical
  for small networks. A cyclic network is rejected up front.
"""
import logging
from typing import List, Optional

from uic406.core.ean import Activity, Event, EventActivityNetwork
from uic406.core.errors import CyclicNetworkError

logger = logging.getLogger(__name__)

STRATEGIES = ("topological", "stack")


def solve_longest_paths(
    network: EventActivityNetwork,
    strategy: str = "topological",
    root: Optional[Event] = None,
) -> EventActivityNetwork:
    root = root or network.origin
    root.compressed_time = 0
    if strategy == "topological":
        relaxations = _relax_in_topological_order(network, root)
    elif strategy == "stack":
        relaxations = _relax_by_stack(network, root)
    else:
        raise ValueError(f"Unknown strategy {strategy!r}; expected one of {', '.join(STRATEGIES)}")
    logger.info("longest paths solved (%s): %d relaxations over %d events", strategy, relaxations, len(network))
    return network


def _relax(network: EventActivityNetwork, event: Event, activity: Activity) -> Event:
    target = network.events[activity.target]
    candidate = event.compressed_time + activity.min_duration
    if candidate > target.compressed_time:
        target.compressed_time = candidate
    return target


def _relax_by_stack(network: EventActivityNetwork, root: Event) -> int:
    # re-pushing never drains the work list on a cycle
    cycle = network.find_cycle()
    if cycle:
        raise CyclicNetworkError(
            f"Event-activity network contains a cycle through {len(cycle)} events "
            f"({' -> '.join(e.label() for e in cycle[:5])})",
            events=cycle,
        )
    stack = [root]
    count = 0
    while stack:
        event = stack.pop()
        for act in network.outgoing(event):
            stack.append(_relax(network, event, act))
            count += 1
    return count


def _relax_in_topological_order(network: EventActivityNetwork, root: Event) -> int:
    reached = {root.index}
    count = 0
    for event in network.topological_order():
        if event.index not in reached:
            continue
        for act in network.outgoing(event):
            reached.add(_relax(network, event, act).index)
            count += 1
    return count


def constraint_violations(network: EventActivityNetwork) -> List[Activity]:
    return [
        a for a in network.activities
        if network.events[a.target].compressed_time < network.events[a.source].compressed_time + a.min_duration
    ]


def critical_path(network: EventActivityNetwork) -> List[Activity]:
    """Chain of tight activities from the origin to the latest event.

    This is the sequence of running, dwelling and headway constraints that
    fixes the compressed span. Among several tight incoming activities the
    first one recorded is followed.
    """
    if len(network) <= 1:
        return []
    latest = max(network.events, key=lambda e: (e.compressed_time, -e.index))
    path: List[Activity] = []
    current = latest
    while current is not network.origin:
        tight = next(
            (
                a for a in network.incoming(current)
                if network.events[a.source].compressed_time + a.min_duration == current.compressed_time
            ),
            None,
        )
        if tight is None:
            raise ValueError(f"event {current.label()} has no tight incoming activity; solve the network first")
        path.append(tight)
        current = network.events[tight.source]
    path.reverse()
    return path
