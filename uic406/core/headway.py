from typing import Callable

from uic406.core.ean import Event
from uic406.core.models import Segment

# (segment, earlier event, later event) -> minimum separation
HeadwayPolicy = Callable[[Segment, Event, Event], int]

DEFAULT_MIN_HEADWAY = 6


def constant_headway(value: int = DEFAULT_MIN_HEADWAY) -> HeadwayPolicy:
    def policy(segment: Segment, first: Event, second: Event) -> int:
        return value

    return policy


def segment_headway(default: int = DEFAULT_MIN_HEADWAY) -> HeadwayPolicy:
    """Use the segment's own ``min_headway`` parameter, falling back to ``default``."""

    def policy(segment: Segment, first: Event, second: Event) -> int:
        if segment.min_headway is not None:
            return int(segment.min_headway)
        return default

    return policy
