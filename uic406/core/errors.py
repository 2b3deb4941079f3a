class DataIntegrityError(ValueError):
    """Input data that would corrupt the compressed timetable (e.g. a negative running time)."""


class CyclicNetworkError(DataIntegrityError):
    """The event-activity network contains a cycle and has no topological order."""

    def __init__(self, message: str, events=None):
        super().__init__(message)
        self.events = list(events or [])
