"""Domain exceptions.

Degenerate market data never raises; it resolves to neutral zero values.
Invalid configuration surfaces as ValueError (pydantic.ValidationError for
model construction). The classes here cover the remaining failure modes.
"""


class AnalyticsError(Exception):
    """Base class for analytics engine errors."""


class SimulationCancelledError(AnalyticsError):
    """Raised when a caller's cancellation check fires between trial batches.

    completed is the number of trials finished before cancellation; no
    partial result is returned.
    """

    def __init__(self, completed: int, total: int) -> None:
        self.completed = completed
        self.total = total
        super().__init__(f"simulation cancelled after {completed} of {total} trials")
