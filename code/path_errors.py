from typing import Any, Optional


class SharedPathError(Exception):
    pass


class MissingMetricError(SharedPathError, KeyError):
    """A hop between two stops has no distance or duration in the table."""

    def __init__(self, origin: Any, dest: Any, metric: Optional[str] = None):
        self.origin = origin
        self.dest = dest
        self.metric = metric
        what = metric or "metric"
        super().__init__(f"No {what} from {origin} to {dest}")

    def __str__(self) -> str:
        # KeyError would repr() the message
        return self.args[0]


class ProviderError(SharedPathError, RuntimeError):
    """The distance/duration provider failed; no search may run."""


class InvariantViolation(SharedPathError, AssertionError):
    """Raised on internal inconsistencies (malformed ordering, empty candidate set)."""
