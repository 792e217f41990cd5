from dataclasses import dataclass
from datetime import datetime
from typing import Any, Tuple, Union

from Stop import StopId

Timestamp = Union[datetime, float]


@dataclass(frozen=True)
class TravelerTimeline:
    # absolute times, same kind as the bounds passed in (datetime or epoch seconds)
    start: Timestamp
    end: Timestamp

    # epoch seconds, used for the checks
    start_s: float
    end_s: float

    # the traveler's own ride: first stop .. last stop of the shared journey
    duration_seconds: float
    distance_meters: float
    slice: Tuple[StopId, ...]
    locs: Tuple[Any, ...]

    # window that was checked
    earliest_s: float
    latest_s: float

    @property
    def starts_in_window(self) -> bool:
        return self.start_s >= self.earliest_s

    @property
    def ends_in_window(self) -> bool:
        return self.end_s <= self.latest_s

    @property
    def valid(self) -> bool:
        return self.starts_in_window and self.ends_in_window


@dataclass(frozen=True)
class Timeline:
    a: TravelerTimeline
    b: TravelerTimeline

    # whole shared journey
    total_duration_seconds: float
    total_distance_meters: float

    valid: bool
