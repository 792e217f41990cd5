from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Tuple

LatLon = Tuple[float, float]  # (lat, lon)


class Group(Enum):
    A = "a"  # traveler 1
    B = "b"  # traveler 2


@dataclass(frozen=True)
class StopId:
    """
    Identity of one stop: which traveler it belongs to and its position in
    that traveler's original sequence. Equal locations in different groups
    are still different stops.
    """
    group: Group
    index: int

    def __str__(self) -> str:
        return f"{self.group.value}{self.index}"


@dataclass(frozen=True)
class StopRef:
    """StopId plus the caller's original location object (opaque to the core)."""
    group: Group
    index: int
    loc: Any = field(compare=False)

    @property
    def stop_id(self) -> StopId:
        return StopId(self.group, self.index)


def as_stop_id(stop) -> StopId:
    if isinstance(stop, StopId):
        return stop
    if isinstance(stop, StopRef):
        return stop.stop_id
    raise TypeError(f"Expected StopId or StopRef, got {type(stop).__name__}")
