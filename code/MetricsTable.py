from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence, Tuple

from Stop import StopId
from path_errors import MissingMetricError

Hop = Tuple[StopId, StopId]


def _check_matrix(name: str, matrix: Sequence[Sequence[Optional[float]]], size: int) -> None:
    if len(matrix) != size or any(len(row) != size for row in matrix):
        raise ValueError(f"{name} matrix must be {size}x{size}")
    for row in matrix:
        for v in row:
            if v is not None and v < 0:
                raise ValueError(f"{name} matrix contains a negative value: {v}")


@dataclass(frozen=True)
class MetricsTable:
    """
    Distances (m) and durations (s) keyed by (origin, dest) stop identity.
    A missing key or a None value means the provider did not know the hop.
    """
    distances: Mapping[Hop, Optional[float]]
    durations: Mapping[Hop, Optional[float]]

    @classmethod
    def from_matrices(cls,
                      ids: Sequence[StopId],
                      distances: Sequence[Sequence[Optional[float]]],
                      durations: Sequence[Sequence[Optional[float]]]) -> "MetricsTable":
        n = len(ids)
        _check_matrix("distance", distances, n)
        _check_matrix("duration", durations, n)

        dist = {}
        dur = {}
        for i, a in enumerate(ids):
            for j, b in enumerate(ids):
                dist[(a, b)] = distances[i][j]
                dur[(a, b)] = durations[i][j]
        return cls(distances=MappingProxyType(dist), durations=MappingProxyType(dur))

    def distance(self, a: StopId, b: StopId) -> float:
        v = self.distances.get((a, b))
        if v is None:
            raise MissingMetricError(a, b, "distance")
        return v

    def duration(self, a: StopId, b: StopId) -> float:
        v = self.durations.get((a, b))
        if v is None:
            raise MissingMetricError(a, b, "duration")
        return v

    def require(self, hops: Iterable[Hop]) -> None:
        """Raise MissingMetricError for the first hop lacking either metric."""
        for a, b in hops:
            self.distance(a, b)
            self.duration(a, b)
