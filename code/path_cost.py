from typing import List, NamedTuple, Sequence

from MetricsTable import MetricsTable
from Stop import StopId


class PathCost(NamedTuple):
    distance: float
    duration: float


def cum_array(values: List[float]) -> List[float]:
    cum = [0.0]
    s = 0.0
    for v in values:
        s += v
        cum.append(s)
    return cum


def path_distance(path: Sequence[StopId], table: MetricsTable) -> float:
    distance = 0
    for prev, curr in zip(path, path[1:]):
        distance += table.distance(prev, curr)
    return distance


def path_duration(path: Sequence[StopId], table: MetricsTable) -> float:
    duration = 0
    for prev, curr in zip(path, path[1:]):
        duration += table.duration(prev, curr)
    return duration


def path_cost(path: Sequence[StopId], table: MetricsTable) -> PathCost:
    # fewer than two stops -> no hops -> (0, 0)
    return PathCost(path_distance(path, table), path_duration(path, table))


def cum_durations(path: Sequence[StopId], table: MetricsTable) -> List[float]:
    """cum[i] = travel time from path[0] to path[i]."""
    if not path:
        return []
    hops = [table.duration(prev, curr) for prev, curr in zip(path, path[1:])]
    return cum_array(hops)
