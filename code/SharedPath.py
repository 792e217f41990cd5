from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from MetricsTable import MetricsTable
from Stop import StopRef
from StopSet import StopSet
from Timeline import Timeline, Timestamp
from feasibility import check_feasibility
from osrm_table import Matrix, fetch_table, fetch_table_async
from selector import search_orderings

logger = logging.getLogger(__name__)

Provider = Callable[[Sequence[Any]], Dict[str, Matrix]]
AsyncProvider = Callable[[Sequence[Any]], Awaitable[Dict[str, Matrix]]]


class SharedPath:
    """
    Two travelers, each with an ordered list of locations, sharing one vehicle.

    Holds the stop set and the metrics table for one computation; both are
    fixed at construction, so `search()` and `check_feasibility()` can be
    called any number of times with the same result.

        sp = SharedPath.from_locations(path_a, path_b)
        for ordering in sp.search():
            timeline = sp.check_feasibility(ordering, a_min, a_max, b_min, b_max)
    """

    def __init__(self,
                 path_a: Sequence[Any],
                 path_b: Sequence[Any],
                 distances: Matrix,
                 durations: Matrix):
        self.stop_set = StopSet.from_paths(path_a, path_b)
        self.table = MetricsTable.from_matrices(self.stop_set.ids, distances, durations)

    @classmethod
    def from_locations(cls,
                       path_a: Sequence[Any],
                       path_b: Sequence[Any],
                       provider: Optional[Provider] = None) -> "SharedPath":
        """Query the provider once for all stops (A then B); ProviderError aborts here."""
        provider = provider or fetch_table
        locs = StopSet.from_paths(path_a, path_b).locations()
        data = provider(locs)
        return cls(path_a, path_b, data["distances"], data["durations"])

    @classmethod
    async def from_locations_async(cls,
                                   path_a: Sequence[Any],
                                   path_b: Sequence[Any],
                                   provider: Optional[AsyncProvider] = None) -> "SharedPath":
        provider = provider or fetch_table_async
        locs = StopSet.from_paths(path_a, path_b).locations()
        data = await provider(locs)
        return cls(path_a, path_b, data["distances"], data["durations"])

    def search(self, prune: bool = True) -> List[List[StopRef]]:
        """All shortest shared orderings (distance, then duration); order is not significant."""
        orderings = search_orderings(self.stop_set.ids_a, self.stop_set.ids_b, self.table, prune=prune)
        logger.info("%d optimal ordering(s) found", len(orderings))
        return [self.stop_set.refs(o) for o in orderings]

    def check_feasibility(self,
                          ordering: Sequence,
                          a_min: Timestamp, a_max: Timestamp,
                          b_min: Timestamp, b_max: Timestamp) -> Timeline:
        """`ordering` may hold StopRefs (as returned by search) or raw StopIds."""
        return check_feasibility(ordering, self.stop_set, self.table, a_min, a_max, b_min, b_max)
