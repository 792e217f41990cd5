import logging
from typing import Iterable, Iterator, List, Sequence, Tuple

import path_config as config
from MetricsTable import Hop, MetricsTable
from Stop import StopId
from interleave import count_interleavings, interleavings
from path_cost import PathCost, path_cost
from path_errors import InvariantViolation

logger = logging.getLogger(__name__)

Ordering = Tuple[StopId, ...]


def possible_hops(ids_a: Sequence[StopId], ids_b: Sequence[StopId]) -> Iterator[Hop]:
    """Every (prev, curr) pair that can be consecutive in some valid ordering."""
    for seq in (ids_a, ids_b):
        for prev, curr in zip(seq, seq[1:]):
            yield prev, curr
    for a in ids_a:
        for b in ids_b:
            yield a, b
            yield b, a


def select_optimal(candidates: Iterable[Ordering], table: MetricsTable) -> List[Ordering]:
    """
    Keep the orderings with minimum total distance, then minimum total
    duration among those. Ties are all returned.
    """
    best: List[Ordering] = []
    best_cost = None

    for path in candidates:
        cost = path_cost(path, table)
        if best_cost is None or cost < best_cost:
            best_cost = cost
            best = [path]
        elif cost == best_cost:
            best.append(path)

    if best_cost is None:
        raise InvariantViolation("Candidate set is empty")
    logger.debug("optimal cost %s shared by %d ordering(s)", best_cost, len(best))
    return best


def _branch_and_bound(ids_a: Sequence[StopId],
                      ids_b: Sequence[StopId],
                      table: MetricsTable) -> List[Ordering]:
    best: List[Ordering] = []
    best_cost = None
    merged: List[StopId] = []
    pruned = 0

    def step(i: int, j: int, cost: PathCost) -> None:
        nonlocal best, best_cost, pruned
        # metrics are non-negative, so a prefix worse than the best full path stays worse
        if best_cost is not None and cost > best_cost:
            pruned += 1
            return
        if i == len(ids_a) and j == len(ids_b):
            if best_cost is None or cost < best_cost:
                best_cost = cost
                best = [tuple(merged)]
            else:
                best.append(tuple(merged))
            return

        for nxt, ni, nj in ((ids_a[i] if i < len(ids_a) else None, i + 1, j),
                            (ids_b[j] if j < len(ids_b) else None, i, j + 1)):
            if nxt is None:
                continue
            if merged:
                prev = merged[-1]
                nxt_cost = PathCost(cost.distance + table.distance(prev, nxt),
                                    cost.duration + table.duration(prev, nxt))
            else:
                nxt_cost = cost
            merged.append(nxt)
            step(ni, nj, nxt_cost)
            merged.pop()

    step(0, 0, PathCost(0, 0))
    logger.debug("branch and bound pruned %d prefixes", pruned)
    if best_cost is None:
        raise InvariantViolation("Candidate set is empty")
    return best


def search_orderings(ids_a: Sequence[StopId],
                     ids_b: Sequence[StopId],
                     table: MetricsTable,
                     prune: bool = True) -> List[Ordering]:
    """
    All optimal order-preserving interleavings of ids_a and ids_b.

    The table is checked for every hop that could occur before any
    enumeration starts, so a gap fails the whole search instead of silently
    dropping candidates. With prune=True generation and costing are fused and
    dominated prefixes are cut; the result set is identical to prune=False.
    """
    total = len(ids_a) + len(ids_b)
    if not prune and total > config.MAX_EXHAUSTIVE_STOPS:
        raise ValueError(
            f"{total} stops exceed MAX_EXHAUSTIVE_STOPS={config.MAX_EXHAUSTIVE_STOPS}; "
            f"use prune=True")

    table.require(possible_hops(ids_a, ids_b))

    logger.info("searching %d candidate orderings (%d + %d stops, prune=%s)",
                count_interleavings(len(ids_a), len(ids_b)), len(ids_a), len(ids_b), prune)

    if prune:
        return _branch_and_bound(ids_a, ids_b, table)
    return select_optimal(interleavings(ids_a, ids_b), table)
