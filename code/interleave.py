from math import comb
from typing import Iterator, List, Sequence, Tuple, TypeVar

T = TypeVar("T")


def count_interleavings(m: int, n: int) -> int:
    return comb(m + n, m)


def interleavings(seq_a: Sequence[T], seq_b: Sequence[T]) -> Iterator[Tuple[T, ...]]:
    """
    Yield every merge of seq_a and seq_b that keeps the relative order of
    each input. Produces exactly C(m+n, m) orderings; with one side empty the
    only ordering is the other side unchanged.
    """
    merged: List[T] = []

    def step(i: int, j: int) -> Iterator[Tuple[T, ...]]:
        if i == len(seq_a) and j == len(seq_b):
            yield tuple(merged)
            return
        if i < len(seq_a):
            merged.append(seq_a[i])
            yield from step(i + 1, j)
            merged.pop()
        if j < len(seq_b):
            merged.append(seq_b[j])
            yield from step(i, j + 1)
            merged.pop()

    yield from step(0, 0)


def is_order_preserving(ordering: Sequence[T], seq_a: Sequence[T], seq_b: Sequence[T]) -> bool:
    if len(ordering) != len(seq_a) + len(seq_b):
        return False
    in_a = set(seq_a)
    only_a = [s for s in ordering if s in in_a]
    only_b = [s for s in ordering if s not in in_a]
    return only_a == list(seq_a) and only_b == list(seq_b)
