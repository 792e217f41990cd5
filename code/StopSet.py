from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, List, Mapping, Sequence, Tuple

from Stop import Group, StopId, StopRef


@dataclass(frozen=True)
class StopSet:
    """
    Union of both travelers' stops, built once per computation.
    ids_a / ids_b keep the original sequence order; `ids` is A then B and is
    the row/column order of the provider matrices.
    """
    ids_a: Tuple[StopId, ...]
    ids_b: Tuple[StopId, ...]
    locs: Mapping[StopId, Any]

    @classmethod
    def from_paths(cls, path_a: Sequence[Any], path_b: Sequence[Any]) -> "StopSet":
        ids_a = tuple(StopId(Group.A, i) for i in range(len(path_a)))
        ids_b = tuple(StopId(Group.B, i) for i in range(len(path_b)))
        locs = dict(zip(ids_a, path_a))
        locs.update(zip(ids_b, path_b))
        return cls(ids_a=ids_a, ids_b=ids_b, locs=MappingProxyType(locs))

    @property
    def ids(self) -> Tuple[StopId, ...]:
        return self.ids_a + self.ids_b

    def locations(self) -> List[Any]:
        return [self.locs[i] for i in self.ids]

    def ids_of(self, group: Group) -> Tuple[StopId, ...]:
        return self.ids_a if group is Group.A else self.ids_b

    def ref(self, stop_id: StopId) -> StopRef:
        return StopRef(stop_id.group, stop_id.index, self.locs[stop_id])

    def refs(self, ordering: Sequence[StopId]) -> List[StopRef]:
        return [self.ref(s) for s in ordering]

    def __contains__(self, stop_id: object) -> bool:
        return stop_id in self.locs

    def __len__(self) -> int:
        return len(self.locs)
