import logging
from datetime import datetime
from typing import Dict, Sequence, Tuple

from MetricsTable import MetricsTable
from Stop import Group, StopId, as_stop_id
from StopSet import StopSet
from Timeline import Timeline, Timestamp, TravelerTimeline
from path_cost import cum_durations, path_cost
from path_errors import InvariantViolation

logger = logging.getLogger(__name__)


def to_epoch(value: Timestamp) -> float:
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected datetime or epoch seconds, got {type(value).__name__}")
    return float(value)


def from_epoch(ts: float, like: Timestamp) -> Timestamp:
    """Convert back to the kind of `like` (aware/naive datetime or seconds)."""
    if isinstance(like, datetime):
        if like.tzinfo is not None:
            return datetime.fromtimestamp(ts, tz=like.tzinfo)
        return datetime.fromtimestamp(ts)
    return ts


def user_slice(path: Sequence[StopId], user_ids: Sequence[StopId]) -> Tuple[StopId, ...]:
    """
    The stretch of the shared journey one traveler is on board: from the
    first occurrence of their first stop up to the next occurrence of their
    last stop, including the other traveler's stops in between.
    """
    if not user_ids:
        return ()
    first, last = user_ids[0], user_ids[-1]

    slice_ = []
    recording = False
    for stop in path:
        if recording:
            slice_.append(stop)
            if stop == last:
                return tuple(slice_)
        elif stop == first:
            slice_.append(stop)
            if first == last:
                return tuple(slice_)
            recording = True

    if recording:
        raise InvariantViolation(f"Slice for {first}..{last} never reaches {last}")
    raise InvariantViolation(f"Ordering does not contain {first}")


def normalize_ordering(ordering: Sequence, stop_set: StopSet) -> Tuple[StopId, ...]:
    path = tuple(as_stop_id(s) for s in ordering)
    unknown = [s for s in path if s not in stop_set]
    if unknown:
        raise InvariantViolation(f"Ordering contains unknown stops: {', '.join(map(str, unknown))}")
    if len(set(path)) != len(path):
        raise InvariantViolation("Ordering visits a stop more than once")
    if len(path) != len(stop_set):
        missing = [s for s in stop_set.ids if s not in path]
        raise InvariantViolation(f"Ordering is missing stops: {', '.join(map(str, missing))}")
    return path


def check_feasibility(ordering: Sequence,
                      stop_set: StopSet,
                      table: MetricsTable,
                      a_min: Timestamp, a_max: Timestamp,
                      b_min: Timestamp, b_max: Timestamp) -> Timeline:
    """
    Compute start/end times for both travelers on one shared ordering and
    check them against their windows.

    The traveler picked up first leaves at their own earliest departure; the
    other one's start is derived from the shared clock (first start plus the
    travel time up to their first stop). An infeasible plan comes back with
    valid=False, it is not an error.
    """
    path = normalize_ordering(ordering, stop_set)

    bounds = {
        Group.A: (to_epoch(a_min), to_epoch(a_max)),
        Group.B: (to_epoch(b_min), to_epoch(b_max)),
    }

    slices = {g: user_slice(path, stop_set.ids_of(g)) for g in Group}
    costs = {g: path_cost(slices[g], table) for g in Group}
    total = path_cost(path, table)

    starts: Dict[Group, float] = {}
    firsts = {g: path.index(stop_set.ids_of(g)[0]) for g in Group if stop_set.ids_of(g)}
    if len(firsts) == 2:
        lead = min(firsts, key=firsts.get)
        other = Group.B if lead is Group.A else Group.A
        cum = cum_durations(path, table)
        starts[lead] = bounds[lead][0]
        starts[other] = starts[lead] + cum[firsts[other]]
    else:
        # a traveler without stops rides nothing; everyone leaves at their own earliest time
        for g in Group:
            starts[g] = bounds[g][0]

    likes = {Group.A: (a_min, a_max), Group.B: (b_min, b_max)}
    travelers = {}
    for g in Group:
        start_s = starts[g]
        end_s = start_s + costs[g].duration
        travelers[g] = TravelerTimeline(
            start=from_epoch(start_s, likes[g][0]),
            end=from_epoch(end_s, likes[g][1]),
            start_s=start_s,
            end_s=end_s,
            duration_seconds=costs[g].duration,
            distance_meters=costs[g].distance,
            slice=slices[g],
            locs=tuple(stop_set.locs[s] for s in slices[g]),
            earliest_s=bounds[g][0],
            latest_s=bounds[g][1],
        )

    valid = travelers[Group.A].valid and travelers[Group.B].valid
    if not valid:
        logger.debug("timeline infeasible: a=%s..%s b=%s..%s",
                     travelers[Group.A].start_s, travelers[Group.A].end_s,
                     travelers[Group.B].start_s, travelers[Group.B].end_s)

    return Timeline(
        a=travelers[Group.A],
        b=travelers[Group.B],
        total_duration_seconds=total.duration,
        total_distance_meters=total.distance,
        valid=valid,
    )
