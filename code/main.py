import logging
import os
import sys
from datetime import datetime, timezone

from SharedPath import SharedPath
from osrm_table import fetch_table, haversine_table
from path_errors import ProviderError

logger = logging.getLogger("sharedpath")

# Bangalore: Koramangala -> Indiranagar, Domlur -> M G Road
path_a = [
    {"name": "Koramangala", "lat": 12.9352, "lon": 77.6245},
    {"name": "Indiranagar", "lat": 12.9719, "lon": 77.6412},
]
path_b = [
    {"name": "Domlur", "lat": 12.9610, "lon": 77.6387},
    {"name": "M G Road", "lat": 12.9756, "lon": 77.6050},
]

a_min = datetime.fromtimestamp(1406282400, tz=timezone.utc)
a_max = datetime.fromtimestamp(1406286000, tz=timezone.utc)
b_min = datetime.fromtimestamp(1406282400, tz=timezone.utc)
b_max = datetime.fromtimestamp(1406284800, tz=timezone.utc)


def start():
    provider = haversine_table if os.getenv("SHAREDPATH_OFFLINE") else fetch_table
    try:
        sp = SharedPath.from_locations(path_a, path_b, provider=provider)
    except ProviderError as e:
        logger.error("could not fetch distances: %s", e)
        raise SystemExit(1)

    for ordering in sp.search():
        names = " -> ".join(f"{r.group.value}{r.index}:{r.loc['name']}" for r in ordering)
        t = sp.check_feasibility(ordering, a_min, a_max, b_min, b_max)
        logger.info("%s | %.0f m, %.0f s | valid=%s", names,
                    t.total_distance_meters, t.total_duration_seconds, t.valid)
        for label, tr in (("a", t.a), ("b", t.b)):
            logger.info("  %s: %s -> %s (%.0f s, %.0f m)", label,
                        tr.start.isoformat(), tr.end.isoformat(),
                        tr.duration_seconds, tr.distance_meters)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, stream=sys.stdout,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    start()
