# Single place for knobs; every value can be overridden from the environment.
import os

# OSRM table service
OSRM_URL = os.getenv("SHAREDPATH_OSRM_URL", "http://localhost:5000")
OSRM_PROFILE = os.getenv("SHAREDPATH_OSRM_PROFILE", "driving")
OSRM_TIMEOUT_S = float(os.getenv("SHAREDPATH_OSRM_TIMEOUT_S", "60"))

# OSRM codes that mean "no route between some points" rather than a failure
OSRM_NO_RESULT_CODES = ("NoTable", "NoSegment")

# Exhaustive enumeration is C(m+n, m); 16 stops -> 12870 orderings
MAX_EXHAUSTIVE_STOPS = int(os.getenv("SHAREDPATH_MAX_EXHAUSTIVE_STOPS", "16"))

# haversine_table() estimate
FALLBACK_SPEED_KMH = float(os.getenv("SHAREDPATH_FALLBACK_SPEED_KMH", "40"))
