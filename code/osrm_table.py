import asyncio
import logging
import math
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import aiohttp
import polyline
import requests

import path_config as config
from Stop import LatLon
from path_errors import ProviderError

logger = logging.getLogger(__name__)

Matrix = List[List[Optional[float]]]


# -------------------------
# small utils
# -------------------------
def to_latlon(loc: Any) -> LatLon:
    """Accepts (lat, lon), {"lat", "lon"/"lng"} or an object with .lat and .lon/.lng."""
    if isinstance(loc, (tuple, list)) and len(loc) == 2:
        return float(loc[0]), float(loc[1])
    if isinstance(loc, dict):
        lat = loc.get("lat")
        lon = loc.get("lon", loc.get("lng"))
    else:
        lat = getattr(loc, "lat", None)
        lon = getattr(loc, "lon", getattr(loc, "lng", None))
    if lat is None or lon is None:
        raise ValueError(
            f"Location has no coordinates: {loc!r}; geocode it first or pass an "
            f"address-capable provider to SharedPath.from_locations(provider=...)")
    return float(lat), float(lon)


def haversine_m(a: LatLon, b: LatLon) -> float:
    R = 6371000.0
    lat1, lon1 = map(math.radians, a)
    lat2, lon2 = map(math.radians, b)
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    x = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * R * math.asin(math.sqrt(x))


def _trivial_table(n: int) -> Dict[str, Matrix]:
    return {"distances": [[0.0] * n for _ in range(n)],
            "durations": [[0.0] * n for _ in range(n)]}


def _unknown_table(n: int) -> Dict[str, Matrix]:
    return {"distances": [[None] * n for _ in range(n)],
            "durations": [[None] * n for _ in range(n)]}


# -------------------------
# offline estimate
# -------------------------
def haversine_table(locs: Sequence[Any], speed_kmh: float = None) -> Dict[str, Matrix]:
    """Great-circle metres and constant-speed seconds; no network."""
    speed_kmh = speed_kmh or config.FALLBACK_SPEED_KMH
    points = [to_latlon(l) for l in locs]
    n = len(points)
    table = _trivial_table(n)
    for i in range(n):
        for j in range(n):
            if i != j:
                d = haversine_m(points[i], points[j])
                table["distances"][i][j] = d
                table["durations"][i][j] = d / 1000.0 / speed_kmh * 3600.0
    return table


# -------------------------
# OSRM table fetch
# -------------------------
def table_url(locs: Sequence[Any], profile: str = None, base: str = None) -> str:
    base = base or config.OSRM_URL
    profile = profile or config.OSRM_PROFILE
    encoded = polyline.encode([to_latlon(l) for l in locs], 5)
    return (
        f"{base.rstrip('/')}/table/v1/{profile}/polyline({quote(encoded, safe='')})"
        "?annotations=duration,distance"
    )


def parse_table(status: int, data: Any, n: int) -> Dict[str, Matrix]:
    code = data.get("code") if isinstance(data, dict) else None

    if code in config.OSRM_NO_RESULT_CODES:
        logger.warning("OSRM returned %s; every hop is unknown", code)
        return _unknown_table(n)

    if status != 200 or code != "Ok":
        message = data.get("message") if isinstance(data, dict) else None
        raise ProviderError(f"OSRM table failed (HTTP {status}, code={code}): {message}")

    durations = data.get("durations")
    distances = data.get("distances")
    if durations is None or distances is None:
        raise ProviderError("OSRM table response lacks durations or distances")
    if len(durations) != n or len(distances) != n:
        raise ProviderError(f"OSRM table has wrong size, expected {n}x{n}")

    return {
        "distances": [[None if v is None else float(v) for v in row] for row in distances],
        "durations": [[None if v is None else float(v) for v in row] for row in durations],
    }


def fetch_table(locs: Sequence[Any],
                profile: str = None,
                base: str = None,
                timeout: float = None) -> Dict[str, Matrix]:
    """
    Distances (m) and durations (s) between every pair of `locs`, in one
    request so both matrices always come from the same snapshot.
    """
    n = len(locs)
    if n < 2:
        return _trivial_table(n)

    url = table_url(locs, profile, base)
    logger.debug("GET %s", url)
    try:
        r = requests.get(url, timeout=timeout or config.OSRM_TIMEOUT_S)
    except requests.RequestException as e:
        raise ProviderError(f"OSRM request failed: {e}") from e

    try:
        data = r.json()
    except ValueError:
        try:
            r.raise_for_status()
        except requests.HTTPError as e:
            raise ProviderError(f"OSRM request failed: {e}") from e
        raise ProviderError("OSRM returned a non-JSON body")

    return parse_table(r.status_code, data, n)


async def fetch_table_async(locs: Sequence[Any],
                            profile: str = None,
                            base: str = None,
                            timeout: float = None,
                            session: Optional[aiohttp.ClientSession] = None) -> Dict[str, Matrix]:
    """Non-blocking fetch_table(); pass `session` to reuse a connection pool."""
    n = len(locs)
    if n < 2:
        return _trivial_table(n)

    url = table_url(locs, profile, base)
    own_session = session is None
    if own_session:
        session = aiohttp.ClientSession()
    logger.debug("GET %s", url)
    try:
        client_timeout = aiohttp.ClientTimeout(total=timeout or config.OSRM_TIMEOUT_S)
        async with session.get(url, timeout=client_timeout) as resp:
            status = resp.status
            try:
                data = await resp.json(content_type=None)
            except ValueError as e:
                raise ProviderError(f"OSRM returned a non-JSON body (HTTP {status})") from e
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise ProviderError(f"OSRM request failed: {e!r}") from e
    finally:
        if own_session:
            await session.close()

    return parse_table(status, data, n)
