import asyncio
import functools

import pytest
import requests
from aiohttp import web
from aiohttp import test_utils

import osrm_table
from SharedPath import SharedPath
from osrm_table import fetch_table, fetch_table_async, haversine_table, table_url, to_latlon
from path_errors import MissingMetricError, ProviderError

path_a = [(12.9352, 77.6245), {"lat": 12.9719, "lng": 77.6412}]
path_b = [{"lat": 12.9610, "lon": 77.6387}, (12.9756, 77.6050)]

OK_TABLE = {
    "code": "Ok",
    "distances": [[0, 5200.5, 3400, 6100],
                  [5100, 0, 1300, 4000],
                  [3500, 1250, 0, 4200],
                  [6000, 3900, 4300, 0]],
    "durations": [[0, 620, 410, 700],
                  [610, 0, 160, 480],
                  [400, 150, 0, 500],
                  [690, 470, 510, 0]],
}


class FakeResponse:
    def __init__(self, status_code, data=None, text=None):
        self.status_code = status_code
        self._data = data
        self._text = text

    def json(self):
        if self._data is None:
            raise ValueError("not json")
        return self._data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


def fake_get(response, calls):
    def get(url, timeout=None):
        calls.append(url)
        if isinstance(response, Exception):
            raise response
        return response
    return get


# -------------------------
# locations
# -------------------------
def test_to_latlon_shapes():
    class Loc:
        lat = 1.5
        lng = 2.5

    assert to_latlon((1, 2)) == (1.0, 2.0)
    assert to_latlon({"lat": 1, "lon": 2}) == (1.0, 2.0)
    assert to_latlon({"lat": 1, "lng": 2}) == (1.0, 2.0)
    assert to_latlon(Loc()) == (1.5, 2.5)
    with pytest.raises(ValueError):
        to_latlon({"addr": "Connaught Place", "city": "New Delhi"})
    with pytest.raises(ValueError, match="provider="):
        to_latlon({"addr": "Indiranagar", "city": "Bangalore"})


def test_table_url_uses_polyline_coordinates():
    url = table_url(path_a + path_b, profile="driving", base="http://osrm:5000/")

    assert url.startswith("http://osrm:5000/table/v1/driving/polyline(")
    assert url.endswith(")?annotations=duration,distance")


def test_haversine_table():
    t = haversine_table(path_a + path_b, speed_kmh=36)

    n = len(path_a + path_b)
    assert all(t["distances"][i][i] == 0 for i in range(n))
    assert t["distances"][0][1] == pytest.approx(t["distances"][1][0])
    # 36 km/h == 10 m/s
    assert t["durations"][0][2] == pytest.approx(t["distances"][0][2] / 10)
    assert 4000 < t["distances"][0][1] < 5000


# -------------------------
# fetch_table (requests)
# -------------------------
def test_fetch_table_ok(monkeypatch):
    calls = []
    data = dict(OK_TABLE, durations=[row[:] for row in OK_TABLE["durations"]])
    data["durations"][3][0] = None
    monkeypatch.setattr(osrm_table.requests, "get", fake_get(FakeResponse(200, data), calls))

    t = fetch_table(path_a + path_b, base="http://osrm:5000")

    assert len(calls) == 1
    assert t["distances"][0][1] == 5200.5
    assert t["durations"][1][2] == 160.0
    assert t["durations"][3][0] is None


def test_fetch_table_single_location_skips_request(monkeypatch):
    calls = []
    monkeypatch.setattr(osrm_table.requests, "get", fake_get(FakeResponse(500), calls))

    assert fetch_table([(1, 2)]) == {"distances": [[0.0]], "durations": [[0.0]]}
    assert calls == []


def test_fetch_table_no_route_means_unknown_hops(monkeypatch):
    calls = []
    resp = FakeResponse(400, {"code": "NoSegment", "message": "Could not find a matching segment"})
    monkeypatch.setattr(osrm_table.requests, "get", fake_get(resp, calls))

    sp = SharedPath.from_locations(path_a, path_b)

    with pytest.raises(MissingMetricError):
        sp.search()


@pytest.mark.parametrize("response", [
    FakeResponse(400, {"code": "InvalidQuery", "message": "Query string malformed"}),
    FakeResponse(200, {"code": "TooBig"}),
    FakeResponse(502, None),
    requests.ConnectionError("connection refused"),
])
def test_fetch_table_failures_abort(monkeypatch, response):
    calls = []
    monkeypatch.setattr(osrm_table.requests, "get", fake_get(response, calls))

    with pytest.raises(ProviderError):
        SharedPath.from_locations(path_a, path_b)


def test_shared_path_with_offline_provider():
    sp = SharedPath.from_locations(path_a, path_b, provider=haversine_table)
    results = sp.search()

    assert results
    for ordering in results:
        t = sp.check_feasibility(ordering, 0, 10 ** 6, 0, 10 ** 6)
        assert t.valid
        assert t.total_distance_meters > 0


# -------------------------
# fetch_table_async (aiohttp)
# -------------------------
async def _start_osrm(status, body, hits):
    async def table(request):
        hits.append(request.match_info["coords"])
        if isinstance(body, str):
            return web.Response(status=status, text=body)
        return web.json_response(body, status=status)

    app = web.Application()
    app.router.add_get("/table/v1/{profile}/{coords:.*}", table)
    server = test_utils.TestServer(app)
    await server.start_server()
    return server


async def _test_from_locations_async():
    hits = []
    server = await _start_osrm(200, OK_TABLE, hits)
    try:
        base = str(server.make_url("/"))
        provider = functools.partial(fetch_table_async, base=base)
        sp = await SharedPath.from_locations_async(path_a, path_b, provider=provider)
    finally:
        await server.close()

    assert len(hits) == 1
    assert hits[0].startswith("polyline(")
    assert sp.table.distance(sp.stop_set.ids_a[0], sp.stop_set.ids_a[1]) == 5200.5
    return sp.search()


async def _test_async_failure(status, body):
    hits = []
    server = await _start_osrm(status, body, hits)
    try:
        await fetch_table_async(path_a + path_b, base=str(server.make_url("/")))
    finally:
        await server.close()


def test_from_locations_async():
    results = asyncio.run(_test_from_locations_async())
    assert len(results) >= 1


def test_async_fetch_failures_abort():
    with pytest.raises(ProviderError):
        asyncio.run(_test_async_failure(500, "upstream exploded"))
    with pytest.raises(ProviderError):
        asyncio.run(_test_async_failure(400, {"code": "InvalidUrl"}))


def test_async_fetch_connection_refused():
    async def run():
        # nothing listens on port 9 (discard) in the test environment
        await fetch_table_async(path_a + path_b, base="http://127.0.0.1:9", timeout=5)

    with pytest.raises(ProviderError):
        asyncio.run(run())
