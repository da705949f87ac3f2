"""HTTPサーバーのテスト"""
import pytest
from fastapi.testclient import TestClient

from location_resolver.features.geocoding.domain.models import LocationQuery, LocationRecord
from location_resolver.features.geocoding.services.cache_keys import cache_key
from location_resolver.features.storage.cache.cache_store import serialize_records
from location_resolver.server import app, get_resolver
from tests.conftest import google_result


@pytest.fixture
def client(make_resolver):
    resolver = make_resolver()
    app.dependency_overrides[get_resolver] = lambda: resolver
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_get_locations(client: TestClient, provider) -> None:
    response = client.get("/locations", params={"locality": "Paris", "country": "FR"})

    assert response.status_code == 200
    body = response.json()
    assert len(body) == 1
    assert body[0]["id"] == "ChIJD7fiBh9u5kcRYJSMaMOCCwQ"
    assert body[0]["location"] == {"type": "Point", "coordinates": [2.3522219, 48.856614]}
    assert body[0]["timezone"] == "Europe/Paris"
    assert body[0]["phone_code"] == "+33"


def test_get_locations_by_coordinates(client: TestClient, provider) -> None:
    response = client.get("/locations", params={"latitude": "48.85", "longitude": "2.35"})

    assert response.status_code == 200
    assert provider.calls_to("reverse_geocode") == [{"latitude": 48.85, "longitude": 2.35}]


def test_invalid_coordinates(client: TestClient, provider) -> None:
    response = client.get(
        "/locations", params={"latitude": "north", "longitude": "2.35", "country": "FR"}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == 7002
    assert body["query"] == {"country": "FR"}
    assert provider.calls == []


def test_head_locations_returns_count(client: TestClient) -> None:
    response = client.head("/locations", params={"country": "FR"})

    assert response.status_code == 200
    assert response.headers["x-location-count"] == "1"


def test_head_locations_counts_from_cache(make_resolver, provider, cache_store) -> None:
    """キャッシュにヒットすれば外部APIを呼ばずに数える"""
    query = LocationQuery(locality="Lyon", country="FR")
    cache_store.put(
        cache_key(query), serialize_records([LocationRecord(id="a"), LocationRecord(id="b")])
    )
    resolver = make_resolver(cache=cache_store)
    app.dependency_overrides[get_resolver] = lambda: resolver
    try:
        response = TestClient(app).head(
            "/locations", params={"locality": "Lyon", "country": "FR"}
        )
    finally:
        app.dependency_overrides.clear()

    assert response.headers["x-location-count"] == "2"
    assert provider.calls == []


def test_get_location_by_id(client: TestClient, provider) -> None:
    response = client.get("/locations/ChIJD7fiBh9u5kcRYJSMaMOCCwQ")

    assert response.status_code == 200
    assert response.json()["address"] == "Paris, France"
    assert provider.calls_to("geocode")[0]["place_id"] == "ChIJD7fiBh9u5kcRYJSMaMOCCwQ"


def test_get_location_by_id_not_found(client: TestClient, provider) -> None:
    provider.geocode_results = []
    assert client.get("/locations/missing").status_code == 404


def test_unresolvable_result_is_404(client: TestClient, provider) -> None:
    provider.geocode_results = [google_result(latitude=None, longitude=None)]

    response = client.get("/locations", params={"country": "FR"})

    assert response.status_code == 404
    assert response.json()["code"] == 7003
    assert response.json()["query"]["country"] == "FR"


def test_rpc_resolve_locations(client: TestClient) -> None:
    response = client.post(
        "/rpc",
        json={
            "jsonrpc": "2.0",
            "id": 1,
            "method": "resolveLocations",
            "params": [{"country": "FR"}],
        },
    )

    body = response.json()
    assert body["id"] == 1
    assert body["result"][0]["country"] == "FR"


def test_rpc_resolve_one_location(client: TestClient) -> None:
    response = client.post(
        "/rpc",
        json={
            "jsonrpc": "2.0",
            "id": "a",
            "method": "resolveOneLocation",
            "params": {"location": {"coordinates": [2.35, 48.85]}},
        },
    )
    assert response.json()["result"]["id"] == "ChIJD7fiBh9u5kcRYJSMaMOCCwQ"


def test_rpc_autocomplete(client: TestClient, provider) -> None:
    provider.predictions = [{"place_id": "p1", "description": "Paris, France"}]

    response = client.post(
        "/rpc",
        json={
            "jsonrpc": "2.0",
            "id": 2,
            "method": "autocompleteSearch",
            "params": {"input": "Par", "location": [2.35, 48.85]},
        },
    )

    assert response.json()["result"] == [{"place_id": "p1", "description": "Paris, France"}]
    assert provider.calls_to("autocomplete")[0]["location"] == "48.85,2.35"


def test_rpc_unknown_method(client: TestClient) -> None:
    response = client.post("/rpc", json={"jsonrpc": "2.0", "id": 3, "method": "launch"})
    assert response.json()["error"]["code"] == -32601


def test_rpc_resolver_error(client: TestClient, provider) -> None:
    provider.geocode_results = [google_result(latitude=None, longitude=None)]

    response = client.post(
        "/rpc",
        json={"jsonrpc": "2.0", "id": 4, "method": "resolveLocations", "params": {"country": "FR"}},
    )

    assert response.json()["error"]["code"] == 7003
