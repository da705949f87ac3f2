"""テスト共通のフィクスチャ（外部APIの代わりになるフェイク）"""
from typing import Any, Optional

import pytest

from location_resolver.features.geocoding.domain.enums import ResolvePriority
from location_resolver.features.geocoding.providers.country_data import get_country_data
from location_resolver.features.geocoding.providers.geoip_database import GeoIpCity
from location_resolver.features.geocoding.services.geo_resolver import (
    GeoResolver,
    ResolverConfig,
)
from location_resolver.features.storage.cache.cache_store import InMemoryCacheStore
from location_resolver.shared.exceptions.errors import ProviderError


def google_result(
    place_id: str = "ChIJD7fiBh9u5kcRYJSMaMOCCwQ",
    formatted_address: str = "Paris, France",
    latitude: Optional[float] = 48.856614,
    longitude: Optional[float] = 2.3522219,
    components: Optional[list[dict[str, Any]]] = None,
) -> dict[str, Any]:
    """Geocoding APIの結果1件を生成（デフォルトはパリ）"""
    geometry: dict[str, Any] = {}
    if latitude is not None and longitude is not None:
        geometry = {"location": {"lat": latitude, "lng": longitude}}

    if components is None:
        components = [
            {"long_name": "Paris", "short_name": "Paris", "types": ["locality", "political"]},
            {
                "long_name": "Département de Paris",
                "short_name": "Département de Paris",
                "types": ["administrative_area_level_2", "political"],
            },
            {
                "long_name": "Île-de-France",
                "short_name": "IDF",
                "types": ["administrative_area_level_1", "political"],
            },
            {"long_name": "France", "short_name": "FR", "types": ["country", "political"]},
        ]

    return {
        "place_id": place_id,
        "formatted_address": formatted_address,
        "geometry": geometry,
        "address_components": components,
    }


class FakeGoogleMapsProvider:
    """呼び出しを記録するGoogle Maps APIのフェイク"""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.geocode_results: list[dict[str, Any]] = [google_result()]
        self.reverse_results: list[dict[str, Any]] = [google_result()]
        self.timezone_id: Optional[str] = "Europe/Paris"
        self.timezone_error: Optional[Exception] = None
        self.geocode_error: Optional[Exception] = None
        self.predictions: list[dict[str, Any]] = []

    def geocode(
        self,
        address: Optional[str] = None,
        place_id: Optional[str] = None,
        components: Optional[str] = None,
        region: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        self.calls.append(
            (
                "geocode",
                {
                    "address": address,
                    "place_id": place_id,
                    "components": components,
                    "region": region,
                },
            )
        )
        if self.geocode_error:
            raise self.geocode_error
        return self.geocode_results

    def reverse_geocode(self, latitude: float, longitude: float) -> list[dict[str, Any]]:
        self.calls.append(("reverse_geocode", {"latitude": latitude, "longitude": longitude}))
        return self.reverse_results

    def timezone(self, latitude: float, longitude: float, timestamp: int) -> Optional[str]:
        self.calls.append(("timezone", {"latitude": latitude, "longitude": longitude}))
        if self.timezone_error:
            raise self.timezone_error
        return self.timezone_id

    def autocomplete(self, input_text: str, **kwargs: Any) -> list[dict[str, Any]]:
        self.calls.append(("autocomplete", {"input": input_text, **kwargs}))
        return self.predictions

    def calls_to(self, method: str) -> list[dict[str, Any]]:
        """指定したメソッドの呼び出し引数だけを返す"""
        return [kwargs for name, kwargs in self.calls if name == method]


class FakeGeoIpDatabase:
    """固定の結果を返すGeoIPデータベースのフェイク"""

    def __init__(self, city: Optional[GeoIpCity] = None) -> None:
        self.result = city or GeoIpCity(
            latitude=48.8566,
            longitude=2.3522,
            timezone="Europe/Paris",
            country_code="FR",
            subdivisions=("Île-de-France", "Paris"),
            city="Paris",
        )
        self.lookups: list[str] = []
        self.closed = False

    def city(self, ip_address: str) -> GeoIpCity:
        self.lookups.append(ip_address)
        if ip_address == "10.0.0.1":
            raise ProviderError(f"IP address not found in GeoIP database: {ip_address}")
        return self.result

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def provider() -> FakeGoogleMapsProvider:
    return FakeGoogleMapsProvider()


@pytest.fixture
def geoip() -> FakeGeoIpDatabase:
    return FakeGeoIpDatabase()


@pytest.fixture
def cache_store() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def make_resolver(provider: FakeGoogleMapsProvider, geoip: FakeGeoIpDatabase):
    """フェイクを注入したリゾルバーを作る関数"""

    def _make(
        cache: Optional[InMemoryCacheStore] = None,
        resolve_priority: Optional[list[ResolvePriority]] = None,
    ) -> GeoResolver:
        config = ResolverConfig(
            google_maps_api_key="test-key",
            geoip_city_path="unused.mmdb",
            cache=cache,
        )
        if resolve_priority is not None:
            config.resolve_priority = resolve_priority
        return GeoResolver(
            config,
            provider=provider,
            geoip=geoip,
            country_data=get_country_data(),
        )

    return _make
