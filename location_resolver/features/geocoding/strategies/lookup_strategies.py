"""
ファセットごとのロケーション検索戦略

どの戦略も入力を正規化し、外部リクエストを1回だけ発行して、
結果を LocationRecord の遅延シーケンスとして返す。
"""
from collections.abc import Iterable, Iterator
from typing import Any, Optional

from ..domain.models import LocationInput, LocationQuery, LocationRecord, label_location
from ..providers.country_data import CountryData
from ..providers.geoip_database import GeoIpDatabase
from ..providers.google_maps_provider import GoogleMapsProvider
from ..services.cache_keys import cache_key
from ..services.canonicalizer import geo_point, query_from_record, record_from_query
from .address_components import assemble_address_components, build_component_filter
from ....shared.exceptions.errors import CouldNotResolveLocationError, LocationQueryError
from ....shared.logging.config import get_logger

logger = get_logger(__name__)

_ADMIN_LEVEL_PREFIX = "administrative_area_level_"


def normalize_provider_results(
    query: LocationQuery, raw_results: Iterable[dict[str, Any]]
) -> Iterator[LocationRecord]:
    """
    Geocoding APIの結果を、元のクエリに重ねたロケーションに変換

    - 座標がない結果は CouldNotResolveLocationError
    - クエリに座標があればそれを優先し、なければ結果の座標を使う
    - formatted_address と place_id はそのまま採用
    - locality は sublocality より優先（New York City > Brooklyn）
    - administrative_area_level_N のうち N が小さい2つを level1 / level2 に採用
    - country は最後の country コンポーネントの short_name

    Args:
        query: 正規化済みクエリ
        raw_results: APIの生の結果リスト

    Yields:
        LocationRecord: 解決済みロケーション
    """
    for raw_result in raw_results:
        coordinates = (raw_result.get("geometry") or {}).get("location") or {}
        latitude = coordinates.get("lat")
        longitude = coordinates.get("lng")

        if latitude is None or longitude is None:
            raise CouldNotResolveLocationError(query)

        record = record_from_query(query)
        if record.location is None:
            record.location = geo_point((longitude, latitude))

        if raw_result.get("formatted_address"):
            record.address = raw_result["formatted_address"]

        if raw_result.get("place_id"):
            record.id = raw_result["place_id"]

        locality: Optional[str] = None
        sublocality: Optional[str] = None
        admin_levels: dict[int, str] = {}
        country: Optional[str] = None

        for component in raw_result.get("address_components") or []:
            types = component.get("types") or []

            if "locality" in types:
                locality = component.get("long_name")
                continue
            if "sublocality" in types:
                sublocality = sublocality or component.get("long_name")
                continue

            admin_type = next((t for t in types if t.startswith(_ADMIN_LEVEL_PREFIX)), None)
            if admin_type:
                level = admin_type[len(_ADMIN_LEVEL_PREFIX):]
                if level.isdigit():
                    admin_levels[int(level)] = component.get("long_name")
                continue

            if "country" in types:
                country = component.get("short_name")

        # sublocality は locality が全くない場合だけ使う
        record.locality = locality or record.locality or sublocality

        lowest_levels = sorted(admin_levels)[:2]
        record.administrative_level1 = (
            admin_levels[lowest_levels[0]] if len(lowest_levels) > 0 else None
        )
        record.administrative_level2 = (
            admin_levels[lowest_levels[1]] if len(lowest_levels) > 1 else None
        )

        if country:
            record.country = country

        yield record_from_query(record)


class LookupStrategies:
    """ファセットごとの検索戦略（Google Maps API / GeoIPデータベース）"""

    def __init__(
        self,
        provider: GoogleMapsProvider,
        geoip: GeoIpDatabase,
        country_data: CountryData,
    ) -> None:
        """
        Args:
            provider: Google Maps APIプロバイダー
            geoip: GeoIPデータベース
            country_data: 国・言語の参照データ
        """
        self.provider = provider
        self.geoip = geoip
        self.country_data = country_data

    def resolve_by_coordinates(self, location: LocationInput) -> Iterator[LocationRecord]:
        """座標から逆ジオコーディングで解決"""
        query = query_from_record(location)
        try:
            if query.location is None:
                raise CouldNotResolveLocationError(query, "Query has no coordinates")

            raw_results = self.provider.reverse_geocode(
                query.location.latitude, query.location.longitude
            )
            yield from normalize_provider_results(query, raw_results)
        except LocationQueryError:
            raise
        except Exception as e:
            raise LocationQueryError(query, e) from e

    def resolve_by_address(self, location: LocationInput) -> Iterator[LocationRecord]:
        """住所文字列（と地域バイアス）で解決"""
        query = query_from_record(location)
        try:
            raw_results = self.provider.geocode(address=query.address, region=query.region)
            yield from normalize_provider_results(query, raw_results)
        except LocationQueryError:
            raise
        except Exception as e:
            raise LocationQueryError(query, e) from e

    def resolve_by_place_id(self, location: LocationInput) -> Iterator[LocationRecord]:
        """
        Google Place IDで解決

        IDがなく地域バイアスだけがある場合は、地域だけでリクエストする。
        """
        query = query_from_record(location)
        try:
            if query.id:
                raw_results = self.provider.geocode(place_id=query.id)
            else:
                raw_results = self.provider.geocode(region=query.region)
            yield from normalize_provider_results(query, raw_results)
        except LocationQueryError:
            raise
        except Exception as e:
            raise LocationQueryError(query, e) from e

    def resolve_by_address_components(
        self, location: LocationInput
    ) -> Iterator[LocationRecord]:
        """市区町村・行政区画・国のコンポーネントフィルタで解決"""
        query = query_from_record(location)
        try:
            components = build_component_filter(assemble_address_components(query))
            raw_results = self.provider.geocode(components=components, region=query.region)
            yield from normalize_provider_results(query, raw_results)
        except LocationQueryError:
            raise
        except Exception as e:
            raise LocationQueryError(query, e) from e

    def resolve_by_ip_address(self, location: LocationInput) -> Iterator[LocationRecord]:
        """
        GeoIPデータベースでIPアドレスから解決

        プロバイダーにIDがないため、正規化済みクエリのハッシュをIDにする。
        国名・言語は静的な参照データから補う。
        """
        query = query_from_record(location)
        try:
            if not query.ip_address:
                raise CouldNotResolveLocationError(query, "Query has no IP address")

            city = self.geoip.city(query.ip_address)
            record = record_from_query(query)

            if city.longitude is not None and city.latitude is not None:
                record.location = geo_point((city.longitude, city.latitude))
            if city.timezone:
                record.timezone = city.timezone
            if city.country_code:
                record.country = city.country_code

            country_info = self.country_data.get(city.country_code)
            if country_info:
                record.country_name = country_info.name
                if country_info.languages:
                    record.languages = list(country_info.languages)

            if len(city.subdivisions) > 0:
                record.administrative_level1 = city.subdivisions[0]
            if len(city.subdivisions) > 1:
                record.administrative_level2 = city.subdivisions[1]
            if city.city:
                record.locality = city.city

            address = label_location(
                LocationRecord(
                    locality=city.city,
                    administrative_level1=record.administrative_level1,
                    administrative_level2=record.administrative_level2,
                    country_name=record.country_name,
                )
            )
            if address:
                record.address = address

            record.id = cache_key(query)
            logger.debug(f"Resolved IP address {query.ip_address} -> {record.address}")

            yield record_from_query(record)
        except LocationQueryError:
            raise
        except Exception as e:
            raise LocationQueryError(query, e) from e
