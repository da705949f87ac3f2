"""
クエリ形式とロケーション形式の相互変換

他のすべてのコンポーネントはここで正規化した値を扱う。
どちらの関数も入力を変更しない。
"""
from typing import Optional, overload

from ..domain.models import (
    Coordinates,
    GeoPoint,
    GeoQuery,
    LocationInput,
    LocationQuery,
    LocationRecord,
    label_location_safe,
)
from ..providers.country_data import get_country_data
from ....shared.exceptions.errors import LocationQueryError


def _normalize_coordinates(coordinates: Coordinates) -> Coordinates:
    longitude, latitude = coordinates
    return (float(longitude), float(latitude))


def geo_point(coordinates: Coordinates) -> GeoPoint:
    """(経度, 緯度) からGeoJSON Pointを生成"""
    return GeoPoint(coordinates=_normalize_coordinates(coordinates))


def _derive_region(country: Optional[str]) -> Optional[str]:
    return get_country_data().internet_tld(country)


@overload
def query_from_record(location: None) -> None: ...


@overload
def query_from_record(location: LocationQuery | LocationRecord) -> LocationQuery: ...


def query_from_record(location: LocationInput) -> Optional[LocationQuery]:
    """
    クエリまたはロケーションから正規化済みのクエリを生成

    - 行政区画・国・市区町村・住所・IPアドレスはそのままコピー
    - 座標は検索半径ごとコピー（半径がなければ0）
    - regionは明示されていなければ国のccTLDから導出
    - 値のないフィールドは作らない

    Args:
        location: クエリ、ロケーション、またはNone

    Returns:
        Optional[LocationQuery]: 正規化済みクエリ（入力がNoneの場合のみNone）
    """
    if location is None:
        return None

    geo_query: Optional[GeoQuery] = None
    if isinstance(location, LocationQuery):
        if location.location is not None:
            geo_query = GeoQuery(
                coordinates=_normalize_coordinates(location.location.coordinates),
                min_distance=float(location.location.min_distance or 0),
                max_distance=float(location.location.max_distance or 0),
            )
        ip_address = location.ip_address
        region = location.region
        from_cache = location.from_cache
        resolve_ip_with_geo = location.resolve_ip_with_geo
    else:
        if location.location is not None:
            geo_query = GeoQuery(
                coordinates=_normalize_coordinates(location.location.coordinates),
                min_distance=0.0,
                max_distance=0.0,
            )
        ip_address = None
        region = None
        from_cache = None
        resolve_ip_with_geo = None

    if region is None:
        region = _derive_region(location.country)

    return LocationQuery(
        id=location.id,
        location=geo_query,
        address=location.address,
        locality=location.locality,
        administrative_level1=location.administrative_level1,
        administrative_level2=location.administrative_level2,
        country=location.country,
        ip_address=ip_address,
        region=region.lower() if region else None,
        from_cache=from_cache,
        resolve_ip_with_geo=resolve_ip_with_geo,
    )


@overload
def record_from_query(location: None) -> None: ...


@overload
def record_from_query(location: LocationQuery | LocationRecord) -> LocationRecord: ...


def record_from_query(location: LocationInput) -> Optional[LocationRecord]:
    """
    クエリまたはロケーションから解決済みロケーションの形を生成

    検索半径・キャッシュ指定・IPアドレスなどクエリ専用のフィールドは捨て、
    safe_labelを計算して付与する。欠けているフィールドはNoneのまま。

    Args:
        location: クエリ、ロケーション、またはNone

    Returns:
        Optional[LocationRecord]: ロケーション（入力がNoneの場合のみNone）

    Raises:
        LocationQueryError: ラベルの計算に失敗した場合
    """
    if location is None:
        return None

    point = geo_point(location.location.coordinates) if location.location else None

    if isinstance(location, LocationRecord):
        record = LocationRecord(
            id=location.id,
            location=point,
            address=location.address,
            locality=location.locality,
            administrative_level1=location.administrative_level1,
            administrative_level2=location.administrative_level2,
            country=location.country,
            country_name=location.country_name,
            timezone=location.timezone,
            languages=list(location.languages) if location.languages is not None else None,
            phone_code=location.phone_code,
        )
    else:
        record = LocationRecord(
            id=location.id,
            location=point,
            address=location.address,
            locality=location.locality,
            administrative_level1=location.administrative_level1,
            administrative_level2=location.administrative_level2,
            country=location.country,
        )

    try:
        record.safe_label = label_location_safe(record)
    except Exception as e:
        raise LocationQueryError(query_from_record(location), e) from e

    return record
