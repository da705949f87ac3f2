"""キャッシュキー生成のテスト"""
from location_resolver.features.geocoding.domain.models import (
    GeoPoint,
    GeoQuery,
    LocationQuery,
    LocationRecord,
)
from location_resolver.features.geocoding.services.cache_keys import cache_key


def test_same_query_gives_same_key() -> None:
    key = cache_key(LocationQuery(locality="Paris", country="FR"))
    assert key == cache_key(LocationQuery(country="FR", locality="Paris"))


def test_key_ignores_from_cache() -> None:
    """キャッシュ指定はキーに影響しない"""
    assert cache_key(LocationQuery(country="FR", from_cache=False)) == cache_key(
        LocationQuery(country="FR")
    )


def test_key_uses_normalized_query() -> None:
    """導出されたregionや座標の型の違いは同じキーになる"""
    assert cache_key(LocationQuery(country="FR")) == cache_key(
        LocationQuery(country="FR", region="FR")
    )
    assert cache_key(LocationQuery(location=GeoQuery(coordinates=(2, 48)))) == cache_key(
        LocationQuery(location=GeoQuery(coordinates=(2.0, 48.0)))
    )


def test_record_and_equivalent_query_share_key() -> None:
    record = LocationRecord(location=GeoPoint(coordinates=(2.35, 48.85)), country="FR")
    query = LocationQuery(location=GeoQuery(coordinates=(2.35, 48.85)), country="FR")
    assert cache_key(record) == cache_key(query)


def test_different_queries_give_different_keys() -> None:
    assert cache_key(LocationQuery(locality="Paris")) != cache_key(
        LocationQuery(locality="Lyon")
    )


def test_key_is_url_safe() -> None:
    """Firestoreのドキュメント IDにそのまま使える"""
    key = cache_key(LocationQuery(address="1 River Avenue, Bronx / New York"))
    assert "/" not in key
    assert "+" not in key
    assert "=" not in key
    assert len(key) == 43


def test_integer_and_float_distances_share_key() -> None:
    """検索半径が100でも100.0でも同じキーになる"""
    as_int = LocationQuery(
        location=GeoQuery(coordinates=(2.35, 48.85), min_distance=10, max_distance=100)
    )
    as_float = LocationQuery(
        location=GeoQuery(coordinates=(2.35, 48.85), min_distance=10.0, max_distance=100.0)
    )
    assert cache_key(as_int) == cache_key(as_float)


def test_json_rpc_and_rest_forms_share_key() -> None:
    """JSON由来の整数の半径とクエリ文字列由来の浮動小数の半径"""
    from_json = LocationQuery.from_dict(
        {"location": {"coordinates": [2, 48], "max_distance": 500}, "country": "FR"}
    )
    from_params = LocationQuery(
        location=GeoQuery(coordinates=(2.0, 48.0), min_distance=0.0, max_distance=500.0),
        country="FR",
    )
    assert cache_key(from_json) == cache_key(from_params)
