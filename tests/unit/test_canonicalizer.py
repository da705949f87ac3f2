"""クエリ・ロケーションの正規化のテスト"""
import pytest

from location_resolver.features.geocoding.domain.models import (
    GeoPoint,
    GeoQuery,
    LocationQuery,
    LocationRecord,
    label_location,
)
from location_resolver.features.geocoding.services import canonicalizer
from location_resolver.features.geocoding.services.canonicalizer import (
    query_from_record,
    record_from_query,
)
from location_resolver.shared.exceptions.errors import LocationQueryError


def test_none_passes_through() -> None:
    """Noneはそのまま返る"""
    assert query_from_record(None) is None
    assert record_from_query(None) is None


def test_query_derives_region_from_country() -> None:
    """regionが指定されていなければ国のccTLDを使う"""
    assert query_from_record(LocationQuery(country="FR")).region == "fr"
    assert query_from_record(LocationQuery(country="GB")).region == "uk"


def test_explicit_region_is_kept_and_lowercased() -> None:
    """明示されたregionは小文字にして保持"""
    query = query_from_record(LocationQuery(country="FR", region="BE"))
    assert query.region == "be"


def test_no_country_has_no_region() -> None:
    """国がなければregionを作らない"""
    assert query_from_record(LocationQuery(locality="Paris")).region is None


def test_query_defaults_distances_to_zero() -> None:
    """検索半径がなければ0"""
    record = LocationRecord(location=GeoPoint(coordinates=(2.35, 48.85)))
    query = query_from_record(record)

    assert query.location == GeoQuery(coordinates=(2.35, 48.85))
    assert query.location.min_distance == 0
    assert query.location.max_distance == 0


def test_query_from_record_is_idempotent() -> None:
    """正規化を2回かけても結果は変わらない"""
    original = LocationQuery(
        location=GeoQuery(coordinates=(2, 48), max_distance=500),
        locality="Paris",
        country="FR",
        from_cache=False,
    )
    once = query_from_record(original)
    twice = query_from_record(once)

    assert once == twice
    assert once.location.coordinates == (2.0, 48.0)


def test_query_from_record_does_not_mutate_input() -> None:
    """入力を書き換えない"""
    original = LocationQuery(country="FR")
    query_from_record(original)
    assert original.region is None


def test_record_drops_query_only_fields() -> None:
    """検索半径やIPアドレスなどクエリ専用のフィールドは捨てる"""
    query = LocationQuery(
        id="abc",
        location=GeoQuery(coordinates=(2.35, 48.85), max_distance=1000),
        ip_address="81.2.69.142",
        from_cache=True,
        locality="Paris",
    )
    record = record_from_query(query)

    assert record.id == "abc"
    assert record.location == GeoPoint(coordinates=(2.35, 48.85))
    assert "ip_address" not in record.to_dict()
    assert record.timezone is None


def test_record_keeps_enrichment_fields() -> None:
    """ロケーションからロケーションへの変換では付加情報を保持"""
    record = LocationRecord(
        country="FR",
        country_name="France",
        timezone="Europe/Paris",
        languages=["French"],
        phone_code="+33",
    )
    copied = record_from_query(record)

    assert copied == LocationRecord(
        country="FR",
        country_name="France",
        timezone="Europe/Paris",
        languages=["French"],
        phone_code="+33",
        safe_label="France",
    )
    assert copied is not record


def test_record_computes_safe_label() -> None:
    """safe_labelは市区町村・州・国名から作る"""
    record = record_from_query(
        LocationRecord(
            address="1 River Avenue, Bronx, New York, NY, USA",
            locality="Bronx",
            administrative_level1="New York",
            country_name="United States",
        )
    )
    assert record.safe_label == "Bronx, New York, United States"


def test_label_falls_back_to_address() -> None:
    """ラベルの材料がなければ住所を使う"""
    assert label_location(LocationRecord(address="Somewhere")) == "Somewhere"
    assert label_location(LocationRecord()) is None
    assert record_from_query(LocationRecord()).safe_label == ""


def test_label_failure_is_wrapped(monkeypatch: pytest.MonkeyPatch) -> None:
    """ラベル計算の失敗はLocationQueryErrorになる"""

    def broken_label(location: LocationRecord) -> str:
        raise RuntimeError("boom")

    monkeypatch.setattr(canonicalizer, "label_location_safe", broken_label)

    with pytest.raises(LocationQueryError) as exc_info:
        record_from_query(LocationQuery(locality="Paris", country="FR"))

    assert exc_info.value.query.region == "fr"
    assert isinstance(exc_info.value.inner_error, RuntimeError)


def test_round_trip_preserves_shared_fields() -> None:
    """ロケーション → クエリ → ロケーションで共通のフィールドは失われない"""
    record = LocationRecord(
        id="ChIJD7fiBh9u5kcRYJSMaMOCCwQ",
        location=GeoPoint(coordinates=(2.3522219, 48.856614)),
        address="Paris, France",
        locality="Paris",
        administrative_level1="Île-de-France",
        administrative_level2="Département de Paris",
        country="FR",
        timezone="Europe/Paris",
    )
    round_tripped = record_from_query(query_from_record(record_from_query(record)))

    assert round_tripped.id == record.id
    assert round_tripped.location.coordinates == (2.3522219, 48.856614)
    assert round_tripped.address == record.address
    assert round_tripped.locality == record.locality
    assert round_tripped.administrative_level1 == record.administrative_level1
    assert round_tripped.administrative_level2 == record.administrative_level2
    assert round_tripped.country == record.country
    # タイムゾーンはクエリの形にはないので落ちる
    assert round_tripped.timezone is None


def test_record_from_query_is_idempotent() -> None:
    query = LocationQuery(
        location=GeoQuery(coordinates=(139.69, 35.68)), locality="Tokyo", country="JP"
    )
    once = record_from_query(query)
    assert record_from_query(once) == once
