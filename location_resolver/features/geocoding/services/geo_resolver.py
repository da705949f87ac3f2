"""ロケーションリゾルバー"""
from collections.abc import Iterator, Sequence
from contextlib import closing
from dataclasses import dataclass, field
from typing import Optional

from ..domain.enums import DEFAULT_RESOLVE_PRIORITIES, ResolvePriority
from ..domain.models import (
    AutocompleteQuery,
    AutocompleteResult,
    LocationInput,
    LocationRecord,
)
from ..providers.country_data import CountryData, get_country_data
from ..providers.geoip_database import GeoIpDatabase
from ..providers.google_maps_provider import GoogleMapsProvider
from ..strategies.lookup_strategies import LookupStrategies
from .canonicalizer import query_from_record, record_from_query
from .cascade import ResolutionCascade
from .enrichment import LocationEnricher
from .location_cache import LocationCache
from ...storage.cache.cache_store import CacheStore
from ....shared.exceptions.errors import ProviderError
from ....shared.logging.config import get_logger

logger = get_logger(__name__)


@dataclass
class ResolverConfig:
    """リゾルバーの構成（生成時に明示的に渡す）"""

    google_maps_api_key: str
    geoip_city_path: str
    resolve_priority: Sequence[ResolvePriority] = field(
        default_factory=lambda: list(DEFAULT_RESOLVE_PRIORITIES)
    )
    # Google Places APIの結果をキャッシュすることは利用規約に抵触する場合がある
    cache: Optional[CacheStore] = None
    provider_timeout: Optional[float] = None


class GeoResolver:
    """
    部分的なロケーション情報から、正規化・付加情報付きのロケーションを解決する

    Google Maps API（Geocoding / Time Zone / Places Autocomplete）と
    MaxMind GeoIP2 Cityデータベースを使用する。
    """

    def __init__(
        self,
        config: ResolverConfig,
        provider: Optional[GoogleMapsProvider] = None,
        geoip: Optional[GeoIpDatabase] = None,
        country_data: Optional[CountryData] = None,
    ) -> None:
        """
        Args:
            config: リゾルバーの構成
            provider: Google Maps APIプロバイダー（省略時は構成から生成）
            geoip: GeoIPデータベース（省略時は構成から生成、初回検索時に開く）
            country_data: 国・言語の参照データ（省略時は共有テーブル）
        """
        self.config = config
        self.provider = provider or GoogleMapsProvider(
            config.google_maps_api_key, timeout=config.provider_timeout
        )
        self.geoip = geoip or GeoIpDatabase(config.geoip_city_path)
        self.country_data = country_data or get_country_data()

        self.cache = LocationCache(config.cache)
        self.strategies = LookupStrategies(self.provider, self.geoip, self.country_data)
        self.enricher = LocationEnricher(self.provider, self.country_data)
        self.cascade = ResolutionCascade(self.strategies, self.cache, config.resolve_priority)

        logger.info(
            f"GeoResolver initialized: cache={self.cache.enabled}, "
            f"priority={[p.value for p in self.resolve_priority]}"
        )

    @property
    def resolve_priority(self) -> list[ResolvePriority]:
        """解決に使うファセットの優先順位（コピー）"""
        return list(self.config.resolve_priority)

    def resolve_many(self, location: LocationInput) -> Iterator[LocationRecord]:
        """
        一致するロケーションをすべて返す

        キャッシュが有効で from_cache が False でなければ、クエリ全体の
        キャッシュを先に確認する。ミスの場合はファセットをたどり、IDで
        重複を除き、付加情報を補ってから返す。最後まで読み切ったときだけ、
        結果のリストをクエリ全体のキーでキャッシュに書き込む。

        Args:
            location: クエリまたはロケーション

        Yields:
            LocationRecord: 解決済みロケーション
        """
        query = query_from_record(location)
        if query is None:
            return

        use_cache = self.cache.enabled and query.from_cache is not False

        if use_cache:
            cached = self.cache.lookup(query)
            if cached is not None:
                yield from cached
                return

        results: list[LocationRecord] = []
        seen_ids: set[Optional[str]] = set()

        for record in self.cascade.resolve(query):
            if record.id in seen_ids:
                continue
            seen_ids.add(record.id)

            record = record_from_query(self.enricher.enrich(record))
            results.append(record)
            yield record

        if use_cache:
            self.cache.put_locations(query, results)

    def resolve_one(self, location: LocationInput) -> Optional[LocationRecord]:
        """
        最初に一致したロケーションを返す

        2件目以降のための外部API呼び出しは行わない。
        """
        with closing(self.resolve_many(location)) as results:
            return next(results, None)

    def count_locations(self, location: LocationInput) -> int:
        """
        一致するロケーションの件数

        クエリ全体のキャッシュにヒットすればその件数を返す。ミスの場合は
        resolve_many を最後まで読み切って数える（結果はキャッシュされる）。
        """
        query = query_from_record(location)
        if query is None:
            return 0

        if self.cache.enabled and query.from_cache is not False:
            cached = self.cache.count_locations(query)
            if cached is not None:
                return cached

        return sum(1 for _ in self.resolve_many(query))

    def autocomplete(self, query: AutocompleteQuery) -> list[AutocompleteResult]:
        """
        Places Autocomplete APIで候補を返す（キャッシュなし）

        Args:
            query: 検索条件（inputが空の場合はリクエストしない）

        Returns:
            list[AutocompleteResult]: 候補のリスト

        Raises:
            ProviderError: APIリクエストに失敗した場合
        """
        if not query.input:
            return []

        location = None
        if query.location is not None:
            longitude, latitude = query.location
            location = f"{latitude},{longitude}"

        predictions = self.provider.autocomplete(
            query.input,
            session_token=query.session_token,
            location=location,
            radius=query.radius,
            language=query.language,
            types=query.types,
            components=query.components,
        )

        try:
            return [
                AutocompleteResult(
                    place_id=prediction["place_id"], description=prediction["description"]
                )
                for prediction in predictions
            ]
        except (KeyError, TypeError) as e:
            raise ProviderError(f"Unexpected autocomplete response: {e}") from e

    def get_timezone(
        self, location: LocationInput, timestamp: Optional[int] = None
    ) -> Optional[LocationRecord]:
        """座標に対応するタイムゾーンを付与したロケーションを返す"""
        return self.enricher.get_timezone(location, timestamp)

    def get_country_info(self, location: LocationInput) -> LocationRecord:
        """国の言語・国番号を付与したロケーションを返す"""
        return self.enricher.get_country_info(location)

    def invalidate(self, location: LocationInput) -> None:
        """クエリ全体のキャッシュを削除"""
        self.cache.invalidate(location)

    def close(self) -> None:
        """GeoIPデータベースを閉じる"""
        self.geoip.close()

    def __enter__(self) -> "GeoResolver":
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()
