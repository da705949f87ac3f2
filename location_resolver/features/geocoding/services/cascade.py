"""
優先順位に従ってファセットをたどるロケーション解決

結果はジェネレーターで遅延的に返す。先頭の1件だけを読む呼び出し元は、
その1件に必要な分しか外部APIを呼ばない。
"""
from collections.abc import Callable, Iterator, Sequence
from typing import Optional

from ..domain.enums import ResolvePriority
from ..domain.models import GeoQuery, LocationInput, LocationQuery, LocationRecord
from ..strategies.lookup_strategies import LookupStrategies
from .canonicalizer import query_from_record
from .location_cache import LocationCache
from ....shared.logging.config import get_logger

logger = get_logger(__name__)

Lookup = Callable[[LocationInput], Iterator[LocationRecord]]

# ファセットとクエリのフィールドの対応
_FIELD_BY_PRIORITY = {
    ResolvePriority.ID: "id",
    ResolvePriority.GOOGLE_PLACE_ID: "id",
    ResolvePriority.ADDRESS: "address",
    ResolvePriority.LOCALITY: "locality",
    ResolvePriority.ADMINISTRATIVE_LEVEL1: "administrative_level1",
    ResolvePriority.ADMINISTRATIVE_LEVEL2: "administrative_level2",
    ResolvePriority.COUNTRY: "country",
}


class ResolutionCascade:
    """
    ファセットの優先順位リストをたどってロケーションを返す

    - キャッシュにヒットしたら、その結果を返して打ち切る
    - キャッシュになければ戦略を呼び、結果を返して次のファセットへ進む
    - IDで解決した場合は常に打ち切る
    - IPで解決した場合は resolve_ip_with_geo が真でなければ打ち切る
    """

    def __init__(
        self,
        strategies: LookupStrategies,
        cache: LocationCache,
        resolve_priority: Sequence[ResolvePriority],
    ) -> None:
        """
        Args:
            strategies: ファセットごとの検索戦略
            cache: ロケーションキャッシュ
            resolve_priority: ファセットの優先順位
        """
        self.strategies = strategies
        self.cache = cache
        self.resolve_priority = list(resolve_priority)

    def resolve(self, location: LocationInput) -> Iterator[LocationRecord]:
        """
        優先順位に従ってロケーションを解決

        Args:
            location: クエリまたはロケーション

        Yields:
            LocationRecord: 候補のロケーション（重複を含む）
        """
        query = query_from_record(location)
        if query is None:
            return

        source: LocationInput = location
        use_cache = query.from_cache is not False

        for priority in self.resolve_priority:
            # 座標もIPもなく、このファセットの値もなければ何もできない
            if (
                query.location is None
                and not query.ip_address
                and not self._facet_value(query, priority)
            ):
                continue

            if priority is ResolvePriority.IP_ADDRESS:
                if not query.ip_address:
                    continue

                ip_record: Optional[LocationRecord] = None
                for record in self.strategies.resolve_by_ip_address(query):
                    ip_record = ip_record or record
                    yield record

                if not query.resolve_ip_with_geo:
                    break

                if ip_record is not None:
                    # IPで得た地理情報で以降のファセットを解決する
                    query = self._escalate_ip_query(query, ip_record)
                    source = query
                continue

            if priority is ResolvePriority.LOCATION:
                if query.location is None:
                    continue
                facet_query = LocationQuery(location=query.location)
                lookup: Lookup = self.strategies.resolve_by_coordinates
            else:
                field_name = _FIELD_BY_PRIORITY.get(priority)
                if field_name is None or not getattr(query, field_name):
                    continue
                # 呼び出し側で書き換えられた値では解決しない
                if getattr(source, field_name, None) != getattr(query, field_name):
                    continue
                facet_query = self._narrow_query(query, priority)
                lookup = self._lookup_for(priority)

            cached = self.cache.get_locations(facet_query) if use_cache else []
            if cached:
                logger.debug(f"Resolved {priority.value} from cache: {len(cached)} locations")
                yield from cached
                break

            logger.debug(f"Resolving by {priority.value}")
            yield from lookup(facet_query)

            if priority is ResolvePriority.ID:
                break

    def _lookup_for(self, priority: ResolvePriority) -> Lookup:
        if priority in (ResolvePriority.ID, ResolvePriority.GOOGLE_PLACE_ID):
            return self.strategies.resolve_by_place_id
        if priority is ResolvePriority.ADDRESS:
            return self.strategies.resolve_by_address
        return self.strategies.resolve_by_address_components

    @staticmethod
    def _facet_value(query: LocationQuery, priority: ResolvePriority) -> object:
        if priority is ResolvePriority.IP_ADDRESS:
            return query.ip_address
        if priority is ResolvePriority.LOCATION:
            return query.location
        field_name = _FIELD_BY_PRIORITY.get(priority)
        return getattr(query, field_name) if field_name else None

    @staticmethod
    def _narrow_query(query: LocationQuery, priority: ResolvePriority) -> LocationQuery:
        """
        キャッシュ確認用の絞り込みクエリを作る

        同名の市区町村を取り違えないよう、より上位の既知の行政区画も含める。
        """
        if priority in (ResolvePriority.ID, ResolvePriority.GOOGLE_PLACE_ID):
            return LocationQuery(id=query.id)

        if priority is ResolvePriority.ADDRESS:
            return LocationQuery(address=query.address, region=query.region)

        facet_query = LocationQuery(country=query.country, region=query.region)

        if priority is ResolvePriority.COUNTRY:
            return facet_query

        facet_query.administrative_level1 = query.administrative_level1
        if priority is ResolvePriority.ADMINISTRATIVE_LEVEL1:
            return facet_query

        facet_query.administrative_level2 = query.administrative_level2
        if priority is ResolvePriority.ADMINISTRATIVE_LEVEL2:
            return facet_query

        facet_query.locality = query.locality
        return facet_query

    @staticmethod
    def _escalate_ip_query(query: LocationQuery, ip_record: LocationRecord) -> LocationQuery:
        """IPの解決結果の地理情報をクエリに重ねる（IDは引き継がない）"""
        escalated = LocationQuery(
            location=(
                GeoQuery(coordinates=ip_record.location.coordinates)
                if ip_record.location
                else query.location
            ),
            address=ip_record.address or query.address,
            locality=ip_record.locality or query.locality,
            administrative_level1=ip_record.administrative_level1 or query.administrative_level1,
            administrative_level2=ip_record.administrative_level2 or query.administrative_level2,
            country=ip_record.country or query.country,
            ip_address=query.ip_address,
            region=query.region if query.region and not ip_record.country else None,
            from_cache=query.from_cache,
            resolve_ip_with_geo=query.resolve_ip_with_geo,
        )
        return query_from_record(escalated)
