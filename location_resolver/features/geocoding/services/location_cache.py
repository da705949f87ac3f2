"""ロケーション結果のキャッシュ"""
from typing import Optional

from ..domain.models import LocationInput, LocationRecord
from .cache_keys import cache_key
from ...storage.cache.cache_store import CacheStore, deserialize_records, serialize_records
from ....shared.exceptions.errors import CacheKeyNotFoundError
from ....shared.logging.config import get_logger

logger = get_logger(__name__)


class LocationCache:
    """
    クエリをキーにしてロケーションのリストを保存するキャッシュ

    ストアが設定されていない場合はキャッシュ自体が無効になる。
    """

    def __init__(self, store: Optional[CacheStore] = None) -> None:
        """
        Args:
            store: キー・バリューストア（Noneの場合はキャッシュ無効）
        """
        self.store = store

    @property
    def enabled(self) -> bool:
        return self.store is not None

    def lookup(self, location: LocationInput) -> Optional[list[LocationRecord]]:
        """
        キャッシュを検索

        Returns:
            Optional[list[LocationRecord]]: キャッシュされたリスト（ミスの場合はNone）
        """
        if self.store is None:
            return None

        key = cache_key(location)
        try:
            payload = self.store.get(key)
        except CacheKeyNotFoundError:
            logger.debug(f"Cache miss: {key}")
            return None

        logger.debug(f"Cache hit: {key}")
        return deserialize_records(payload)

    def get_locations(self, location: LocationInput) -> list[LocationRecord]:
        """キャッシュされたロケーションをすべて返す（ミスの場合は空リスト）"""
        return self.lookup(location) or []

    def count_locations(self, location: LocationInput) -> Optional[int]:
        """キャッシュされたロケーションの件数（ミスの場合はNone）"""
        cached = self.lookup(location)
        return len(cached) if cached is not None else None

    def put_locations(self, location: LocationInput, records: list[LocationRecord]) -> None:
        """ロケーションのリストを保存"""
        if self.store is None:
            return

        key = cache_key(location)
        self.store.put(key, serialize_records(records))
        logger.debug(f"Cached {len(records)} locations: {key}")

    def invalidate(self, location: LocationInput) -> None:
        """クエリに対応するエントリを削除"""
        if self.store is None:
            return

        self.store.delete(cache_key(location))
