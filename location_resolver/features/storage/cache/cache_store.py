"""キャッシュストア（キー・バリュー）"""
import json
from typing import Protocol

from ...geocoding.domain.models import LocationRecord
from ....shared.exceptions.errors import CacheKeyNotFoundError, StorageError
from ....shared.logging.config import get_logger
from ..clients.firestore_client import FirestoreClient

logger = get_logger(__name__)


class CacheStore(Protocol):
    """
    リゾルバーが使う最小限のキー・バリュー契約

    get() はキーがない場合に CacheKeyNotFoundError を送出する。
    それ以外のエラーはリゾルバーでは握りつぶさない。
    """

    def get(self, key: str) -> bytes: ...

    def put(self, key: str, value: bytes) -> None: ...

    def delete(self, key: str) -> None: ...


def serialize_records(records: list[LocationRecord]) -> bytes:
    """ロケーションのリストをキャッシュ用のバイト列に変換"""
    return json.dumps(
        [record.to_dict() for record in records], ensure_ascii=False
    ).encode("utf-8")


def deserialize_records(payload: bytes) -> list[LocationRecord]:
    """キャッシュのバイト列からロケーションのリストを復元"""
    try:
        return [LocationRecord.from_dict(item) for item in json.loads(payload)]
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        raise StorageError(f"Failed to deserialize cached locations: {e}") from e


class InMemoryCacheStore:
    """
    メモリ内キャッシュストア

    プロセス内でのみ有効。テストやローカル開発で使用する。
    """

    def __init__(self) -> None:
        self.cache: dict[str, bytes] = {}
        self.hit_count = 0
        self.miss_count = 0

        logger.info("InMemoryCacheStore initialized")

    def get(self, key: str) -> bytes:
        if key not in self.cache:
            self.miss_count += 1
            raise CacheKeyNotFoundError(key)

        self.hit_count += 1
        return self.cache[key]

    def put(self, key: str, value: bytes) -> None:
        self.cache[key] = value

    def delete(self, key: str) -> None:
        self.cache.pop(key, None)

    def clear(self) -> None:
        """キャッシュをクリア"""
        cache_size = len(self.cache)
        self.cache.clear()
        self.hit_count = 0
        self.miss_count = 0
        logger.info(f"Cache cleared: {cache_size} entries removed")

    def get_cache_stats(self) -> dict[str, float]:
        """
        キャッシュ統計を取得

        Returns:
            dict[str, float]: キャッシュ統計（サイズ、ヒット数、ミス数、ヒット率）
        """
        total_requests = self.hit_count + self.miss_count
        hit_rate = (self.hit_count / total_requests * 100) if total_requests > 0 else 0.0

        return {
            "cache_size": len(self.cache),
            "hit_count": self.hit_count,
            "miss_count": self.miss_count,
            "total_requests": total_requests,
            "hit_rate_percent": round(hit_rate, 2),
        }


class FirestoreCacheStore:
    """
    Firestoreをバックエンドにしたキャッシュストア

    キーごとに1ドキュメントを作り、値はbytesフィールドに保存する。
    Google Places APIの結果をキャッシュすることは利用規約に抵触する場合がある。
    """

    COLLECTION_NAME = "location_cache"
    VALUE_FIELD = "value"

    def __init__(
        self, firestore_client: FirestoreClient, collection_name: str = COLLECTION_NAME
    ) -> None:
        """
        Args:
            firestore_client: Firestoreクライアント
            collection_name: キャッシュ用コレクション名
        """
        self.client = firestore_client
        self.collection_name = collection_name
        logger.info(f"FirestoreCacheStore initialized: collection={collection_name}")

    def get(self, key: str) -> bytes:
        document = self.client.get_document(self.collection_name, key)

        if document is None or self.VALUE_FIELD not in document:
            raise CacheKeyNotFoundError(key)

        return bytes(document[self.VALUE_FIELD])

    def put(self, key: str, value: bytes) -> None:
        self.client.set_document(self.collection_name, key, {self.VALUE_FIELD: value})
        logger.debug(f"Cached {len(value)} bytes under {key}")

    def delete(self, key: str) -> None:
        self.client.delete_document(self.collection_name, key)
