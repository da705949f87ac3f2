"""カスタム例外定義"""
from typing import Any, Optional, Union


class LocationResolverError(Exception):
    """ロケーションリゾルバー基底例外"""

    pass


def _message_from(cause: Union[str, BaseException, None], default: str) -> str:
    """原因（文字列または例外）からエラーメッセージを生成"""
    if cause is None:
        return default
    if isinstance(cause, BaseException):
        return str(cause) or cause.__class__.__name__
    return cause


class LocationQueryError(LocationResolverError):
    """
    ロケーションクエリの解決に失敗した場合のエラー

    上流APIの失敗（ステータスがOK以外、通信エラー）はすべてこの例外で
    呼び出し元へ伝搬する。内部でのリトライは行わない。

    Attributes:
        query: 正規化済みのクエリ
        inner_error: 原因となった例外（あれば）
    """

    code = 7001
    http_status_code = 500
    default_message = "An unknown error occurred with this location query"

    def __init__(
        self, query: Any, cause: Union[str, BaseException, None] = None
    ) -> None:
        super().__init__(_message_from(cause, self.default_message))
        self.query = query
        self.inner_error: Optional[BaseException] = (
            cause if isinstance(cause, BaseException) else None
        )


class InvalidLocationQueryError(LocationQueryError):
    """クエリが不正"""

    code = 7002
    http_status_code = 400
    default_message = "Location query is invalid"


class CouldNotResolveLocationError(LocationQueryError):
    """プロバイダーの結果から座標を取得できなかった"""

    code = 7003
    http_status_code = 404
    default_message = "Could not resolve the query provided to a location"


class ProviderError(LocationResolverError):
    """外部プロバイダー（Google Maps API、GeoIPデータベース）のエラー"""

    def __init__(self, message: str, status: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status


class StorageError(LocationResolverError):
    """ストレージ関連のエラー"""

    pass


class CacheKeyNotFoundError(StorageError):
    """キャッシュにキーが存在しない（リゾルバーが握りつぶす唯一のエラー）"""

    def __init__(self, key: str) -> None:
        super().__init__(f"Cache key not found: {key}")
        self.key = key


class ConfigurationError(LocationResolverError):
    """設定エラー"""

    pass
