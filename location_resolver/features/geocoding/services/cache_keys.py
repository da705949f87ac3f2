"""キャッシュキーの生成"""
import base64
import hashlib
import json

from ..domain.models import LocationInput
from .canonicalizer import query_from_record


def cache_key(location: LocationInput) -> str:
    """
    正規化済みクエリのハッシュからキャッシュキーを生成

    フィールドの順序に依存せず、同じ内容のクエリからは常に同じキーを返す。
    キャッシュ指定（from_cache）は結果に影響しないためキーに含めない。
    キーはURLセーフなBase64（Firestoreのドキュメントにもそのまま使える）。

    Args:
        location: クエリ、ロケーション、またはNone

    Returns:
        str: キャッシュキー
    """
    query = query_from_record(location)
    canonical = query.to_dict() if query else {}
    canonical.pop("from_cache", None)

    payload = json.dumps(canonical, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    digest = hashlib.sha256(payload.encode("utf-8")).digest()

    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")
