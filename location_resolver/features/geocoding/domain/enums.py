"""ジオコーディング機能のEnum定義"""
from enum import Enum


class ResolvePriority(str, Enum):
    """
    ロケーション解決に使う戦略（ファセット）

    リストの順序が解決の優先順位になる。
    """

    IP_ADDRESS = "ip_address"  # MaxMind GeoIPデータベースで解決
    ID = "id"  # Google Place ID、またはIPアドレスのハッシュで解決
    LOCATION = "location"  # 座標（逆ジオコーディング）で解決
    GOOGLE_PLACE_ID = "google_place_id"  # Google Place IDで解決（解決後も続行）
    ADDRESS = "address"  # 住所文字列で解決
    LOCALITY = "locality"  # 市区町村で解決
    ADMINISTRATIVE_LEVEL1 = "administrative_level1"  # 州・都道府県で解決
    ADMINISTRATIVE_LEVEL2 = "administrative_level2"  # 郡などで解決
    COUNTRY = "country"  # 国で解決

    @classmethod
    def from_name(cls, name: str) -> "ResolvePriority":
        """名前（"locality"、"administrativeLevel1"など）から取得"""
        normalized = name.strip()
        for priority in cls:
            if normalized in (priority.value, _CAMEL_CASE_NAMES[priority]):
                return priority
        raise ValueError(f"Invalid resolve priority: {name}")


class GeoJSONType(str, Enum):
    """GeoJSONのジオメトリ種別"""

    POINT = "Point"


# 旧クライアントが送ってくるcamelCase表記
_CAMEL_CASE_NAMES = {
    ResolvePriority.IP_ADDRESS: "ipAddress",
    ResolvePriority.ID: "id",
    ResolvePriority.LOCATION: "location",
    ResolvePriority.GOOGLE_PLACE_ID: "googlePlaceId",
    ResolvePriority.ADDRESS: "address",
    ResolvePriority.LOCALITY: "locality",
    ResolvePriority.ADMINISTRATIVE_LEVEL1: "administrativeLevel1",
    ResolvePriority.ADMINISTRATIVE_LEVEL2: "administrativeLevel2",
    ResolvePriority.COUNTRY: "country",
}

DEFAULT_RESOLVE_PRIORITIES: tuple[ResolvePriority, ...] = (
    ResolvePriority.IP_ADDRESS,
    ResolvePriority.ID,
    ResolvePriority.LOCATION,
    ResolvePriority.GOOGLE_PLACE_ID,
    ResolvePriority.ADDRESS,
    ResolvePriority.LOCALITY,
    ResolvePriority.ADMINISTRATIVE_LEVEL1,
    ResolvePriority.ADMINISTRATIVE_LEVEL2,
    ResolvePriority.COUNTRY,
)
