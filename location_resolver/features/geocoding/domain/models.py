"""ジオコーディング機能のドメインモデル"""
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .enums import GeoJSONType

# (経度, 緯度) の順。システム全体でこの順序を入れ替えてはいけない
Coordinates = tuple[float, float]


def _coordinates_from(value: Any) -> Coordinates:
    """リスト・タプルから (経度, 緯度) を生成"""
    longitude, latitude = value
    return (float(longitude), float(latitude))


@dataclass(frozen=True)
class GeoPoint:
    """GeoJSON Point（解決済みロケーションの正確な座標）"""

    coordinates: Coordinates
    type: GeoJSONType = GeoJSONType.POINT

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "coordinates": list(self.coordinates)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GeoPoint":
        return cls(coordinates=_coordinates_from(data["coordinates"]))


@dataclass(frozen=True)
class GeoQuery:
    """座標を中心とした検索範囲（距離はメートル）"""

    coordinates: Coordinates
    min_distance: float = 0.0
    max_distance: float = 0.0

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]

    def to_dict(self) -> dict[str, Any]:
        return {
            "coordinates": list(self.coordinates),
            "min_distance": self.min_distance,
            "max_distance": self.max_distance,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GeoQuery":
        return cls(
            coordinates=_coordinates_from(data["coordinates"]),
            min_distance=float(data.get("min_distance") or 0),
            max_distance=float(data.get("max_distance") or 0),
        )


@dataclass
class LocationQuery:
    """
    ロケーション検索条件

    すべてのフィールドは任意。フィールドが存在すること自体が
    「このファセットで解決を試みる」という意味を持つ。
    """

    id: Optional[str] = None  # Google Place ID、またはIPアドレスのハッシュ
    location: Optional[GeoQuery] = None  # 座標と検索半径
    address: Optional[str] = None  # 住所（例: "1 River Avenue, Bronx, New York"）
    locality: Optional[str] = None  # 市区町村
    administrative_level1: Optional[str] = None  # 州・都道府県
    administrative_level2: Optional[str] = None  # 郡など
    country: Optional[str] = None  # ISO 3166-1 alpha-2 国コード
    ip_address: Optional[str] = None  # GeoIPで解決するIPアドレス
    region: Optional[str] = None  # 地域バイアス（ccTLD）
    from_cache: Optional[bool] = None  # Falseの場合はキャッシュを使わない
    resolve_ip_with_geo: Optional[bool] = None  # IPの結果をさらにGoogleで解決するか

    def to_dict(self) -> dict[str, Any]:
        """値のあるフィールドだけを辞書に変換"""
        data: dict[str, Any] = {
            "id": self.id,
            "location": self.location.to_dict() if self.location else None,
            "address": self.address,
            "locality": self.locality,
            "administrative_level1": self.administrative_level1,
            "administrative_level2": self.administrative_level2,
            "country": self.country,
            "ip_address": self.ip_address,
            "region": self.region,
            "from_cache": self.from_cache,
            "resolve_ip_with_geo": self.resolve_ip_with_geo,
        }
        return {key: value for key, value in data.items() if value is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LocationQuery":
        location = data.get("location")
        return cls(
            id=data.get("id"),
            location=GeoQuery.from_dict(location) if location else None,
            address=data.get("address"),
            locality=data.get("locality"),
            administrative_level1=data.get("administrative_level1"),
            administrative_level2=data.get("administrative_level2"),
            country=data.get("country"),
            ip_address=data.get("ip_address"),
            region=data.get("region"),
            from_cache=data.get("from_cache"),
            resolve_ip_with_geo=data.get("resolve_ip_with_geo"),
        )


@dataclass
class LocationRecord:
    """解決済みロケーション"""

    id: Optional[str] = None  # Google Place ID、またはIPアドレスのハッシュ
    location: Optional[GeoPoint] = None  # 正確な座標
    address: Optional[str] = None  # 人が読める住所
    locality: Optional[str] = None  # 市区町村（sublocalityより優先）
    administrative_level1: Optional[str] = None  # 州・都道府県
    administrative_level2: Optional[str] = None  # 郡など
    country: Optional[str] = None  # ISO 3166-1 alpha-2 国コード
    country_name: Optional[str] = None  # 国名（英語）
    timezone: Optional[str] = None  # TZ Databaseのタイムゾーン名
    languages: Optional[list[str]] = None  # 主に話されている言語（英語名）
    phone_code: Optional[str] = None  # 国際電話の国番号（例: "+86"）
    safe_label: Optional[str] = None  # 派生ラベル（保存しない）

    def to_dict(self) -> dict[str, Any]:
        """値のあるフィールドだけを辞書に変換"""
        data: dict[str, Any] = {
            "id": self.id,
            "location": self.location.to_dict() if self.location else None,
            "address": self.address,
            "locality": self.locality,
            "administrative_level1": self.administrative_level1,
            "administrative_level2": self.administrative_level2,
            "country": self.country,
            "country_name": self.country_name,
            "timezone": self.timezone,
            "languages": list(self.languages) if self.languages is not None else None,
            "phone_code": self.phone_code,
            "safe_label": self.safe_label,
        }
        return {key: value for key, value in data.items() if value is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LocationRecord":
        location = data.get("location")
        return cls(
            id=data.get("id"),
            location=GeoPoint.from_dict(location) if location else None,
            address=data.get("address"),
            locality=data.get("locality"),
            administrative_level1=data.get("administrative_level1"),
            administrative_level2=data.get("administrative_level2"),
            country=data.get("country"),
            country_name=data.get("country_name"),
            timezone=data.get("timezone"),
            languages=data.get("languages"),
            phone_code=data.get("phone_code"),
            safe_label=data.get("safe_label"),
        )


# 公開APIはクエリ・解決済みロケーション・Noneのいずれも受け付ける
LocationInput = Union[LocationQuery, LocationRecord, None]


@dataclass
class AutocompleteQuery:
    """Google Places Autocomplete APIへの検索条件"""

    input: Optional[str] = None  # 検索キーワード
    session_token: Optional[str] = None
    location: Optional[Coordinates] = None  # 検索の中心（経度, 緯度）
    radius: Optional[int] = None  # 検索半径（メートル）
    language: Optional[str] = None
    types: Optional[str] = None
    components: dict[str, list[str]] = field(default_factory=dict)  # 例: {"country": ["us"]}


@dataclass
class AutocompleteResult:
    """Google Places Autocomplete APIの候補"""

    place_id: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"place_id": self.place_id, "description": self.description}


def label_location(location: Union[LocationRecord, LocationQuery, None]) -> Optional[str]:
    """
    住所より簡潔なラベルを返す

    市区町村（なければ郡など）、州・都道府県、国名の順に並べる。
    "1 River Avenue, Bronx, New York, New York, USA" ではなく
    "Bronx, New York, USA" のような表記になる。

    Args:
        location: ラベルを作るロケーション

    Returns:
        Optional[str]: ラベル（作れない場合は住所、それもなければNone）
    """
    if location is None:
        return None

    parts = [
        location.locality or location.administrative_level2,
        location.administrative_level1,
        getattr(location, "country_name", None),
    ]
    parts = [part for part in parts if part]

    if parts:
        return ", ".join(parts)

    return location.address or None


def label_location_safe(location: Union[LocationRecord, LocationQuery, None]) -> str:
    """label_locationの結果、または空文字列"""
    return label_location(location) or ""
