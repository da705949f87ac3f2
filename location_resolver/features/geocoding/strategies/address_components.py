"""Geocoding APIのコンポーネントフィルタ"""
import re

from ..domain.models import LocationInput
from ..services.canonicalizer import query_from_record


def assemble_address_components(location: LocationInput) -> dict[str, str]:
    """
    クエリまたはロケーションから住所コンポーネントを組み立てる

    キーの順序は locality → administrative_area_level_2 →
    administrative_area_level_1 → country で固定。値のないキーは含めない。

    Args:
        location: クエリまたはロケーション

    Returns:
        dict[str, str]: Google APIのコンポーネント名をキーにした辞書
    """
    query = query_from_record(location)
    components: dict[str, str] = {}

    if query is None:
        return components

    if query.locality:
        components["locality"] = query.locality
    if query.administrative_level2:
        components["administrative_area_level_2"] = query.administrative_level2
    if query.administrative_level1:
        components["administrative_area_level_1"] = query.administrative_level1
    if query.country:
        components["country"] = query.country

    return components


def build_component_filter(components: dict[str, str]) -> str:
    """
    コンポーネントフィルタ文字列（"locality:New+York|country:US"）を生成

    administrative_area_level_N はAPIのフィルタ名 administrative_area に
    まとめ、値の空白は "+" に置き換える。順序は入力の順序を保つ。
    """
    parts = []
    for key, value in components.items():
        name = "administrative_area" if key.startswith("administrative_area") else key
        value = re.sub(r"\s", "+", value)
        parts.append(f"{name}:{value}")
    return "|".join(parts)
