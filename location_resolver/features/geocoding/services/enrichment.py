"""ロケーションの付加情報（タイムゾーン・国情報）"""
import time
from typing import Optional

from ..domain.models import LocationInput, LocationRecord
from ..providers.country_data import CountryData
from ..providers.google_maps_provider import GoogleMapsProvider
from .canonicalizer import query_from_record, record_from_query
from ....shared.exceptions.errors import InvalidLocationQueryError, LocationQueryError
from ....shared.logging.config import get_logger

logger = get_logger(__name__)


class LocationEnricher:
    """タイムゾーン・言語・国番号をロケーションに付与する"""

    def __init__(self, provider: GoogleMapsProvider, country_data: CountryData) -> None:
        """
        Args:
            provider: Google Maps APIプロバイダー（Time Zone API）
            country_data: 国・言語の参照データ
        """
        self.provider = provider
        self.country_data = country_data

    def get_timezone(
        self, location: LocationInput, timestamp: Optional[int] = None
    ) -> Optional[LocationRecord]:
        """
        座標に対応するタイムゾーンを取得し、ロケーションに付与する

        Args:
            location: クエリまたはロケーション（座標が必要）
            timestamp: 基準時刻（UNIX秒、省略時は現在時刻）

        Returns:
            Optional[LocationRecord]: タイムゾーン付きのロケーション
                （APIがタイムゾーンを返さなかった場合はNone）

        Raises:
            InvalidLocationQueryError: 座標がない場合
            LocationQueryError: APIリクエストに失敗した場合
        """
        query = query_from_record(location)
        if query.location is None:
            raise InvalidLocationQueryError(query, "Location has no coordinates")

        try:
            timezone = self.provider.timezone(
                query.location.latitude,
                query.location.longitude,
                timestamp if timestamp is not None else int(time.time()),
            )
        except Exception as e:
            raise LocationQueryError(query, e) from e

        if not timezone:
            return None

        record = record_from_query(location)
        record.timezone = timezone
        return record

    def get_country_info(self, location: LocationInput) -> LocationRecord:
        """
        国の参照データ（言語・国番号・国名）をロケーションに付与する

        Raises:
            LocationQueryError: 国が不明な場合
        """
        query = query_from_record(location)
        country_info = self.country_data.get(query.country)

        if country_info is None:
            raise LocationQueryError(query, f"Unknown country: {query.country}")

        record = record_from_query(location)
        record.languages = list(country_info.languages)
        record.phone_code = country_info.phone_code
        if not record.country_name:
            record.country_name = country_info.name
        return record

    def enrich(self, record: LocationRecord) -> LocationRecord:
        """
        欠けている付加情報をベストエフォートで補う

        どちらの取得に失敗してもエラーにはせず、その時点のフィールドのまま返す。
        """
        if record.timezone is None:
            try:
                record = self.get_timezone(record) or record
            except Exception as e:
                logger.debug(f"Timezone enrichment skipped for {record.id}: {e}")

        if record.languages is None or record.phone_code is None:
            try:
                record = self.get_country_info(record)
            except Exception as e:
                logger.debug(f"Country enrichment skipped for {record.id}: {e}")

        return record
