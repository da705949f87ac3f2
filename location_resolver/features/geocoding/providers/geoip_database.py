"""MaxMind GeoIP2 Cityデータベース"""
import threading
from dataclasses import dataclass
from typing import Optional

import geoip2.database
import geoip2.errors

from ....shared.exceptions.errors import ProviderError
from ....shared.logging.config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class GeoIpCity:
    """GeoIPの検索結果（どのフィールドも欠ける可能性がある）"""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None
    country_code: Optional[str] = None
    subdivisions: tuple[str, ...] = ()  # 上位の行政区画から順に英語名
    city: Optional[str] = None


class GeoIpDatabase:
    """
    GeoIP2 Cityデータベースのリーダー

    データベースファイルは最初の検索時に一度だけ開く。リーダーの作成と
    クローズはロックで直列化する（複数スレッドから共有される）。
    """

    def __init__(self, path: str) -> None:
        """
        Args:
            path: GeoLite2-City.mmdb などのファイルパス
        """
        self.path = path
        self._reader: Optional[geoip2.database.Reader] = None
        self._lock = threading.Lock()

    def _get_reader(self) -> geoip2.database.Reader:
        reader = self._reader
        if reader is not None:
            return reader

        with self._lock:
            if self._reader is None:
                try:
                    self._reader = geoip2.database.Reader(self.path)
                except (OSError, RuntimeError) as e:
                    # RuntimeError: maxminddb.InvalidDatabaseError
                    raise ProviderError(
                        f"Failed to open GeoIP database {self.path}: {e}"
                    ) from e
                logger.info(f"GeoIP database opened: {self.path}")
            return self._reader

    def city(self, ip_address: str) -> GeoIpCity:
        """
        IPアドレスから位置情報を取得

        Args:
            ip_address: IPv4 / IPv6アドレス

        Returns:
            GeoIpCity: 位置情報

        Raises:
            ProviderError: アドレスが見つからない、または不正な場合
        """
        try:
            response = self._get_reader().city(ip_address)
        except geoip2.errors.AddressNotFoundError as e:
            raise ProviderError(f"IP address not found in GeoIP database: {ip_address}") from e
        except ValueError as e:
            raise ProviderError(f"Invalid IP address: {ip_address}") from e

        subdivisions = tuple(
            subdivision.names.get("en")
            for subdivision in response.subdivisions
            if subdivision.names.get("en")
        )

        return GeoIpCity(
            latitude=response.location.latitude,
            longitude=response.location.longitude,
            timezone=response.location.time_zone,
            country_code=response.country.iso_code,
            subdivisions=subdivisions,
            city=response.city.names.get("en"),
        )

    def close(self) -> None:
        """データベースを閉じる"""
        with self._lock:
            if self._reader is not None:
                self._reader.close()
                self._reader = None
                logger.debug("GeoIP database closed")
