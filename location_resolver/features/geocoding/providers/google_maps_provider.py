"""Google Maps API実装（Geocoding / Time Zone / Places Autocomplete）"""
from typing import Any, Optional

import googlemaps

from ....shared.exceptions.errors import ConfigurationError, ProviderError
from ....shared.logging.config import get_logger

logger = get_logger(__name__)


class _SingleAttemptClient(googlemaps.Client):
    """
    再送しない googlemaps.Client

    googlemapsは5xxやOVER_QUERY_LIMITのレスポンスを retry_timeout の間
    自動で再送する。2回目以降の送信を TransportError にして1回で打ち切る。
    """

    def _request(self, url, params, first_request_time=None, retry_counter=0, *args, **kwargs):
        if retry_counter > 0:
            raise googlemaps.exceptions.TransportError(
                "Retriable response from Google Maps (retries are disabled)"
            )
        return super()._request(url, params, first_request_time, retry_counter, *args, **kwargs)


def _latlng(latitude: float, longitude: float) -> str:
    """APIに渡す "緯度,経度" 形式の文字列"""
    return f"{latitude},{longitude}"


class GoogleMapsProvider:
    """
    Google Maps APIの薄いラッパー

    ステータスがOK以外のレスポンスや通信エラーはすべて ProviderError に
    変換する。リトライは行わない（失敗はそのまま呼び出し元に返す）。
    retry_timeout はgooglemapsの既定値のまま（0にすると送信前に Timeout になる）。
    """

    def __init__(self, api_key: str, timeout: Optional[float] = None) -> None:
        """
        Args:
            api_key: Google Maps API キー（Geocoding、Time Zone、Places APIが有効なもの）
            timeout: リクエストタイムアウト（秒）

        Raises:
            ConfigurationError: クライアントの初期化に失敗した場合
        """
        try:
            self.client = _SingleAttemptClient(
                key=api_key,
                timeout=timeout,
                retry_over_query_limit=False,
            )
            logger.info("GoogleMapsProvider initialized")
        except Exception as e:
            raise ConfigurationError(f"Failed to initialize Google Maps client: {e}") from e

    def geocode(
        self,
        address: Optional[str] = None,
        place_id: Optional[str] = None,
        components: Optional[str] = None,
        region: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """
        Geocoding APIを呼び出す

        Args:
            address: 住所文字列
            place_id: Google Place ID
            components: コンポーネントフィルタ（"locality:Paris|country:FR" 形式、順序を保持）
            region: 地域バイアス（ccTLD）

        Returns:
            list[dict[str, Any]]: APIの生の結果リスト

        Raises:
            ProviderError: APIリクエストに失敗した場合
        """
        # googlemapsのcomponents引数はキーをソートしてしまうため、組み立て済みの文字列を直接渡す
        extra_params = {"components": components} if components else None

        logger.debug(
            f"Geocoding: address={address}, place_id={place_id}, "
            f"components={components}, region={region}"
        )
        return self._call(
            "geocode",
            address=address,
            place_id=place_id,
            region=region,
            extra_params=extra_params,
        )

    def reverse_geocode(self, latitude: float, longitude: float) -> list[dict[str, Any]]:
        """
        座標から住所を取得（逆ジオコーディング）

        Raises:
            ProviderError: APIリクエストに失敗した場合
        """
        logger.debug(f"Reverse geocoding: ({latitude}, {longitude})")
        return self._call("reverse_geocode", _latlng(latitude, longitude))

    def timezone(
        self, latitude: float, longitude: float, timestamp: int
    ) -> Optional[str]:
        """
        Time Zone APIでタイムゾーン名を取得

        Args:
            latitude: 緯度
            longitude: 経度
            timestamp: 基準時刻（UNIX秒）

        Returns:
            Optional[str]: タイムゾーン名（例: "America/New_York"）

        Raises:
            ProviderError: APIリクエストに失敗した場合
        """
        logger.debug(f"Fetching timezone: ({latitude}, {longitude}) at {timestamp}")
        response = self._call(
            "timezone", location=_latlng(latitude, longitude), timestamp=timestamp
        )
        return response.get("timeZoneId") if response else None

    def autocomplete(
        self,
        input_text: str,
        session_token: Optional[str] = None,
        location: Optional[str] = None,
        radius: Optional[int] = None,
        language: Optional[str] = None,
        types: Optional[str] = None,
        components: Optional[dict[str, list[str]]] = None,
    ) -> list[dict[str, Any]]:
        """
        Places Autocomplete APIで候補を取得

        Raises:
            ProviderError: APIリクエストに失敗した場合
        """
        logger.debug(f"Autocomplete: {input_text}")
        return self._call(
            "places_autocomplete",
            input_text,
            session_token=session_token,
            location=location,
            radius=radius,
            language=language,
            types=types,
            components=components or None,
        )

    def _call(self, method: str, *args: Any, **kwargs: Any) -> Any:
        try:
            return getattr(self.client, method)(*args, **kwargs)
        except googlemaps.exceptions.ApiError as e:
            raise ProviderError(
                f"Google Maps API error: {e.message or e.status}", status=e.status
            ) from e
        except googlemaps.exceptions.TransportError as e:
            raise ProviderError(f"Google Maps transport error: {e}") from e
        except googlemaps.exceptions.Timeout as e:
            raise ProviderError("Google Maps request timed out") from e
