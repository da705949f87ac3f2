"""アプリケーション設定（Pydantic Settings）"""
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ...features.geocoding.domain.enums import DEFAULT_RESOLVE_PRIORITIES, ResolvePriority
from ...shared.exceptions.errors import ConfigurationError


class Settings(BaseSettings):
    """アプリケーション設定"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Project
    project_name: str = Field(
        default="location-resolver",
        description="プロジェクト名",
    )
    environment: str = Field(
        default="development",
        description="環境 (development, staging, production)",
    )

    # GCP
    gcp_project_id: Optional[str] = Field(
        default=None,
        description="GCPプロジェクトID（Firestore、Secret Manager、Cloud Loggingで使用）",
    )

    # Google Maps
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="Google Maps API Key（ローカル開発用）",
    )
    google_maps_api_key_secret_name: str = Field(
        default="google-maps-api-key",
        description="Google Maps API KeyのSecret Manager名",
    )
    provider_timeout: float = Field(
        default=10.0,
        description="Google Maps APIのタイムアウト（秒）",
    )

    # GeoIP
    geoip_city_path: str = Field(
        default="geoip/GeoLite2-City.mmdb",
        description="MaxMind GeoIP2 Cityデータベースのパス",
    )

    # Resolution
    resolve_priority: str = Field(
        default=",".join(priority.value for priority in DEFAULT_RESOLVE_PRIORITIES),
        description="解決に使うファセットの優先順位（カンマ区切り）",
    )

    # Cache
    cache_backend: Literal["none", "memory", "firestore"] = Field(
        default="none",
        description="キャッシュのバックエンド (none, memory, firestore)",
    )
    firestore_database_id: str = Field(
        default="(default)",
        description="FirestoreデータベースID",
    )
    firestore_cache_collection: str = Field(
        default="location_cache",
        description="キャッシュ用コレクション名",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="ログレベル (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    gcp_logging_enabled: bool = Field(
        default=False,
        description="Cloud Loggingを有効にするか",
    )

    # HTTP server
    port: int = Field(
        default=8080,
        description="HTTPサーバーのポート番号",
    )

    def get_resolve_priorities(self) -> list[ResolvePriority]:
        """
        解決に使うファセットの優先順位を取得

        Raises:
            ConfigurationError: 不明なファセット名、または重複がある場合
        """
        names = [name for name in self.resolve_priority.split(",") if name.strip()]
        try:
            priorities = [ResolvePriority.from_name(name) for name in names]
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        if len(set(priorities)) != len(priorities):
            raise ConfigurationError(
                f"Duplicate entries in resolve priority: {self.resolve_priority}"
            )

        return priorities

    @property
    def is_production(self) -> bool:
        """本番環境かどうか"""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """開発環境かどうか"""
        return self.environment.lower() == "development"
