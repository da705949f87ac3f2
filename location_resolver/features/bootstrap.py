"""設定からリゾルバーを組み立てる"""
from typing import Optional

from ..infrastructure.config.settings import Settings
from ..infrastructure.gcp.secret_manager import SecretManagerClient
from ..shared.exceptions.errors import ConfigurationError
from ..shared.logging.config import get_logger
from .geocoding.services.geo_resolver import GeoResolver, ResolverConfig
from .storage.cache.cache_store import CacheStore, FirestoreCacheStore, InMemoryCacheStore
from .storage.clients.firestore_client import FirestoreClient

logger = get_logger(__name__)


def get_google_maps_api_key(settings: Settings) -> str:
    """
    Google Maps API Keyを取得

    環境変数で指定されていなければ、開発環境以外ではSecret Managerから読む。

    Raises:
        ConfigurationError: API Keyが見つからない場合
    """
    if settings.google_maps_api_key:
        return settings.google_maps_api_key

    if not settings.is_development and settings.gcp_project_id:
        secret_manager = SecretManagerClient(settings.gcp_project_id)
        return secret_manager.get_secret(settings.google_maps_api_key_secret_name)

    raise ConfigurationError(
        "Google Maps API key is not configured (set GOOGLE_MAPS_API_KEY)"
    )


def create_cache_store(settings: Settings) -> Optional[CacheStore]:
    """設定に応じたキャッシュストアを作成（"none" の場合はNone）"""
    if settings.cache_backend == "memory":
        return InMemoryCacheStore()

    if settings.cache_backend == "firestore":
        firestore_client = FirestoreClient(
            project_id=settings.gcp_project_id,
            database_id=settings.firestore_database_id,
        )
        return FirestoreCacheStore(
            firestore_client, collection_name=settings.firestore_cache_collection
        )

    logger.info("Cache is disabled via settings")
    return None


def create_resolver(settings: Settings) -> GeoResolver:
    """
    設定からリゾルバーを作成

    Args:
        settings: アプリケーション設定

    Returns:
        GeoResolver: リゾルバー

    Raises:
        ConfigurationError: 設定が不正な場合
    """
    config = ResolverConfig(
        google_maps_api_key=get_google_maps_api_key(settings),
        geoip_city_path=settings.geoip_city_path,
        resolve_priority=settings.get_resolve_priorities(),
        cache=create_cache_store(settings),
        provider_timeout=settings.provider_timeout,
    )
    return GeoResolver(config)
