"""GCP Secret Manager連携（Google Maps API Keyの取得）"""
from google.cloud import secretmanager

from ...shared.exceptions.errors import ConfigurationError
from ...shared.logging.config import get_logger

logger = get_logger(__name__)


class SecretManagerClient:
    """Secret Managerクライアント"""

    def __init__(self, project_id: str) -> None:
        """
        Args:
            project_id: GCPプロジェクトID
        """
        self.project_id = project_id
        self.client = secretmanager.SecretManagerServiceClient()

    def get_secret(self, secret_name: str, version: str = "latest") -> str:
        """
        シークレットの値を取得

        Args:
            secret_name: シークレット名
            version: バージョン（デフォルト: latest）

        Returns:
            シークレットの値（前後の空白は除去）

        Raises:
            ConfigurationError: シークレット取得失敗時
        """
        name = self.client.secret_version_path(self.project_id, secret_name, version)
        try:
            response = self.client.access_secret_version(request={"name": name})
        except Exception as e:
            raise ConfigurationError(f"Failed to fetch secret {secret_name}: {e}") from e

        logger.info(f"Fetched secret: {secret_name}")
        return response.payload.data.decode("UTF-8").strip()
