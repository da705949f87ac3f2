"""Firestoreクライアント"""
import os
from typing import Any, Optional

from google.cloud import firestore

from ....shared.exceptions.errors import StorageError
from ....shared.logging.config import get_logger

logger = get_logger(__name__)


class FirestoreClient:
    """Firestore操作クライアント（キャッシュ用のドキュメント単位の読み書き）"""

    def __init__(self, project_id: Optional[str], database_id: str = "(default)") -> None:
        """
        Firestoreクライアントを初期化

        Args:
            project_id: GCPプロジェクトID（Noneの場合は環境から推定）
            database_id: データベースID（デフォルトは"(default)"）
        """
        self.project_id = project_id
        self.database_id = database_id

        # エミュレータモードの検出
        emulator_host = os.environ.get("FIRESTORE_EMULATOR_HOST")

        try:
            self.client = firestore.Client(project=project_id, database=database_id)
        except Exception as e:
            raise StorageError(f"Failed to initialize Firestore client: {e}") from e

        if emulator_host:
            logger.info(
                f"Firestore client initialized (EMULATOR MODE): "
                f"host={emulator_host}, project={project_id}, database={database_id}"
            )
        else:
            logger.info(
                f"Firestore client initialized: project={project_id}, database={database_id}"
            )

    def get_collection(self, collection_path: str) -> firestore.CollectionReference:
        """コレクション参照を取得"""
        return self.client.collection(collection_path)

    def get_document(
        self, collection_path: str, document_id: str
    ) -> Optional[dict[str, Any]]:
        """
        ドキュメントを取得

        Args:
            collection_path: コレクションパス
            document_id: ドキュメントID

        Returns:
            Optional[dict[str, Any]]: ドキュメントデータ（存在しない場合はNone）

        Raises:
            StorageError: 読み込みに失敗した場合
        """
        try:
            doc = self.get_collection(collection_path).document(document_id).get()
        except Exception as e:
            raise StorageError(
                f"Failed to get document {document_id} from {collection_path}: {e}"
            ) from e

        if doc.exists:
            return doc.to_dict()
        return None

    def set_document(
        self, collection_path: str, document_id: str, data: dict[str, Any]
    ) -> None:
        """
        ドキュメントを作成または上書き

        Args:
            collection_path: コレクションパス
            document_id: ドキュメントID
            data: 書き込む内容

        Raises:
            StorageError: 書き込みに失敗した場合
        """
        try:
            self.get_collection(collection_path).document(document_id).set(data)
        except Exception as e:
            raise StorageError(
                f"Failed to set document {document_id} in {collection_path}: {e}"
            ) from e

    def delete_document(self, collection_path: str, document_id: str) -> None:
        """
        ドキュメントを削除

        Args:
            collection_path: コレクションパス
            document_id: ドキュメントID
        """
        try:
            self.get_collection(collection_path).document(document_id).delete()
            logger.info(f"Document {document_id} deleted from {collection_path}")
        except Exception as e:
            raise StorageError(
                f"Failed to delete document {document_id} from {collection_path}: {e}"
            ) from e
