"""ロギング設定"""
import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# リクエストごとにログを出すサードパーティのロガー
NOISY_LOGGERS = ("urllib3", "google", "googlemaps", "maxminddb", "uvicorn.access")

# ロガー設定済みフラグ
_logger_configured = False


def _add_cloud_logging_handler(
    root_logger: logging.Logger, log_level: int, project_id: Optional[str]
) -> None:
    """Cloud Loggingのハンドラーを追加（失敗してもコンソール出力は続ける）"""
    try:
        from google.cloud import logging as cloud_logging

        client = cloud_logging.Client(project=project_id)
        cloud_handler = cloud_logging.handlers.CloudLoggingHandler(
            client, name="location-resolver"
        )
        cloud_handler.setLevel(log_level)
        root_logger.addHandler(cloud_handler)

        logging.info("Cloud Logging enabled")
    except Exception as e:
        logging.warning(f"Failed to enable Cloud Logging: {e}")


def setup_logging(
    level: str = "INFO",
    enable_cloud_logging: bool = False,
    project_id: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    ロギングを設定

    ログは標準エラーに出す（標準出力はCLIのJSON出力用）。

    Args:
        level: ログレベル (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_cloud_logging: Cloud Loggingを有効にするか
        project_id: GCPプロジェクトID (Cloud Logging有効時に必要)
        force: 設定済みでも再設定する
    """
    global _logger_configured

    if _logger_configured and not force:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console_handler)

    if enable_cloud_logging:
        _add_cloud_logging_handler(root_logger, log_level, project_id)

    # サードパーティのロガーはWARNING以上だけ出す
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    _logger_configured = True
    logging.getLogger(__name__).info(f"Logging configured with level: {level}")


def get_logger(name: str) -> logging.Logger:
    """
    指定名のロガーを取得

    Args:
        name: ロガー名（通常は__name__を指定）

    Returns:
        ロガーインスタンス
    """
    return logging.getLogger(name)
