#!/usr/bin/env python3
"""ローカル開発用のロケーション解決スクリプト（インメモリキャッシュで2回解決する）"""
import argparse
import sys
import time
from pathlib import Path

# プロジェクトルートをPythonパスに追加
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from location_resolver.features.bootstrap import create_resolver
from location_resolver.features.geocoding.domain.models import LocationQuery
from location_resolver.infrastructure.config.settings import Settings
from location_resolver.shared.logging.config import get_logger, setup_logging


def main():
    """メイン関数"""
    parser = argparse.ArgumentParser(
        description="ロケーション解決ツール（ローカル開発用）"
    )
    parser.add_argument(
        "--locality",
        "-l",
        type=str,
        default="Paris",
        help="市区町村（デフォルト: Paris）",
    )
    parser.add_argument(
        "--country",
        "-c",
        type=str,
        default="FR",
        help="国コード（デフォルト: FR）",
    )
    parser.add_argument(
        "--debug",
        "-d",
        action="store_true",
        help="デバッグモードで実行",
    )

    args = parser.parse_args()

    # 設定を読み込み（キャッシュの効果を確認するためインメモリを使う）
    settings = Settings(cache_backend="memory")

    # ロギングを設定
    log_level = "DEBUG" if args.debug else settings.log_level
    setup_logging(level=log_level)
    logger = get_logger(__name__)

    logger.info("=" * 80)
    logger.info("Location resolver (local run)")
    logger.info("=" * 80)
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Query: locality={args.locality}, country={args.country}")
    logger.info(f"Resolve priority: {settings.resolve_priority}")
    logger.info("=" * 80)

    query = LocationQuery(locality=args.locality, country=args.country)

    try:
        with create_resolver(settings) as resolver:
            for attempt in ("cold", "cached"):
                started = time.perf_counter()
                records = list(resolver.resolve_many(query))
                elapsed = (time.perf_counter() - started) * 1000

                logger.info(f"[{attempt}] {len(records)} location(s) in {elapsed:.1f}ms")
                for record in records:
                    logger.info(
                        f"  {record.id}: {record.safe_label} "
                        f"(timezone={record.timezone}, phone={record.phone_code})"
                    )

        logger.info("=" * 80)
        logger.info("Resolution completed successfully!")
        logger.info("=" * 80)

    except KeyboardInterrupt:
        logger.warning("Resolution interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Resolution failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
