"""CLIエントリーポイント"""
import argparse
import json
import sys
from typing import Optional

from .features.bootstrap import create_resolver
from .features.geocoding.domain.models import AutocompleteQuery, GeoQuery, LocationQuery
from .infrastructure.config.settings import Settings
from .shared.exceptions.errors import LocationQueryError, LocationResolverError
from .shared.logging.config import get_logger, setup_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """引数パーサーを作成"""
    parser = argparse.ArgumentParser(
        description="部分的なロケーション情報を解決してJSONで出力するツール"
    )

    query_group = parser.add_argument_group("query")
    query_group.add_argument("--id", type=str, help="Google Place ID（またはIPのハッシュ）")
    query_group.add_argument("--latitude", type=float, help="緯度")
    query_group.add_argument("--longitude", type=float, help="経度")
    query_group.add_argument("--min-distance", type=float, default=0, help="最小距離（メートル）")
    query_group.add_argument("--max-distance", type=float, default=0, help="最大距離（メートル）")
    query_group.add_argument("--address", type=str, help="住所")
    query_group.add_argument("--locality", type=str, help="市区町村")
    query_group.add_argument("--administrative-level1", type=str, help="州・都道府県")
    query_group.add_argument("--administrative-level2", type=str, help="郡など")
    query_group.add_argument("--country", type=str, help="国コード（例: FR）")
    query_group.add_argument("--ip-address", type=str, help="IPアドレス")
    query_group.add_argument("--region", type=str, help="地域バイアス（ccTLD、例: uk）")
    query_group.add_argument(
        "--no-cache",
        action="store_true",
        help="キャッシュを使わずに解決",
    )
    query_group.add_argument(
        "--resolve-ip-with-geo",
        action="store_true",
        help="IPアドレスの結果をさらにGoogle Mapsで解決",
    )

    parser.add_argument(
        "--one",
        action="store_true",
        help="最初に一致したロケーションだけを出力",
    )
    parser.add_argument(
        "--autocomplete",
        type=str,
        metavar="INPUT",
        help="Places Autocompleteで候補を検索",
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=".env",
        help="環境変数ファイルのパス（デフォルト: .env）",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="ログレベル",
    )

    return parser


def query_from_args(args: argparse.Namespace) -> LocationQuery:
    """引数からロケーションクエリを作成"""
    location: Optional[GeoQuery] = None
    if args.latitude is not None and args.longitude is not None:
        location = GeoQuery(
            coordinates=(args.longitude, args.latitude),
            min_distance=args.min_distance,
            max_distance=args.max_distance,
        )

    return LocationQuery(
        id=args.id,
        location=location,
        address=args.address,
        locality=args.locality,
        administrative_level1=args.administrative_level1,
        administrative_level2=args.administrative_level2,
        country=args.country,
        ip_address=args.ip_address,
        region=args.region,
        from_cache=False if args.no_cache else None,
        resolve_ip_with_geo=True if args.resolve_ip_with_geo else None,
    )


def main(argv: Optional[list[str]] = None) -> int:
    """
    メインエントリーポイント

    Returns:
        int: 終了コード（0: 成功, 1: 失敗, 2: 見つからない）
    """
    args = build_parser().parse_args(argv)

    try:
        # 設定を読み込み
        settings = Settings(_env_file=args.env_file)

        # ログレベルを上書き
        if args.log_level:
            settings.log_level = args.log_level

        setup_logging(
            level=settings.log_level,
            enable_cloud_logging=settings.gcp_logging_enabled,
            project_id=settings.gcp_project_id,
        )
        logger.info(f"Environment: {settings.environment}")

        with create_resolver(settings) as resolver:
            if args.autocomplete is not None:
                components = {"country": [args.country]} if args.country else {}
                suggestions = resolver.autocomplete(
                    AutocompleteQuery(input=args.autocomplete, components=components)
                )
                output: object = [suggestion.to_dict() for suggestion in suggestions]
            elif args.one:
                record = resolver.resolve_one(query_from_args(args))
                if record is None:
                    logger.warning("No location matched the query")
                    return 2
                output = record.to_dict()
            else:
                output = [
                    record.to_dict()
                    for record in resolver.resolve_many(query_from_args(args))
                ]

        print(json.dumps(output, ensure_ascii=False, indent=2))
        return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130  # SIGINT
    except LocationQueryError as e:
        logger.error(f"Failed to resolve location: {e}")
        return 1
    except LocationResolverError as e:
        logger.error(f"Application failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
