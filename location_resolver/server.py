"""HTTPサーバー（FastAPI）"""
from functools import lru_cache
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response

from .features.bootstrap import create_resolver
from .features.geocoding.domain.models import (
    AutocompleteQuery,
    GeoQuery,
    LocationQuery,
    LocationRecord,
)
from .features.geocoding.services.geo_resolver import GeoResolver
from .infrastructure.config.settings import Settings
from .shared.exceptions.errors import (
    InvalidLocationQueryError,
    LocationQueryError,
    LocationResolverError,
)
from .shared.logging.config import get_logger, setup_logging

# 設定を読み込み
settings = Settings()

# ロギングを設定
setup_logging(
    level=settings.log_level,
    enable_cloud_logging=settings.gcp_logging_enabled,
    project_id=settings.gcp_project_id,
)
logger = get_logger(__name__)

app = FastAPI(
    title="Location Resolver",
    description="部分的なロケーション情報（座標、住所、IPアドレス、Place ID、行政区画）を解決するサービス",
    version="1.0.0",
)


@lru_cache(maxsize=1)
def get_resolver() -> GeoResolver:
    """リゾルバーを取得（初回のみ作成）"""
    return create_resolver(settings)


def _flag(value: Optional[str]) -> Optional[bool]:
    """"0" / "1" のクエリパラメータをboolに変換（それ以外はNone）"""
    if value == "0":
        return False
    if value == "1":
        return True
    return None


def query_from_params(request: Request) -> LocationQuery:
    """
    クエリパラメータからロケーションクエリを作成

    例: /locations?locality=Paris&country=FR

    Raises:
        InvalidLocationQueryError: 座標や検索半径が数値でない場合
    """
    params = request.query_params

    query = LocationQuery(
        id=params.get("id"),
        address=params.get("address"),
        locality=params.get("locality"),
        administrative_level1=params.get("administrative_level1"),
        administrative_level2=params.get("administrative_level2"),
        country=params.get("country"),
        ip_address=params.get("ip_address"),
        region=params.get("region"),
        from_cache=_flag(params.get("from_cache")),
        resolve_ip_with_geo=_flag(params.get("resolve_ip_with_geo")),
    )

    if "latitude" in params and "longitude" in params:
        try:
            query.location = GeoQuery(
                coordinates=(float(params["longitude"]), float(params["latitude"])),
                min_distance=float(params.get("min_distance", 0)),
                max_distance=float(params.get("max_distance", 0)),
            )
        except ValueError as e:
            raise InvalidLocationQueryError(query, f"Invalid coordinates: {e}") from e

    return query


def _records_to_dicts(records: list[LocationRecord]) -> list[dict[str, Any]]:
    return [record.to_dict() for record in records]


@app.get("/health")
def health() -> dict[str, str]:
    """ヘルスチェックエンドポイント"""
    return {"status": "healthy"}


@app.get("/locations")
def resolve_locations(
    query: LocationQuery = Depends(query_from_params),
    resolver: GeoResolver = Depends(get_resolver),
) -> list[dict[str, Any]]:
    """一致するロケーションをすべて返す"""
    return _records_to_dicts(list(resolver.resolve_many(query)))


@app.head("/locations")
def count_locations(
    query: LocationQuery = Depends(query_from_params),
    resolver: GeoResolver = Depends(get_resolver),
) -> Response:
    """一致するロケーションの件数をヘッダーで返す"""
    count = resolver.count_locations(query)
    return Response(
        status_code=200,
        media_type="application/json",
        headers={"x-location-count": str(count)},
    )


@app.get("/locations/{location_id}")
def resolve_location_by_id(
    location_id: str, resolver: GeoResolver = Depends(get_resolver)
) -> dict[str, Any]:
    """Google Place ID（またはIPのハッシュ）からロケーションを1件返す"""
    record = resolver.resolve_one(LocationQuery(id=location_id))
    if record is None:
        raise HTTPException(status_code=404, detail="Location not found")
    return record.to_dict()


def _autocomplete_query(params: dict[str, Any]) -> AutocompleteQuery:
    location = params.get("location")
    return AutocompleteQuery(
        input=params.get("input"),
        session_token=params.get("session_token"),
        location=tuple(location) if location else None,
        radius=params.get("radius"),
        language=params.get("language"),
        types=params.get("types"),
        components=params.get("components") or {},
    )


@app.post("/rpc")
def rpc(
    payload: dict[str, Any] = Body(...),
    resolver: GeoResolver = Depends(get_resolver),
) -> dict[str, Any]:
    """
    JSON-RPC 2.0エンドポイント

    メソッド: resolveLocations, resolveOneLocation, autocompleteSearch
    """
    request_id = payload.get("id")
    method = payload.get("method")
    params = payload.get("params") or {}
    if isinstance(params, list):
        params = params[0] if params else {}

    try:
        if method == "resolveLocations":
            result: Any = _records_to_dicts(
                list(resolver.resolve_many(LocationQuery.from_dict(params)))
            )
        elif method == "resolveOneLocation":
            record = resolver.resolve_one(LocationQuery.from_dict(params))
            result = record.to_dict() if record else None
        elif method == "autocompleteSearch":
            result = [
                suggestion.to_dict()
                for suggestion in resolver.autocomplete(_autocomplete_query(params))
            ]
        else:
            return {
                "jsonrpc": "2.0",
                "id": request_id,
                "error": {"code": -32601, "message": f"Method not found: {method}"},
            }
    except LocationResolverError as e:
        logger.warning(f"RPC {method} failed: {e}")
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "error": {"code": getattr(e, "code", -32000), "message": str(e)},
        }
    except (KeyError, TypeError, ValueError) as e:
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "error": {"code": -32602, "message": f"Invalid params: {e}"},
        }

    return {"jsonrpc": "2.0", "id": request_id, "result": result}


@app.exception_handler(LocationQueryError)
async def location_query_exception_handler(
    request: Request, exc: LocationQueryError
) -> JSONResponse:
    """ロケーションクエリの例外をHTTPステータスに変換"""
    logger.warning(f"Location query failed: {exc}")
    return JSONResponse(
        status_code=exc.http_status_code,
        content={
            "message": str(exc),
            "code": exc.code,
            "query": exc.query.to_dict() if exc.query else None,
        },
    )


@app.exception_handler(LocationResolverError)
async def resolver_exception_handler(
    request: Request, exc: LocationResolverError
) -> JSONResponse:
    """その他のリゾルバー例外"""
    logger.error(f"Resolver error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=502,
        content={"message": "Upstream error", "detail": str(exc)},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
