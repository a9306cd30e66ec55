"""Catalog proxy endpoints.

Pass-through proxy in front of TMDB so browser clients never hold the
credential:
- ``GET {prefix}/{path}`` forwards any catalog path with its query string
- ``GET /api/search`` forwards its query string to ``/search/movie``

The bearer token is injected here. Upstream status codes and JSON bodies are
relayed verbatim; CORS headers are added to successful responses.
"""

from collections.abc import Sequence

import httpx
from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from moviefinder.config import Settings
from moviefinder.core.logging import get_logger
from moviefinder.dependencies import SettingsDep, UpstreamClientDep
from moviefinder.schemas.common import ProxyErrorResponse

logger = get_logger(__name__)

router = APIRouter()
search_router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
}

NOT_ALLOWED_METHODS = ["POST", "PUT", "PATCH", "DELETE"]


def _error(message: str, **extra: str) -> dict[str, str]:
    return ProxyErrorResponse(error=message, **extra).model_dump(exclude_none=True)


async def forward_to_tmdb(
    client: httpx.AsyncClient,
    settings: Settings,
    tmdb_path: str,
    params: Sequence[tuple[str, str]],
    error_headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Relay one GET to TMDB and mirror its status and JSON body."""
    if not settings.has_tmdb_token:
        logger.error("catalog_proxy_token_missing", path=tmdb_path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error("API key not configured"),
            headers=error_headers,
        )

    url = f"{settings.tmdb_base_url.rstrip('/')}/{tmdb_path.lstrip('/')}"
    try:
        upstream = await client.get(
            url,
            params=list(params),
            headers={
                "Accept": "application/json",
                "Authorization": f"Bearer {settings.tmdb_token.get_secret_value()}",
            },
        )
    except httpx.HTTPError as e:
        logger.error("catalog_proxy_upstream_error", path=tmdb_path, error=str(e))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error("Internal server error", details=str(e)),
            headers=error_headers,
        )

    try:
        body = upstream.json()
    except ValueError:
        body = _error(
            f"TMDB API error: {upstream.status_code} {upstream.reason_phrase}",
        )

    if upstream.is_success:
        headers = CORS_HEADERS
    else:
        logger.warning(
            "catalog_proxy_upstream_status",
            path=tmdb_path,
            status_code=upstream.status_code,
        )
        headers = error_headers

    return JSONResponse(status_code=upstream.status_code, content=body, headers=headers)


# =============================================================================
# Generic Proxy
# =============================================================================


@router.get(
    "/{path:path}",
    summary="Proxy a catalog request",
    description="Forward a GET to the TMDB API with the server-held credential.",
    responses={
        405: {"model": ProxyErrorResponse, "description": "Method not allowed"},
        500: {"model": ProxyErrorResponse, "description": "Proxy misconfigured or failed"},
    },
)
async def proxy_catalog(
    path: str,
    request: Request,
    settings: SettingsDep,
    client: UpstreamClientDep,
) -> Response:
    """Forward ``GET {prefix}/{path}?{query}`` to ``{tmdb_base_url}/{path}``."""
    return await forward_to_tmdb(
        client, settings, path, request.query_params.multi_items()
    )


@router.api_route("/{path:path}", methods=NOT_ALLOWED_METHODS, include_in_schema=False)
async def proxy_catalog_not_allowed(path: str) -> Response:
    return JSONResponse(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        content=_error("Method not allowed"),
    )


# =============================================================================
# Search Proxy
# =============================================================================


@search_router.get(
    "/search",
    summary="Proxy a movie search",
    description="Forward the query string to TMDB /search/movie.",
)
async def proxy_search(
    request: Request,
    settings: SettingsDep,
    client: UpstreamClientDep,
) -> Response:
    return await forward_to_tmdb(
        client,
        settings,
        "/search/movie",
        request.query_params.multi_items(),
        error_headers=CORS_HEADERS,
    )


@search_router.options("/search", include_in_schema=False)
async def proxy_search_preflight() -> Response:
    return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)


@search_router.api_route("/search", methods=NOT_ALLOWED_METHODS, include_in_schema=False)
async def proxy_search_not_allowed() -> Response:
    return JSONResponse(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        content=_error("Method not allowed"),
        headers=CORS_HEADERS,
    )
