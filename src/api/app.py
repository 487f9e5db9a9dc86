"""HTTP surface: one generic route for every catalogued avatar endpoint.

Usage: `GET /api/minecraft/face?user=Notch&size=128`.
"""

from __future__ import annotations

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from core.config import AppSettings
from core.observability import RequestContext
from core.services.avatar_pipeline import AvatarResult, FailureKind, render_avatar
from core.services.catalog import CATALOG, AssetDefinition, get_asset

_STATUS: dict[FailureKind, int] = {
    FailureKind.BAD_REQUEST: 400,
    FailureKind.RESTRICTED: 403,
    FailureKind.NOT_FOUND: 404,
    FailureKind.PROCESSING_ERROR: 500,
}


def parse_size(value: str | None) -> int | None:
    """Lenient like the public API always was: junk or <= 0 means "default"."""

    if value is None:
        return None
    try:
        size = int(value.strip())
    except ValueError:
        return None
    return size if size > 0 else None


def _error(
    status: int,
    kind: str,
    error: str,
    details: str | None = None,
    *,
    request_id: str | None = None,
    extra_headers: dict[str, str] | None = None,
) -> JSONResponse:
    payload: dict[str, str] = {"kind": kind, "error": error}
    if details:
        payload["details"] = details
    headers = dict(extra_headers or {})
    if request_id:
        headers["X-Request-ID"] = request_id
    return JSONResponse(status_code=status, content=payload, headers=headers)


def _failure_response(
    asset: AssetDefinition,
    result: AvatarResult,
    cache_headers: dict[str, str],
) -> JSONResponse:
    """Error payload; lookups that ran carry the endpoint cache policy, 400 does not."""

    kind = result.failure or FailureKind.PROCESSING_ERROR
    request_id = result.context.request_id
    if kind is FailureKind.BAD_REQUEST:
        return _error(
            400,
            kind.value,
            f'Missing "{asset.query_params[0]}" parameter',
            f"Usage: /api/{asset.route}{asset.usage}",
            request_id=request_id,
        )
    if kind is FailureKind.NOT_FOUND:
        return _error(
            404,
            kind.value,
            f"{asset.label} not found",
            request_id=request_id,
            extra_headers=cache_headers,
        )
    if kind is FailureKind.RESTRICTED:
        return _error(
            403,
            kind.value,
            f"{asset.label} avatar is access-restricted",
            result.detail,
            request_id=request_id,
            extra_headers=cache_headers,
        )
    return _error(
        _STATUS[kind],
        kind.value,
        "Avatar generation failed",
        result.detail,
        request_id=request_id,
        extra_headers=cache_headers,
    )


def create_app(
    settings: AppSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the app; `transport` replaces the upstream network (tests)."""

    settings = settings or AppSettings()
    app = FastAPI(title="avatar-api", version="0.1.0")
    app.state.settings = settings
    app.state.transport = transport

    @app.get("/health")
    async def health() -> dict[str, object]:
        return {"ok": True, "endpoints": sorted(CATALOG)}

    @app.get("/api/{family}/{kind}")
    async def avatar(family: str, kind: str, request: Request) -> Response:
        asset = get_asset(f"{family}/{kind}")
        if asset is None:
            return _error(404, "unknown_endpoint", "Unknown avatar endpoint", f"/api/{family}/{kind}")

        params = request.query_params
        identifier = next((params[name] for name in asset.query_params if params.get(name)), None)
        context = RequestContext(asset=asset.route, identifier=identifier or "")

        result = await render_avatar(
            settings=app.state.settings,
            asset=asset,
            identifier=identifier,
            size=parse_size(params.get("size")),
            transport=app.state.transport,
            context=context,
        )
        cache_headers = app.state.settings.asset(asset.family).cache_policy.headers()
        if not result.ok:
            return _failure_response(asset, result, cache_headers)

        headers = dict(cache_headers)
        headers["X-Request-ID"] = context.request_id
        if result.size is not None:
            headers["X-Avatar-Size"] = str(result.size)
        return Response(content=result.image, media_type="image/png", headers=headers)

    return app
