"""Catch-all reverse proxy used by the gateway."""

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from loguru import logger

from src.fitness.api.http.deps import get_proxy_client
from src.fitness.runtime.context import get_config

router = APIRouter(tags=["gateway"])

# Hop-by-hop headers never cross the proxy; httpx recomputes framing headers
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "trailers",
        "transfer-encoding",
        "upgrade",
        "host",
        "content-length",
    }
)

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


def resolve_upstream(path: str, routes: dict[str, str]) -> str | None:
    """Return the upstream base URL for the longest route prefix matching ``path``."""
    best: str | None = None
    for prefix in routes:
        normalized = prefix.rstrip("/") or "/"
        matches = (
            normalized == "/"
            or path == normalized
            or path.startswith(normalized + "/")
        )
        if matches and (best is None or len(normalized) > len(best.rstrip("/"))):
            best = prefix
    return routes[best].rstrip("/") if best is not None else None


def _forwardable(raw_headers: list[tuple[bytes, bytes]]) -> list[tuple[bytes, bytes]]:
    """Header pairs to send upstream, kept as bytes so non-ASCII values pass through."""
    return [
        (key, value)
        for key, value in raw_headers
        if key.decode("latin-1").lower() not in HOP_BY_HOP_HEADERS
        and key.lower() != b"x-forwarded-for"
    ]


@router.api_route("/{path:path}", methods=PROXY_METHODS, include_in_schema=False)
async def forward(
    path: str,
    request: Request,
    client: httpx.AsyncClient = Depends(get_proxy_client),
) -> Response:
    request_path = "/" + path
    upstream = resolve_upstream(request_path, get_config().gateway.routes)
    if upstream is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "no_route", "message": f"No upstream for {request_path}"},
        )

    url = upstream + request_path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    headers = _forwardable(request.headers.raw)
    prior = request.headers.get("x-forwarded-for")
    client_host = request.client.host if request.client else None
    if client_host:
        forwarded_for = f"{prior}, {client_host}" if prior else client_host
        headers.append((b"x-forwarded-for", forwarded_for.encode("latin-1")))
    elif prior:
        headers.append((b"x-forwarded-for", prior.encode("latin-1")))

    try:
        upstream_response = await client.request(
            request.method, url, headers=headers, content=await request.body()
        )
    except httpx.TimeoutException as exc:
        logger.warning(f"Upstream {upstream} timed out for {request.method} {request_path}")
        raise HTTPException(
            status_code=504,
            detail={"code": "upstream_timeout", "message": "Upstream service timed out"},
        ) from exc
    except httpx.TransportError as exc:
        logger.error(
            f"Upstream {upstream} unreachable for {request.method} {request_path}: {exc}"
        )
        raise HTTPException(
            status_code=502,
            detail={"code": "upstream_unavailable", "message": "Upstream service unavailable"},
        ) from exc

    response_headers = {
        k: v
        for k, v in upstream_response.headers.items()
        if k.lower() not in HOP_BY_HOP_HEADERS and k.lower() != "content-encoding"
    }
    return Response(
        content=upstream_response.content,
        status_code=upstream_response.status_code,
        headers=response_headers,
    )
