"""Relay endpoint forwarding requests to the radio directory."""
import time
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from ..config import Settings
from ..exceptions import EndpointNotAllowedError, RelayError
from ..logging import get_logger
from ..metrics import relay_request_duration_seconds, relay_requests_total
from .deps import get_http_client, get_settings

logger = get_logger(__name__)

router = APIRouter(tags=["relay"])

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}


def validate_endpoint(endpoint: str, allowed_prefixes) -> None:
    """Reject upstream paths that could turn the relay into an open proxy.

    Raises:
        EndpointNotAllowedError: if the path is outside the allowed prefixes,
            climbs directories or names another host
    """
    if "://" in endpoint or endpoint.startswith("//") or "\\" in endpoint:
        raise EndpointNotAllowedError(message="Endpoint must be a path", details={"endpoint": endpoint})
    if ".." in endpoint.split("?", 1)[0]:
        raise EndpointNotAllowedError(message="Endpoint must not contain '..'", details={"endpoint": endpoint})
    if not any(endpoint.startswith(prefix) for prefix in allowed_prefixes):
        raise EndpointNotAllowedError(
            message="Endpoint not allowed",
            details={"endpoint": endpoint, "allowed_prefixes": list(allowed_prefixes)},
        )


async def fetch_upstream(client: httpx.AsyncClient, url: str, params) -> httpx.Response:
    """GET ``url`` and make sure the body is JSON.

    Raises:
        RelayError: on network errors or a non-JSON body
    """
    try:
        response = await client.get(url, params=params)
        response.json()
    except httpx.HTTPError as e:
        raise RelayError(message="Failed to fetch", details={"url": url, "error": str(e)}) from e
    except ValueError as e:
        raise RelayError(message="Failed to fetch", details={"url": url, "error": "invalid JSON"}) from e
    return response


@router.get("/radio")
async def relay(
    request: Request,
    endpoint: Optional[str] = Query(None, description="Directory path to fetch, e.g. /json/stations/topvote/100"),
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    Forward a GET to the radio directory.

    Returns the upstream JSON body and status with permissive CORS headers.
    """
    start_time = time.time()

    if not endpoint:
        relay_requests_total.labels(status=400).inc()
        return PlainTextResponse("Missing endpoint parameter", status_code=status.HTTP_400_BAD_REQUEST)

    try:
        validate_endpoint(endpoint, settings.allowed_endpoint_prefixes)
    except EndpointNotAllowedError as e:
        relay_requests_total.labels(status=400).inc()
        logger.warning("relay_endpoint_rejected", endpoint=endpoint, error=e.message)
        return PlainTextResponse(e.message, status_code=status.HTTP_400_BAD_REQUEST)

    params = [(key, value) for key, value in request.query_params.multi_items() if key != "endpoint"]
    url = f"{settings.upstream_base_url.rstrip('/')}{endpoint}"

    try:
        upstream = await fetch_upstream(client, url, params)
    except RelayError as e:
        relay_requests_total.labels(status=500).inc()
        relay_request_duration_seconds.observe(time.time() - start_time)
        logger.error("relay_failed", endpoint=endpoint, error=e.details.get("error"))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": e.message},
        )

    duration = time.time() - start_time
    relay_requests_total.labels(status=upstream.status_code).inc()
    relay_request_duration_seconds.observe(duration)
    logger.info("relay_completed", endpoint=endpoint, status_code=upstream.status_code, duration_seconds=duration)

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type="application/json",
        headers=CORS_HEADERS,
    )
