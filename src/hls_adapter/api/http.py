"""HTTP routes for the playlist adapter edge service."""
from __future__ import annotations

import logging
import traceback

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, Response

from hls_adapter.core.config import Settings, get_settings
from hls_adapter.core.errors import AdapterError
from hls_adapter.services.origin import UpstreamResponse
from hls_adapter.services.pipeline import handle_request

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter(tags=["edge"])

_PROXIED_METHODS: list[str] = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def error_response(ex: BaseException) -> PlainTextResponse:
    """Build the 500 response carrying the error kind, message and traceback.

    Notes
    -----
    - Every failure surfaces the same way; no partial playlist is ever returned.
    """

    kind: str = ex.kind if isinstance(ex, AdapterError) else type(ex).__name__
    trace: str = "".join(traceback.format_exception(type(ex), ex, ex.__traceback__))
    return PlainTextResponse(f"{kind}: {ex}\n\n{trace}", status_code=500)


@router.api_route("/{path:path}", methods=_PROXIED_METHODS)
async def proxy(path: str, request: Request) -> Response:
    """Forward a request to the origin, adapting master playlists on the way back.

    Parameters
    ----------
    path: str
        Request path relative to the service root.
    request: Request
        The inbound request; its method, query, headers and body are forwarded.

    Returns
    -------
    Response
        The origin's status and headers with the (possibly rewritten) body.

    Notes
    -----
    - Failures of any kind (device lookup, parse, transport) become HTTP 500.
    - The reason phrase is the standard one for the status code; ASGI cannot carry
      the origin's custom phrase.
    """

    settings: Settings = get_settings()
    body: bytes = await request.body()
    try:
        result: UpstreamResponse = await handle_request(
            method=request.method,
            path=path,
            query=request.url.query,
            headers=dict(request.headers),
            body=body,
            settings=settings,
        )
    except Exception as ex:  # noqa: BLE001 - every failure aborts the request with a 500
        logger.exception("Request for /%s failed", path)
        return error_response(ex)

    return Response(content=result.body, status_code=result.status_code, headers=result.headers)
