"""Request pipeline: concurrent profile lookup and origin fetch, then playlist adaptation."""
from __future__ import annotations

import asyncio
import logging
from typing import Mapping

from hls_adapter.core.config import Settings
from hls_adapter.domain.device import DeviceProfile
from hls_adapter.domain.policy import SelectionPolicy
from hls_adapter.domain.variants import Variant
from hls_adapter.services.decision import decide
from hls_adapter.services.origin import UpstreamResponse, build_origin_url, fetch_upstream
from hls_adapter.services.parser import parse_manifest
from hls_adapter.services.resolver import resolve_device
from hls_adapter.services.writer import write_manifest

logger = logging.getLogger(__name__)

# The body is re-encoded after adaptation, so these no longer describe it
_STALE_RESPONSE_HEADERS: frozenset[str] = frozenset({"content-length", "content-encoding", "transfer-encoding"})


def adapt_playlist(text: str, profile: DeviceProfile, settings: Settings) -> str:
    """Rewrite master playlist ``text`` for ``profile``.

    Notes
    -----
    - Straight-line parse, decide, write; any failure propagates to the caller.
    - The output line ending follows ``settings.line_ending``.

    Raises
    ------
    ParseError
        If the upstream playlist is structurally broken.
    """

    variants: list[Variant] = parse_manifest(text)
    policy: SelectionPolicy = decide(profile, len(variants), settings.decision_rules())
    logger.debug(
        "Adapting playlist",
        extra={
            "variants": len(variants),
            "order": policy.primary_order.value,
            "cap_enabled": policy.cap_enabled,
            "cap_dimension": policy.cap_dimension,
        },
    )
    return write_manifest(
        variants,
        policy,
        line_ending=settings.resolve_line_ending(text),
        high_bitrate_bps=settings.high_bitrate_bps,
    )


def _with_body(upstream: UpstreamResponse, body: bytes) -> UpstreamResponse:
    headers: dict[str, str] = {
        name: value for name, value in upstream.headers.items() if name.lower() not in _STALE_RESPONSE_HEADERS
    }
    headers["Content-Length"] = str(len(body))
    return UpstreamResponse(
        status_code=upstream.status_code,
        reason=upstream.reason,
        headers=headers,
        body=body,
    )


def rewrite_response(upstream: UpstreamResponse, body: str) -> UpstreamResponse:
    """Carry status and headers over to a new body, recomputing ``Content-Length``."""

    return _with_body(upstream, body.encode("utf-8"))


def passthrough_response(upstream: UpstreamResponse, *, keep_length: bool = False) -> UpstreamResponse:
    """Return the origin response as-is, minus headers invalidated by body decoding.

    With ``keep_length`` (HEAD responses, which carry no body) the origin's
    ``Content-Length`` and ``Content-Encoding`` still describe the resource and are kept.
    """

    if not keep_length:
        return _with_body(upstream, upstream.body)
    headers: dict[str, str] = {
        name: value for name, value in upstream.headers.items() if name.lower() != "transfer-encoding"
    }
    return UpstreamResponse(status_code=upstream.status_code, reason=upstream.reason, headers=headers, body=b"")


async def handle_request(
    method: str,
    path: str,
    query: str,
    headers: Mapping[str, str],
    body: bytes,
    settings: Settings,
) -> UpstreamResponse:
    """Serve one inbound request through the origin, adapting master playlists.

    Parameters
    ----------
    method: str
        Inbound HTTP method, forwarded unchanged.
    path: str
        Inbound path; only paths matching ``settings.playlist_suffixes`` are adapted.
    query: str
        Raw query string, forwarded unchanged.
    headers: Mapping[str, str]
        Inbound headers; ``User-Agent`` feeds the device lookup.
    body: bytes
        Inbound body, forwarded unchanged.
    settings: Settings
        Application settings.

    Returns
    -------
    UpstreamResponse
        The response to send to the client.

    Notes
    -----
    - Playlist requests run the device lookup and the origin fetch concurrently in
      worker threads; both must succeed before parsing starts.
    - Non-2xx origin responses are returned without adaptation.
    - HEAD requests are proxied without a device lookup; their headers, including
      ``Content-Length``, come from the origin unchanged.
    - There is no per-stage recovery: ``ResolutionError``, ``ParseError`` and any
      transport error propagate to the caller.
    """

    url: str = build_origin_url(settings, path, query)

    is_head: bool = method.upper() == "HEAD"
    if is_head or not settings.is_playlist_path(path):
        upstream: UpstreamResponse = await asyncio.to_thread(fetch_upstream, method, url, headers, body, settings)
        return passthrough_response(upstream, keep_length=is_head)

    user_agent: str = next((v for k, v in headers.items() if k.lower() == "user-agent"), "")
    profile, upstream = await asyncio.gather(
        asyncio.to_thread(resolve_device, user_agent, settings),
        asyncio.to_thread(fetch_upstream, method, url, headers, body, settings),
    )

    if not upstream.ok:
        logger.info(
            "Origin error passed through",
            extra={"path": path, "status": upstream.status_code},
        )
        return passthrough_response(upstream)

    output: str = adapt_playlist(upstream.text, profile, settings)
    return rewrite_response(upstream, output)
