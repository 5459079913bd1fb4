"""Origin client forwarding inbound requests to the upstream server."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

import requests

from hls_adapter.core.config import Settings

# Recomputed by the transport for the outgoing request
_DROPPED_REQUEST_HEADERS: frozenset[str] = frozenset({"host", "content-length"})


@dataclass
class UpstreamResponse:
    """The parts of an origin response the adapter needs to build its own response."""

    status_code: int
    reason: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        """Body decoded as UTF-8, the only encoding HLS playlists may use."""

        return self.body.decode("utf-8", errors="replace")


def build_origin_url(settings: Settings, path: str, query: str = "") -> str:
    """Join the configured origin base URL with the inbound path and query string."""

    base: str = settings.origin_url.rstrip("/")
    url: str = f"{base}/{path.lstrip('/')}"
    return f"{url}?{query}" if query else url


def fetch_upstream(
    method: str,
    url: str,
    headers: Mapping[str, str],
    body: bytes,
    settings: Settings,
) -> UpstreamResponse:
    """Forward a request to the origin unmodified and capture the response.

    Notes
    -----
    - Blocking; run in a worker thread by the request pipeline.
    - Transport failures propagate as ``requests.RequestException``.
    - ``requests`` transparently decodes gzip/deflate bodies, so ``body`` is the
      decoded payload.
    """

    forward_headers: dict[str, str] = {
        name: value for name, value in headers.items() if name.lower() not in _DROPPED_REQUEST_HEADERS
    }
    resp = requests.request(
        method,
        url,
        headers=forward_headers,
        data=body or None,
        timeout=settings.origin_timeout_sec,
        allow_redirects=False,
    )
    return UpstreamResponse(
        status_code=resp.status_code,
        reason=resp.reason or "",
        headers=dict(resp.headers),
        body=resp.content,
    )
