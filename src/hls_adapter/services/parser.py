"""Master playlist parser producing ``Variant`` records.

Parsing is a single pass over the materialized lines of the document; the
module-level patterns carry no scan position between calls.
"""
from __future__ import annotations

import re
from typing import Optional

from hls_adapter.core.errors import ParseError
from hls_adapter.domain.variants import Resolution, Variant

STREAM_INF_TAG: str = "#EXT-X-STREAM-INF:"

# One attribute of an attribute-list; quoted values may contain commas
_ATTRIBUTE = re.compile(r'\s*([A-Za-z0-9-]+)=("[^"]*"|[^,]*)\s*(?:,|$)')
_RESOLUTION = re.compile(r"^(\d+)x(\d+)$")
_BANDWIDTH = re.compile(r"^\d+$")


def detect_line_ending(text: str) -> str:
    """Return ``"\\r\\n"`` when ``text`` uses CRLF line endings, else ``"\\n"``."""

    return "\r\n" if "\r\n" in text else "\n"


def split_attributes(attribute_list: str) -> list[tuple[str, str]]:
    """Split an HLS attribute list into ``(name, raw_value)`` pairs in source order.

    Notes
    -----
    - Quoted values keep their quotes so they can be written back verbatim.
    - Malformed trailing text without ``NAME=`` is dropped.
    """

    pairs: list[tuple[str, str]] = []
    pos: int = 0
    length: int = len(attribute_list)
    while pos < length:
        match = _ATTRIBUTE.match(attribute_list, pos)
        if match is None or match.end() == pos:
            break
        pairs.append((match.group(1), match.group(2).strip()))
        pos = match.end()
    return pairs


def _is_skippable(line: str) -> bool:
    """Blank lines and plain comments (``#`` not followed by ``EXT``) never hold a URI."""

    stripped: str = line.strip()
    return not stripped or (stripped.startswith("#") and not stripped.startswith("#EXT"))


def _is_uri_line(line: str) -> bool:
    stripped: str = line.strip()
    return bool(stripped) and not stripped.startswith("#")


def _parse_stream_inf(attribute_list: str, uri: str) -> Optional[Variant]:
    """Build a Variant from a stream-info attribute list, or ``None`` without a bandwidth."""

    bandwidth: Optional[int] = None
    resolution: Optional[Resolution] = None
    extras: list[str] = []

    for name, value in split_attributes(attribute_list):
        upper: str = name.upper()
        if upper == "BANDWIDTH" and bandwidth is None and _BANDWIDTH.match(value):
            bandwidth = int(value)
            continue
        if upper == "RESOLUTION" and resolution is None:
            res_match = _RESOLUTION.match(value)
            if res_match:
                resolution = Resolution(width=int(res_match.group(1)), height=int(res_match.group(2)))
                continue
        extras.append(f"{name}={value}")

    if bandwidth is None:
        return None
    return Variant(
        bandwidth_bps=bandwidth,
        uri=uri,
        resolution=resolution,
        extra_attributes=",".join(extras) if extras else None,
    )


def parse_manifest(text: str) -> list[Variant]:
    """Parse master playlist text into variants, in source order.

    Parameters
    ----------
    text: str
        Raw playlist body; LF and CRLF line endings are both accepted.

    Returns
    -------
    list[Variant]
        One entry per stream-info/URI pair. Empty when none are found.

    Notes
    -----
    - The URI is the next non-blank, non-comment line after the stream-info tag.
    - Stream-info lines without an integer ``BANDWIDTH`` are skipped together with
      their URI line; parsing continues with the rest of the document.
    - A stream-info tag directly followed by another tag has no URI and is skipped,
      as long as some URI line still follows further down.

    Raises
    ------
    ParseError
        If a stream-info line carrying a bandwidth has no URI line anywhere after it.
    """

    lines: list[str] = text.splitlines()
    variants: list[Variant] = []
    index: int = 0
    total: int = len(lines)
    last_uri_index: int = max((i for i, raw in enumerate(lines) if _is_uri_line(raw)), default=-1)

    while index < total:
        line: str = lines[index].strip()
        if not line.startswith(STREAM_INF_TAG):
            index += 1
            continue

        tag_line_number: int = index + 1
        attribute_list: str = line[len(STREAM_INF_TAG):]
        uri_index: int = index + 1
        while uri_index < total and _is_skippable(lines[uri_index]):
            uri_index += 1

        if uri_index > last_uri_index:
            if _parse_stream_inf(attribute_list, "") is not None:
                raise ParseError("Stream-info tag has no following URI line", line_number=tag_line_number)
            index = uri_index
            continue

        uri: str = lines[uri_index].strip()
        if uri.startswith("#EXT"):
            # Tag without a URI; let the next tag be examined on its own
            index = uri_index
            continue

        variant: Optional[Variant] = _parse_stream_inf(attribute_list, uri)
        if variant is not None:
            variants.append(variant)
        index = uri_index + 1

    return variants
