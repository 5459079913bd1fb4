"""Manifest writer: applies a selection policy and serializes a master playlist.

All helpers are pure and return new lists; input sequences are never mutated.
"""
from __future__ import annotations

from typing import Sequence

from hls_adapter.domain.policy import PrimaryOrder, SelectionPolicy
from hls_adapter.domain.variants import Variant
from hls_adapter.services.parser import STREAM_INF_TAG

HEADER_LINES: tuple[str, ...] = ("#EXTM3U", "#EXT-X-VERSION:3")
DEFAULT_HIGH_BITRATE_BPS: int = 4_000_000


def apply_cap(variants: Sequence[Variant], cap_dimension: int) -> list[Variant]:
    """Drop variants larger than ``cap_dimension``, unless that would drop all of them.

    Notes
    -----
    - Variants without a resolution are kept.
    - Fail-open: when nothing fits, the original sequence is returned so a
      playlist with variants never becomes empty.
    """

    kept: list[Variant] = [v for v in variants if v.fits(cap_dimension)]
    return kept if kept else list(variants)


def sort_variants(variants: Sequence[Variant], order: PrimaryOrder) -> list[Variant]:
    """Stable sort by bandwidth; ascending for ``LOWEST_FIRST``, descending otherwise."""

    descending: bool = order is not PrimaryOrder.LOWEST_FIRST
    # sorted() keeps ties in input order with reverse=True too
    return sorted(variants, key=lambda v: v.bandwidth_bps, reverse=descending)


def _capped_best_index(variants: Sequence[Variant], cap_dimension: int, high_bitrate_bps: int) -> int:
    """Index of the head for ``CAPPED_BEST`` within a descending-sorted sequence."""

    for i, variant in enumerate(variants):
        if not variant.fits(cap_dimension):
            continue
        if variant.bandwidth_bps < high_bitrate_bps:
            return i
        # Fits but heavy: step down once, only onto a variant that still fits
        if i + 1 < len(variants) and variants[i + 1].fits(cap_dimension):
            return i + 1
        return i
    return 0


def _move_to_front(variants: Sequence[Variant], index: int) -> list[Variant]:
    items: list[Variant] = list(variants)
    if 0 < index < len(items):
        items.insert(0, items.pop(index))
    return items


def select_head(
    variants: Sequence[Variant],
    policy: SelectionPolicy,
    high_bitrate_bps: int = DEFAULT_HIGH_BITRATE_BPS,
) -> list[Variant]:
    """Move the policy's preferred variant to the front of a sorted sequence.

    Parameters
    ----------
    variants: Sequence[Variant]
        Variants already ordered by ``sort_variants`` for the same policy.
    policy: SelectionPolicy
        The selection policy.
    high_bitrate_bps: int
        Bitrate at or above which ``CAPPED_BEST`` prefers the next candidate.

    Returns
    -------
    list[Variant]
        The reordered variants; all other relative order is preserved.
    """

    if not variants:
        return []
    if policy.primary_order is PrimaryOrder.MIDDLE_FIRST:
        return _move_to_front(variants, len(variants) // 2)
    if policy.primary_order is PrimaryOrder.CAPPED_BEST:
        return _move_to_front(variants, _capped_best_index(variants, policy.cap_dimension, high_bitrate_bps))
    return list(variants)


def format_stream_inf(variant: Variant) -> str:
    """Render the ``#EXT-X-STREAM-INF`` line: bandwidth, optional resolution, then the rest."""

    parts: list[str] = [f"BANDWIDTH={variant.bandwidth_bps}"]
    if variant.resolution is not None:
        parts.append(f"RESOLUTION={variant.resolution}")
    if variant.extra_attributes:
        parts.append(variant.extra_attributes)
    return STREAM_INF_TAG + ",".join(parts)


def serialize(variants: Sequence[Variant], line_ending: str = "\n") -> str:
    """Serialize variants as a version 3 master playlist, every line terminated."""

    lines: list[str] = list(HEADER_LINES)
    for variant in variants:
        lines.append(format_stream_inf(variant))
        lines.append(variant.uri)
    return "".join(line + line_ending for line in lines)


def write_manifest(
    variants: Sequence[Variant],
    policy: SelectionPolicy,
    *,
    line_ending: str = "\n",
    high_bitrate_bps: int = DEFAULT_HIGH_BITRATE_BPS,
) -> str:
    """Filter, order and serialize ``variants`` according to ``policy``.

    Notes
    -----
    - Steps: optional cap filter, stable bandwidth sort, head selection, serialization.
    - Never fails; an empty input yields a header-only playlist.
    """

    selected: list[Variant] = apply_cap(variants, policy.cap_dimension) if policy.cap_enabled else list(variants)
    ordered: list[Variant] = sort_variants(selected, policy.primary_order)
    ordered = select_head(ordered, policy, high_bitrate_bps)
    return serialize(ordered, line_ending)
