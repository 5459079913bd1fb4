"""Selection policy produced by the decision step and consumed by the writer."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PrimaryOrder(str, Enum):
    """How the writer orders variants and which one it puts first.

    Notes
    -----
    - ``HIGHEST_FIRST`` and ``LOWEST_FIRST`` rely on the bandwidth sort alone.
    - ``MIDDLE_FIRST`` promotes the median of the descending order.
    - ``CAPPED_BEST`` promotes the best variant that fits the cap dimension.
    """

    HIGHEST_FIRST = "highest_first"
    LOWEST_FIRST = "lowest_first"
    MIDDLE_FIRST = "middle_first"
    CAPPED_BEST = "capped_best"


@dataclass(frozen=True)
class SelectionPolicy:
    """Ordering and filtering instructions for one playlist rewrite."""

    primary_order: PrimaryOrder
    cap_enabled: bool
    cap_dimension: int


@dataclass(frozen=True)
class DecisionRules:
    """Thresholds used to classify devices; operators override them via settings."""

    ios_legacy_below: int = 7
    android_legacy_below: int = 6
    legacy_release_year_before: int = 2012
    desktop_dimension: int = 1280
