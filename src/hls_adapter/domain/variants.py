"""Domain records for master-playlist variant streams."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Resolution:
    """Pixel dimensions declared by a variant's ``RESOLUTION`` attribute."""

    width: int
    height: int

    @property
    def larger_dimension(self) -> int:
        """The larger of width and height, used to compare against screen caps."""

        return max(self.width, self.height)

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class Variant:
    """One ``#EXT-X-STREAM-INF`` entry of a master playlist.

    Notes
    -----
    - ``extra_attributes`` holds every attribute other than ``BANDWIDTH`` and a
      well-formed ``RESOLUTION``, verbatim and in source order, so that codecs,
      frame rates and renditions round-trip untouched.
    - Instances are immutable; the writer reorders references, never edits them.
    """

    bandwidth_bps: int
    uri: str
    resolution: Optional[Resolution] = None
    extra_attributes: Optional[str] = None

    def fits(self, dimension: int) -> bool:
        """Return whether this variant fits a screen whose larger side is ``dimension``.

        A variant without a declared resolution is treated as fitting.
        """

        if self.resolution is None:
            return True
        return self.resolution.larger_dimension <= dimension
