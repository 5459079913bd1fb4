"""Error kinds raised at the adapter's component boundaries."""
from __future__ import annotations


class AdapterError(Exception):
    """Base class for failures that abort playlist adaptation."""

    kind: str = "AdapterError"


class ResolutionError(AdapterError):
    """The device lookup failed or returned an unusable document."""

    kind = "ResolutionError"


class ParseError(AdapterError):
    """The upstream body is not a structurally sound master playlist."""

    kind = "ParseError"

    def __init__(self, message: str, line_number: int | None = None) -> None:
        super().__init__(message)
        self.line_number: int | None = line_number

    def __str__(self) -> str:
        base: str = super().__str__()
        if self.line_number is None:
            return base
        return f"{base} (line {self.line_number})"
