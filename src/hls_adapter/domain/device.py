"""Device profile model validated from device-description-repository attributes.

The DDR returns loosely typed attributes (numbers as strings, booleans as
``"true"``/``"false"``). This model coerces them once at the boundary so the
decision step only ever sees real integers and booleans.
"""
from __future__ import annotations

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_LEADING_INT = re.compile(r"^\s*(\d+)")


def _leading_int(value: Any) -> Optional[int]:
    """Extract the leading integer of ``value`` (``"4.4.2"`` -> ``4``), or ``None``."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


class DeviceProfile(BaseModel):
    """Capability snapshot of the requesting device.

    Notes
    -----
    - Field aliases match the OpenDDR ``classify`` attribute names; the model can
      also be built with the Python field names.
    - Immutable (``frozen``); a new profile is resolved for every request.
    - ``os_version_major`` and ``release_year`` become ``None`` when the DDR value
      is missing or unparseable, which never classifies a device as legacy.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    display_width: int = Field(alias="displayWidth", ge=0, description="Screen width in pixels")
    display_height: int = Field(alias="displayHeight", ge=0, description="Screen height in pixels")
    is_desktop: bool = Field(default=False, alias="is_desktop", description="Desktop-class device")
    os_name: Optional[str] = Field(default=None, alias="device_os", description="Operating system name")
    os_version_major: Optional[int] = Field(
        default=None, alias="device_os_version", description="Major OS version"
    )
    release_year: Optional[int] = Field(default=None, alias="release-year", description="Device release year")

    @field_validator("display_width", "display_height", mode="before")
    @classmethod
    def _coerce_dimension(cls, value: Any) -> Any:
        parsed: Optional[int] = _leading_int(value)
        return parsed if parsed is not None else value

    @field_validator("is_desktop", mode="before")
    @classmethod
    def _coerce_bool(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return bool(value)

    @field_validator("os_name", mode="before")
    @classmethod
    def _blank_os_is_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text: str = str(value).strip()
        return text or None

    @field_validator("os_version_major", "release_year", mode="before")
    @classmethod
    def _coerce_optional_int(cls, value: Any) -> Optional[int]:
        return _leading_int(value)

    @property
    def target_dimension(self) -> int:
        """The larger screen dimension."""

        return max(self.display_width, self.display_height)
