"""Device profile resolver backed by an OpenDDR-style classify endpoint."""
from __future__ import annotations

import logging
from typing import Any

import requests
from pydantic import ValidationError

from hls_adapter.core.config import Settings
from hls_adapter.core.errors import ResolutionError
from hls_adapter.domain.device import DeviceProfile

logger = logging.getLogger(__name__)


def _extract_attributes(document: Any) -> dict[str, Any]:
    """Return ``result.attributes`` from a classify response document.

    Raises
    ------
    ResolutionError
        If the document does not have the expected shape.
    """

    result = document.get("result") if isinstance(document, dict) else None
    attributes = result.get("attributes") if isinstance(result, dict) else None
    if not isinstance(attributes, dict):
        raise ResolutionError("Device lookup returned no result.attributes")
    return attributes


def resolve_device(user_agent: str, settings: Settings) -> DeviceProfile:
    """Look up the capability profile of the device sending ``user_agent``.

    Parameters
    ----------
    user_agent: str
        The inbound ``User-Agent`` header value (may be empty).
    settings: Settings
        Provides the DDR endpoint and transport timeout.

    Returns
    -------
    DeviceProfile
        The validated profile.

    Notes
    -----
    - Blocking; the request pipeline runs it in a worker thread alongside the
      origin fetch.
    - No fallback profile is ever substituted.

    Raises
    ------
    ResolutionError
        On transport failure, non-2xx status, non-JSON body or an unusable document.
    """

    try:
        resp = requests.get(settings.ddr_url, params={"ua": user_agent}, timeout=settings.ddr_timeout_sec)
        resp.raise_for_status()
    except requests.RequestException as ex:
        raise ResolutionError(f"Device lookup failed: {ex}") from ex

    try:
        document: Any = resp.json()
    except ValueError as ex:
        raise ResolutionError("Device lookup returned a non-JSON body") from ex

    attributes: dict[str, Any] = _extract_attributes(document)
    try:
        profile: DeviceProfile = DeviceProfile.model_validate(attributes)
    except ValidationError as ex:
        raise ResolutionError(f"Device lookup returned unusable attributes: {ex.error_count()} error(s)") from ex

    logger.debug(
        "Resolved device profile: %sx%s desktop=%s os=%s/%s year=%s",
        profile.display_width,
        profile.display_height,
        profile.is_desktop,
        profile.os_name,
        profile.os_version_major,
        profile.release_year,
    )
    return profile
