"""Decision step mapping a device profile to a selection policy."""
from __future__ import annotations

from hls_adapter.domain.device import DeviceProfile
from hls_adapter.domain.policy import DecisionRules, PrimaryOrder, SelectionPolicy

IOS: str = "iOS"
ANDROID: str = "Android"


def is_legacy(profile: DeviceProfile, rules: DecisionRules) -> bool:
    """Return whether a non-desktop device should be served conservatively.

    Notes
    -----
    - Old iOS or Android majors, or an old release year, make a device legacy.
    - Missing version or year information never makes a device legacy.
    """

    version = profile.os_version_major
    if version is not None:
        if profile.os_name == IOS and version < rules.ios_legacy_below:
            return True
        if profile.os_name == ANDROID and version < rules.android_legacy_below:
            return True
    return profile.release_year is not None and profile.release_year < rules.legacy_release_year_before


def decide(profile: DeviceProfile, variant_count: int, rules: DecisionRules = DecisionRules()) -> SelectionPolicy:
    """Choose how the playlist should be filtered and ordered for ``profile``.

    Parameters
    ----------
    profile: DeviceProfile
        The requesting device.
    variant_count: int
        Number of parsed variants. The current rules do not depend on it.
    rules: DecisionRules
        Legacy thresholds and the desktop target dimension.

    Returns
    -------
    SelectionPolicy
        Desktops get an uncapped best fit against ``rules.desktop_dimension``;
        legacy devices get lowest-first with a hard cap at the screen size;
        everything else gets an uncapped best fit against the screen size.
    """

    target: int = profile.target_dimension

    if profile.is_desktop:
        return SelectionPolicy(
            primary_order=PrimaryOrder.CAPPED_BEST,
            cap_enabled=False,
            cap_dimension=rules.desktop_dimension,
        )

    if is_legacy(profile, rules):
        return SelectionPolicy(primary_order=PrimaryOrder.LOWEST_FIRST, cap_enabled=True, cap_dimension=target)

    return SelectionPolicy(primary_order=PrimaryOrder.CAPPED_BEST, cap_enabled=False, cap_dimension=target)
