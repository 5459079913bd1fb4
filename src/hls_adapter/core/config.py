"""Application configuration utilities.

This module defines application settings loaded from environment variables,
including the upstream addresses and the operator-tunable selection thresholds.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from hls_adapter.domain.policy import DecisionRules
from hls_adapter.services.parser import detect_line_ending

_LINE_ENDINGS: dict[str, str] = {"lf": "\n", "crlf": "\r\n"}


class Settings(BaseSettings):
    """Typed application settings loaded from the environment.

    Notes
    -----
    - Environment variables are read with the ``HLSA_`` prefix (e.g., ``HLSA_DDR_URL``).
    - The legacy-device thresholds and the output line ending are operator choices;
      the defaults suit typical phone and desktop fleets.
    """

    model_config = SettingsConfigDict(env_prefix="HLSA_", env_file=".env", extra="ignore")

    app_name: str = Field(default="HLS Playlist Adapter", description="Application display name")
    debug: bool = Field(default=False, description="Enable debug mode")

    origin_url: str = Field(
        default="http://127.0.0.1:8080",
        description="Base URL of the upstream origin serving the original playlists",
    )
    ddr_url: str = Field(
        default="http://127.0.0.1:8081/servlet/classify",
        description="Classify endpoint of the device description repository (OpenDDR-style)",
    )
    origin_timeout_sec: float = Field(default=10.0, description="Transport timeout for origin fetches")
    ddr_timeout_sec: float = Field(default=5.0, description="Transport timeout for device lookups")

    line_ending: Literal["auto", "lf", "crlf"] = Field(
        default="auto",
        description="Output line ending; 'auto' reuses the convention of the upstream playlist",
    )
    playlist_suffixes: list[str] = Field(
        default_factory=lambda: [".m3u8"],
        description="Request path suffixes that are adapted; everything else is proxied as-is",
    )

    ios_legacy_below: int = Field(default=7, description="iOS major versions below this are legacy")
    android_legacy_below: int = Field(default=6, description="Android major versions below this are legacy")
    legacy_release_year_before: int = Field(default=2012, description="Devices released before this are legacy")
    desktop_dimension: int = Field(default=1280, description="Best-fit target dimension for desktops")
    high_bitrate_bps: int = Field(
        default=4_000_000,
        description="Bitrate at or above which best-fit selection steps down one variant",
    )

    def decision_rules(self) -> DecisionRules:
        """Build the decision thresholds from the configured values."""

        return DecisionRules(
            ios_legacy_below=self.ios_legacy_below,
            android_legacy_below=self.android_legacy_below,
            legacy_release_year_before=self.legacy_release_year_before,
            desktop_dimension=self.desktop_dimension,
        )

    def resolve_line_ending(self, upstream_text: str) -> str:
        """Return the line ending to write, detecting it from ``upstream_text`` in auto mode."""

        if self.line_ending == "auto":
            return detect_line_ending(upstream_text)
        return _LINE_ENDINGS[self.line_ending]

    def is_playlist_path(self, path: str) -> bool:
        """Return whether requests for ``path`` should have their playlist adapted."""

        lowered: str = path.lower()
        return any(lowered.endswith(suffix.lower()) for suffix in self.playlist_suffixes)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache application settings.

    Notes
    -----
    - Cached with ``functools.lru_cache(maxsize=1)`` to provide a single settings instance
      across the process. Tests call ``get_settings.cache_clear()`` after changing env.

    Returns
    -------
    Settings
        The application settings instance.
    """

    return Settings()
