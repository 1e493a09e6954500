"""Responsive sizing tiers for the widget."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

LOGGER = logging.getLogger(__name__)

# Ascending dp thresholds: below the first is SMALL, at or above the last is EXTRA_LARGE.
DEFAULT_SIZE_THRESHOLDS: tuple[int, int, int] = (100, 150, 200)


class SizeTier(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    EXTRA_LARGE = "extra_large"


TIER_ORDER: tuple[SizeTier, ...] = (
    SizeTier.SMALL,
    SizeTier.MEDIUM,
    SizeTier.LARGE,
    SizeTier.EXTRA_LARGE,
)


@dataclass(frozen=True)
class WidgetSize:
    """Widget dimensions in device-independent units."""

    width_dp: int
    height_dp: int
    tier: SizeTier

    @property
    def smaller_dp(self) -> int:
        return min(self.width_dp, self.height_dp)


@dataclass(frozen=True)
class SizingProfile:
    """Typography (sp) and dimension (dp) bundle for one tier."""

    tier: SizeTier
    title_text_size: float
    subtitle_text_size: float
    body_text_size: float
    button_text_size: float
    settings_button_text_size: float
    gauge_main_text_size: float
    gauge_sub_text_size: float
    calendar_text_size: float
    button_height: int
    nav_button_size: int
    settings_button_size: int
    gauge_size: int


SIZING_PROFILES: dict[SizeTier, SizingProfile] = {
    SizeTier.SMALL: SizingProfile(
        tier=SizeTier.SMALL,
        title_text_size=12.0,
        subtitle_text_size=11.0,
        body_text_size=10.0,
        button_text_size=11.0,
        settings_button_text_size=9.0,
        gauge_main_text_size=12.0,
        gauge_sub_text_size=9.0,
        calendar_text_size=9.0,
        button_height=32,
        nav_button_size=28,
        settings_button_size=28,
        gauge_size=120,
    ),
    SizeTier.MEDIUM: SizingProfile(
        tier=SizeTier.MEDIUM,
        title_text_size=14.0,
        subtitle_text_size=13.0,
        body_text_size=12.0,
        button_text_size=13.0,
        settings_button_text_size=10.0,
        gauge_main_text_size=14.0,
        gauge_sub_text_size=10.0,
        calendar_text_size=10.0,
        button_height=36,
        nav_button_size=32,
        settings_button_size=32,
        gauge_size=140,
    ),
    SizeTier.LARGE: SizingProfile(
        tier=SizeTier.LARGE,
        title_text_size=16.0,
        subtitle_text_size=15.0,
        body_text_size=14.0,
        button_text_size=15.0,
        settings_button_text_size=12.0,
        gauge_main_text_size=16.0,
        gauge_sub_text_size=12.0,
        calendar_text_size=12.0,
        button_height=40,
        nav_button_size=36,
        settings_button_size=36,
        gauge_size=160,
    ),
    SizeTier.EXTRA_LARGE: SizingProfile(
        tier=SizeTier.EXTRA_LARGE,
        title_text_size=18.0,
        subtitle_text_size=17.0,
        body_text_size=16.0,
        button_text_size=17.0,
        settings_button_text_size=14.0,
        gauge_main_text_size=18.0,
        gauge_sub_text_size=14.0,
        calendar_text_size=14.0,
        button_height=44,
        nav_button_size=40,
        settings_button_size=40,
        gauge_size=180,
    ),
}


def tier_for_dp(smaller_dp: int, thresholds: Sequence[int] = DEFAULT_SIZE_THRESHOLDS) -> SizeTier:
    """Map the smaller dp dimension onto a tier."""
    for tier, limit in zip(TIER_ORDER, sorted(thresholds), strict=False):
        if smaller_dp < limit:
            return tier
    return SizeTier.EXTRA_LARGE


def measure(
    width_px: int,
    height_px: int,
    density: float,
    thresholds: Sequence[int] = DEFAULT_SIZE_THRESHOLDS,
) -> WidgetSize:
    """Convert pixel dimensions to dp and classify them."""
    if density <= 0:
        density = 1.0
    width_dp = int(width_px / density)
    height_dp = int(height_px / density)
    tier = tier_for_dp(min(width_dp, height_dp), thresholds)
    LOGGER.debug("[sizing] Widget size: %sx%sdp, category: %s", width_dp, height_dp, tier.value)
    return WidgetSize(width_dp=width_dp, height_dp=height_dp, tier=tier)


def resolve_tier(
    width_px: int,
    height_px: int,
    density: float,
    thresholds: Sequence[int] = DEFAULT_SIZE_THRESHOLDS,
) -> SizeTier:
    return measure(width_px, height_px, density, thresholds).tier


def resolve_profile(
    width_px: int,
    height_px: int,
    density: float,
    thresholds: Sequence[int] = DEFAULT_SIZE_THRESHOLDS,
) -> SizingProfile:
    """Return the fixed sizing profile for a widget of the given physical size."""
    return SIZING_PROFILES[resolve_tier(width_px, height_px, density, thresholds)]
