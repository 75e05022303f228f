"""Design tokens for the player controls.

Usage:
    from castplay.ui.tokens import spacing, typography, sizing

    layout.setSpacing(spacing.md)
    button.setFixedSize(sizing.play_button, sizing.play_button)
    label.setFixedWidth(sizing.time_label)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SpacingTokens:
    """Spacing scale in pixels."""

    sm: int = 5  # Control bar margins
    md: int = 8  # Between control groups


@dataclass(frozen=True)
class TypographyTokens:
    """Font sizes in points."""

    time_label: int = 10  # Current / total clock labels


@dataclass(frozen=True)
class SizingTokens:
    """Widget sizing constants in pixels."""

    play_button: int = 40  # Round play/pause button
    play_icon: int = 20  # Icon inside the play/pause button
    time_label: int = 50  # Fixed width of each clock label
    controls_height: int = 20  # Slider row height
    border_radius_button: int = 20  # Half of play_button, for a circle
    min_video_height: int = 180  # Minimum height of the video area


@dataclass(frozen=True)
class SeekTokens:
    """Progress slider resolution."""

    resolution: int = 1000  # Slider steps from start to end of media


# Module-level singletons, imported by widgets
spacing = SpacingTokens()
typography = TypographyTokens()
sizing = SizingTokens()
seek = SeekTokens()
