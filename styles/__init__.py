"""Shared style constants for FEEDPLAY."""

COLORS = {
    "bass": "#cc5500",
    "primary": "#ff8c00",
    "highlight": "#ffb347",
    "background": "#1a1a1a",
    "muted": "#888888",
    "dim": "#555555",
    "inactive": "#333333",
}

COLOR_BASS = COLORS["bass"]
COLOR_PRIMARY = COLORS["primary"]
COLOR_HIGHLIGHT = COLORS["highlight"]
COLOR_BACKGROUND = COLORS["background"]
COLOR_MUTED = COLORS["muted"]
COLOR_DIM = COLORS["dim"]
COLOR_INACTIVE = COLORS["inactive"]
