"""Colour and motion helpers used by the demo window."""

from __future__ import annotations

import math


def hsv_to_rgb(h: float, s: float, v: float) -> tuple[float, float, float]:
    """Convert hue (degrees), saturation and value to an RGB triple in [0, 1]."""
    h = math.fmod(h, 360.0)
    c = v * s
    x = c * (1.0 - abs(math.fmod(h / 60.0, 2.0) - 1.0))
    m = v - c
    if h < 60.0:
        r, g, b = c, x, 0.0
    elif h < 120.0:
        r, g, b = x, c, 0.0
    elif h < 180.0:
        r, g, b = 0.0, c, x
    elif h < 240.0:
        r, g, b = 0.0, x, c
    elif h < 300.0:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x
    return r + m, g + m, b + m


def bounce(position: float, velocity: float, limit: float) -> tuple[float, float]:
    """Clamp ``position`` to ``[0, limit]``, reflecting ``velocity`` at the edges."""
    if position <= 0.0:
        return 0.0, abs(velocity)
    if position >= limit:
        return limit, -abs(velocity)
    return position, velocity