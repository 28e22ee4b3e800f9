# -*- coding: utf-8 -*-
"""
Tincture: Mixing and mapping colors across the CSS Color 4 spaces
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tincture_gamut.py — gamut tests, clipping and CSS gamut mapping.

``map_into_gamut_limits`` implements the CSS Color 4 binary search: keep the
Oklch lightness and hue, and search chroma for the most colorful candidate
whose clipped projection stays within a just-noticeable difference (deltaEOK
< JND).  The result is always inside the destination gamut.

Lab, Lch, Oklab, Oklch and both XYZ spaces are unbounded and pass through
untouched.  HSL and HWB are bounded by sRGB: they are tested, clipped and
mapped in sRGB and converted back.
"""

from __future__ import annotations

import logging
from typing import Final

from tincture_color import Color, Space
from tincture_colorengine import ColorMetrics, GamutMapping
from tincture_convert import to_space

__all__ = [
    "JND",
    "EPSILON",
    "in_gamut",
    "clip",
    "delta_eok",
    "map_into_gamut_limits",
]

logger = logging.getLogger(__name__)

# Just-noticeable difference in deltaEOK.
JND: Final[float] = 0.02
# Chroma search tolerance.
EPSILON: Final[float] = 0.0001

_SRGB_NOTATIONS: Final = (Space.HSL, Space.HWB)


def in_gamut(color: Color) -> bool:
    """
    True when every channel lies in [0, 1] (missing channels count as 0).

    Always true for spaces without gamut limits.
    """
    if not color.space.has_gamut_limits:
        return True
    if color.space in _SRGB_NOTATIONS:
        color = to_space(color, Space.SRGB)
    return bool(GamutMapping.in_unit_cube(color.to_array()))


def clip(color: Color) -> Color:
    """
    Clamps every present channel to [0, 1].  Missing channels stay missing.
    """
    if not color.space.has_gamut_limits:
        return color
    if color.space in _SRGB_NOTATIONS:
        return to_space(clip(to_space(color, Space.SRGB)), color.space)
    return color.with_values(GamutMapping.clip_absolute(color.to_array()))


def delta_eok(reference: Color, sample: Color) -> float:
    """Euclidean distance between the two colors in Oklab."""
    ref = to_space(reference, Space.OKLAB).to_array()
    smp = to_space(sample, Space.OKLAB).to_array()
    return float(ColorMetrics.delta_E_OK(ref, smp))


def _solid(color: Color, value: float) -> Color:
    """White (1.0) or black (0.0) in ``color``'s space, keeping its alpha."""
    return Color.new(color.space, value, value, value, color.alpha_value)


def map_into_gamut_limits(color: Color) -> Color:
    """
    Maps ``color`` into the gamut of its own space.

    Args:
        color: Any color.

    Returns:
        ``color`` itself when its space is unbounded or it is already in
        gamut; otherwise the CSS gamut-mapped color, which is in gamut and
        keeps the original alpha.
    """
    space = color.space
    if not space.has_gamut_limits or in_gamut(color):
        return color

    if space in _SRGB_NOTATIONS:
        return to_space(map_into_gamut_limits(to_space(color, Space.SRGB)), space)

    origin = to_space(color, Space.OKLCH)
    lightness = origin.to_array()[0]
    if lightness >= 1.0:
        logger.debug("gamut map %s: lightness %.6g >= 1, white", space.value, lightness)
        return _solid(color, 1.0)
    if lightness <= 0.0:
        logger.debug("gamut map %s: lightness %.6g <= 0, black", space.value, lightness)
        return _solid(color, 0.0)

    clipped = clip(color)
    if delta_eok(origin, clipped) < JND:
        logger.debug("gamut map %s: clip is within JND", space.value)
        return clipped

    low = 0.0
    high = origin.to_array()[1]
    low_in_gamut = True
    current = origin
    iterations = 0

    while high - low > EPSILON:
        iterations += 1
        chroma = (low + high) / 2.0
        current = origin.with_component(1, chroma)
        candidate = to_space(current, space)

        if low_in_gamut and in_gamut(candidate):
            low = chroma
            continue

        clipped = clip(candidate)
        error = delta_eok(clipped, current)
        if error < JND:
            if JND - error < EPSILON:
                logger.debug("gamut map %s: converged after %d steps", space.value, iterations)
                return clipped
            low_in_gamut = False
            low = chroma
        else:
            high = chroma

    logger.debug("gamut map %s: search exhausted after %d steps", space.value, iterations)
    return clip(to_space(current, space))
