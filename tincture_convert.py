# -*- coding: utf-8 -*-
"""
Tincture: Mixing and mapping colors across the CSS Color 4 spaces
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tincture_convert.py — conversion dispatcher.

Routing rules:
  1.  Same space: the color is returned as is (colors are immutable).
  2.  Pairs one conceptual step apart use a direct shortcut
      (sRGB <-> sRGB-linear, sRGB <-> HSL/HWB, HSL <-> HWB, XYZ-D50 <-> XYZ-D65,
      Lab <-> Lch, Oklab <-> Oklch).
  3.  Everything else pivots through the XYZ-D65 base.

Missing components then carry forward to the analogous channel of the target
space (CSS Color 4, "interpolating with missing components"); flags with no
analogue are dropped.  Alpha, missing or not, is always kept.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Final, Tuple

import numpy as np

from tincture_color import Color, Flags, Space
from tincture_colorengine import (
    LCH_POWERLESS_CHROMA,
    OKLCH_POWERLESS_CHROMA,
    ArrayFloat,
    ColorSpaceEngine,
    handle_shapes,
)
from tincture_models import (
    Hsl,
    Hwb,
    Lab,
    Lch,
    Model,
    Oklab,
    Oklch,
    Srgb,
    SrgbLinear,
    XyzD50,
    XyzD65,
    model_for,
)

__all__ = [
    "to_space",
    "analogous_missing_components",
    "convert_array",
]

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# 1.  Shortcut tables
# ═══════════════════════════════════════════════════════════════════════════════
_SHORTCUTS: Final[Dict[Tuple[Space, Space], Callable[[Model], Model]]] = {
    (Space.SRGB, Space.SRGB_LINEAR): Srgb.to_linear_light,
    (Space.SRGB_LINEAR, Space.SRGB): SrgbLinear.to_gamma_encoded,
    (Space.SRGB, Space.HSL): Srgb.to_hsl,
    (Space.HSL, Space.SRGB): Hsl.to_srgb,
    (Space.SRGB, Space.HWB): Srgb.to_hwb,
    (Space.HWB, Space.SRGB): Hwb.to_srgb,
    (Space.HSL, Space.HWB): Hsl.to_hwb,
    (Space.HWB, Space.HSL): Hwb.to_hsl,
    (Space.XYZ_D50, Space.XYZ_D65): XyzD50.transfer,
    (Space.XYZ_D65, Space.XYZ_D50): XyzD65.transfer,
    (Space.LAB, Space.LCH): Lab.to_polar,
    (Space.LCH, Space.LAB): Lch.to_rectangular,
    (Space.OKLAB, Space.OKLCH): Oklab.to_polar,
    (Space.OKLCH, Space.OKLAB): Oklch.to_rectangular,
}

# Same routes over raw (N, 3) arrays for batch conversion.
_ARRAY_SHORTCUTS: Final[Dict[Tuple[Space, Space], Callable[[ArrayFloat], ArrayFloat]]] = {
    (Space.SRGB, Space.SRGB_LINEAR): lambda v: ColorSpaceEngine._to_linear_raw(v, "srgb"),
    (Space.SRGB_LINEAR, Space.SRGB): lambda v: ColorSpaceEngine._from_linear_raw(v, "srgb"),
    (Space.SRGB, Space.HSL): ColorSpaceEngine._srgb_to_hsl_raw,
    (Space.HSL, Space.SRGB): ColorSpaceEngine._hsl_to_srgb_raw,
    (Space.SRGB, Space.HWB): ColorSpaceEngine._srgb_to_hwb_raw,
    (Space.HWB, Space.SRGB): ColorSpaceEngine._hwb_to_srgb_raw,
    (Space.HSL, Space.HWB): lambda v: ColorSpaceEngine._srgb_to_hwb_raw(ColorSpaceEngine._hsl_to_srgb_raw(v)),
    (Space.HWB, Space.HSL): lambda v: ColorSpaceEngine._srgb_to_hsl_raw(ColorSpaceEngine._hwb_to_srgb_raw(v)),
    (Space.XYZ_D50, Space.XYZ_D65): XyzD50.to_base_raw,
    (Space.XYZ_D65, Space.XYZ_D50): XyzD50.from_base_raw,
    (Space.LAB, Space.LCH): lambda v: ColorSpaceEngine._rect_to_polar_raw(v, LCH_POWERLESS_CHROMA),
    (Space.LCH, Space.LAB): ColorSpaceEngine._polar_to_rect_raw,
    (Space.OKLAB, Space.OKLCH): lambda v: ColorSpaceEngine._rect_to_polar_raw(v, OKLCH_POWERLESS_CHROMA),
    (Space.OKLCH, Space.OKLAB): ColorSpaceEngine._polar_to_rect_raw,
}


# ═══════════════════════════════════════════════════════════════════════════════
# 2.  Analogous missing components
# ═══════════════════════════════════════════════════════════════════════════════
# Each table maps a space to the flag of its channel in one analogous group.
_LIGHTNESS: Final[Dict[Space, Flags]] = {
    Space.LAB: Flags.C0_IS_NONE,
    Space.LCH: Flags.C0_IS_NONE,
    Space.OKLAB: Flags.C0_IS_NONE,
    Space.OKLCH: Flags.C0_IS_NONE,
    Space.HSL: Flags.C2_IS_NONE,
}
_COLORFULNESS: Final[Dict[Space, Flags]] = {
    Space.HSL: Flags.C1_IS_NONE,
    Space.LCH: Flags.C1_IS_NONE,
    Space.OKLCH: Flags.C1_IS_NONE,
}
_HUE: Final[Dict[Space, Flags]] = {
    Space.HSL: Flags.C0_IS_NONE,
    Space.HWB: Flags.C0_IS_NONE,
    Space.LCH: Flags.C2_IS_NONE,
    Space.OKLCH: Flags.C2_IS_NONE,
}
_OPPONENT_A: Final[Dict[Space, Flags]] = {
    Space.LAB: Flags.C1_IS_NONE,
    Space.OKLAB: Flags.C1_IS_NONE,
}
_OPPONENT_B: Final[Dict[Space, Flags]] = {
    Space.LAB: Flags.C2_IS_NONE,
    Space.OKLAB: Flags.C2_IS_NONE,
}
_ANALOGOUS_GROUPS = (_LIGHTNESS, _COLORFULNESS, _HUE, _OPPONENT_A, _OPPONENT_B)


def analogous_missing_components(from_space: Space, to_space: Space, flags: Flags) -> Flags:
    """
    Remaps missing-component flags from ``from_space`` to ``to_space``.

    Channels only carry over between spaces whose channels mean the same
    thing: the whole RGB family shares red/green/blue, the two XYZ spaces
    share x/y/z, and the cylindrical and Lab-like spaces share lightness,
    colorfulness, hue and the opponent axes as far as each has them.  A
    missing red never implies a missing X.  The alpha flag always carries.
    """
    if from_space is to_space:
        return flags
    if (from_space.is_rgb_like and to_space.is_rgb_like) or (from_space.is_xyz_like and to_space.is_xyz_like):
        return flags

    result = flags & Flags.ALPHA_IS_NONE
    for group in _ANALOGOUS_GROUPS:
        src = group.get(from_space)
        dst = group.get(to_space)
        if src is not None and dst is not None and flags & src:
            result |= dst
    return Flags(result)


# ═══════════════════════════════════════════════════════════════════════════════
# 3.  Dispatcher
# ═══════════════════════════════════════════════════════════════════════════════
def to_space(color: Color, space: Space) -> Color:
    """
    Converts ``color`` into ``space``.

    Args:
        color: Any color.
        space: Target space.

    Returns:
        The converted color.  Powerless results (e.g. the hue of a gray) and
        channels analogous to a missing source channel come back missing.

    Raises:
        TypeError: ``space`` is not a ``Space``.
    """
    target_model = model_for(space)
    if color.space is space:
        return color

    source = model_for(color.space).from_color(color)
    shortcut = _SHORTCUTS.get((color.space, space))
    if shortcut is not None:
        logger.debug("to_space %s -> %s via shortcut", color.space.value, space.value)
        converted = shortcut(source)
    else:
        logger.debug("to_space %s -> %s via xyz-d65", color.space.value, space.value)
        converted = target_model.from_base(source.to_base())

    result = converted.to_color()
    carried = analogous_missing_components(color.space, space, color.flags)
    if carried & ~result.flags:
        result = result.with_missing(carried)
    return result


def convert_array(values: ArrayFloat, source: Space, target: Space) -> ArrayFloat:
    """
    Converts raw component arrays between two spaces.

    Follows the same routes as ``to_space`` but tracks no flags.  NaN input
    is treated as 0.0; powerless hues come out as NaN.

    Args:
        values: Components in ``source``, shape (N, 3) or (3,).
        source: Space of ``values``.
        target: Space to convert into.

    Returns:
        Components in ``target``, same shape as ``values``.
    """
    source_model = model_for(source)
    target_model = model_for(target)

    @handle_shapes
    def _convert(arr: ArrayFloat) -> ArrayFloat:
        arr = np.nan_to_num(arr, nan=0.0)
        if source is target:
            return arr
        shortcut = _ARRAY_SHORTCUTS.get((source, target))
        if shortcut is not None:
            return shortcut(arr)
        return target_model.from_base_raw(source_model.to_base_raw(arr))

    return _convert(values)
