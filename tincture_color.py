# -*- coding: utf-8 -*-
"""
Tincture: Mixing and mapping colors across the CSS Color 4 spaces
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tincture_color.py — numeric primitives and the generic Color value.

A color is three components plus alpha, tagged with one of the fourteen CSS
Color 4 spaces.  Any of the four values may be *missing* (the CSS ``none``
keyword, or a powerless hue produced by a conversion).  Missing values are
stored as NaN and mirrored in a ``Flags`` bitset; readers consult the flags
through the ``c0``/``c1``/``c2``/``alpha_value`` accessors, which return
``None`` for a missing value.

The heavy lifting lives elsewhere:
  * tincture_convert      : ``to_space``
  * tincture_gamut        : ``in_gamut``, ``clip``, ``map_into_gamut_limits``
  * tincture_interpolate  : ``interpolate``
``Color`` exposes each of them as a method.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import TYPE_CHECKING, Callable, NamedTuple, Optional, Tuple, TypeAlias

import numpy as np

if TYPE_CHECKING:
    from tincture_interpolate import HueInterpolationMethod, Interpolation

# ═══════════════════════════════════════════════════════════════════════════════
# 1.  Numeric primitives
# ═══════════════════════════════════════════════════════════════════════════════
Component: TypeAlias = float

# ``None`` is the explicit "missing" marker accepted by every constructor.
MaybeComponent: TypeAlias = Optional[float]


class Components(NamedTuple):
    """Ordered component triple; meaning depends on the active space."""
    c0: Component
    c1: Component
    c2: Component

    def map(self, func: Callable[[Component], Component]) -> Components:
        return Components(func(self.c0), func(self.c1), func(self.c2))


class Flags(IntFlag):
    """Which of the three components, or the alpha, are missing."""
    NONE = 0
    C0_IS_NONE = 1
    C1_IS_NONE = 2
    C2_IS_NONE = 4
    ALPHA_IS_NONE = 8

    @classmethod
    def for_component(cls, index: int) -> Flags:
        return cls(1 << index)


_COMPONENT_FLAGS: Tuple[Flags, Flags, Flags] = (
    Flags.C0_IS_NONE, Flags.C1_IS_NONE, Flags.C2_IS_NONE,
)


def is_missing(value: MaybeComponent) -> bool:
    return value is None or math.isnan(value)


def resolve_components(
    c0: MaybeComponent,
    c1: MaybeComponent,
    c2: MaybeComponent,
    alpha: MaybeComponent,
) -> Tuple[Components, float, Flags]:
    """
    Turns user input into stored values plus flags.

    ``None`` and NaN both mean missing: the stored value becomes NaN and the
    matching flag is raised.  A present alpha is clamped to [0, 1].
    """
    flags = Flags.NONE
    values = []
    for flag, value in zip(_COMPONENT_FLAGS, (c0, c1, c2)):
        if is_missing(value):
            flags |= flag
            values.append(math.nan)
        else:
            values.append(float(value))

    if is_missing(alpha):
        flags |= Flags.ALPHA_IS_NONE
        alpha_value = math.nan
    else:
        alpha_value = min(max(float(alpha), 0.0), 1.0)

    return Components(*values), alpha_value, flags


# ═══════════════════════════════════════════════════════════════════════════════
# 2.  Space: closed enumeration of the supported spaces / notations
# ═══════════════════════════════════════════════════════════════════════════════
class Space(Enum):
    """The CSS Color 4 color spaces.  Values are the CSS identifiers."""
    SRGB = "srgb"
    HSL = "hsl"
    HWB = "hwb"
    LAB = "lab"
    LCH = "lch"
    OKLAB = "oklab"
    OKLCH = "oklch"
    SRGB_LINEAR = "srgb-linear"
    DISPLAY_P3 = "display-p3"
    A98_RGB = "a98-rgb"
    PROPHOTO_RGB = "prophoto-rgb"
    REC2020 = "rec2020"
    XYZ_D50 = "xyz-d50"
    XYZ_D65 = "xyz-d65"

    @property
    def is_rgb_like(self) -> bool:
        return self in _RGB_LIKE

    @property
    def is_xyz_like(self) -> bool:
        return self in (Space.XYZ_D50, Space.XYZ_D65)

    @property
    def has_gamut_limits(self) -> bool:
        """RGB-like spaces and the sRGB notations HSL/HWB are bounded."""
        return self in _RGB_LIKE or self in (Space.HSL, Space.HWB)

    @property
    def hue_index(self) -> Optional[int]:
        """Index of the hue channel, or None for spaces without one."""
        if self in (Space.HSL, Space.HWB):
            return 0
        if self in (Space.LCH, Space.OKLCH):
            return 2
        return None


_RGB_LIKE = frozenset({
    Space.SRGB,
    Space.SRGB_LINEAR,
    Space.DISPLAY_P3,
    Space.A98_RGB,
    Space.PROPHOTO_RGB,
    Space.REC2020,
})


# ═══════════════════════════════════════════════════════════════════════════════
# 3.  Color: the generic value
# ═══════════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True, eq=False, slots=True)
class Color:
    """
    An immutable color value in one of the supported spaces.

    Construct with ``Color.new(space, c0, c1, c2, alpha)``; pass ``None`` for a
    missing value.  Direct construction expects already-resolved storage
    (NaN exactly where a flag is raised) and is meant for the library's own
    conversions.

    Equality is structural: two colors are equal when they share a space and
    missing-flags and every *present* value matches.
    """
    components: Components
    alpha: float
    flags: Flags
    space: Space

    def __post_init__(self) -> None:
        if not isinstance(self.space, Space):
            raise TypeError(f"Expected a Space, got {type(self.space).__name__}")
        object.__setattr__(self, "components", Components(*(float(c) for c in self.components)))
        object.__setattr__(self, "flags", Flags(self.flags))
        alpha = float(self.alpha)
        if not math.isnan(alpha):
            alpha = min(max(alpha, 0.0), 1.0)
        object.__setattr__(self, "alpha", alpha)
        assert self._flags_in_sync(), f"flags {self.flags!r} disagree with stored values {self.components}, {self.alpha}"

    # --- Construction -------------------------------------------------------
    @classmethod
    def new(
        cls,
        space: Space,
        c0: MaybeComponent,
        c1: MaybeComponent,
        c2: MaybeComponent,
        alpha: MaybeComponent = 1.0,
    ) -> Color:
        components, alpha_value, flags = resolve_components(c0, c1, c2, alpha)
        return cls(components, alpha_value, flags, space)

    def _flags_in_sync(self) -> bool:
        for flag, value in zip(_COMPONENT_FLAGS, self.components):
            if bool(self.flags & flag) != math.isnan(value):
                return False
        return bool(self.flags & Flags.ALPHA_IS_NONE) == math.isnan(self.alpha)

    # --- Accessors ----------------------------------------------------------
    def component(self, index: int) -> MaybeComponent:
        """Component ``index`` (0, 1 or 2), or None when missing."""
        if self.flags & _COMPONENT_FLAGS[index]:
            return None
        return self.components[index]

    @property
    def c0(self) -> MaybeComponent:
        return self.component(0)

    @property
    def c1(self) -> MaybeComponent:
        return self.component(1)

    @property
    def c2(self) -> MaybeComponent:
        return self.component(2)

    @property
    def alpha_value(self) -> MaybeComponent:
        if self.flags & Flags.ALPHA_IS_NONE:
            return None
        return self.alpha

    def values(self) -> Tuple[MaybeComponent, MaybeComponent, MaybeComponent, MaybeComponent]:
        """``(c0, c1, c2, alpha)`` with None for missing values."""
        return self.c0, self.c1, self.c2, self.alpha_value

    def to_array(self) -> np.ndarray:
        """Components as a float64 (3,) array, missing values resolved to 0.0."""
        return np.nan_to_num(np.array(self.components, dtype=np.float64), nan=0.0)

    # --- Derivation ---------------------------------------------------------
    def with_component(self, index: int, value: MaybeComponent) -> Color:
        values = list(self.values())
        values[index] = value
        return Color.new(self.space, *values)

    def with_alpha(self, alpha: MaybeComponent) -> Color:
        return Color.new(self.space, self.c0, self.c1, self.c2, alpha)

    def with_missing(self, flags: Flags) -> Color:
        """Marks every component and/or alpha named in ``flags`` as missing."""
        values = list(self.values())
        for index, flag in enumerate(_COMPONENT_FLAGS):
            if flags & flag:
                values[index] = None
        if flags & Flags.ALPHA_IS_NONE:
            values[3] = None
        return Color.new(self.space, *values)

    def with_values(self, values: np.ndarray) -> Color:
        """
        Replaces the components with ``values`` but keeps missing flags.

        A missing component stays missing whatever ``values`` holds for it.
        """
        stored = Components(*(
            math.nan if self.flags & flag else float(v)
            for flag, v in zip(_COMPONENT_FLAGS, values)
        ))
        return Color(stored, self.alpha, self.flags, self.space)

    # --- Equality -----------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Color):
            return NotImplemented
        return self.space is other.space and self.values() == other.values()

    def __hash__(self) -> int:
        return hash((self.space, self.values()))

    def __repr__(self) -> str:
        shown = ", ".join("none" if v is None else repr(v) for v in self.values())
        return f"Color({self.space.value}, {shown})"

    # --- Operations -----------------------------------------------------------
    def to_space(self, space: Space) -> Color:
        from tincture_convert import to_space
        return to_space(self, space)

    def in_gamut(self) -> bool:
        from tincture_gamut import in_gamut
        return in_gamut(self)

    def clip(self) -> Color:
        from tincture_gamut import clip
        return clip(self)

    def map_into_gamut_limits(self) -> Color:
        from tincture_gamut import map_into_gamut_limits
        return map_into_gamut_limits(self)

    def delta_eok(self, other: Color) -> float:
        from tincture_gamut import delta_eok
        return delta_eok(self, other)

    def interpolate(
        self,
        other: Color,
        space: Space,
        hue_interpolation: Optional[HueInterpolationMethod] = None,
    ) -> Interpolation:
        from tincture_interpolate import HueInterpolationMethod, interpolate
        if hue_interpolation is None:
            hue_interpolation = HueInterpolationMethod.SHORTER
        return interpolate(self, other, space, hue_interpolation)
