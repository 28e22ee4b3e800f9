# -*- coding: utf-8 -*-
"""
Tincture: Mixing and mapping colors across the CSS Color 4 spaces
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tincture_models.py — per-space typed color models.

Every model is a small immutable value with named fields (``Srgb.red``,
``Oklch.hue``, …) and a fixed ``SPACE`` tag.  Each one declares its edges to
the shared base, XYZ relative to D65:

    RGB-like     encoded → linear light → XYZ (native white) → XYZ-D65
    HSL / HWB    → sRGB → base      (never directly through XYZ)
    Lab / Lch    polar → rectangular → XYZ-D50 → XYZ-D65
    Oklab/Oklch  polar → rectangular → XYZ-D65
    XYZ-D50      Bradford transfer → XYZ-D65

The edges are class-level ``to_base_raw`` / ``from_base_raw`` functions over
validated (N, 3) float64 arrays, so the same graph serves single colors and
batches.  Missing components take part in the math as 0.0; a NaN produced by
a conversion (a powerless hue) comes back flagged missing.  Alpha and its
missing flag ride along unchanged.

White points are explicit tags (``WhitePoint``).  ``from_base`` accepts only
an ``XyzD65``; D50 data has to go through ``XyzD50.transfer()`` first.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Optional, Tuple, Type, TypeVar

import numpy as np

from tincture_color import Color, Components, Flags, MaybeComponent, Space, resolve_components
from tincture_colorengine import (
    LCH_POWERLESS_CHROMA,
    OKLCH_POWERLESS_CHROMA,
    REF_WHITE_D50,
    REF_WHITE_D65,
    ArrayFloat,
    ChromaticAdaptation,
    ColorSpaceEngine,
)

__all__ = [
    "WhitePoint",
    "Model",
    "RgbModel",
    "GammaEncodedRgb",
    "LinearRgb",
    "Srgb",
    "SrgbLinear",
    "DisplayP3",
    "DisplayP3Linear",
    "A98Rgb",
    "A98RgbLinear",
    "ProPhotoRgb",
    "ProPhotoRgbLinear",
    "Rec2020",
    "Rec2020Linear",
    "Hsl",
    "Hwb",
    "Lab",
    "Lch",
    "Oklab",
    "Oklch",
    "XyzD50",
    "XyzD65",
    "MODELS",
    "model_for",
]

M = TypeVar("M", bound="Model")


# ═══════════════════════════════════════════════════════════════════════════════
# 1.  White-point tags
# ═══════════════════════════════════════════════════════════════════════════════
class WhitePoint(Enum):
    D50 = "D50"
    D65 = "D65"

    @property
    def xyz(self) -> ArrayFloat:
        return REF_WHITE_D50 if self is WhitePoint.D50 else REF_WHITE_D65


def _to_d65(xyz: ArrayFloat, white: WhitePoint) -> ArrayFloat:
    if white is WhitePoint.D65:
        return xyz
    return ChromaticAdaptation._adapt_raw(xyz, white.xyz, REF_WHITE_D65)


def _from_d65(xyz: ArrayFloat, white: WhitePoint) -> ArrayFloat:
    if white is WhitePoint.D65:
        return xyz
    return ChromaticAdaptation._adapt_raw(xyz, REF_WHITE_D65, white.xyz)


# ═══════════════════════════════════════════════════════════════════════════════
# 2.  Model: shared value behaviour
# ═══════════════════════════════════════════════════════════════════════════════
def _channel(index: int) -> property:
    def getter(self: Model) -> MaybeComponent:
        return self.component(index)
    return property(getter)


@dataclass(frozen=True, init=False, eq=False, repr=False)
class Model:
    """
    Base class of the per-space models.

    Subclasses set ``SPACE`` (None for the linear-light companions that have
    no CSS space), ``FIELDS`` and the two raw base edges.  Subclasses declare
    ``__slots__ = ()`` so instances stay as frozen as the base.  The slots are
    spelled out rather than passed as ``slots=True``, which would rebuild the
    class underneath the generated frozen ``__setattr__``.
    """
    __slots__ = ("components", "alpha", "flags")

    SPACE: ClassVar[Optional[Space]] = None
    FIELDS: ClassVar[Tuple[str, str, str]] = ("c0", "c1", "c2")

    components: Components
    alpha: float
    flags: Flags

    def __init__(
        self,
        c0: MaybeComponent,
        c1: MaybeComponent,
        c2: MaybeComponent,
        alpha: MaybeComponent = 1.0,
    ) -> None:
        components, alpha_value, flags = resolve_components(c0, c1, c2, alpha)
        object.__setattr__(self, "components", components)
        object.__setattr__(self, "alpha", alpha_value)
        object.__setattr__(self, "flags", flags)

    # --- Accessors ----------------------------------------------------------
    def component(self, index: int) -> MaybeComponent:
        if self.flags & Flags.for_component(index):
            return None
        return self.components[index]

    @property
    def alpha_value(self) -> MaybeComponent:
        if self.flags & Flags.ALPHA_IS_NONE:
            return None
        return self.alpha

    def values(self) -> Tuple[MaybeComponent, MaybeComponent, MaybeComponent, MaybeComponent]:
        return self.component(0), self.component(1), self.component(2), self.alpha_value

    def _array(self) -> ArrayFloat:
        """(1, 3) float64 array, missing components resolved to 0.0."""
        return np.nan_to_num(np.array([self.components], dtype=np.float64), nan=0.0)

    @classmethod
    def _from_array(cls: Type[M], values: ArrayFloat, like: Model) -> M:
        c0, c1, c2 = (float(v) for v in values[0])
        return cls(c0, c1, c2, like.alpha_value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Model):
            return NotImplemented
        return type(self) is type(other) and self.values() == other.values()

    def __hash__(self) -> int:
        return hash((type(self), self.values()))

    def __repr__(self) -> str:
        parts = [
            f"{name}={'none' if value is None else value!r}"
            for name, value in zip(self.FIELDS + ("alpha",), self.values())
        ]
        return f"{type(self).__name__}({', '.join(parts)})"

    # --- Bridge to the generic Color ----------------------------------------
    def to_color(self) -> Color:
        if self.SPACE is None:
            raise TypeError(f"{type(self).__name__} has no CSS color space")
        return Color(self.components, self.alpha, self.flags, self.SPACE)

    @classmethod
    def from_color(cls: Type[M], color: Color) -> M:
        if color.space is not cls.SPACE:
            raise TypeError(f"{cls.__name__} cannot hold a {color.space.value} color")
        return cls(*color.values())

    # --- Base edges ---------------------------------------------------------
    @classmethod
    def to_base_raw(cls, values: ArrayFloat) -> ArrayFloat:
        """(N, 3) values of this space -> (N, 3) XYZ-D65."""
        raise NotImplementedError

    @classmethod
    def from_base_raw(cls, xyz: ArrayFloat) -> ArrayFloat:
        """(N, 3) XYZ-D65 -> (N, 3) values of this space."""
        raise NotImplementedError

    def to_base(self) -> XyzD65:
        return XyzD65._from_array(self.to_base_raw(self._array()), self)

    @classmethod
    def from_base(cls: Type[M], base: XyzD65) -> M:
        if not isinstance(base, XyzD65):
            raise TypeError(
                f"from_base expects XyzD65, got {type(base).__name__}; "
                "transfer D50 values to D65 first"
            )
        return cls._from_array(cls.from_base_raw(base._array()), base)


# ═══════════════════════════════════════════════════════════════════════════════
# 3.  RGB family
# ═══════════════════════════════════════════════════════════════════════════════
class RgbModel(Model):
    """
    Red/green/blue over one set of primaries.

    ``GAMUT`` selects the primaries, ``CURVE`` the transfer function and
    ``WHITE_POINT`` the native white.  ``IS_LINEAR`` marks linear-light models.
    """
    FIELDS = ("red", "green", "blue")
    GAMUT: ClassVar[str]
    CURVE: ClassVar[str]
    WHITE_POINT: ClassVar[WhitePoint] = WhitePoint.D65
    IS_LINEAR: ClassVar[bool] = False

    __slots__ = ()

    red = _channel(0)
    green = _channel(1)
    blue = _channel(2)

    @classmethod
    def to_base_raw(cls, values: ArrayFloat) -> ArrayFloat:
        linear = values if cls.IS_LINEAR else ColorSpaceEngine._to_linear_raw(values, cls.CURVE)
        xyz = ColorSpaceEngine._linear_rgb_to_xyz_raw(linear, cls.GAMUT)
        return _to_d65(xyz, cls.WHITE_POINT)

    @classmethod
    def from_base_raw(cls, xyz: ArrayFloat) -> ArrayFloat:
        linear = ColorSpaceEngine._xyz_to_linear_rgb_raw(_from_d65(xyz, cls.WHITE_POINT), cls.GAMUT)
        if cls.IS_LINEAR:
            return linear
        return ColorSpaceEngine._from_linear_raw(linear, cls.CURVE)


class LinearRgb(RgbModel):
    IS_LINEAR = True
    ENCODED: ClassVar[Type[GammaEncodedRgb]]

    __slots__ = ()

    def to_gamma_encoded(self) -> GammaEncodedRgb:
        encoded = ColorSpaceEngine._from_linear_raw(self._array(), self.CURVE)
        return self.ENCODED._from_array(encoded, self)


class GammaEncodedRgb(RgbModel):
    LINEAR: ClassVar[Type[LinearRgb]]

    __slots__ = ()

    def to_linear_light(self) -> LinearRgb:
        linear = ColorSpaceEngine._to_linear_raw(self._array(), self.CURVE)
        return self.LINEAR._from_array(linear, self)


class Srgb(GammaEncodedRgb):
    """sRGB, which also carries the HSL / HWB notations."""
    SPACE = Space.SRGB
    GAMUT = "srgb"
    CURVE = "srgb"

    __slots__ = ()

    def to_hsl(self) -> Hsl:
        return Hsl._from_array(ColorSpaceEngine._srgb_to_hsl_raw(self._array()), self)

    def to_hwb(self) -> Hwb:
        return Hwb._from_array(ColorSpaceEngine._srgb_to_hwb_raw(self._array()), self)


class SrgbLinear(LinearRgb):
    SPACE = Space.SRGB_LINEAR
    GAMUT = "srgb"
    CURVE = "srgb"

    __slots__ = ()


class DisplayP3(GammaEncodedRgb):
    SPACE = Space.DISPLAY_P3
    GAMUT = "display-p3"
    CURVE = "srgb"

    __slots__ = ()


class DisplayP3Linear(LinearRgb):
    GAMUT = "display-p3"
    CURVE = "srgb"

    __slots__ = ()


class A98Rgb(GammaEncodedRgb):
    SPACE = Space.A98_RGB
    GAMUT = "a98-rgb"
    CURVE = "a98-rgb"

    __slots__ = ()


class A98RgbLinear(LinearRgb):
    GAMUT = "a98-rgb"
    CURVE = "a98-rgb"

    __slots__ = ()


class ProPhotoRgb(GammaEncodedRgb):
    """ProPhoto RGB, native to D50."""
    SPACE = Space.PROPHOTO_RGB
    GAMUT = "prophoto-rgb"
    CURVE = "prophoto-rgb"
    WHITE_POINT = WhitePoint.D50

    __slots__ = ()


class ProPhotoRgbLinear(LinearRgb):
    GAMUT = "prophoto-rgb"
    CURVE = "prophoto-rgb"
    WHITE_POINT = WhitePoint.D50

    __slots__ = ()


class Rec2020(GammaEncodedRgb):
    SPACE = Space.REC2020
    GAMUT = "rec2020"
    CURVE = "rec2020"

    __slots__ = ()


class Rec2020Linear(LinearRgb):
    GAMUT = "rec2020"
    CURVE = "rec2020"

    __slots__ = ()


# Encoded <-> linear-light companions.
for _encoded, _linear in (
    (Srgb, SrgbLinear),
    (DisplayP3, DisplayP3Linear),
    (A98Rgb, A98RgbLinear),
    (ProPhotoRgb, ProPhotoRgbLinear),
    (Rec2020, Rec2020Linear),
):
    _encoded.LINEAR = _linear
    _linear.ENCODED = _encoded
del _encoded, _linear


# ═══════════════════════════════════════════════════════════════════════════════
# 4.  HSL / HWB: cylindrical notations of sRGB
# ═══════════════════════════════════════════════════════════════════════════════
class Hsl(Model):
    SPACE = Space.HSL
    FIELDS = ("hue", "saturation", "lightness")

    __slots__ = ()

    hue = _channel(0)
    saturation = _channel(1)
    lightness = _channel(2)

    @classmethod
    def to_base_raw(cls, values: ArrayFloat) -> ArrayFloat:
        return Srgb.to_base_raw(ColorSpaceEngine._hsl_to_srgb_raw(values))

    @classmethod
    def from_base_raw(cls, xyz: ArrayFloat) -> ArrayFloat:
        return ColorSpaceEngine._srgb_to_hsl_raw(Srgb.from_base_raw(xyz))

    def to_srgb(self) -> Srgb:
        return Srgb._from_array(ColorSpaceEngine._hsl_to_srgb_raw(self._array()), self)

    def to_hwb(self) -> Hwb:
        return self.to_srgb().to_hwb()


class Hwb(Model):
    SPACE = Space.HWB
    FIELDS = ("hue", "whiteness", "blackness")

    __slots__ = ()

    hue = _channel(0)
    whiteness = _channel(1)
    blackness = _channel(2)

    @classmethod
    def to_base_raw(cls, values: ArrayFloat) -> ArrayFloat:
        return Srgb.to_base_raw(ColorSpaceEngine._hwb_to_srgb_raw(values))

    @classmethod
    def from_base_raw(cls, xyz: ArrayFloat) -> ArrayFloat:
        return ColorSpaceEngine._srgb_to_hwb_raw(Srgb.from_base_raw(xyz))

    def to_srgb(self) -> Srgb:
        return Srgb._from_array(ColorSpaceEngine._hwb_to_srgb_raw(self._array()), self)

    def to_hsl(self) -> Hsl:
        return self.to_srgb().to_hsl()


# ═══════════════════════════════════════════════════════════════════════════════
# 5.  Rectangular / polar pairs
# ═══════════════════════════════════════════════════════════════════════════════
class RectangularModel(Model):
    POLAR: ClassVar[Type[PolarModel]]

    __slots__ = ()

    lightness = _channel(0)
    a = _channel(1)
    b = _channel(2)

    def to_polar(self) -> PolarModel:
        polar = ColorSpaceEngine._rect_to_polar_raw(self._array(), self.POLAR.POWERLESS_CHROMA)
        return self.POLAR._from_array(polar, self)


class PolarModel(Model):
    RECTANGULAR: ClassVar[Type[RectangularModel]]
    POWERLESS_CHROMA: ClassVar[float]

    __slots__ = ()

    lightness = _channel(0)
    chroma = _channel(1)
    hue = _channel(2)

    @classmethod
    def to_base_raw(cls, values: ArrayFloat) -> ArrayFloat:
        return cls.RECTANGULAR.to_base_raw(ColorSpaceEngine._polar_to_rect_raw(values))

    @classmethod
    def from_base_raw(cls, xyz: ArrayFloat) -> ArrayFloat:
        rect = cls.RECTANGULAR.from_base_raw(xyz)
        return ColorSpaceEngine._rect_to_polar_raw(rect, cls.POWERLESS_CHROMA)

    def to_rectangular(self) -> RectangularModel:
        rect = ColorSpaceEngine._polar_to_rect_raw(self._array())
        return self.RECTANGULAR._from_array(rect, self)


class Lab(RectangularModel):
    """CIE Lab relative to D50, as CSS defines it."""
    SPACE = Space.LAB
    FIELDS = ("lightness", "a", "b")
    WHITE_POINT: ClassVar[WhitePoint] = WhitePoint.D50

    __slots__ = ()

    @classmethod
    def to_base_raw(cls, values: ArrayFloat) -> ArrayFloat:
        xyz = ColorSpaceEngine._lab_to_xyz_raw(values, cls.WHITE_POINT.xyz)
        return _to_d65(xyz, cls.WHITE_POINT)

    @classmethod
    def from_base_raw(cls, xyz: ArrayFloat) -> ArrayFloat:
        return ColorSpaceEngine._xyz_to_lab_raw(_from_d65(xyz, cls.WHITE_POINT), cls.WHITE_POINT.xyz)


class Lch(PolarModel):
    SPACE = Space.LCH
    FIELDS = ("lightness", "chroma", "hue")
    RECTANGULAR = Lab
    POWERLESS_CHROMA = LCH_POWERLESS_CHROMA

    __slots__ = ()


class Oklab(RectangularModel):
    SPACE = Space.OKLAB
    FIELDS = ("lightness", "a", "b")

    __slots__ = ()

    @classmethod
    def to_base_raw(cls, values: ArrayFloat) -> ArrayFloat:
        return ColorSpaceEngine._oklab_to_xyz_raw(values)

    @classmethod
    def from_base_raw(cls, xyz: ArrayFloat) -> ArrayFloat:
        return ColorSpaceEngine._xyz_to_oklab_raw(xyz)


class Oklch(PolarModel):
    SPACE = Space.OKLCH
    FIELDS = ("lightness", "chroma", "hue")
    RECTANGULAR = Oklab
    POWERLESS_CHROMA = OKLCH_POWERLESS_CHROMA

    __slots__ = ()


Lab.POLAR = Lch
Oklab.POLAR = Oklch


# ═══════════════════════════════════════════════════════════════════════════════
# 6.  XYZ with white-point tags
# ═══════════════════════════════════════════════════════════════════════════════
class XyzModel(Model):
    FIELDS = ("x", "y", "z")
    WHITE_POINT: ClassVar[WhitePoint]
    OTHER: ClassVar[Type[XyzModel]]

    __slots__ = ()

    x = _channel(0)
    y = _channel(1)
    z = _channel(2)

    @classmethod
    def to_base_raw(cls, values: ArrayFloat) -> ArrayFloat:
        return _to_d65(values, cls.WHITE_POINT)

    @classmethod
    def from_base_raw(cls, xyz: ArrayFloat) -> ArrayFloat:
        return _from_d65(xyz, cls.WHITE_POINT)

    def transfer(self) -> XyzModel:
        """Bradford-adapts the value to the other white point."""
        adapted = ChromaticAdaptation._adapt_raw(self._array(), self.WHITE_POINT.xyz, self.OTHER.WHITE_POINT.xyz)
        return self.OTHER._from_array(adapted, self)


class XyzD50(XyzModel):
    SPACE = Space.XYZ_D50
    WHITE_POINT = WhitePoint.D50

    __slots__ = ()


class XyzD65(XyzModel):
    SPACE = Space.XYZ_D65
    WHITE_POINT = WhitePoint.D65

    __slots__ = ()


XyzD50.OTHER = XyzD65
XyzD65.OTHER = XyzD50


# ═══════════════════════════════════════════════════════════════════════════════
# 7.  Registry
# ═══════════════════════════════════════════════════════════════════════════════
MODELS: Dict[Space, Type[Model]] = {
    Space.SRGB: Srgb,
    Space.SRGB_LINEAR: SrgbLinear,
    Space.HSL: Hsl,
    Space.HWB: Hwb,
    Space.LAB: Lab,
    Space.LCH: Lch,
    Space.OKLAB: Oklab,
    Space.OKLCH: Oklch,
    Space.DISPLAY_P3: DisplayP3,
    Space.A98_RGB: A98Rgb,
    Space.PROPHOTO_RGB: ProPhotoRgb,
    Space.REC2020: Rec2020,
    Space.XYZ_D50: XyzD50,
    Space.XYZ_D65: XyzD65,
}


def model_for(space: Space) -> Type[Model]:
    if not isinstance(space, Space):
        raise TypeError(f"Expected a Space, got {type(space).__name__}")
    return MODELS[space]
