# -*- coding: utf-8 -*-
"""
Tincture: Mixing and mapping colors across the CSS Color 4 spaces
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tincture_interpolate.py — premultiplied color interpolation (color-mix).

Pipeline (CSS Color 4 §12, CSS Color 5 color-mix):
  1.  Both endpoints are converted into the mixing space; missing channels
      carry forward to their analogues.
  2.  A missing alpha on one side takes the other side's alpha.
  3.  Every channel except hue is premultiplied by its endpoint's alpha.
  4.  Per query, hues are fixed up by the hue interpolation method, channels
      and alpha are interpolated linearly, then un-premultiplied.

A channel missing on one side takes the other side's value; missing on both
sides it stays missing in the result.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, NamedTuple, Tuple

from tincture_color import Color, MaybeComponent, Space
from tincture_convert import to_space

__all__ = [
    "HueInterpolationMethod",
    "Interpolation",
    "interpolate",
]


class HueInterpolationMethod(Enum):
    """How the arc between two hue angles is chosen."""
    SHORTER = "shorter"
    LONGER = "longer"
    INCREASING = "increasing"
    DECREASING = "decreasing"

    def adjust(self, a: float, b: float) -> Tuple[float, float]:
        """
        Normalizes both hues into [0, 360) and shifts one of them by 360 so
        that linear interpolation from ``a`` to ``b`` follows this method's arc.
        """
        a %= 360.0
        b %= 360.0
        delta = b - a
        if self is HueInterpolationMethod.SHORTER:
            if delta > 180.0:
                a += 360.0
            elif delta < -180.0:
                b += 360.0
        elif self is HueInterpolationMethod.LONGER:
            if 0.0 < delta < 180.0:
                a += 360.0
            elif -180.0 < delta <= 0.0:
                b += 360.0
        elif self is HueInterpolationMethod.INCREASING:
            if b < a:
                b += 360.0
        elif a < b:
            a += 360.0
        return a, b


class _Premultiplied(NamedTuple):
    """Endpoint channels scaled by the endpoint's alpha (hue excluded)."""
    components: Tuple[MaybeComponent, MaybeComponent, MaybeComponent]
    alpha: MaybeComponent

    @classmethod
    def from_color(cls, color: Color) -> _Premultiplied:
        channels = (color.c0, color.c1, color.c2)
        alpha = color.alpha_value
        if alpha is None:
            return cls(channels, None)
        hue_index = color.space.hue_index
        return cls(
            tuple(
                v if v is None or i == hue_index else v * alpha
                for i, v in enumerate(channels)
            ),
            alpha,
        )

    def to_color(self, space: Space, alpha: MaybeComponent) -> Color:
        """Un-premultiplies by ``alpha``; a missing or zero alpha keeps raw values."""
        if alpha is None or alpha == 0.0:
            return Color.new(space, *self.components, alpha)
        hue_index = space.hue_index
        channels = [
            v if v is None or i == hue_index else v / alpha
            for i, v in enumerate(self.components)
        ]
        return Color.new(space, *channels, alpha)


def _lerp(left: float, right: float, left_weight: float, right_weight: float) -> float:
    return left * left_weight + right * right_weight


@dataclass(frozen=True)
class Interpolation:
    """
    An interpolation between two colors in a fixed mixing space.

    Build one with ``interpolate`` (or ``Color.interpolate``) and query it
    with ``at``, ``with_weights`` or ``steps``.  Instances are immutable;
    ``with_hue_interpolation`` returns a new one.
    """
    left: _Premultiplied
    right: _Premultiplied
    space: Space
    hue_interpolation: HueInterpolationMethod = HueInterpolationMethod.SHORTER

    def with_hue_interpolation(self, method: HueInterpolationMethod) -> Interpolation:
        return replace(self, hue_interpolation=method)

    def with_raw_weights(self, left_weight: float, right_weight: float) -> Color:
        """
        Interpolates with the weights exactly as given (no normalization).
        """
        if self.left.alpha is None or self.right.alpha is None:
            assert self.left.alpha is None and self.right.alpha is None
            alpha = None
        else:
            alpha = min(max(_lerp(self.left.alpha, self.right.alpha, left_weight, right_weight), 0.0), 1.0)

        hue_index = self.space.hue_index
        channels: List[MaybeComponent] = []
        for i, (lv, rv) in enumerate(zip(self.left.components, self.right.components)):
            if lv is None:
                channels.append(rv)
            elif rv is None:
                channels.append(lv)
            elif i == hue_index:
                lv, rv = self.hue_interpolation.adjust(lv, rv)
                channels.append(_lerp(lv, rv, left_weight, right_weight) % 360.0)
            else:
                channels.append(_lerp(lv, rv, left_weight, right_weight))

        return _Premultiplied(tuple(channels), alpha).to_color(self.space, alpha)

    def at(self, t: float) -> Color:
        """The color at ``t`` (0 is the left endpoint, 1 the right)."""
        return self.with_raw_weights(1.0 - t, t)

    def with_weights(self, left_weight: float, right_weight: float) -> Color:
        """
        Interpolates with color-mix percentage normalization.

        Weights that do not sum to 1 are rescaled to do so.  When they sum
        to less than 1, the result alpha is multiplied by the sum.  Weights
        summing to 0 give a fully transparent even mix.
        """
        total = left_weight + right_weight
        if total == 0.0:
            warnings.warn(
                "with_weights: weights sum to zero; result is fully transparent.",
                stacklevel=2,
            )
            left_weight, right_weight = 0.5, 0.5
        elif total != 1.0:
            left_weight /= total
            right_weight /= total

        result = self.with_raw_weights(left_weight, right_weight)
        if total < 1.0:
            alpha = result.alpha_value
            if alpha is not None:
                result = result.with_alpha(alpha * max(total, 0.0))
        return result

    def steps(self, count: int) -> List[Color]:
        """``count`` evenly spaced colors from the left to the right endpoint."""
        if count < 2:
            raise ValueError(f"steps needs at least 2 colors, got {count}")
        return [self.at(i / (count - 1)) for i in range(count)]


def interpolate(
    left: Color,
    right: Color,
    space: Space,
    hue_interpolation: HueInterpolationMethod = HueInterpolationMethod.SHORTER,
) -> Interpolation:
    """
    Prepares an interpolation from ``left`` to ``right`` in ``space``.

    Args:
        left: Start color, any space.
        right: End color, any space.
        space: Mixing space.
        hue_interpolation: Arc policy for spaces with a hue channel.

    Returns:
        The ``Interpolation``.
    """
    left = to_space(left, space)
    right = to_space(right, space)

    left_alpha, right_alpha = left.alpha_value, right.alpha_value
    if left_alpha is None and right_alpha is not None:
        left = left.with_alpha(right_alpha)
    elif right_alpha is None and left_alpha is not None:
        right = right.with_alpha(left_alpha)

    return Interpolation(
        _Premultiplied.from_color(left),
        _Premultiplied.from_color(right),
        space,
        hue_interpolation,
    )
