"""Tests for gamut tests, clipping and CSS gamut mapping."""

import logging

import numpy as np
import pytest

from tincture_color import Color, Space
from tincture_gamut import EPSILON, JND, clip, delta_eok, in_gamut, map_into_gamut_limits


class TestInGamut:
    def test_unit_cube(self):
        assert in_gamut(Color.new(Space.SRGB, 0.0, 0.5, 1.0))
        assert not in_gamut(Color.new(Space.SRGB, 1.2, 0.5, -0.1))

    def test_missing_components_count_as_zero(self):
        assert in_gamut(Color.new(Space.DISPLAY_P3, None, 0.5, 0.5))

    @pytest.mark.parametrize("space", [Space.LAB, Space.LCH, Space.OKLAB, Space.OKLCH, Space.XYZ_D50, Space.XYZ_D65])
    def test_unbounded_spaces_are_always_in_gamut(self, space):
        assert in_gamut(Color.new(space, 200.0, -300.0, 400.0))

    def test_hsl_is_bounded_by_srgb(self):
        assert in_gamut(Color.new(Space.HSL, 120.0, 0.5, 0.5))
        assert not in_gamut(Color.new(Space.HSL, 120.0, 1.5, 0.5))


class TestClip:
    def test_clamps_each_channel(self):
        clipped = clip(Color.new(Space.SRGB, 1.2, 0.5, -0.1, 0.7))
        assert clipped.values() == (1.0, 0.5, 0.0, 0.7)

    def test_missing_stays_missing(self):
        assert clip(Color.new(Space.SRGB, None, 1.5, 0.2)).values() == (None, 1.0, 0.2, 1.0)

    def test_unbounded_spaces_pass_through(self):
        color = Color.new(Space.OKLAB, 1.5, 0.4, -0.4)
        assert clip(color) is color

    def test_hsl_clip_stays_in_hsl(self):
        clipped = clip(Color.new(Space.HSL, 120.0, 1.5, 0.5))
        assert clipped.space is Space.HSL
        assert in_gamut(clipped)


class TestDeltaEOK:
    def test_identical_colors(self):
        color = Color.new(Space.SRGB, 0.3, 0.6, 0.9)
        assert delta_eok(color, color) == pytest.approx(0.0, abs=1e-12)

    def test_is_measured_in_oklab(self):
        a = Color.new(Space.OKLAB, 0.5, 0.0, 0.0)
        b = Color.new(Space.OKLAB, 0.5, 0.03, 0.04)
        assert delta_eok(a, b) == pytest.approx(0.05)
        assert Color.new(Space.OKLCH, 0.5, 0.05, 53.13010235).delta_eok(a) == pytest.approx(0.05)


class TestMapIntoGamutLimits:
    def test_display_p3_yellow_in_srgb(self):
        yellow = Color.new(Space.DISPLAY_P3, 1.0, 1.0, 0.0)
        mapped = map_into_gamut_limits(yellow.to_space(Space.SRGB))
        assert mapped.space is Space.SRGB
        assert mapped.c0 == pytest.approx(0.9962327282577411, abs=1e-5)
        assert mapped.c1 == pytest.approx(0.9990142856519192, abs=1e-5)
        assert mapped.c2 == pytest.approx(0.0, abs=1e-5)

    def test_in_gamut_color_is_returned_as_is(self):
        color = Color.new(Space.SRGB, 0.2, 0.4, 0.6)
        assert map_into_gamut_limits(color) is color

    def test_unbounded_space_is_returned_as_is(self):
        color = Color.new(Space.OKLCH, 0.7, 0.5, 150.0)
        assert map_into_gamut_limits(color) is color

    def test_too_light_maps_to_white(self):
        mapped = map_into_gamut_limits(Color.new(Space.SRGB, 2.0, 2.0, 2.0, 0.5))
        assert mapped.values() == (1.0, 1.0, 1.0, 0.5)

    def test_too_dark_maps_to_black(self):
        mapped = map_into_gamut_limits(Color.new(Space.SRGB, -1.0, -1.0, -1.0))
        assert mapped.values() == (0.0, 0.0, 0.0, 1.0)

    @pytest.mark.parametrize(
        "color",
        [
            Color.new(Space.SRGB, 1.3, 0.2, -0.4, 0.6),
            Color.new(Space.DISPLAY_P3, 1.1, -0.2, 0.9),
            Color.new(Space.REC2020, 0.0, 1.2, 0.1),
            Color.new(Space.SRGB, 0.2, 0.9, 1.05),
            Color.new(Space.HSL, 200.0, 1.6, 0.5),
            Color.new(Space.HSL, 30.0, 1.2, 0.7),
            Color.new(Space.HWB, 120.0, -0.2, 0.1),
            Color.new(Space.HWB, 300.0, -0.1, -0.05),
        ],
    )
    def test_result_is_in_gamut_and_idempotent(self, color):
        mapped = map_into_gamut_limits(color)
        assert mapped.space is color.space
        assert in_gamut(mapped)
        assert mapped.alpha_value == color.alpha_value
        assert map_into_gamut_limits(mapped) == mapped

    def test_lightness_and_hue_are_kept(self):
        origin = Color.new(Space.OKLCH, 0.7, 0.35, 145.0)
        mapped = map_into_gamut_limits(origin.to_space(Space.SRGB))
        oklch = mapped.to_space(Space.OKLCH)
        assert oklch.c0 == pytest.approx(0.7, abs=JND + EPSILON)
        assert oklch.c1 < 0.35
        assert oklch.c2 == pytest.approx(145.0, abs=10.0)

    def test_hsl_is_mapped_through_srgb(self):
        mapped = map_into_gamut_limits(Color.new(Space.HSL, 200.0, 1.6, 0.5))
        assert mapped.space is Space.HSL
        rgb = mapped.to_space(Space.SRGB).to_array()
        assert np.all((rgb >= -1e-9) & (rgb <= 1.0 + 1e-9))
        assert mapped.c0 == pytest.approx(200.0, abs=5.0)

    def test_search_is_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="tincture_gamut"):
            map_into_gamut_limits(Color.new(Space.DISPLAY_P3, 1.0, 1.0, 0.0).to_space(Space.SRGB))
        assert "gamut map srgb" in caplog.text
