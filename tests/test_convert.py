"""Tests for the conversion dispatcher and missing-component carry forward."""

import logging

import numpy as np
import pytest

from tincture_color import Color, Flags, Space
from tincture_convert import analogous_missing_components, convert_array, to_space
from tincture_models import model_for

# One color, rgb(210 105 30), written in every space.
REFERENCE = {
    Space.SRGB: (0.82352941, 0.41176471, 0.11764706),
    Space.HSL: (25.0, 0.75, 0.47058824),
    Space.HWB: (25.0, 0.11764706, 0.17647059),
    Space.LAB: (56.62930022, 39.23708020, 57.55376917),
    Space.LCH: (56.62930022, 69.65619002, 55.71592715),
    Space.OKLAB: (0.63439842, 0.09907391, 0.11919316),
    Space.OKLCH: (0.63439842, 0.15499242, 50.26648308),
    Space.SRGB_LINEAR: (0.64447968, 0.14126329, 0.01298303),
    Space.DISPLAY_P3: (0.77056903, 0.43401475, 0.19984926),
    Space.A98_RGB: (0.73040524, 0.41068841, 0.16200485),
    Space.PROPHOTO_RGB: (0.59231119, 0.39414858, 0.16428630),
    Space.REC2020: (0.66926598, 0.40190046, 0.14271567),
    Space.XYZ_D50: (0.33730087, 0.24544919, 0.03195887),
    Space.XYZ_D65: (0.31863422, 0.23900588, 0.04163696),
}


def assert_close(color, expected):
    np.testing.assert_allclose(color.to_array(), expected, rtol=1e-5, atol=3e-5)


@pytest.mark.parametrize("source", [Space.SRGB, Space.HSL, Space.LAB, Space.OKLCH, Space.PROPHOTO_RGB, Space.XYZ_D65])
@pytest.mark.parametrize("target", list(Space))
def test_reference_color_converts_between_spaces(source, target):
    color = Color.new(source, *REFERENCE[source])
    result = to_space(color, target)
    assert result.space is target
    assert result.flags == Flags.NONE
    assert_close(result, REFERENCE[target])


class TestToSpace:
    def test_same_space_returns_the_color(self):
        color = Color.new(Space.LAB, 50.0, 10.0, None)
        assert to_space(color, Space.LAB) is color

    def test_rejects_non_space_targets(self):
        with pytest.raises(TypeError):
            to_space(Color.new(Space.SRGB, 0.1, 0.2, 0.3), "oklch")

    def test_alpha_is_kept(self):
        color = Color.new(Space.SRGB, 0.1, 0.2, 0.3, 0.4)
        assert to_space(color, Space.OKLCH).alpha_value == pytest.approx(0.4)

    def test_missing_alpha_is_kept(self):
        color = Color.new(Space.SRGB, 0.1, 0.2, 0.3, None)
        assert to_space(color, Space.OKLAB).alpha_value is None

    def test_alpha_is_clamped_after_conversion(self):
        color = Color.new(Space.SRGB, 2.0, 3.0, 4.0, 5.0)
        assert to_space(color, Space.HSL).alpha_value == 1.0

    def test_powerless_hue_comes_back_missing(self):
        gray = Color.new(Space.SRGB, 0.5, 0.5, 0.5)
        assert to_space(gray, Space.HSL).c0 is None
        assert to_space(gray, Space.HWB).c0 is None
        assert to_space(gray, Space.OKLCH).c2 is None
        assert to_space(gray, Space.LCH).c2 is None

    def test_conversion_is_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="tincture_convert"):
            to_space(Color.new(Space.SRGB, 0.1, 0.2, 0.3), Space.LAB)
        assert "via xyz-d65" in caplog.text


class TestCarryForward:
    def test_lightness_carries_between_lab_like_spaces(self):
        color = Color.new(Space.LCH, None, 30.0, 40.0)
        assert to_space(color, Space.OKLCH).c0 is None
        assert to_space(color, Space.HSL).c2 is None

    def test_hue_carries_between_cylindrical_spaces(self):
        color = Color.new(Space.HSL, None, 0.5, 0.5)
        assert to_space(color, Space.OKLCH).c2 is None
        assert to_space(color, Space.LCH).c2 is None

    def test_opponent_axes_carry(self):
        color = Color.new(Space.LAB, 50.0, None, 20.0)
        result = to_space(color, Space.OKLAB)
        assert result.c1 is None
        assert result.c2 is not None

    def test_rgb_channels_carry_within_the_family(self):
        color = Color.new(Space.SRGB, None, 0.5, 0.5)
        assert to_space(color, Space.DISPLAY_P3).c0 is None

    def test_rgb_channels_do_not_imply_xyz(self):
        color = Color.new(Space.SRGB, None, 0.5, 0.5)
        assert to_space(color, Space.XYZ_D65).flags == Flags.NONE

    def test_flags_without_analogue_are_dropped(self):
        assert analogous_missing_components(Space.LAB, Space.SRGB, Flags.C0_IS_NONE) == Flags.NONE
        assert analogous_missing_components(Space.HWB, Space.HSL, Flags.C1_IS_NONE) == Flags.NONE

    def test_alpha_flag_always_carries(self):
        flags = analogous_missing_components(Space.SRGB, Space.OKLCH, Flags.ALPHA_IS_NONE)
        assert flags == Flags.ALPHA_IS_NONE

    def test_colorfulness_maps_to_chroma(self):
        flags = analogous_missing_components(Space.HSL, Space.OKLCH, Flags.C1_IS_NONE | Flags.C0_IS_NONE)
        assert flags == Flags.C1_IS_NONE | Flags.C2_IS_NONE


class TestConvertArray:
    def test_batch_matches_single_conversions(self):
        sources = np.array([REFERENCE[Space.SRGB], (0.2, 0.7, 0.4), (1.0, 0.0, 0.0)])
        batch = convert_array(sources, Space.SRGB, Space.OKLCH)
        assert batch.shape == (3, 3)
        for row, src in zip(batch, sources):
            single = to_space(Color.new(Space.SRGB, *src), Space.OKLCH)
            np.testing.assert_allclose(row, single.to_array(), atol=1e-12)

    def test_single_row(self):
        out = convert_array(np.array(REFERENCE[Space.LAB]), Space.LAB, Space.XYZ_D50)
        assert out.shape == (3,)
        np.testing.assert_allclose(out, REFERENCE[Space.XYZ_D50], atol=3e-5)

    def test_nan_input_counts_as_zero_and_powerless_hue_is_nan(self):
        out = convert_array(np.array([[np.nan, 0.5, 0.5]]), Space.SRGB, Space.HSL)
        np.testing.assert_allclose(out[0, 1:], convert_array(np.array([0.0, 0.5, 0.5]), Space.SRGB, Space.HSL)[1:])
        assert np.isnan(convert_array(np.array([0.3, 0.3, 0.3]), Space.SRGB, Space.HSL)[0])


class TestRoutes:
    @pytest.mark.parametrize(
        "source, target",
        [
            (Space.SRGB, Space.HSL),
            (Space.HWB, Space.HSL),
            (Space.LAB, Space.LCH),
            (Space.OKLCH, Space.OKLAB),
            (Space.XYZ_D50, Space.XYZ_D65),
            (Space.SRGB, Space.SRGB_LINEAR),
        ],
    )
    def test_shortcut_matches_base_pivot(self, source, target):
        source_model = model_for(source)
        target_model = model_for(target)
        model = source_model(*REFERENCE[source])
        direct = to_space(model.to_color(), target)
        pivot = target_model.from_base(model.to_base()).to_color()
        np.testing.assert_allclose(direct.to_array(), pivot.to_array(), rtol=1e-7, atol=1e-8)

    @pytest.mark.parametrize("space", [Space.HWB, Space.LCH, Space.A98_RGB, Space.REC2020, Space.XYZ_D50])
    def test_round_trip_through_oklch(self, space):
        color = Color.new(space, *REFERENCE[space], 0.5)
        back = to_space(to_space(color, Space.OKLCH), space)
        assert back.alpha_value == 0.5
        np.testing.assert_allclose(back.to_array(), color.to_array(), rtol=1e-7, atol=1e-8)
