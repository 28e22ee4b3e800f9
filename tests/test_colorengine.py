"""Tests for the numba conversion kernels and array helpers."""

import numpy as np
import pytest

import tincture_colorengine as ce
from tincture_colorengine import (
    REF_WHITE_D50,
    REF_WHITE_D65,
    ChromaticAdaptation,
    ColorMetrics,
    ColorSpaceEngine,
    GamutMapping,
    handle_shapes,
)

SRGB = np.array([0.82352941, 0.41176471, 0.11764706])
SRGB_LINEAR = np.array([0.64447968, 0.14126329, 0.01298303])
XYZ_D65 = np.array([0.31863422, 0.23900588, 0.04163696])
XYZ_D50 = np.array([0.33730087, 0.24544919, 0.03195887])
LAB = np.array([56.62930022, 39.23708020, 57.55376917])
OKLAB = np.array([0.63439842, 0.09907391, 0.11919316])


class TestHandleShapes:
    def test_single_color_keeps_its_shape(self):
        out = ColorSpaceEngine.to_linear(SRGB)
        assert out.shape == (3,)

    def test_batch_keeps_its_shape(self):
        out = ColorSpaceEngine.to_linear(np.tile(SRGB, (5, 1)))
        assert out.shape == (5, 3)
        np.testing.assert_allclose(out[3], SRGB_LINEAR, atol=1e-7)

    def test_wrong_width_is_rejected(self):
        @handle_shapes
        def identity(arr):
            return arr

        with pytest.raises(ValueError):
            identity(np.zeros(4))
        with pytest.raises(ValueError):
            identity(np.zeros((2, 2)))


class TestTransferCurves:
    @pytest.mark.parametrize("curve", ["srgb", "a98-rgb", "prophoto-rgb", "rec2020"])
    def test_decode_inverts_encode(self, curve):
        values = np.array([[0.0, 0.001, 0.02], [0.18, 0.5, 1.0]])
        linear = ColorSpaceEngine.to_linear(values, curve)
        np.testing.assert_allclose(ColorSpaceEngine.from_linear(linear, curve), values, atol=1e-12)

    def test_srgb_linearizes_mid_gray(self):
        assert ColorSpaceEngine.to_linear(np.array([0.5, 0.5, 0.5]))[0] == pytest.approx(0.21404114, abs=1e-8)

    @pytest.mark.parametrize("curve", ["srgb", "a98-rgb", "prophoto-rgb", "rec2020"])
    def test_curves_are_sign_preserving(self, curve):
        values = np.array([0.3, 0.7, 1.2])
        np.testing.assert_allclose(
            ColorSpaceEngine.to_linear(-values, curve),
            -ColorSpaceEngine.to_linear(values, curve),
        )

    def test_strict_kernels_agree_with_fast_kernels(self):
        fast = ColorSpaceEngine.to_linear(SRGB)
        ce.set_strict_ieee(True)
        strict = ColorSpaceEngine.to_linear(SRGB)
        np.testing.assert_allclose(strict, fast, atol=1e-12)


class TestColorSpaces:
    def test_linear_srgb_to_xyz(self):
        np.testing.assert_allclose(ColorSpaceEngine.linear_rgb_to_xyz(SRGB_LINEAR), XYZ_D65, atol=3e-5)

    def test_xyz_to_linear_srgb(self):
        np.testing.assert_allclose(ColorSpaceEngine.xyz_to_linear_rgb(XYZ_D65), SRGB_LINEAR, atol=3e-5)

    def test_white_maps_to_reference_white(self):
        xyz = ColorSpaceEngine.linear_rgb_to_xyz(np.ones(3), "display-p3")
        np.testing.assert_allclose(xyz, REF_WHITE_D65, atol=1e-6)

    def test_lab_from_d50(self):
        np.testing.assert_allclose(ColorSpaceEngine.xyz_to_lab(XYZ_D50), LAB, rtol=1e-5, atol=3e-5)
        np.testing.assert_allclose(ColorSpaceEngine.lab_to_xyz(LAB), XYZ_D50, atol=3e-5)

    def test_oklab_from_d65(self):
        np.testing.assert_allclose(ColorSpaceEngine.xyz_to_oklab(XYZ_D65), OKLAB, atol=3e-5)
        np.testing.assert_allclose(ColorSpaceEngine.oklab_to_xyz(OKLAB), XYZ_D65, atol=3e-5)

    def test_polar_hue_lands_in_zero_to_360(self):
        lch = ColorSpaceEngine.lab_to_lch(np.array([50.0, 10.0, -10.0]))
        assert lch[2] == pytest.approx(315.0)

    def test_achromatic_lab_has_no_hue(self):
        assert np.isnan(ColorSpaceEngine.lab_to_lch(np.array([50.0, 0.001, 0.001]))[2])
        assert np.isnan(ColorSpaceEngine.oklab_to_oklch(np.array([0.5, 0.0, 0.0]))[2])

    def test_missing_hue_counts_as_zero(self):
        lab = ColorSpaceEngine.lch_to_lab(np.array([50.0, 20.0, np.nan]))
        np.testing.assert_allclose(lab, [50.0, 20.0, 0.0], atol=1e-12)

    def test_hsl_and_hwb(self):
        np.testing.assert_allclose(ColorSpaceEngine.srgb_to_hsl(SRGB), [25.0, 0.75, 0.47058824], atol=3e-5)
        np.testing.assert_allclose(ColorSpaceEngine.srgb_to_hwb(SRGB), [25.0, 0.11764706, 0.17647059], atol=3e-5)
        np.testing.assert_allclose(ColorSpaceEngine.hwb_to_srgb(np.array([40.0, 0.3, 0.4])), [0.6, 0.5, 0.3], atol=1e-9)

    def test_gray_has_no_hsl_hue(self):
        hsl = ColorSpaceEngine.srgb_to_hsl(np.array([[1.0, 1.0, 1.0], [0.0, 0.0, 0.0], [0.5, 0.5, 0.5]]))
        assert np.all(np.isnan(hsl[:, 0]))

    def test_hwb_whiteness_plus_blackness_over_one_is_gray(self):
        np.testing.assert_allclose(ColorSpaceEngine.hwb_to_srgb(np.array([120.0, 0.6, 0.6])), [0.5, 0.5, 0.5])


class TestChromaticAdaptation:
    def test_bradford_maps_white_to_white(self):
        np.testing.assert_allclose(ChromaticAdaptation.adapt(REF_WHITE_D65, REF_WHITE_D65, REF_WHITE_D50), REF_WHITE_D50, atol=1e-6)

    def test_reference_color(self):
        np.testing.assert_allclose(ChromaticAdaptation.adapt(XYZ_D65, REF_WHITE_D65, REF_WHITE_D50), XYZ_D50, atol=3e-5)

    def test_matrix_is_cached_and_read_only(self):
        first = ChromaticAdaptation.calc_transform_matrix(REF_WHITE_D65, REF_WHITE_D50)
        second = ChromaticAdaptation.calc_transform_matrix(REF_WHITE_D65, REF_WHITE_D50)
        assert first is second
        assert not first.flags.writeable

    def test_clip_negative(self):
        out = ChromaticAdaptation.adapt(np.array([-0.1, 0.2, 0.3]), REF_WHITE_D65, REF_WHITE_D65, clip_negative=True)
        assert out[0] == 0.0


class TestGamutAndMetrics:
    def test_clip_absolute(self):
        np.testing.assert_array_equal(GamutMapping.clip_absolute(np.array([1.2, 0.5, -0.1])), [1.0, 0.5, 0.0])

    def test_in_unit_cube(self):
        assert GamutMapping.in_unit_cube(np.array([0.0, 0.5, 1.0])) is True
        assert GamutMapping.in_unit_cube(np.array([0.0, 0.5, 1.0001])) is False
        np.testing.assert_array_equal(
            GamutMapping.in_unit_cube(np.array([[0.2, 0.2, 0.2], [-0.2, 0.2, 0.2]])),
            [True, False],
        )

    def test_delta_e_ok_single_pair_is_float(self):
        d = ColorMetrics.delta_E_OK(np.array([0.5, 0.0, 0.0]), np.array([0.5, 0.03, 0.04]))
        assert isinstance(d, float)
        assert d == pytest.approx(0.05)

    def test_delta_e_broadcasts_one_against_many(self):
        reference = np.array([50.0, 0.0, 0.0])
        samples = np.array([[50.0, 3.0, 4.0], [56.0, 0.0, 8.0]])
        np.testing.assert_allclose(ColorMetrics.delta_E_76(reference, samples), [5.0, 10.0])

    def test_delta_e_rejects_mismatched_batches(self):
        with pytest.raises(ValueError):
            ColorMetrics.delta_E_OK(np.zeros((2, 3)), np.zeros((3, 3)))
