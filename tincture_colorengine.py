# -*- coding: utf-8 -*-
"""
Tincture: Mixing and mapping colors across the CSS Color 4 spaces
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Unified Color Engine
====================
Vectorised, JIT-compiled numeric core behind every Tincture color model.

All public transforms accept either a single color of shape (3,) or a batch
of shape (N, 3) and return the same shape.  The engine knows nothing about
missing components: callers resolve missing channels to 0.0 before entering
it, and the only NaN it ever *produces* is the powerless hue written by the
polar and HSL/HWB kernels.

Design notes:
- Matrices are stored pre-transposed (``*_T``) for row-vector products,
  ``np.dot(v, M_T)``, which keeps (N, 3) batches C-contiguous.
- Reference whites and the D50 <-> D65 Bradford transform are derived from
  the CSS Color 4 chromaticity definitions, so the rational constants
  round-trip at machine precision.
- Transfer curves are the "extended" sign-preserving variants used by CSS:
  negative and >1 channel values survive a decode/encode round trip.
- ``set_strict_ieee(True)`` swaps the transfer-curve and Lab kernels to
  ``fastmath=False`` variants.  Kernels that write NaN are always strict,
  since ``fastmath`` licenses the compiler to assume NaN never occurs.

References:
    - CSS Color Module Level 4, sections 10 (predefined spaces) and 17
      (sample conversion code).
    - IEC 61966-2-1:1999 (sRGB Standard)
    - Ottosson, B. (2020). "A perceptual color space for image processing".
"""

import functools
import numpy as np
import numpy.typing as npt
from numba import njit, prange
from typing import Tuple, Final, TypeAlias, Callable, Dict, Literal, Union, Sequence, Any

__all__ = [
    # --- Type Aliases ---
    "ArrayFloat",
    "TransferCurve",
    "RgbGamut",

    # --- Constants ---
    "REF_WHITE_D65",
    "REF_WHITE_D50",
    "LAB_EPSILON",
    "LAB_KAPPA",
    "LCH_POWERLESS_CHROMA",
    "OKLCH_POWERLESS_CHROMA",
    "DEG2RAD",
    "RAD2DEG",

    # --- Configuration ---
    "set_strict_ieee",

    # --- Matrices ---
    "M_SRGB_TO_XYZ_T",
    "M_XYZ_TO_SRGB_T",
    "M_DISPLAY_P3_TO_XYZ_T",
    "M_XYZ_TO_DISPLAY_P3_T",
    "M_A98_RGB_TO_XYZ_T",
    "M_XYZ_TO_A98_RGB_T",
    "M_PROPHOTO_RGB_TO_XYZ_T",
    "M_XYZ_TO_PROPHOTO_RGB_T",
    "M_REC2020_TO_XYZ_T",
    "M_XYZ_TO_REC2020_T",
    "M1_XYZ_TO_LMS_OKLAB_T",
    "M1_LMS_TO_XYZ_OKLAB_T",
    "M2_LMS_TO_LAB_OKLAB_T",
    "M2_LAB_TO_LMS_OKLAB_T",
    "M_BRADFORD_T",
    "M_BRADFORD_INV_T",
    "RGB_GAMUTS",

    # --- Decorators ---
    "handle_shapes",

    # --- Classes ---
    "ColorSpaceEngine",
    "ChromaticAdaptation",
    "GamutMapping",
    "ColorMetrics",
]

# --- Type Aliases ---
# NOTE: Internal kernels compile to float64.  float32 inputs are cast on entry.
ArrayFloat: TypeAlias = npt.NDArray[np.floating]

TransferCurve: TypeAlias = Literal["srgb", "a98-rgb", "prophoto-rgb", "rec2020"]
RgbGamut: TypeAlias = Literal["srgb", "display-p3", "a98-rgb", "prophoto-rgb", "rec2020"]

# --- Constants & Pre-Transposed Matrices ---

# Standard Illuminants (Y=1.0), from the CSS Color 4 chromaticities.
# D65: x = 0.3127, y = 0.3290
REF_WHITE_D65: Final[ArrayFloat] = np.array(
    [0.3127 / 0.3290, 1.0, (1.0 - 0.3127 - 0.3290) / 0.3290], dtype=np.float64
)
# D50: x = 0.3457, y = 0.3585 (ICC profile connection space)
REF_WHITE_D50: Final[ArrayFloat] = np.array(
    [0.3457 / 0.3585, 1.0, (1.0 - 0.3457 - 0.3585) / 0.3585], dtype=np.float64
)

# sRGB (linear) <-> XYZ-D65
_M_SRGB_TO_XYZ = np.array([
    [0.4123907992659595,  0.35758433938387796, 0.1804807884018343],
    [0.21263900587151036, 0.7151686787677559,  0.07219231536073371],
    [0.01933081871559185, 0.11919477979462599, 0.9505321522496606],
], dtype=np.float64)
M_SRGB_TO_XYZ_T: Final[ArrayFloat] = _M_SRGB_TO_XYZ.T.copy()

_M_XYZ_TO_SRGB = np.array([
    [ 3.2409699419045213, -1.5373831775700935, -0.4986107602930033],
    [-0.9692436362808798,  1.8759675015077206,  0.04155505740717561],
    [ 0.05563007969699361, -0.20397695888897657, 1.0569715142428786],
], dtype=np.float64)
M_XYZ_TO_SRGB_T: Final[ArrayFloat] = _M_XYZ_TO_SRGB.T.copy()

# Display-P3 (linear) <-> XYZ-D65
_M_DISPLAY_P3_TO_XYZ = np.array([
    [0.48657094864821626, 0.26566769316909294,  0.1982172852343625],
    [0.22897456406974884, 0.6917385218365062,   0.079286914093745],
    [0.0,                 0.045113381858902575, 1.0439443689009757],
], dtype=np.float64)
M_DISPLAY_P3_TO_XYZ_T: Final[ArrayFloat] = _M_DISPLAY_P3_TO_XYZ.T.copy()

_M_XYZ_TO_DISPLAY_P3 = np.array([
    [ 2.4934969119414245,   -0.9313836179191236,  -0.40271078445071684],
    [-0.829488969561575,     1.7626640603183468,   0.02362468584194359],
    [ 0.035845830243784335, -0.07617238926804171,  0.9568845240076873],
], dtype=np.float64)
M_XYZ_TO_DISPLAY_P3_T: Final[ArrayFloat] = _M_XYZ_TO_DISPLAY_P3.T.copy()

# A98-RGB (linear) <-> XYZ-D65
_M_A98_RGB_TO_XYZ = np.array([
    [0.5766690429101308,   0.18555823790654627, 0.18822864623499472],
    [0.29734497525053616,  0.627363566255466,   0.07529145849399789],
    [0.027031361386412378, 0.07068885253582714, 0.9913375368376389],
], dtype=np.float64)
M_A98_RGB_TO_XYZ_T: Final[ArrayFloat] = _M_A98_RGB_TO_XYZ.T.copy()

_M_XYZ_TO_A98_RGB = np.array([
    [ 2.041587903810746,    -0.5650069742788596,  -0.3447313507783295],
    [-0.9692436362808798,    1.8759675015077206,   0.04155505740717561],
    [ 0.013444280632031024, -0.11836239223101824,  1.0151749943912054],
], dtype=np.float64)
M_XYZ_TO_A98_RGB_T: Final[ArrayFloat] = _M_XYZ_TO_A98_RGB.T.copy()

# ProPhoto-RGB (linear) <-> XYZ-D50
_M_PROPHOTO_RGB_TO_XYZ = np.array([
    [0.7977604896723027, 0.13518583717574031, 0.0313493495815248],
    [0.2880711282292934, 0.7118432178101014,  0.00008565396060525902],
    [0.0,                0.0,                 0.8251046025104601],
], dtype=np.float64)
M_PROPHOTO_RGB_TO_XYZ_T: Final[ArrayFloat] = _M_PROPHOTO_RGB_TO_XYZ.T.copy()

_M_XYZ_TO_PROPHOTO_RGB = np.array([
    [ 1.3457989731028281, -0.25558010007997534, -0.05110628506753401],
    [-0.5446224939028347,  1.5082327413132781,   0.02053603239147973],
    [ 0.0,                 0.0,                  1.2119675456389454],
], dtype=np.float64)
M_XYZ_TO_PROPHOTO_RGB_T: Final[ArrayFloat] = _M_XYZ_TO_PROPHOTO_RGB.T.copy()

# Rec2020 (linear) <-> XYZ-D65
_M_REC2020_TO_XYZ = np.array([
    [0.6369580483012913,  0.14461690358620838,  0.16888097516417205],
    [0.26270021201126703, 0.677998071518871,    0.059301716469861945],
    [0.0,                 0.028072693049087508, 1.0609850577107909],
], dtype=np.float64)
M_REC2020_TO_XYZ_T: Final[ArrayFloat] = _M_REC2020_TO_XYZ.T.copy()

_M_XYZ_TO_REC2020 = np.array([
    [ 1.7166511879712676,   -0.3556707837763924,  -0.2533662813736598],
    [-0.666684351832489,     1.616481236634939,    0.01576854581391113],
    [ 0.017639857445310915, -0.042770613257808655, 0.942103121235474],
], dtype=np.float64)
M_XYZ_TO_REC2020_T: Final[ArrayFloat] = _M_XYZ_TO_REC2020.T.copy()

# Oklab Matrices (XYZ-D65 oriented, CSS Color 4 precision)
_M1_XYZ_TO_LMS = np.array([
    [0.8190224432164319,   0.3619062562801221,  -0.12887378261216414],
    [0.0329836671980271,   0.9292868468965546,   0.03614466816999844],
    [0.048177199566046255, 0.26423952494422764,  0.6335478258136937],
], dtype=np.float64)
M1_XYZ_TO_LMS_OKLAB_T: Final[ArrayFloat] = _M1_XYZ_TO_LMS.T.copy()

_M1_LMS_TO_XYZ = np.array([
    [ 1.2268798733741557,  -0.5578149965554813,  0.28139105017721583],
    [-0.04057576262431372,  1.1122868293970594, -0.07171106666151701],
    [-0.07637294974672142, -0.4214933239627914,  1.5869240244272418],
], dtype=np.float64)
M1_LMS_TO_XYZ_OKLAB_T: Final[ArrayFloat] = _M1_LMS_TO_XYZ.T.copy()

_M2_LMS_TO_LAB = np.array([
    [0.2104542553,  0.7936177850, -0.0040720468],
    [1.9779984951, -2.4285922050,  0.4505937099],
    [0.0259040371,  0.7827717662, -0.8086757660],
], dtype=np.float64)
M2_LMS_TO_LAB_OKLAB_T: Final[ArrayFloat] = _M2_LMS_TO_LAB.T.copy()

_M2_LAB_TO_LMS = np.array([
    [0.99999999845051981432,  0.39633779217376785678,  0.21580375806075880339],
    [1.0000000088817607767,  -0.1055613423236563494,  -0.063854174771705903402],
    [1.0000000546724109177,  -0.089484182094965759684, -1.2914855378640917399],
], dtype=np.float64)
M2_LAB_TO_LMS_OKLAB_T: Final[ArrayFloat] = _M2_LAB_TO_LMS.T.copy()

# Bradford Matrix
_M_BRADFORD = np.array([
    [ 0.8951,  0.2664, -0.1614],
    [-0.7502,  1.7135,  0.0367],
    [ 0.0389, -0.0685,  1.0296]
], dtype=np.float64)
M_BRADFORD_T: Final[ArrayFloat] = _M_BRADFORD.T.copy()
M_BRADFORD_INV_T: Final[ArrayFloat] = np.linalg.inv(_M_BRADFORD).T.copy()

# RGB gamut table: gamut -> (linear-to-XYZ, XYZ-to-linear, native white)
RGB_GAMUTS: Final[Dict[str, Tuple[ArrayFloat, ArrayFloat, ArrayFloat]]] = {
    "srgb":         (M_SRGB_TO_XYZ_T, M_XYZ_TO_SRGB_T, REF_WHITE_D65),
    "display-p3":   (M_DISPLAY_P3_TO_XYZ_T, M_XYZ_TO_DISPLAY_P3_T, REF_WHITE_D65),
    "a98-rgb":      (M_A98_RGB_TO_XYZ_T, M_XYZ_TO_A98_RGB_T, REF_WHITE_D65),
    "prophoto-rgb": (M_PROPHOTO_RGB_TO_XYZ_T, M_XYZ_TO_PROPHOTO_RGB_T, REF_WHITE_D50),
    "rec2020":      (M_REC2020_TO_XYZ_T, M_XYZ_TO_REC2020_T, REF_WHITE_D65),
}

# CIE Lab Constants (exact rational definitions)
_LAB_DELTA: Final[float] = 6.0 / 29.0
LAB_EPSILON: Final[float] = 216.0 / 24389.0
LAB_KAPPA: Final[float] = 24389.0 / 27.0

# Chroma at or below which a polar hue is powerless (reported as NaN).
LCH_POWERLESS_CHROMA: Final[float] = 0.0015
OKLCH_POWERLESS_CHROMA: Final[float] = 0.000004

# Transfer curve constants
_A98_GAMMA: Final[float] = 563.0 / 256.0
_PROPHOTO_ET: Final[float] = 1.0 / 512.0
_REC2020_ALPHA: Final[float] = 1.09929682680944
_REC2020_BETA: Final[float] = 0.018053968510807

DEG2RAD: Final[float] = np.pi / 180.0
RAD2DEG: Final[float] = 180.0 / np.pi


# --- Runtime Configuration ---
# When True, the transfer-curve and Lab kernels use fastmath=False variants
# that preserve strict IEEE 754 semantics (inf / NaN propagation, no FP
# reassociation).
#
# Toggle at runtime via:
#     import tincture_colorengine as ce
#     ce.set_strict_ieee(True)   # enable strict mode
#     ce.set_strict_ieee(False)  # back to fast mode (default)
_STRICT_IEEE: bool = False

def set_strict_ieee(enabled: bool = True) -> None:
    """
    Toggle between fast (default) and strict IEEE 754 Numba kernels.

    When ``enabled=True``, all transfer curves and the Lab f / f_inv
    functions use ``fastmath=False`` kernels that guarantee correct inf/NaN
    propagation at the cost of some throughput.

    Args:
        enabled: If True, use strict IEEE mode.
    """
    global _STRICT_IEEE
    _STRICT_IEEE = bool(enabled)


# =============================================================================
# 1. ROBUST DECORATORS
# =============================================================================

def handle_shapes(func: Callable[..., ArrayFloat]) -> Callable[..., ArrayFloat]:
    """
    Decorator to normalize inputs to (N, 3) float64 and safeguard shape.

    Args:
        func: The function to decorate.

    Returns:
        The wrapped function with shape handling.
        - If input is (3,), returns (3,)
        - If input is (N, 3), returns (N, 3)
    """
    @functools.wraps(func)
    def wrapper(arr: ArrayFloat, *args: Any, **kwargs: Any) -> ArrayFloat:
        arr = np.asarray(arr, dtype=np.float64)
        arr_in = np.ascontiguousarray(np.atleast_2d(arr))

        if arr_in.ndim != 2 or arr_in.shape[-1] != 3:
            raise ValueError(f"Expected shape (3,) or (N, 3), got {arr.shape}")

        res = func(arr_in, *args, **kwargs)

        if arr.ndim == 1:
            return res[0]
        return res
    return wrapper


# =============================================================================
# 2. LOW-LEVEL MATH KERNELS (Numba Optimized)
# =============================================================================
# Every transfer curve is sign-preserving: f(-v) == -f(v).  Each curve is
# written once as a plain loop and compiled twice, fast and strict.

def _srgb_encode(linear: ArrayFloat) -> ArrayFloat:
    """sRGB / Display-P3 OETF (linear -> gamma encoded)."""
    out = np.empty_like(linear)
    linear_flat = linear.ravel()
    out_flat = out.ravel()
    for i in range(linear.size):
        v = linear_flat[i]
        a = abs(v)
        if a > 0.0031308:
            e = 1.055 * (a ** (1.0 / 2.4)) - 0.055
            out_flat[i] = e if v >= 0.0 else -e
        else:
            out_flat[i] = 12.92 * v
    return out

def _srgb_decode(encoded: ArrayFloat) -> ArrayFloat:
    """sRGB / Display-P3 EOTF (gamma encoded -> linear)."""
    out = np.empty_like(encoded)
    enc_flat = encoded.ravel()
    out_flat = out.ravel()
    for i in range(encoded.size):
        v = enc_flat[i]
        a = abs(v)
        if a < 0.04045:
            out_flat[i] = v / 12.92
        else:
            d = ((a + 0.055) / 1.055) ** 2.4
            out_flat[i] = d if v >= 0.0 else -d
    return out

def _a98_encode(linear: ArrayFloat) -> ArrayFloat:
    """A98-RGB pure power-law encoding."""
    out = np.empty_like(linear)
    linear_flat = linear.ravel()
    out_flat = out.ravel()
    for i in range(linear.size):
        v = linear_flat[i]
        e = abs(v) ** (1.0 / _A98_GAMMA)
        out_flat[i] = e if v >= 0.0 else -e
    return out

def _a98_decode(encoded: ArrayFloat) -> ArrayFloat:
    """A98-RGB pure power-law decoding."""
    out = np.empty_like(encoded)
    enc_flat = encoded.ravel()
    out_flat = out.ravel()
    for i in range(encoded.size):
        v = enc_flat[i]
        d = abs(v) ** _A98_GAMMA
        out_flat[i] = d if v >= 0.0 else -d
    return out

def _prophoto_encode(linear: ArrayFloat) -> ArrayFloat:
    """ProPhoto-RGB encoding, gamma 1.8 with a linear toe below 1/512."""
    out = np.empty_like(linear)
    linear_flat = linear.ravel()
    out_flat = out.ravel()
    for i in range(linear.size):
        v = linear_flat[i]
        a = abs(v)
        if a >= _PROPHOTO_ET:
            e = a ** (1.0 / 1.8)
            out_flat[i] = e if v >= 0.0 else -e
        else:
            out_flat[i] = 16.0 * v
    return out

def _prophoto_decode(encoded: ArrayFloat) -> ArrayFloat:
    """ProPhoto-RGB decoding."""
    out = np.empty_like(encoded)
    enc_flat = encoded.ravel()
    out_flat = out.ravel()
    for i in range(encoded.size):
        v = enc_flat[i]
        a = abs(v)
        if a <= 16.0 * _PROPHOTO_ET:
            out_flat[i] = v / 16.0
        else:
            d = a ** 1.8
            out_flat[i] = d if v >= 0.0 else -d
    return out

def _rec2020_encode(linear: ArrayFloat) -> ArrayFloat:
    """ITU-R BT.2020 OETF."""
    out = np.empty_like(linear)
    linear_flat = linear.ravel()
    out_flat = out.ravel()
    for i in range(linear.size):
        v = linear_flat[i]
        a = abs(v)
        if a > _REC2020_BETA:
            e = _REC2020_ALPHA * (a ** 0.45) - (_REC2020_ALPHA - 1.0)
            out_flat[i] = e if v >= 0.0 else -e
        else:
            out_flat[i] = 4.5 * v
    return out

def _rec2020_decode(encoded: ArrayFloat) -> ArrayFloat:
    """ITU-R BT.2020 inverse OETF."""
    out = np.empty_like(encoded)
    enc_flat = encoded.ravel()
    out_flat = out.ravel()
    for i in range(encoded.size):
        v = enc_flat[i]
        a = abs(v)
        if a < _REC2020_BETA * 4.5:
            out_flat[i] = v / 4.5
        else:
            d = ((a + _REC2020_ALPHA - 1.0) / _REC2020_ALPHA) ** (1.0 / 0.45)
            out_flat[i] = d if v >= 0.0 else -d
    return out

def _xyz_to_lab_f(t: ArrayFloat) -> ArrayFloat:
    """
    Non-linear transfer function f(t) for CIELAB.

    This is the "cube root" part of the Lab transform, with a linear slope
    near zero to prevent infinite slope.  Negative input always takes the
    linear branch.
    """
    out = np.empty_like(t)
    t_flat = t.ravel()
    out_flat = out.ravel()
    for i in range(t.size):
        v = t_flat[i]
        if v > LAB_EPSILON:
            out_flat[i] = v ** (1.0 / 3.0)
        else:
            out_flat[i] = (LAB_KAPPA * v + 16.0) / 116.0
    return out

def _lab_to_xyz_f_inv(t: ArrayFloat) -> ArrayFloat:
    """
    Inverse non-linear transfer function for CIELAB.

    Uses multiplication form (116*t - 16)/k instead of (t - 16/116)/(k/116)
    to minimize floating point division errors near the delta threshold.
    """
    out = np.empty_like(t)
    t_flat = t.ravel()
    out_flat = out.ravel()
    for i in range(t.size):
        v = t_flat[i]
        if v > _LAB_DELTA:
            out_flat[i] = v ** 3.0
        else:
            out_flat[i] = (116.0 * v - 16.0) / LAB_KAPPA
    return out


def _compile_pair(func: Callable[[ArrayFloat], ArrayFloat]) -> Tuple[Callable[[ArrayFloat], ArrayFloat], Callable[[ArrayFloat], ArrayFloat]]:
    """
    Compiles *func* as a (fast, strict) kernel pair.

    The strict variant is not disk-cached: both variants share one source
    function, and Numba keys its on-disk cache by function, not by flags.
    """
    return (
        njit(cache=True, fastmath=True)(func),
        njit(cache=False, fastmath=False)(func),
    )


_ENCODE_KERNELS: Final[Dict[str, Tuple[Callable[[ArrayFloat], ArrayFloat], Callable[[ArrayFloat], ArrayFloat]]]] = {
    "srgb": _compile_pair(_srgb_encode),
    "a98-rgb": _compile_pair(_a98_encode),
    "prophoto-rgb": _compile_pair(_prophoto_encode),
    "rec2020": _compile_pair(_rec2020_encode),
}
_DECODE_KERNELS: Final[Dict[str, Tuple[Callable[[ArrayFloat], ArrayFloat], Callable[[ArrayFloat], ArrayFloat]]]] = {
    "srgb": _compile_pair(_srgb_decode),
    "a98-rgb": _compile_pair(_a98_decode),
    "prophoto-rgb": _compile_pair(_prophoto_decode),
    "rec2020": _compile_pair(_rec2020_decode),
}
_LAB_F_KERNELS = _compile_pair(_xyz_to_lab_f)
_LAB_F_INV_KERNELS = _compile_pair(_lab_to_xyz_f_inv)


# --- Kernel dispatchers ---
# These thin wrappers check the global _STRICT_IEEE flag and delegate
# to the appropriate compiled variant.

def _select(pair: Tuple[Callable[[ArrayFloat], ArrayFloat], Callable[[ArrayFloat], ArrayFloat]]) -> Callable[[ArrayFloat], ArrayFloat]:
    return pair[1] if _STRICT_IEEE else pair[0]

def _encode(linear: ArrayFloat, curve: str) -> ArrayFloat:
    """Dispatch a gamma-encoding curve to the fast or strict kernel."""
    try:
        pair = _ENCODE_KERNELS[curve]
    except KeyError:
        raise ValueError(f"Unknown transfer curve: {curve!r}") from None
    return _select(pair)(linear)

def _decode(encoded: ArrayFloat, curve: str) -> ArrayFloat:
    """Dispatch a gamma-decoding curve to the fast or strict kernel."""
    try:
        pair = _DECODE_KERNELS[curve]
    except KeyError:
        raise ValueError(f"Unknown transfer curve: {curve!r}") from None
    return _select(pair)(encoded)

def _lab_f(t: ArrayFloat) -> ArrayFloat:
    """Dispatch Lab f(t) to fast or strict kernel."""
    return _select(_LAB_F_KERNELS)(t)

def _lab_f_inv(t: ArrayFloat) -> ArrayFloat:
    """Dispatch Lab f_inv(t) to fast or strict kernel."""
    return _select(_LAB_F_INV_KERNELS)(t)


# --- NaN-producing kernels (always strict) ---

@njit(cache=True, fastmath=False)
def _rect_to_polar_kernel(rect: ArrayFloat, powerless_chroma: float) -> ArrayFloat:
    """
    Rectangular (L, a, b) -> polar (L, C, h) for Lab and Oklab.

    Hue lands in [0, 360).  At or below ``powerless_chroma`` the hue is NaN.
    """
    n = rect.shape[0]
    polar = np.empty_like(rect)
    for i in range(n):
        L, a, b = rect[i, 0], rect[i, 1], rect[i, 2]
        C = np.hypot(a, b)
        if C <= powerless_chroma:
            h_deg = np.nan
        else:
            h_deg = np.arctan2(b, a) * RAD2DEG
            if h_deg < 0.0:
                h_deg += 360.0
        polar[i, 0], polar[i, 1], polar[i, 2] = L, C, h_deg
    return polar

@njit(cache=True, fastmath=False)
def _polar_to_rect_kernel(polar: ArrayFloat) -> ArrayFloat:
    """Polar (L, C, h) -> rectangular (L, a, b).  A NaN hue counts as 0."""
    n = polar.shape[0]
    rect = np.empty_like(polar)
    for i in range(n):
        L, C, h_deg = polar[i, 0], polar[i, 1], polar[i, 2]
        if np.isnan(h_deg):
            h_deg = 0.0
        h_rad = h_deg * DEG2RAD
        rect[i, 0] = L
        rect[i, 1] = C * np.cos(h_rad)
        rect[i, 2] = C * np.sin(h_rad)
    return rect

@njit(cache=True, fastmath=False)
def _rgb_hue(r: float, g: float, b: float, hi: float, lo: float) -> float:
    """Hexagonal hue in degrees, NaN for achromatic input."""
    delta = hi - lo
    if delta == 0.0:
        return np.nan
    if hi == r:
        h = (g - b) / delta
        if g < b:
            h += 6.0
    elif hi == g:
        h = (b - r) / delta + 2.0
    else:
        h = (r - g) / delta + 4.0
    return h * 60.0

@njit(cache=True, fastmath=False)
def _hsl_channel(n: float, h: float, s: float, l: float) -> float:
    k = (n + h / 30.0) % 12.0
    a = s * min(l, 1.0 - l)
    return l - a * max(-1.0, min(min(k - 3.0, 9.0 - k), 1.0))

@njit(cache=True, fastmath=False)
def _rgb_to_hsl_kernel(rgb: ArrayFloat) -> ArrayFloat:
    """sRGB -> HSL.  Hue is NaN when the input is achromatic."""
    n = rgb.shape[0]
    hsl = np.empty_like(rgb)
    for i in range(n):
        r, g, b = rgb[i, 0], rgb[i, 1], rgb[i, 2]
        hi = max(r, max(g, b))
        lo = min(r, min(g, b))
        l = (lo + hi) / 2.0
        s = 0.0
        if hi - lo != 0.0 and l != 0.0 and l != 1.0:
            s = (hi - l) / min(l, 1.0 - l)
        hsl[i, 0] = _rgb_hue(r, g, b, hi, lo)
        hsl[i, 1] = s
        hsl[i, 2] = l
    return hsl

@njit(cache=True, fastmath=False)
def _hsl_to_rgb_kernel(hsl: ArrayFloat) -> ArrayFloat:
    """HSL -> sRGB.  NaN channels count as 0."""
    n = hsl.shape[0]
    rgb = np.empty_like(hsl)
    for i in range(n):
        h, s, l = hsl[i, 0], hsl[i, 1], hsl[i, 2]
        if np.isnan(s):
            s = 0.0
        if np.isnan(l):
            l = 0.0
        if s <= 0.0:
            rgb[i, 0], rgb[i, 1], rgb[i, 2] = l, l, l
            continue
        if np.isnan(h):
            h = 0.0
        h = h % 360.0
        rgb[i, 0] = _hsl_channel(0.0, h, s, l)
        rgb[i, 1] = _hsl_channel(8.0, h, s, l)
        rgb[i, 2] = _hsl_channel(4.0, h, s, l)
    return rgb

@njit(cache=True, fastmath=False)
def _rgb_to_hwb_kernel(rgb: ArrayFloat) -> ArrayFloat:
    """sRGB -> HWB.  Hue is NaN when the input is achromatic."""
    n = rgb.shape[0]
    hwb = np.empty_like(rgb)
    for i in range(n):
        r, g, b = rgb[i, 0], rgb[i, 1], rgb[i, 2]
        hi = max(r, max(g, b))
        lo = min(r, min(g, b))
        hwb[i, 0] = _rgb_hue(r, g, b, hi, lo)
        hwb[i, 1] = lo
        hwb[i, 2] = 1.0 - hi
    return hwb

@njit(cache=True, fastmath=False)
def _hwb_to_rgb_kernel(hwb: ArrayFloat) -> ArrayFloat:
    """HWB -> sRGB.  Whiteness + blackness >= 1 collapses to a gray."""
    n = hwb.shape[0]
    rgb = np.empty_like(hwb)
    for i in range(n):
        h, w, b = hwb[i, 0], hwb[i, 1], hwb[i, 2]
        if np.isnan(h):
            h = 0.0
        if np.isnan(w):
            w = 0.0
        if np.isnan(b):
            b = 0.0
        if w + b >= 1.0:
            gray = w / (w + b)
            rgb[i, 0], rgb[i, 1], rgb[i, 2] = gray, gray, gray
            continue
        h = h % 360.0
        scale = 1.0 - w - b
        rgb[i, 0] = _hsl_channel(0.0, h, 1.0, 0.5) * scale + w
        rgb[i, 1] = _hsl_channel(8.0, h, 1.0, 0.5) * scale + w
        rgb[i, 2] = _hsl_channel(4.0, h, 1.0, 0.5) * scale + w
    return rgb


# =============================================================================
# 3. COLOR SPACE ENGINE
# =============================================================================

class ColorSpaceEngine:
    """Static utility class for unified color space transformations.

    Architecture Note:
        Core transforms provide both a public ``@handle_shapes`` decorated API
        and an internal ``_raw`` fast-path that assumes pre-validated (N, 3)
        float64 input.  Chained pipelines (the per-space models and the batch
        converter) call the ``_raw`` variants to avoid redundant shape checks
        at each stage.
    """

    # =====================================================================
    #  Internal _raw fast-path methods  (assume validated (N, 3) float64)
    # =====================================================================

    @staticmethod
    def _to_linear_raw(encoded: ArrayFloat, curve: str) -> ArrayFloat:
        return _decode(encoded, curve)

    @staticmethod
    def _from_linear_raw(linear: ArrayFloat, curve: str) -> ArrayFloat:
        return _encode(linear, curve)

    @staticmethod
    def _linear_rgb_to_xyz_raw(linear: ArrayFloat, gamut: str) -> ArrayFloat:
        """Raw linear RGB -> XYZ relative to the gamut's native white."""
        return np.dot(linear, RGB_GAMUTS[gamut][0])

    @staticmethod
    def _xyz_to_linear_rgb_raw(xyz_array: ArrayFloat, gamut: str) -> ArrayFloat:
        return np.dot(xyz_array, RGB_GAMUTS[gamut][1])

    @staticmethod
    def _xyz_to_lab_raw(xyz_array: ArrayFloat, illuminant: ArrayFloat = REF_WHITE_D50) -> ArrayFloat:
        """Raw XYZ -> Lab.  *xyz_array* must be (N, 3) float64."""
        f = _lab_f(xyz_array / illuminant)
        out = np.empty_like(f)
        out[:, 0] = 116.0 * f[:, 1] - 16.0
        out[:, 1] = 500.0 * (f[:, 0] - f[:, 1])
        out[:, 2] = 200.0 * (f[:, 1] - f[:, 2])
        return out

    @staticmethod
    def _lab_to_xyz_raw(lab_array: ArrayFloat, illuminant: ArrayFloat = REF_WHITE_D50) -> ArrayFloat:
        """Raw Lab -> XYZ.  *lab_array* must be (N, 3) float64."""
        fy = (lab_array[:, 0] + 16.0) / 116.0
        f = np.empty_like(lab_array)
        f[:, 0] = fy + lab_array[:, 1] / 500.0
        f[:, 1] = fy
        f[:, 2] = fy - lab_array[:, 2] / 200.0
        return _lab_f_inv(f) * illuminant

    @staticmethod
    def _xyz_to_oklab_raw(xyz_array: ArrayFloat) -> ArrayFloat:
        """Raw XYZ-D65 -> Oklab.  *xyz_array* must be (N, 3) float64."""
        lms = np.dot(xyz_array, M1_XYZ_TO_LMS_OKLAB_T)
        lms_prime = np.cbrt(lms)
        return np.dot(lms_prime, M2_LMS_TO_LAB_OKLAB_T)

    @staticmethod
    def _oklab_to_xyz_raw(oklab_array: ArrayFloat) -> ArrayFloat:
        """Raw Oklab -> XYZ-D65.  *oklab_array* must be (N, 3) float64."""
        lms_prime = np.dot(oklab_array, M2_LAB_TO_LMS_OKLAB_T)
        lms = lms_prime ** 3
        return np.dot(lms, M1_LMS_TO_XYZ_OKLAB_T)

    @staticmethod
    def _rect_to_polar_raw(rect_array: ArrayFloat, powerless_chroma: float) -> ArrayFloat:
        return _rect_to_polar_kernel(rect_array, powerless_chroma)

    @staticmethod
    def _polar_to_rect_raw(polar_array: ArrayFloat) -> ArrayFloat:
        return _polar_to_rect_kernel(polar_array)

    @staticmethod
    def _srgb_to_hsl_raw(rgb_array: ArrayFloat) -> ArrayFloat:
        return _rgb_to_hsl_kernel(rgb_array)

    @staticmethod
    def _hsl_to_srgb_raw(hsl_array: ArrayFloat) -> ArrayFloat:
        return _hsl_to_rgb_kernel(hsl_array)

    @staticmethod
    def _srgb_to_hwb_raw(rgb_array: ArrayFloat) -> ArrayFloat:
        return _rgb_to_hwb_kernel(rgb_array)

    @staticmethod
    def _hwb_to_srgb_raw(hwb_array: ArrayFloat) -> ArrayFloat:
        return _hwb_to_rgb_kernel(hwb_array)

    # =====================================================================
    #  Public API  (shape-safe wrappers)
    # =====================================================================

    @staticmethod
    @handle_shapes
    def to_linear(encoded: ArrayFloat, curve: TransferCurve = "srgb") -> ArrayFloat:
        """
        Decodes gamma-encoded RGB channels to linear light.

        Args:
            encoded: Gamma-encoded RGB, shape (N, 3) or (3,).
            curve: Transfer curve name.  Display-P3 shares ``"srgb"``.

        Returns:
            Linear-light RGB, same shape.  Values outside [0, 1] are
            decoded with a mirrored curve.
        """
        return ColorSpaceEngine._to_linear_raw(encoded, curve)

    @staticmethod
    @handle_shapes
    def from_linear(linear: ArrayFloat, curve: TransferCurve = "srgb") -> ArrayFloat:
        """
        Gamma-encodes linear-light RGB channels.

        Args:
            linear: Linear-light RGB, shape (N, 3) or (3,).
            curve: Transfer curve name.  Display-P3 shares ``"srgb"``.
        """
        return ColorSpaceEngine._from_linear_raw(linear, curve)

    @staticmethod
    @handle_shapes
    def linear_rgb_to_xyz(linear: ArrayFloat, gamut: RgbGamut = "srgb") -> ArrayFloat:
        """
        Converts linear-light RGB to XYZ.

        Args:
            linear: Linear RGB, shape (N, 3) or (3,).
            gamut: RGB primaries.

        Returns:
            XYZ relative to the gamut's native white (D50 for ProPhoto-RGB,
            D65 for every other gamut).
        """
        return ColorSpaceEngine._linear_rgb_to_xyz_raw(linear, gamut)

    @staticmethod
    @handle_shapes
    def xyz_to_linear_rgb(xyz_array: ArrayFloat, gamut: RgbGamut = "srgb") -> ArrayFloat:
        """Inverse of ``linear_rgb_to_xyz``.  No clipping is applied."""
        return ColorSpaceEngine._xyz_to_linear_rgb_raw(xyz_array, gamut)

    @staticmethod
    @handle_shapes
    def xyz_to_lab(xyz_array: ArrayFloat, illuminant: ArrayFloat = REF_WHITE_D50) -> ArrayFloat:
        """
        Converts XYZ to CIELAB.

        Args:
            xyz_array: Input XYZ data.
            illuminant: Reference white.  CSS Lab is D50-relative.
        """
        return ColorSpaceEngine._xyz_to_lab_raw(xyz_array, illuminant)

    @staticmethod
    @handle_shapes
    def lab_to_xyz(lab_array: ArrayFloat, illuminant: ArrayFloat = REF_WHITE_D50) -> ArrayFloat:
        """
        Converts CIELAB to XYZ.

        Args:
            lab_array: Input Lab data.
            illuminant: Reference white.  CSS Lab is D50-relative.
        """
        return ColorSpaceEngine._lab_to_xyz_raw(lab_array, illuminant)

    @staticmethod
    @handle_shapes
    def lab_to_lch(lab_array: ArrayFloat) -> ArrayFloat:
        """
        Converts Lab to LCh(ab).

        Hue is in degrees [0, 360), NaN when chroma <= LCH_POWERLESS_CHROMA.
        """
        return ColorSpaceEngine._rect_to_polar_raw(lab_array, LCH_POWERLESS_CHROMA)

    @staticmethod
    @handle_shapes
    def lch_to_lab(lch_array: ArrayFloat) -> ArrayFloat:
        """Converts LCh(ab) to Lab."""
        return ColorSpaceEngine._polar_to_rect_raw(lch_array)

    @staticmethod
    @handle_shapes
    def xyz_to_oklab(xyz_array: ArrayFloat) -> ArrayFloat:
        """
        Converts XYZ (D65) to Oklab.

        Args:
            xyz_array: Input XYZ data (D65).
        """
        return ColorSpaceEngine._xyz_to_oklab_raw(xyz_array)

    @staticmethod
    @handle_shapes
    def oklab_to_xyz(oklab_array: ArrayFloat) -> ArrayFloat:
        """
        Converts Oklab to XYZ (D65).

        Args:
            oklab_array: Input Oklab data.
        """
        return ColorSpaceEngine._oklab_to_xyz_raw(oklab_array)

    @staticmethod
    @handle_shapes
    def oklab_to_oklch(oklab_array: ArrayFloat) -> ArrayFloat:
        """
        Converts Oklab to Oklch.

        Hue is in degrees [0, 360), NaN when chroma <= OKLCH_POWERLESS_CHROMA.
        """
        return ColorSpaceEngine._rect_to_polar_raw(oklab_array, OKLCH_POWERLESS_CHROMA)

    @staticmethod
    @handle_shapes
    def oklch_to_oklab(oklch_array: ArrayFloat) -> ArrayFloat:
        """Converts Oklch to Oklab."""
        return ColorSpaceEngine._polar_to_rect_raw(oklch_array)

    @staticmethod
    @handle_shapes
    def srgb_to_hsl(rgb_array: ArrayFloat) -> ArrayFloat:
        """
        Converts gamma-encoded sRGB to HSL (hue in degrees, S and L in [0, 1]).

        Achromatic input yields a NaN hue.
        """
        return ColorSpaceEngine._srgb_to_hsl_raw(rgb_array)

    @staticmethod
    @handle_shapes
    def hsl_to_srgb(hsl_array: ArrayFloat) -> ArrayFloat:
        """Converts HSL to gamma-encoded sRGB."""
        return ColorSpaceEngine._hsl_to_srgb_raw(hsl_array)

    @staticmethod
    @handle_shapes
    def srgb_to_hwb(rgb_array: ArrayFloat) -> ArrayFloat:
        """
        Converts gamma-encoded sRGB to HWB.

        Achromatic input yields a NaN hue.
        """
        return ColorSpaceEngine._srgb_to_hwb_raw(rgb_array)

    @staticmethod
    @handle_shapes
    def hwb_to_srgb(hwb_array: ArrayFloat) -> ArrayFloat:
        """Converts HWB to gamma-encoded sRGB."""
        return ColorSpaceEngine._hwb_to_srgb_raw(hwb_array)


# =============================================================================
# 4. CHROMATIC ADAPTATION & GAMUT CLIPPING
# =============================================================================

def _to_hashable(obj: Union[ArrayFloat, Sequence[float]]) -> Tuple[float, ...]:
    """Helper to ensure inputs are hashable tuples for caching."""
    if isinstance(obj, np.ndarray):
        return tuple(obj.ravel())
    return tuple(obj)

@functools.lru_cache(maxsize=16)
def _get_cached_bradford_matrix(src_white_tuple: Tuple[float, ...], dst_white_tuple: Tuple[float, ...]) -> ArrayFloat:
    """
    Cached worker for calculating Bradford matrix.

    Derivation:
    M_composite = M_inv * Gain * M
    Since we operate on row vectors: M_comp = M.T @ Gain @ M_inv.T
    """
    src = np.array(src_white_tuple, dtype=np.float64)
    dst = np.array(dst_white_tuple, dtype=np.float64)

    src_lms = np.dot(src, M_BRADFORD_T)
    dst_lms = np.dot(dst, M_BRADFORD_T)

    # Prevent divide-by-zero for extremely dark white points
    src_lms = np.where(np.abs(src_lms) < 1e-12, 1e-12, src_lms)
    M_gain = np.diag(dst_lms / src_lms)

    M = M_BRADFORD_T @ M_gain @ M_BRADFORD_INV_T
    M.setflags(write=False)
    return M

class ChromaticAdaptation:
    """Handles White Point Adaptation (Bradford Method)."""

    @staticmethod
    def calc_transform_matrix(src_white: ArrayFloat, dst_white: ArrayFloat) -> ArrayFloat:
        """
        Computes the Bradford adaptation matrix between two white points.

        Args:
            src_white: Source white point (XYZ).
            dst_white: Destination white point (XYZ).

        Returns:
            3x3 Adaptation Matrix (for row-vector multiplication).
        """
        return _get_cached_bradford_matrix(_to_hashable(src_white), _to_hashable(dst_white))

    @staticmethod
    def _adapt_raw(xyz: ArrayFloat, src_white: ArrayFloat, dst_white: ArrayFloat) -> ArrayFloat:
        return np.dot(xyz, ChromaticAdaptation.calc_transform_matrix(src_white, dst_white))

    @staticmethod
    @handle_shapes
    def adapt(xyz: ArrayFloat, src_white: ArrayFloat, dst_white: ArrayFloat, clip_negative: bool = False) -> ArrayFloat:
        """
        Adapts XYZ color(s) from source to dest white point using Cached Bradford.

        Args:
            xyz: Input XYZ colors.
            src_white: Source white point.
            dst_white: Destination white point.
            clip_negative: If True, clamps negative XYZ values to 0.0.  Off by
                default: out-of-gamut colors legitimately carry negative XYZ.

        Returns:
            Adapted XYZ colors.
        """
        if np.array_equal(src_white, dst_white):
            res = xyz
        else:
            res = ChromaticAdaptation._adapt_raw(xyz, src_white, dst_white)
        if clip_negative:
            return np.where(res < 0.0, 0.0, res)
        return res

class GamutMapping:
    """Per-channel gamut tests and clipping for RGB-like arrays."""

    @staticmethod
    @handle_shapes
    def clip_absolute(rgb: ArrayFloat) -> ArrayFloat:
        """Hard clip to [0, 1]."""
        return np.clip(rgb, 0.0, 1.0)

    @staticmethod
    def in_unit_cube(rgb: ArrayFloat) -> Union[bool, np.ndarray]:
        """
        True where every channel lies in [0, 1].

        Returns a bool for a (3,) input, a bool array of shape (N,) for (N, 3).
        """
        arr = np.asarray(rgb, dtype=np.float64)
        inside = np.all((arr >= 0.0) & (arr <= 1.0), axis=-1)
        if arr.ndim == 1:
            return bool(inside)
        return inside


# =============================================================================
# 5. OPTIMIZED METRICS
# =============================================================================

@njit(cache=True, fastmath=True, parallel=True)
def _batch_euclidean(p1: ArrayFloat, p2: ArrayFloat) -> ArrayFloat:
    """Vectorized and Parallelized row-wise Euclidean distance."""
    n = len(p1)
    res = np.empty(n, dtype=np.float64)
    for i in prange(n):
        d0 = p1[i, 0] - p2[i, 0]
        d1 = p1[i, 1] - p2[i, 1]
        d2 = p1[i, 2] - p2[i, 2]
        res[i] = np.sqrt(d0*d0 + d1*d1 + d2*d2)
    return res

class ColorMetrics:
    @staticmethod
    def _prepare_inputs(c1: ArrayFloat, c2: ArrayFloat) -> Tuple[ArrayFloat, ArrayFloat]:
        """
        Broadcasting helper.

        Uses NumPy's broadcast_to for shape matching, then ensures the result
        is contiguous.  ``broadcast_to`` creates read-only strided views which
        Numba ``prange`` kernels may silently copy internally; the explicit
        copy keeps the hot loop on a dense layout.
        """
        p1 = np.ascontiguousarray(np.atleast_2d(np.asarray(c1, dtype=np.float64)))
        p2 = np.ascontiguousarray(np.atleast_2d(np.asarray(c2, dtype=np.float64)))

        if p1.shape[-1] != 3 or p2.shape[-1] != 3:
            raise ValueError(f"Inputs must have shape (N, 3), got {p1.shape} and {p2.shape}")

        if p1.shape[0] != p2.shape[0]:
            if p1.shape[0] == 1: p1 = np.ascontiguousarray(np.broadcast_to(p1, p2.shape))
            elif p2.shape[0] == 1: p2 = np.ascontiguousarray(np.broadcast_to(p2, p1.shape))
            else: raise ValueError(f"Shapes {p1.shape} and {p2.shape} are not broadcastable.")
        return p1, p2

    @staticmethod
    def _distance(c1: ArrayFloat, c2: ArrayFloat) -> Union[float, ArrayFloat]:
        p1, p2 = ColorMetrics._prepare_inputs(c1, c2)
        res = _batch_euclidean(p1, p2)
        if np.ndim(c1) == 1 and np.ndim(c2) == 1:
            return float(res[0])
        return res

    @staticmethod
    def delta_E_76(lab1: ArrayFloat, lab2: ArrayFloat) -> Union[float, ArrayFloat]:
        """
        Calculates CIE Delta E 1976 (Euclidean distance in Lab).

        Args:
            lab1: Reference colors.
            lab2: Sample colors.
        """
        return ColorMetrics._distance(lab1, lab2)

    @staticmethod
    def delta_E_OK(oklab1: ArrayFloat, oklab2: ArrayFloat) -> Union[float, ArrayFloat]:
        """
        Calculates Delta E OK (Euclidean distance in Oklab).

        This is the metric the CSS gamut-mapping algorithm compares against
        its just-noticeable-difference threshold of 0.02.

        Args:
            oklab1: Reference colors, shape (N, 3) or (3,).
            oklab2: Sample colors, shape (N, 3) or (3,).

        Returns:
            Distances.  Supports broadcasting (e.g., 1 vs N).
        """
        return ColorMetrics._distance(oklab1, oklab2)
