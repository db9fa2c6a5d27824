import math
from typing import Optional, Tuple
import numpy as np
from lume.domain.types import LUMA_COEFFS, ImageBuffer
from lume.kernel.image.logic import (
    get_luminance,
    linear_to_srgb,
    smoothstep,
    srgb_to_linear,
)
from lume.kernel.system.config import OPERATOR_CONSTANTS
from lume.kernel.system.performance import time_function
from lume.kernel.validation import ensure_image

# CIE XYZ (D65) -> linear sRGB
XYZ_TO_LINEAR_SRGB = np.array(
    [
        [3.2404542, -1.5371385, -0.4985314],
        [-0.9692660, 1.8760108, 0.0415560],
        [0.0556434, -0.2040259, 1.0572252],
    ],
    dtype=np.float64,
)


def cct_to_xy(temperature: float) -> Tuple[float, float]:
    """
    Planckian locus approximation (Kang et al. 2002), valid 1667K - 25000K.
    Temperatures outside the range are clamped.
    """
    t = min(max(float(temperature), 1667.0), 25000.0)

    if t <= 4000.0:
        x = -0.2661239e9 / t**3 - 0.2343589e6 / t**2 + 0.8776956e3 / t + 0.179910
    else:
        x = -3.0258469e9 / t**3 + 2.1070379e6 / t**2 + 0.2226347e3 / t + 0.240390

    if t <= 2222.0:
        y = -1.1063814 * x**3 - 1.34811020 * x**2 + 2.18555832 * x - 0.20219683
    elif t <= 4000.0:
        y = -0.9549476 * x**3 - 1.37418593 * x**2 + 2.09137015 * x - 0.16748867
    else:
        y = 3.0817580 * x**3 - 5.87338670 * x**2 + 3.75112997 * x - 0.37001483

    return x, y


def neutral_to_linear_rgb(temperature: float, tint: float) -> np.ndarray:
    """
    Linear sRGB colour of a neutral at (temperature, tint), Y normalized to 1.
    Positive tint moves the neutral toward green.
    """
    x, y = cct_to_xy(temperature)
    y = y + tint / OPERATOR_CONSTANTS["tint_scale"]
    xyz = np.array([x / y, 1.0, (1.0 - x - y) / y], dtype=np.float64)
    res: np.ndarray = XYZ_TO_LINEAR_SRGB @ xyz
    return res


def white_balance_gains(temperature: float, tint: float) -> Optional[np.ndarray]:
    """
    Per-channel linear gains that map the source neutral onto the D65 white.
    Gains are normalized to keep luma constant. None if the neutral falls outside
    the sRGB gamut (a channel <= 0) and no gains can be built.
    """
    src = neutral_to_linear_rgb(temperature, tint)
    if np.any(src <= 0.0) or not np.all(np.isfinite(src)):
        return None

    ref = neutral_to_linear_rgb(
        OPERATOR_CONSTANTS["reference_temperature"],
        OPERATOR_CONSTANTS["reference_tint"],
    )
    gains = ref / src
    gains = gains / float(np.dot(gains, LUMA_COEFFS))
    return gains.astype(np.float32)


@time_function
def apply_white_balance(img: ImageBuffer, gains: np.ndarray) -> ImageBuffer:
    """
    Scales linear light per channel, returns sRGB encoded.
    """
    linear = srgb_to_linear(img) * gains[None, None, :]
    return linear_to_srgb(linear)


@time_function
def apply_exposure(img: ImageBuffer, ev: float) -> ImageBuffer:
    """
    EV semantics: linear light multiplied by 2^ev.
    """
    if ev == 0.0:
        return img

    linear = srgb_to_linear(img) * np.float32(2.0**ev)
    return linear_to_srgb(linear)


@time_function
def apply_highlight_shadow(
    img: ImageBuffer, highlight_amount: float, shadow_amount: float
) -> ImageBuffer:
    """
    Tone recovery above/below mid-gray. Amounts of 1.0 are neutral.
    highlight < 1 pulls highlights toward mid-gray, > 1 pushes them out.
    shadow > 1 lifts shadows toward mid-gray, < 1 crushes them.
    """
    if highlight_amount == 1.0 and shadow_amount == 1.0:
        return img

    mid = OPERATOR_CONSTANTS["midpoint"]
    lum = get_luminance(img)

    w_high = smoothstep(mid, 1.0, lum)
    w_shadow = 1.0 - smoothstep(0.0, mid, lum)

    delta = (highlight_amount - 1.0) * w_high * (lum - mid) + (
        shadow_amount - 1.0
    ) * w_shadow * (mid - lum)

    res = img + delta[:, :, None]
    return ensure_image(np.clip(res, 0.0, 1.0))


@time_function
def apply_color_controls(
    img: ImageBuffer,
    contrast: float = 1.0,
    saturation: float = 1.0,
    brightness: float = 0.0,
) -> ImageBuffer:
    """
    Brightness (additive), then contrast around 0.5, then saturation around Rec.709 luma.
    Neutral arguments leave the buffer untouched.
    """
    if contrast == 1.0 and saturation == 1.0 and brightness == 0.0:
        return img

    res = img
    if brightness != 0.0:
        res = res + np.float32(brightness)

    if contrast != 1.0:
        mid = OPERATOR_CONSTANTS["midpoint"]
        res = (res - mid) * np.float32(contrast) + mid

    if saturation != 1.0:
        gray = get_luminance(res)[:, :, None]
        res = gray + (res - gray) * np.float32(saturation)

    return ensure_image(np.clip(res, 0.0, 1.0))


def hue_rotation_matrix(angle: float) -> np.ndarray:
    """
    Luma-preserving rotation around the gray axis (W3C feColorMatrix hueRotate).
    """
    c = math.cos(angle)
    s = math.sin(angle)
    return np.array(
        [
            [0.213 + c * 0.787 - s * 0.213, 0.715 - c * 0.715 - s * 0.715, 0.072 - c * 0.072 + s * 0.928],
            [0.213 - c * 0.213 + s * 0.143, 0.715 + c * 0.285 + s * 0.140, 0.072 - c * 0.072 - s * 0.283],
            [0.213 - c * 0.213 - s * 0.787, 0.715 - c * 0.715 + s * 0.715, 0.072 + c * 0.928 + s * 0.072],
        ],
        dtype=np.float32,
    )


@time_function
def apply_hue_rotation(img: ImageBuffer, angle: float) -> ImageBuffer:
    """
    Global hue rotate, angle in radians.
    """
    if angle == 0.0:
        return img

    matrix = hue_rotation_matrix(angle)
    res = np.einsum("hwc,kc->hwk", img, matrix)
    return ensure_image(np.clip(res, 0.0, 1.0))
