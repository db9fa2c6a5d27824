from typing import Optional
import numpy as np
import cv2
from lume.domain.types import ImageBuffer, Mask
from lume.features.basic.logic import apply_color_controls
from lume.kernel.system.config import OPERATOR_CONSTANTS
from lume.kernel.system.logging import get_logger
from lume.kernel.system.performance import time_function
from lume.kernel.validation import ensure_image

logger = get_logger(__name__)


def generate_noise(height: int, width: int, seed: int, max_pixels: int) -> Optional[Mask]:
    """
    Uniform monochrome noise in 0-1. None when the canvas is empty or too large.
    """
    if height <= 0 or width <= 0 or height * width > max_pixels:
        return None

    rng = np.random.default_rng(seed)
    return rng.random((height, width), dtype=np.float32)


def shape_noise(noise: Mask, amount: float, size: float, frequency: float) -> Mask:
    """
    Blur controls grain size; brightness/contrast of the noise control amount and frequency.
    """
    sigma = size / OPERATOR_CONSTANTS["grain_size_divisor"]
    if sigma > 0.0:
        noise = cv2.GaussianBlur(
            noise, (0, 0), sigmaX=sigma, sigmaY=sigma, borderType=cv2.BORDER_REFLECT
        )

    adjusted = apply_color_controls(
        noise[:, :, None],
        contrast=frequency / OPERATOR_CONSTANTS["grain_frequency_divisor"],
        brightness=amount / OPERATOR_CONSTANTS["grain_amount_divisor"],
    )
    return ensure_image(adjusted[:, :, 0])


def overlay_blend(base: ImageBuffer, blend: np.ndarray) -> ImageBuffer:
    """
    Standard overlay: multiply where the base is dark, screen where it is light.
    """
    low = 2.0 * base * blend
    high = 1.0 - 2.0 * (1.0 - base) * (1.0 - blend)
    res = np.where(base < 0.5, low, high)
    return ensure_image(np.clip(res, 0.0, 1.0))


@time_function
def apply_grain(
    img: ImageBuffer,
    amount: float,
    size: float,
    frequency: float,
    seed: int = 0,
    max_pixels: int = 100_000_000,
) -> Optional[ImageBuffer]:
    """
    Procedural film grain overlaid on the image. None if the noise field cannot be built.
    """
    h, w = img.shape[:2]
    noise = generate_noise(h, w, seed, max_pixels)
    if noise is None:
        logger.debug(f"Grain noise refused for {w}x{h} canvas")
        return None

    grain = shape_noise(noise, amount, size, frequency)
    return overlay_blend(img, grain[:, :, None])
