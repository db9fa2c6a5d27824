import numpy as np
import cv2
from lume.domain.types import ImageBuffer
from lume.kernel.image.logic import get_luminance
from lume.kernel.system.performance import time_function
from lume.kernel.validation import ensure_image


def _gaussian(plane: np.ndarray, radius: float) -> np.ndarray:
    res: np.ndarray = cv2.GaussianBlur(
        plane, (0, 0), sigmaX=radius, sigmaY=radius, borderType=cv2.BORDER_REFLECT
    )
    return res


@time_function
def apply_clarity(img: ImageBuffer, intensity: float, radius: float = 2.0) -> ImageBuffer:
    """
    Local contrast via unsharp mask on all channels: img + intensity * (img - blur).
    """
    if intensity == 0.0:
        return img

    src = np.ascontiguousarray(img, dtype=np.float32)
    blurred = _gaussian(src, radius)
    res = src + np.float32(intensity) * (src - blurred)
    return ensure_image(np.clip(res, 0.0, 1.0))


@time_function
def apply_vibrance(img: ImageBuffer, amount: float) -> ImageBuffer:
    """
    Saturation boost weighted toward muted pixels. Per-pixel factor is
    1 + amount * (1 - chroma), never below 0.
    """
    if amount == 0.0:
        return img

    chroma = np.max(img, axis=2) - np.min(img, axis=2)
    factor = np.maximum(1.0 + np.float32(amount) * (1.0 - chroma), 0.0)

    gray = get_luminance(img)[:, :, None]
    res = gray + (img - gray) * factor[:, :, None]
    return ensure_image(np.clip(res, 0.0, 1.0))


@time_function
def apply_luminance_sharpening(
    img: ImageBuffer, amount: float, radius: float = 1.69
) -> ImageBuffer:
    """
    Unsharp mask on the L* channel only, leaving chroma untouched.
    """
    if amount == 0.0:
        return img

    src = np.ascontiguousarray(np.clip(img, 0.0, 1.0), dtype=np.float32)
    lab = cv2.cvtColor(src, cv2.COLOR_RGB2LAB)
    l_chan, a, b = cv2.split(lab)

    l_blur = _gaussian(l_chan, radius)
    l_sharp = np.clip(l_chan + np.float32(amount) * (l_chan - l_blur), 0.0, 100.0)

    res = cv2.cvtColor(cv2.merge([l_sharp.astype(np.float32), a, b]), cv2.COLOR_LAB2RGB)
    return ensure_image(np.clip(res, 0.0, 1.0))
