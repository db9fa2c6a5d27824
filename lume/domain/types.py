from typing import TypeAlias
import numpy as np
import numpy.typing as npt
from dataclasses import dataclass


# Image Types
# Floating point image 0.0 - 1.0, sRGB encoded (Height, Width, 3)
ImageBuffer: TypeAlias = npt.NDArray[np.float32]
# 8-bit interchange image (Height, Width, 4)
ImageRGBA8: TypeAlias = npt.NDArray[np.uint8]
# Single channel float mask (Height, Width)
Mask: TypeAlias = npt.NDArray[np.float32]

# https://en.wikipedia.org/wiki/Luma_(video)
LUMA_COEFFS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float32)
LUMA_R = 0.2126
LUMA_G = 0.7152
LUMA_B = 0.0722


@dataclass
class AppConfig:
    cache_capacity: int
    grain_seed: int
    max_grain_pixels: int
    curve_samples: int
    lut_cache_capacity: int
    lut_dir: str
    presets_dir: str
