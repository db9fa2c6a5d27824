"""
LUT images encode a colour cube as a flat RGBA8 byte stream in row-major
order: red varies fastest, then green, then blue. An image of n*n*n pixels
of any width/height split decodes to an n x n x n cube.
"""
from dataclasses import dataclass
from typing import Optional
import numpy as np
from numba import njit, prange  # type: ignore
from PIL import Image, UnidentifiedImageError
from lume.domain.types import ImageBuffer
from lume.kernel.system.logging import get_logger
from lume.kernel.system.performance import time_function
from lume.kernel.validation import ensure_image

logger = get_logger(__name__)


@dataclass(frozen=True)
class ColorCube:
    """
    Decoded lookup table. table[b, g, r] holds the output RGB (0-1) of that vertex.
    """

    dimension: int
    table: np.ndarray


def decode_lut_image(path: str) -> Optional[np.ndarray]:
    """
    Reads a LUT image into an (H, W, 4) RGBA8 array, or None if it cannot be decoded.
    """
    try:
        with Image.open(path) as pil_img:
            pil_img.load()
            rgba = pil_img.convert("RGBA")
    except (OSError, UnidentifiedImageError, ValueError) as e:
        logger.warning(f"Cannot decode LUT image {path}: {e}")
        return None
    return np.asarray(rgba, dtype=np.uint8).copy()


def cube_dimension(pixel_count: int) -> int:
    """
    Edge length n of the cube encoded by pixel_count pixels, or 0 when
    pixel_count is not a perfect cube.
    """
    if pixel_count <= 0:
        return 0
    n = int(round(pixel_count ** (1.0 / 3.0)))
    if n <= 0 or n**3 != pixel_count:
        return 0
    return n


def build_color_cube(rgba: np.ndarray) -> Optional[ColorCube]:
    """
    Reinterprets the LUT bytes as a cube without reordering.
    """
    if rgba.ndim != 3 or rgba.shape[2] != 4:
        return None

    n = cube_dimension(rgba.shape[0] * rgba.shape[1])
    if n == 0:
        logger.debug(f"LUT image {rgba.shape[1]}x{rgba.shape[0]} is not a cube")
        return None

    flat = np.ascontiguousarray(rgba).reshape(n, n, n, 4)
    table = flat[..., :3].astype(np.float32) / 255.0
    return ColorCube(dimension=n, table=np.ascontiguousarray(table))


def build_identity_lut_image(dimension: int) -> np.ndarray:
    """
    Identity LUT in the decoding order, laid out as n rows of n*n pixels.
    """
    n = dimension
    ramp = np.round(np.linspace(0.0, 255.0, n)).astype(np.uint8)
    b, g, r = np.meshgrid(ramp, ramp, ramp, indexing="ij")
    alpha = np.full_like(r, 255)
    cube = np.stack([r, g, b, alpha], axis=-1)
    return cube.reshape(n, n * n, 4)


@njit(parallel=True)
def _apply_cube_trilinear_jit(img: np.ndarray, table: np.ndarray) -> np.ndarray:
    """
    Trilinear interpolation between the 8 cube vertices surrounding each pixel.
    """
    h, w, _ = img.shape
    n = table.shape[0]
    scale = n - 1
    res = np.empty_like(img)
    for y in prange(h):
        for x in range(w):
            fr = min(max(img[y, x, 0], 0.0), 1.0) * scale
            fg = min(max(img[y, x, 1], 0.0), 1.0) * scale
            fb = min(max(img[y, x, 2], 0.0), 1.0) * scale

            r0 = min(int(fr), n - 1)
            g0 = min(int(fg), n - 1)
            b0 = min(int(fb), n - 1)
            r1 = min(r0 + 1, n - 1)
            g1 = min(g0 + 1, n - 1)
            b1 = min(b0 + 1, n - 1)

            dr = fr - r0
            dg = fg - g0
            db = fb - b0

            for c in range(3):
                c00 = table[b0, g0, r0, c] * (1.0 - dr) + table[b0, g0, r1, c] * dr
                c10 = table[b0, g1, r0, c] * (1.0 - dr) + table[b0, g1, r1, c] * dr
                c01 = table[b1, g0, r0, c] * (1.0 - dr) + table[b1, g0, r1, c] * dr
                c11 = table[b1, g1, r0, c] * (1.0 - dr) + table[b1, g1, r1, c] * dr
                c0 = c00 * (1.0 - dg) + c10 * dg
                c1 = c01 * (1.0 - dg) + c11 * dg
                res[y, x, c] = c0 * (1.0 - db) + c1 * db
    return res


@time_function
def apply_color_cube(img: ImageBuffer, cube: ColorCube) -> ImageBuffer:
    """
    Maps every pixel's RGB through the cube.
    """
    res = _apply_cube_trilinear_jit(
        np.ascontiguousarray(img, dtype=np.float32), cube.table
    )
    return ensure_image(np.clip(res, 0.0, 1.0))
