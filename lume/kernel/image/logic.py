import hashlib
from typing import Any, Tuple
import numpy as np
from PIL import Image, UnidentifiedImageError
from lume.domain.types import LUMA_B, LUMA_G, LUMA_R, ImageBuffer, ImageRGBA8, Mask
from lume.kernel.errors import ImageDecodeError
from lume.kernel.validation import ensure_image


def ensure_rgba(img: Any) -> ImageRGBA8:
    """
    Promotes a uint8 grayscale, RGB or RGBA array to (H, W, 4) RGBA.
    Missing alpha is filled as opaque.
    """
    if not isinstance(img, np.ndarray):
        raise TypeError(f"Expected numpy.ndarray, got {type(img)}")
    if img.dtype != np.uint8:
        raise TypeError(f"Expected uint8 pixels, got {img.dtype}")

    if img.ndim == 2:
        img = img[:, :, None]
    if img.ndim != 3 or img.shape[2] not in (1, 3, 4):
        raise ValueError(f"Unsupported image shape {img.shape}")

    if img.shape[2] == 4:
        return img
    if img.shape[2] == 1:
        img = np.concatenate([img] * 3, axis=-1)

    alpha = np.full(img.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.concatenate([img, alpha], axis=-1)


def uint8_to_float32(img: np.ndarray) -> ImageBuffer:
    return ensure_image(img.astype(np.float32) / 255.0)


def float_to_uint8(img: ImageBuffer) -> np.ndarray:
    """
    Quantizes a 0-1 float buffer to 8 bits with round-half-to-even.
    """
    res: np.ndarray = np.clip(np.round(np.nan_to_num(img) * 255.0), 0, 255).astype(
        np.uint8
    )
    return res


def split_alpha(rgba: ImageRGBA8) -> Tuple[ImageBuffer, np.ndarray]:
    """
    Splits an RGBA8 image into a float RGB working buffer and the untouched alpha plane.
    """
    rgba = ensure_rgba(rgba)
    return uint8_to_float32(rgba[:, :, :3]), rgba[:, :, 3].copy()


def merge_alpha(rgb: ImageBuffer, alpha: np.ndarray) -> ImageRGBA8:
    return np.dstack([float_to_uint8(rgb), alpha]).astype(np.uint8)


def srgb_to_linear(img: ImageBuffer) -> ImageBuffer:
    """
    IEC 61966-2-1 decoding.
    """
    img = np.clip(img, 0.0, 1.0)
    res = np.where(
        img <= 0.04045,
        img / 12.92,
        np.power((img + 0.055) / 1.055, 2.4),
    )
    return ensure_image(res)


def linear_to_srgb(img: ImageBuffer) -> ImageBuffer:
    """
    IEC 61966-2-1 encoding. Input is clipped to 0-1 first.
    """
    img = np.clip(img, 0.0, 1.0)
    res = np.where(
        img <= 0.0031308,
        img * 12.92,
        1.055 * np.power(img, 1.0 / 2.4) - 0.055,
    )
    return ensure_image(res)


def get_luminance(img: ImageBuffer) -> Mask:
    """
    Calculates luma using Rec. 709 coefficients.
    """
    res = LUMA_R * img[..., 0] + LUMA_G * img[..., 1] + LUMA_B * img[..., 2]
    return ensure_image(res)


def smoothstep(edge0: float, edge1: float, x: np.ndarray) -> np.ndarray:
    t = np.clip((x - edge0) / (edge1 - edge0), 0.0, 1.0)
    res: np.ndarray = t * t * (3.0 - 2.0 * t)
    return res


def calculate_image_hash(img: np.ndarray) -> str:
    """
    Content identity of a decoded image: SHA-256 over shape, dtype and pixel bytes.
    """
    arr = np.ascontiguousarray(img)
    hasher = hashlib.sha256()
    hasher.update(str(arr.shape).encode())
    hasher.update(str(arr.dtype).encode())
    hasher.update(arr.tobytes())
    return hasher.hexdigest()


def load_image_rgba8(file_path: str) -> ImageRGBA8:
    """
    Decodes any Pillow-readable raster into an RGBA8 array.
    """
    try:
        with Image.open(file_path) as pil_img:
            pil_img.load()
            rgba = pil_img.convert("RGBA")
    except (OSError, UnidentifiedImageError, ValueError) as e:
        raise ImageDecodeError(f"Cannot decode image: {e}", source=file_path) from e

    return np.asarray(rgba, dtype=np.uint8).copy()


def save_image_rgba8(img: ImageRGBA8, file_path: str, fmt: str = "PNG") -> None:
    """
    Encodes an RGBA8 array. Formats without alpha support get the RGB planes only.
    """
    fmt = fmt.upper()
    pil_img = Image.fromarray(ensure_rgba(img))
    if fmt in ("JPEG", "JPG"):
        pil_img.convert("RGB").save(file_path, format="JPEG", quality=95)
    else:
        pil_img.save(file_path, format=fmt)
