from typing import Any, cast
import numpy as np
from lume.domain.types import ImageBuffer


def ensure_image(arr: Any) -> ImageBuffer:
    """
    Ensures the input is a float32 numpy array and returns it as an ImageBuffer.
    This is preferred over a raw cast because it performs runtime validation.
    """
    if not isinstance(arr, np.ndarray):
        raise TypeError(f"Expected numpy.ndarray, got {type(arr)}")

    if arr.dtype != np.float32:
        arr = arr.astype(np.float32)

    return cast(ImageBuffer, arr)


def validate_int(val: Any, default: int = 0) -> int:
    """Ensures a value is an int, providing a default if None."""
    if val is None:
        return default
    try:
        return int(val)
    except (TypeError, ValueError):
        return default
