import os

os.environ.setdefault("NUMBA_THREADING_LAYER", "workqueue")

import numpy as np
import pytest


@pytest.fixture
def rgba_image():
    rng = np.random.default_rng(7)
    img = rng.integers(0, 256, size=(24, 32, 4), dtype=np.uint8)
    img[..., 3] = rng.integers(0, 256, size=(24, 32), dtype=np.uint8)
    return img


@pytest.fixture
def gray_image():
    img = np.full((2, 2, 4), 128, dtype=np.uint8)
    img[..., 3] = 255
    return img
