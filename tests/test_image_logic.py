import unittest
import numpy as np
from lume.kernel.image.logic import (
    calculate_image_hash,
    ensure_rgba,
    float_to_uint8,
    merge_alpha,
    split_alpha,
)


class TestImageLogic(unittest.TestCase):
    def test_ensure_rgba_promotes_channels(self):
        gray = np.full((3, 3), 10, dtype=np.uint8)
        rgb = np.full((3, 3, 3), 20, dtype=np.uint8)

        self.assertEqual(ensure_rgba(gray).shape, (3, 3, 4))
        self.assertTrue(np.all(ensure_rgba(gray)[..., 3] == 255))
        self.assertTrue(np.all(ensure_rgba(rgb)[..., :3] == 20))

    def test_ensure_rgba_rejects_bad_input(self):
        with self.assertRaises(TypeError):
            ensure_rgba(np.zeros((2, 2, 4), dtype=np.float32))
        with self.assertRaises(ValueError):
            ensure_rgba(np.zeros((2, 2, 2), dtype=np.uint8))
        with self.assertRaises(TypeError):
            ensure_rgba([[1, 2], [3, 4]])

    def test_split_merge_roundtrip(self):
        rng = np.random.default_rng(1)
        img = rng.integers(0, 256, size=(5, 6, 4), dtype=np.uint8)
        rgb, alpha = split_alpha(img)

        self.assertEqual(rgb.dtype, np.float32)
        self.assertTrue(np.array_equal(merge_alpha(rgb, alpha), img))

    def test_float_to_uint8_clips(self):
        arr = np.array([-0.5, 0.0, 0.5, 1.0, 2.0, np.nan], dtype=np.float32)
        self.assertEqual(float_to_uint8(arr).tolist(), [0, 0, 128, 255, 255, 0])

    def test_image_hash_depends_on_content_and_shape(self):
        a = np.zeros((4, 4, 4), dtype=np.uint8)
        b = a.copy()
        b[0, 0, 0] = 1
        c = np.zeros((2, 8, 4), dtype=np.uint8)

        self.assertEqual(calculate_image_hash(a), calculate_image_hash(a.copy()))
        self.assertNotEqual(calculate_image_hash(a), calculate_image_hash(b))
        self.assertNotEqual(calculate_image_hash(a), calculate_image_hash(c))


if __name__ == "__main__":
    unittest.main()
