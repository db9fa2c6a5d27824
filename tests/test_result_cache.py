import threading
import unittest
from lume.kernel.caching.logic import CacheKey, calculate_config_hash
from lume.kernel.caching.manager import ResultCache
from lume.domain.models import Preset


def _key(image: str, preset: str = "p") -> CacheKey:
    return CacheKey(image_id=image, preset_id=preset)


class TestResultCache(unittest.TestCase):
    def test_put_then_get(self):
        cache = ResultCache(capacity=3)
        cache.put(_key("a"), 1)
        self.assertEqual(cache.get(_key("a")), 1)
        self.assertIsNone(cache.get(_key("b")))

    def test_put_overwrites(self):
        cache = ResultCache(capacity=3)
        cache.put(_key("a"), 1)
        cache.put(_key("a"), 2)
        self.assertEqual(len(cache), 1)
        self.assertEqual(cache.get(_key("a")), 2)

    def test_evicts_least_recently_used(self):
        cache = ResultCache(capacity=3)
        for name in ("a", "b", "c"):
            cache.put(_key(name), name)
        cache.get(_key("a"))
        cache.put(_key("d"), "d")

        self.assertEqual(len(cache), 3)
        self.assertNotIn(_key("b"), cache)
        self.assertIn(_key("a"), cache)
        self.assertIn(_key("d"), cache)

    def test_default_capacity(self):
        cache = ResultCache()
        for i in range(16):
            cache.put(_key(str(i)), i)
        self.assertEqual(len(cache), 15)
        self.assertIsNone(cache.get(_key("0")))

    def test_invalidate_all_by_image(self):
        cache = ResultCache(capacity=10)
        cache.put(_key("img1", "p1"), 1)
        cache.put(_key("img1", "p2"), 2)
        cache.put(_key("img2", "p1"), 3)

        self.assertEqual(cache.invalidate_all("img1"), 2)
        self.assertEqual(len(cache), 1)
        self.assertEqual(cache.get(_key("img2", "p1")), 3)
        self.assertEqual(cache.invalidate_all("img1"), 0)

    def test_rejects_zero_capacity(self):
        with self.assertRaises(ValueError):
            ResultCache(capacity=0)

    def test_concurrent_access(self):
        cache = ResultCache(capacity=15)
        errors = []

        def worker(idx: int) -> None:
            try:
                for i in range(200):
                    key = _key(f"img{idx}", f"p{i % 20}")
                    cache.put(key, i)
                    cache.get(key)
                    if i % 50 == 0:
                        cache.invalidate_all(f"img{idx}")
            except Exception as e:  # noqa: BLE001
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(errors, [])
        self.assertLessEqual(len(cache), 15)


def test_config_hash_is_order_independent():
    a = Preset(hue_adjustments={"Red": 1.0, "Blue": 2.0})
    b = Preset(hue_adjustments={"Blue": 2.0, "Red": 1.0})
    assert calculate_config_hash(a) == calculate_config_hash(b)
    assert calculate_config_hash(a) != calculate_config_hash(Preset())
