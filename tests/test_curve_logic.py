import unittest
import numpy as np
from lume.domain.interfaces import PipelineContext
from lume.domain.models import ToneCurvePoint
from lume.features.curve.logic import (
    IDENTITY_ANCHORS,
    MAX_CONTROL_POINTS,
    ToneCurve,
    apply_tone_curve,
    fill_control_points,
)
from lume.features.curve.processor import ToneCurveProcessor

NORMALIZED_IDENTITY = [(x / 255.0, y / 255.0) for x, y in IDENTITY_ANCHORS]


class TestControlPoints(unittest.TestCase):
    def test_empty_curve_fills_identity(self):
        anchors = fill_control_points([])
        self.assertEqual(len(anchors), MAX_CONTROL_POINTS)
        self.assertEqual(anchors, NORMALIZED_IDENTITY)

    def test_given_points_replace_leading_anchors(self):
        anchors = fill_control_points([ToneCurvePoint(0, 20), ToneCurvePoint(255, 235)])
        self.assertAlmostEqual(anchors[0][0], 0.0)
        self.assertAlmostEqual(anchors[0][1], 20 / 255)
        self.assertAlmostEqual(anchors[1][0], 1.0)
        self.assertAlmostEqual(anchors[1][1], 235 / 255)
        self.assertEqual(anchors[2:], NORMALIZED_IDENTITY[2:])

    def test_extra_points_are_ignored(self):
        points = [ToneCurvePoint(i * 40, i * 40) for i in range(7)]
        self.assertEqual(len(fill_control_points(points)), MAX_CONTROL_POINTS)


class TestToneCurve(unittest.TestCase):
    def test_identity_curve(self):
        curve = ToneCurve.from_points([])
        values = np.linspace(0, 1, 101, dtype=np.float32)
        self.assertTrue(np.allclose(curve(values), values, atol=1e-6))

    def test_two_point_reset_curve_is_identity(self):
        curve = ToneCurve.from_points([ToneCurvePoint(0, 0), ToneCurvePoint(255, 255)])
        img = np.random.rand(8, 8, 3).astype(np.float32)
        res = apply_tone_curve(img, curve)
        self.assertTrue(np.allclose(res, img, atol=1e-5))

    def test_lifted_blacks(self):
        curve = ToneCurve.from_points([ToneCurvePoint(0, 20)])
        img = np.zeros((2, 2, 3), dtype=np.float32)
        res = apply_tone_curve(img, curve)
        self.assertTrue(np.allclose(res, 20 / 255, atol=1e-4))

    def test_output_stays_in_range(self):
        curve = ToneCurve.from_points(
            [ToneCurvePoint(0, 0), ToneCurvePoint(60, 250), ToneCurvePoint(255, 255)]
        )
        img = np.random.rand(16, 16, 3).astype(np.float32)
        res = apply_tone_curve(img, curve)
        self.assertGreaterEqual(res.min(), 0.0)
        self.assertLessEqual(res.max(), 1.0)

    def test_supplied_endpoints_win_over_identity_fillers(self):
        curve = ToneCurve.from_points([ToneCurvePoint(0, 10), ToneCurvePoint(255, 245)])
        ends = curve(np.array([0.0, 1.0]))
        self.assertAlmostEqual(ends[0], 10 / 255, places=6)
        self.assertAlmostEqual(ends[1], 245 / 255, places=6)


def test_processor_skips_empty_curve():
    img = np.random.rand(4, 4, 3).astype(np.float32)
    ctx = PipelineContext()
    assert ToneCurveProcessor(()).process(img, ctx) is None
