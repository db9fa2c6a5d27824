import unittest
from unittest.mock import patch
import cv2
import numpy as np
from lume.domain.interfaces import PipelineContext
from lume.domain.models import Preset, ToneCurvePoint
from lume.features.lut.logic import build_identity_lut_image
from lume.services.presets.builtin import VINTAGE_FILM
from lume.services.rendering.engine import STAGE_ORDER, GradingEngine, build_stages
from PIL import Image

IDENTITY_CURVE = (ToneCurvePoint(0, 0), ToneCurvePoint(255, 255))


class _Failing:
    def process(self, image, context):
        raise ValueError("boom")


class TestGradingEngine(unittest.TestCase):
    def setUp(self):
        rng = np.random.default_rng(3)
        self.img = rng.integers(0, 256, size=(20, 24, 4), dtype=np.uint8)
        self.engine = GradingEngine(grain_seed=0)

    def test_stage_order(self):
        names = [name for name, _ in build_stages(Preset())]
        self.assertEqual(tuple(names), STAGE_ORDER)
        self.assertEqual(names.index("grain"), len(names) - 2)
        self.assertEqual(names[-1], "lut")

    def test_identity_preset_returns_input(self):
        preset = Preset(tone_curve=IDENTITY_CURVE)
        res = self.engine.process(self.img, preset)
        self.assertEqual(res.dtype, np.uint8)
        self.assertTrue(np.array_equal(res, self.img))

    def test_neutral_reset_preset_returns_input(self):
        res = self.engine.process(self.img, Preset.neutral())
        self.assertTrue(np.array_equal(res, self.img))

    def test_rendering_is_idempotent(self):
        a = self.engine.process(self.img, VINTAGE_FILM)
        b = self.engine.process(self.img, VINTAGE_FILM)
        self.assertTrue(np.array_equal(a, b))
        self.assertFalse(np.array_equal(a, self.img))

    def test_alpha_is_preserved(self):
        res = self.engine.process(self.img, VINTAGE_FILM)
        self.assertEqual(res.shape, self.img.shape)
        self.assertTrue(np.array_equal(res[..., 3], self.img[..., 3]))

    def test_failing_stage_passes_image_through(self):
        rgb = np.random.rand(4, 4, 3).astype(np.float32)
        ctx = PipelineContext()
        ctx.metrics["applied_stages"] = []
        ctx.metrics["skipped_stages"] = []

        res = self.engine._run_stage("broken", _Failing(), rgb, ctx)

        self.assertIs(res, rgb)
        self.assertEqual(ctx.metrics["skipped_stages"], ["broken"])

    def test_operator_error_does_not_abort_pipeline(self):
        preset = Preset(exposure=1.0, clarity=20.0)
        with patch(
            "lume.features.detail.processor.apply_clarity",
            side_effect=cv2.error("simulated"),
        ):
            ctx = PipelineContext()
            res = self.engine.process(self.img, preset, context=ctx)

        self.assertIn("clarity", ctx.metrics["skipped_stages"])
        self.assertIn("exposure", ctx.metrics["applied_stages"])
        self.assertEqual(res.shape, self.img.shape)

    def test_empty_image(self):
        empty = np.zeros((0, 0, 4), dtype=np.uint8)
        res = self.engine.process(empty, VINTAGE_FILM)
        self.assertEqual(res.shape, (0, 0, 4))


def test_exposure_brightens_mid_gray(gray_image):
    engine = GradingEngine()
    res = engine.process(gray_image, Preset(exposure=1.0))

    assert res.shape == (2, 2, 4)
    assert np.all(res[..., :3] > 128)
    assert np.all(np.abs(res[..., :3].astype(int) - 176) <= 1)
    assert np.all(res[..., 3] == 255)


def test_partial_grain_is_skipped(rgba_image):
    engine = GradingEngine(grain_seed=0)
    ctx = PipelineContext()
    preset = Preset(grain_amount=40.0, grain_size=50.0)

    res = engine.process(rgba_image, preset, context=ctx)

    assert "grain" in ctx.metrics["skipped_stages"]
    assert np.array_equal(res, engine.process(rgba_image, Preset()))


def test_opposing_hue_shifts_match_no_hsl(rgba_image):
    engine = GradingEngine()
    with_hsl = engine.process(
        rgba_image, Preset(hue_adjustments={"Red": 10.0, "Blue": -10.0})
    )
    without = engine.process(rgba_image, Preset())
    assert np.array_equal(with_hsl, without)


def test_non_cube_lut_is_skipped(rgba_image, tmp_path):
    Image.fromarray(np.zeros((10, 10, 4), dtype=np.uint8)).save(str(tmp_path / "flat.png"))
    engine = GradingEngine()
    ctx = PipelineContext()

    res = engine.process(rgba_image, Preset(lut_image=str(tmp_path / "flat.png")), context=ctx)

    assert "lut" in ctx.metrics["skipped_stages"]
    assert np.array_equal(res, rgba_image)


def test_identity_lut_file_is_lossless(rgba_image, tmp_path):
    Image.fromarray(build_identity_lut_image(16)).save(str(tmp_path / "identity.png"))
    engine = GradingEngine()

    res = engine.process(rgba_image, Preset(lut_image="identity.png"), lut_base_dir=str(tmp_path))

    diff = np.abs(res.astype(int) - rgba_image.astype(int))
    assert diff.max() <= 1
    assert np.array_equal(res[..., 3], rgba_image[..., 3])


def test_decoded_luts_belong_to_the_engine(rgba_image, tmp_path):
    Image.fromarray(build_identity_lut_image(4)).save(str(tmp_path / "look.png"))
    engine = GradingEngine()
    preset = Preset(lut_image="look.png")

    engine.process(rgba_image, preset, lut_base_dir=str(tmp_path))
    engine.process(rgba_image, preset, lut_base_dir=str(tmp_path))

    assert len(engine.cubes) == 1
    assert len(GradingEngine().cubes) == 0
