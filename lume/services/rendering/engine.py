from typing import List, Optional, Tuple
import cv2
import numpy as np
from lume.domain.interfaces import IProcessor, PipelineContext
from lume.domain.models import Preset
from lume.domain.types import ImageBuffer, ImageRGBA8
from lume.features.basic.processor import (
    ColorControlsProcessor,
    ExposureProcessor,
    HighlightShadowProcessor,
    WhiteBalanceProcessor,
)
from lume.features.curve.processor import ToneCurveProcessor
from lume.features.detail.processor import (
    ClarityProcessor,
    SharpnessProcessor,
    VibranceProcessor,
)
from lume.features.grain.processor import GrainProcessor
from lume.features.hsl.processor import CoarseHSLProcessor
from lume.features.lut.processor import ColorCubeCache, LUTProcessor
from lume.kernel.image.logic import merge_alpha, split_alpha
from lume.kernel.system.logging import get_logger
from lume.kernel.validation import ensure_image

logger = get_logger(__name__)

# Fixed stage order. Part of the output contract.
STAGE_ORDER: Tuple[str, ...] = (
    "white_balance",
    "exposure",
    "highlight_shadow",
    "tone_curve",
    "color_controls",
    "hsl",
    "clarity",
    "vibrance",
    "sharpness",
    "grain",
    "lut",
)

# Numeric failures a stage may hit; anything else is a programming error and propagates
STAGE_FAILURES = (cv2.error, ValueError, ArithmeticError, MemoryError)


def build_stages(
    preset: Preset,
    grain_seed: Optional[int] = None,
    cubes: Optional[ColorCubeCache] = None,
) -> List[Tuple[str, IProcessor]]:
    stages: List[Tuple[str, IProcessor]] = [
        ("white_balance", WhiteBalanceProcessor(preset.white_balance)),
        ("exposure", ExposureProcessor(preset.exposure)),
        ("highlight_shadow", HighlightShadowProcessor(preset.highlights, preset.shadows)),
        ("tone_curve", ToneCurveProcessor(preset.tone_curve)),
        ("color_controls", ColorControlsProcessor(preset.contrast, preset.saturation)),
        ("hsl", CoarseHSLProcessor(preset)),
        ("clarity", ClarityProcessor(preset.clarity)),
        ("vibrance", VibranceProcessor(preset.vibrance)),
        ("sharpness", SharpnessProcessor(preset.sharpness)),
        ("grain", GrainProcessor(preset, seed=grain_seed)),
        ("lut", LUTProcessor(preset.lut_image, cubes)),
    ]
    return stages


class GradingEngine:
    """
    The orchestrator that runs a preset's stages over an image in the fixed order.
    Pure: the same (image, preset) always yields the same pixels.
    """

    def __init__(
        self,
        grain_seed: Optional[int] = None,
        cubes: Optional[ColorCubeCache] = None,
    ) -> None:
        self.grain_seed = grain_seed
        # Decoded LUTs live as long as the engine
        self.cubes = cubes if cubes is not None else ColorCubeCache()

    def _run_stage(
        self,
        name: str,
        processor: IProcessor,
        img: ImageBuffer,
        context: PipelineContext,
    ) -> ImageBuffer:
        """
        Executes one stage. A stage that does not apply, or whose operator fails,
        passes the image through unchanged.
        """
        try:
            result = processor.process(img, context)
        except STAGE_FAILURES as e:
            logger.warning(f"Stage '{name}' failed, passing image through: {e}")
            result = None

        if result is None:
            context.metrics["skipped_stages"].append(name)
            return img

        context.metrics["applied_stages"].append(name)
        return ensure_image(result)

    def render(
        self,
        img: ImageBuffer,
        preset: Preset,
        context: Optional[PipelineContext] = None,
    ) -> ImageBuffer:
        """
        Runs every stage on a float RGB working buffer.
        """
        img = ensure_image(img)
        if context is None:
            context = PipelineContext()

        context.metrics["applied_stages"] = []
        context.metrics["skipped_stages"] = []

        current_img = img
        for name, processor in build_stages(preset, self.grain_seed, self.cubes):
            current_img = self._run_stage(name, processor, current_img, context)

        logger.debug(
            f"Rendered {img.shape[1]}x{img.shape[0]}: "
            f"applied={context.metrics['applied_stages']}"
        )
        return current_img

    def process(
        self,
        image: ImageRGBA8,
        preset: Preset,
        context: Optional[PipelineContext] = None,
        lut_base_dir: Optional[str] = None,
    ) -> ImageRGBA8:
        """
        RGBA8 in, RGBA8 out. Alpha is carried over untouched; the working buffer is
        quantized to 8 bits once, after the last stage.
        """
        rgb, alpha = split_alpha(image)

        if context is None:
            context = PipelineContext(lut_base_dir=lut_base_dir)
        elif lut_base_dir is not None:
            context.lut_base_dir = lut_base_dir

        if rgb.size == 0:
            return merge_alpha(rgb, alpha)

        graded = self.render(rgb, preset, context)
        out: np.ndarray = merge_alpha(graded, alpha)
        return out
