from typing import Optional
from lume.domain.interfaces import IProcessor, PipelineContext
from lume.domain.types import ImageBuffer
from lume.features.detail.logic import (
    apply_clarity,
    apply_luminance_sharpening,
    apply_vibrance,
)
from lume.kernel.system.config import OPERATOR_CONSTANTS


class ClarityProcessor(IProcessor):
    def __init__(self, clarity: Optional[float]):
        self.clarity = clarity

    def process(
        self, image: ImageBuffer, context: PipelineContext
    ) -> Optional[ImageBuffer]:
        if self.clarity is None:
            return None
        return apply_clarity(
            image, self.clarity, radius=OPERATOR_CONSTANTS["clarity_radius"]
        )


class VibranceProcessor(IProcessor):
    def __init__(self, vibrance: Optional[float]):
        self.vibrance = vibrance

    def process(
        self, image: ImageBuffer, context: PipelineContext
    ) -> Optional[ImageBuffer]:
        if self.vibrance is None:
            return None
        return apply_vibrance(image, self.vibrance)


class SharpnessProcessor(IProcessor):
    def __init__(self, sharpness: Optional[float]):
        self.sharpness = sharpness

    def process(
        self, image: ImageBuffer, context: PipelineContext
    ) -> Optional[ImageBuffer]:
        if self.sharpness is None:
            return None
        return apply_luminance_sharpening(
            image, self.sharpness, radius=OPERATOR_CONSTANTS["sharpen_radius"]
        )
