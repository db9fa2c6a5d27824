from typing import Optional
from lume.domain.interfaces import IProcessor, PipelineContext
from lume.domain.models import Preset
from lume.domain.types import ImageBuffer
from lume.features.hsl.logic import CoarseHSLShift, apply_coarse_hsl


class CoarseHSLProcessor(IProcessor):
    def __init__(self, preset: Preset):
        self.shift = CoarseHSLShift.from_preset(preset)

    def process(
        self, image: ImageBuffer, context: PipelineContext
    ) -> Optional[ImageBuffer]:
        if self.shift.is_empty:
            return None

        context.metrics["hsl_shift"] = self.shift
        return apply_coarse_hsl(image, self.shift)
