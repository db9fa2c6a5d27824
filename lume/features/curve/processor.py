from typing import Optional, Sequence
from lume.domain.interfaces import IProcessor, PipelineContext
from lume.domain.models import ToneCurvePoint
from lume.domain.types import ImageBuffer
from lume.features.curve.logic import ToneCurve, apply_tone_curve
from lume.kernel.system.config import APP_CONFIG


class ToneCurveProcessor(IProcessor):
    def __init__(self, points: Sequence[ToneCurvePoint]):
        self.points = tuple(points)

    def process(
        self, image: ImageBuffer, context: PipelineContext
    ) -> Optional[ImageBuffer]:
        # Empty curve: stage not applicable
        if not self.points:
            return None

        curve = ToneCurve.from_points(self.points)
        return apply_tone_curve(image, curve, samples=APP_CONFIG.curve_samples)
