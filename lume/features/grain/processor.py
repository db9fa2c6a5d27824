from typing import Optional
from lume.domain.interfaces import IProcessor, PipelineContext
from lume.domain.models import Preset
from lume.domain.types import ImageBuffer
from lume.features.grain.logic import apply_grain
from lume.kernel.system.config import APP_CONFIG


class GrainProcessor(IProcessor):
    """
    Runs only when amount, size and frequency are all present.
    """

    def __init__(self, preset: Preset, seed: Optional[int] = None):
        self.preset = preset
        self.seed = APP_CONFIG.grain_seed if seed is None else seed

    def process(
        self, image: ImageBuffer, context: PipelineContext
    ) -> Optional[ImageBuffer]:
        p = self.preset
        if not p.has_grain:
            return None

        return apply_grain(
            image,
            amount=p.grain_amount,
            size=p.grain_size,
            frequency=p.grain_frequency,
            seed=self.seed,
            max_pixels=APP_CONFIG.max_grain_pixels,
        )
