from typing import Optional
from lume.domain.interfaces import IProcessor, PipelineContext
from lume.domain.models import WhiteBalance
from lume.domain.types import ImageBuffer
from lume.features.basic.logic import (
    apply_color_controls,
    apply_exposure,
    apply_highlight_shadow,
    apply_white_balance,
    white_balance_gains,
)
from lume.kernel.system.config import OPERATOR_CONSTANTS
from lume.kernel.system.logging import get_logger

logger = get_logger(__name__)


class WhiteBalanceProcessor(IProcessor):
    """
    Step 1: neutral-point correction, so every later stage works colour corrected.
    """

    def __init__(self, white_balance: WhiteBalance):
        self.white_balance = white_balance

    def process(
        self, image: ImageBuffer, context: PipelineContext
    ) -> Optional[ImageBuffer]:
        wb = self.white_balance
        if (
            wb.temp == OPERATOR_CONSTANTS["reference_temperature"]
            and wb.tint == OPERATOR_CONSTANTS["reference_tint"]
        ):
            return image

        gains = white_balance_gains(wb.temp, wb.tint)
        if gains is None:
            logger.warning(
                f"White balance neutral ({wb.temp}K, tint {wb.tint}) is out of gamut"
            )
            return None

        return apply_white_balance(image, gains)


class ExposureProcessor(IProcessor):
    def __init__(self, exposure: float):
        self.exposure = exposure

    def process(
        self, image: ImageBuffer, context: PipelineContext
    ) -> Optional[ImageBuffer]:
        return apply_exposure(image, self.exposure)


class HighlightShadowProcessor(IProcessor):
    def __init__(self, highlights: float, shadows: float):
        self.highlight_amount = 1.0 + highlights
        self.shadow_amount = 1.0 + shadows

    def process(
        self, image: ImageBuffer, context: PipelineContext
    ) -> Optional[ImageBuffer]:
        return apply_highlight_shadow(
            image, self.highlight_amount, self.shadow_amount
        )


class ColorControlsProcessor(IProcessor):
    """
    Global contrast (pivot at mid-gray) followed by saturation.
    """

    def __init__(self, contrast: float, saturation: float):
        self.contrast = 1.0 + contrast
        self.saturation = 1.0 + saturation

    def process(
        self, image: ImageBuffer, context: PipelineContext
    ) -> Optional[ImageBuffer]:
        return apply_color_controls(
            image, contrast=self.contrast, saturation=self.saturation
        )
