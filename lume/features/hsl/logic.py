"""
Coarse HSL approximation.

Every per-bucket map (Red, Orange, ... Magenta) is collapsed to the arithmetic
mean of the deltas it contains, and that mean is applied globally. Buckets
missing from a map do not count toward its mean. This is not a hue-selective
adjustment; a selective implementation belongs in its own component.
"""
import math
from dataclasses import dataclass
from typing import Mapping, Optional
from lume.domain.models import Preset
from lume.domain.types import ImageBuffer
from lume.features.basic.logic import apply_color_controls, apply_hue_rotation
from lume.kernel.system.config import OPERATOR_CONSTANTS


def mean_adjustment(mapping: Optional[Mapping[str, float]]) -> Optional[float]:
    if not mapping:
        return None
    return sum(mapping.values()) / float(len(mapping))


@dataclass(frozen=True)
class CoarseHSLShift:
    """
    Global shifts derived from the three HSL maps. None means the map was absent or empty.
    """

    hue_degrees: Optional[float] = None
    saturation_delta: Optional[float] = None
    luminance_delta: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return (
            self.hue_degrees is None
            and self.saturation_delta is None
            and self.luminance_delta is None
        )

    @classmethod
    def from_preset(cls, preset: Preset) -> "CoarseHSLShift":
        divisor = OPERATOR_CONSTANTS["hsl_percent_divisor"]
        sat = mean_adjustment(preset.saturation_adjustments)
        lum = mean_adjustment(preset.luminance_adjustments)
        return cls(
            hue_degrees=mean_adjustment(preset.hue_adjustments),
            saturation_delta=None if sat is None else sat / divisor,
            luminance_delta=None if lum is None else lum / divisor,
        )


def apply_coarse_hsl(img: ImageBuffer, shift: CoarseHSLShift) -> ImageBuffer:
    """
    Hue rotate, then saturation, then brightness; each only when its shift is present.
    """
    res = img
    if shift.hue_degrees is not None:
        res = apply_hue_rotation(res, math.radians(shift.hue_degrees))
    if shift.saturation_delta is not None:
        res = apply_color_controls(res, saturation=1.0 + shift.saturation_delta)
    if shift.luminance_delta is not None:
        res = apply_color_controls(res, brightness=shift.luminance_delta)
    return res
