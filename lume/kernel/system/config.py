import os
from typing import Any, Dict
from lume.domain.types import AppConfig
from lume.kernel.validation import validate_int

# User dir env (LUTs and presets live below it)
BASE_USER_DIR = os.path.abspath(os.getenv("LUME_USER_DIR", "user"))

# Global application constants
APP_CONFIG = AppConfig(
    cache_capacity=max(1, validate_int(os.getenv("LUME_CACHE_CAPACITY"), 15)),
    grain_seed=validate_int(os.getenv("LUME_GRAIN_SEED"), 0),
    max_grain_pixels=100_000_000,
    curve_samples=4096,
    lut_cache_capacity=8,
    lut_dir=os.path.join(BASE_USER_DIR, "luts"),
    presets_dir=os.path.join(BASE_USER_DIR, "presets"),
)

# Fixed numeric parameters of the primitive operators
OPERATOR_CONSTANTS: Dict[str, Any] = {
    "reference_temperature": 6500.0,  # Neutral white (D65) in Kelvin
    "reference_tint": 0.0,
    "tint_scale": 3000.0,  # Tint units per unit of CIE y shift
    "clarity_radius": 2.0,  # Unsharp mask radius for clarity (px)
    "sharpen_radius": 1.69,  # Luminance sharpening radius (px)
    "grain_size_divisor": 10.0,  # grainSize -> blur radius
    "grain_amount_divisor": 100.0,  # grainAmount -> noise brightness
    "grain_frequency_divisor": 50.0,  # grainFrequency -> noise contrast
    "hsl_percent_divisor": 100.0,  # HSL sat/lum means are percentages
    "midpoint": 0.5,  # Contrast pivot and highlight/shadow split
}
