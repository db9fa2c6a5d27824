from typing import Dict, List, Tuple
from lume.domain.models import HUE_BUCKET_NAMES, Preset, ToneCurvePoint, WhiteBalance


def _curve(*points: Tuple[float, float]) -> Tuple[ToneCurvePoint, ...]:
    return tuple(ToneCurvePoint(float(x), float(y)) for x, y in points)


def _buckets(*deltas: float) -> Dict[str, float]:
    # Values in HueBucket order: Red, Orange, Yellow, Green, Aqua, Blue, Purple, Magenta
    return {name: float(d) for name, d in zip(HUE_BUCKET_NAMES, deltas)}


VINTAGE_FILM = Preset(
    exposure=0.1,
    contrast=-0.1,
    saturation=-0.2,
    highlights=-0.3,
    shadows=0.2,
    white_balance=WhiteBalance(temp=6500.0, tint=10.0),
    tone_curve=_curve((0, 20), (64, 80), (128, 128), (192, 175), (255, 235)),
    hue_adjustments=_buckets(5, -5, 3, 0, -3, -10, 0, 5),
    saturation_adjustments=_buckets(-10, -10, -10, -5, -5, -5, -5, -10),
    luminance_adjustments=_buckets(10, 10, 5, 0, -5, -10, 0, -5),
    clarity=-5.0,
    vibrance=-10.0,
    sharpness=-5.0,
    grain_amount=40.0,
    grain_size=50.0,
    grain_frequency=30.0,
)

FADED_RETRO = Preset(
    exposure=0.0,
    contrast=-0.2,
    saturation=-0.3,
    highlights=-0.1,
    shadows=0.3,
    white_balance=WhiteBalance(temp=6800.0, tint=15.0),
    tone_curve=_curve((0, 10), (64, 70), (128, 128), (192, 186), (255, 245)),
    hue_adjustments=_buckets(3, 0, -2, 2, -2, -8, 4, 0),
    saturation_adjustments=_buckets(-5, -5, -5, -5, -5, -5, -5, -5),
    luminance_adjustments=_buckets(5, 5, 5, 0, -5, -5, 0, 0),
    clarity=-10.0,
    vibrance=-15.0,
    sharpness=-3.0,
    grain_amount=50.0,
    grain_size=60.0,
    grain_frequency=40.0,
)

POLAROID = Preset(
    exposure=0.2,
    contrast=-0.3,
    saturation=-0.4,
    highlights=-0.2,
    shadows=0.4,
    white_balance=WhiteBalance(temp=7000.0, tint=20.0),
    tone_curve=_curve((0, 5), (64, 50), (128, 128), (192, 200), (255, 240)),
    hue_adjustments=_buckets(7, -3, 0, 5, -7, -15, 10, 5),
    saturation_adjustments=_buckets(-15, -15, -10, -10, -10, -10, -15, -15),
    luminance_adjustments=_buckets(10, 10, 5, 0, -5, -10, -5, 0),
    clarity=-8.0,
    vibrance=-12.0,
    sharpness=-6.0,
    grain_amount=60.0,
    grain_size=70.0,
    grain_frequency=50.0,
)

BUILTIN_PRESETS: Dict[str, Preset] = {
    "vintage_film": VINTAGE_FILM,
    "faded_retro": FADED_RETRO,
    "polaroid": POLAROID,
    "neutral": Preset.neutral(),
}


def list_builtin_presets() -> List[str]:
    return sorted(BUILTIN_PRESETS)


def get_builtin_preset(name: str) -> Preset:
    key = name.strip().lower().replace("-", "_").replace(" ", "_")
    if key not in BUILTIN_PRESETS:
        raise KeyError(f"Unknown built-in preset '{name}'")
    return BUILTIN_PRESETS[key]
