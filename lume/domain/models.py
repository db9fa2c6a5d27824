import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Iterator, Optional, Tuple, Mapping
from lume.kernel.errors import PresetDecodeError
from lume.kernel.system.logging import get_logger

logger = get_logger(__name__)


class HueBucket(Enum):
    RED = "Red"
    ORANGE = "Orange"
    YELLOW = "Yellow"
    GREEN = "Green"
    AQUA = "Aqua"
    BLUE = "Blue"
    PURPLE = "Purple"
    MAGENTA = "Magenta"


HUE_BUCKET_NAMES: Tuple[str, ...] = tuple(b.value for b in HueBucket)


class BucketMap(Mapping[str, float]):
    """
    Read-only bucket name -> delta mapping. Hashable, so a Preset holding one
    stays a value.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Mapping[str, float]):
        self._items: Dict[str, float] = dict(items)

    def __getitem__(self, key: str) -> float:
        return self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __hash__(self) -> int:
        return hash(frozenset(self._items.items()))

    def __repr__(self) -> str:
        return f"BucketMap({self._items!r})"


# JSON keys of the optional scalar fields, in persistence order
_OPTIONAL_SCALARS: Tuple[Tuple[str, str], ...] = (
    ("clarity", "clarity"),
    ("vibrance", "vibrance"),
    ("sharpness", "sharpness"),
    ("grain_amount", "grainAmount"),
    ("grain_size", "grainSize"),
    ("grain_frequency", "grainFrequency"),
)

_HSL_MAPS: Tuple[Tuple[str, str], ...] = (
    ("hue_adjustments", "hueAdjustments"),
    ("saturation_adjustments", "saturationAdjustments"),
    ("luminance_adjustments", "luminanceAdjustments"),
)


@dataclass(frozen=True)
class WhiteBalance:
    """
    Source neutral point. temp in Kelvin (~2000-8000), tint ~-150..150.
    """

    temp: float = 6500.0
    tint: float = 0.0


@dataclass(frozen=True)
class ToneCurvePoint:
    """
    Tone curve control point, both coordinates in 0-255.
    """

    x: float
    y: float


@dataclass(frozen=True)
class Preset:
    """
    One grading recipe.

    Base fields are always applied (0.0 is neutral). Every Optional field uses
    None for "absent", which skips its stage; 0.0 runs the stage neutrally.
    """

    exposure: float = 0.0
    contrast: float = 0.0
    saturation: float = 0.0
    highlights: float = 0.0
    shadows: float = 0.0
    white_balance: WhiteBalance = field(default_factory=WhiteBalance)
    tone_curve: Tuple[ToneCurvePoint, ...] = ()

    hue_adjustments: Optional[Mapping[str, float]] = None
    saturation_adjustments: Optional[Mapping[str, float]] = None
    luminance_adjustments: Optional[Mapping[str, float]] = None

    clarity: Optional[float] = None
    vibrance: Optional[float] = None
    sharpness: Optional[float] = None

    grain_amount: Optional[float] = None
    grain_size: Optional[float] = None
    grain_frequency: Optional[float] = None

    lut_image: Optional[str] = None

    def __post_init__(self) -> None:
        for attr, _ in _HSL_MAPS:
            mapping = getattr(self, attr)
            if mapping is not None and not isinstance(mapping, BucketMap):
                object.__setattr__(self, attr, BucketMap(mapping))
        object.__setattr__(self, "tone_curve", tuple(self.tone_curve))

    @property
    def has_grain(self) -> bool:
        return (
            self.grain_amount is not None
            and self.grain_size is not None
            and self.grain_frequency is not None
        )

    @classmethod
    def neutral(cls) -> "Preset":
        """
        The reset recipe: neutral base values, two-point identity curve,
        zeroed HSL maps, zeroed detail and grain, no LUT.
        """
        zeros = {name: 0.0 for name in HUE_BUCKET_NAMES}
        return cls(
            tone_curve=(ToneCurvePoint(0, 0), ToneCurvePoint(255, 255)),
            hue_adjustments=dict(zeros),
            saturation_adjustments=dict(zeros),
            luminance_adjustments=dict(zeros),
            clarity=0.0,
            vibrance=0.0,
            sharpness=0.0,
            grain_amount=0.0,
            grain_size=0.0,
            grain_frequency=0.0,
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Persistence form. Absent optional fields are omitted, never written as null.
        """
        res: Dict[str, Any] = {
            "exposure": self.exposure,
            "contrast": self.contrast,
            "saturation": self.saturation,
            "highlights": self.highlights,
            "shadows": self.shadows,
            "whiteBalance": {
                "temp": self.white_balance.temp,
                "tint": self.white_balance.tint,
            },
            "toneCurve": [{"x": p.x, "y": p.y} for p in self.tone_curve],
        }
        for attr, key in _HSL_MAPS:
            mapping = getattr(self, attr)
            if mapping is not None:
                res[key] = dict(mapping)
        for attr, key in _OPTIONAL_SCALARS:
            value = getattr(self, attr)
            if value is not None:
                res[key] = value
        if self.lut_image is not None:
            res["lutImage"] = self.lut_image
        return res

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def identity_hash(self) -> str:
        from lume.kernel.caching.logic import calculate_config_hash

        return calculate_config_hash(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Preset":
        """
        from JSON. The five base scalars and whiteBalance are required.
        """
        if not isinstance(data, Mapping):
            raise PresetDecodeError(
                f"Preset must be a JSON object, got {type(data).__name__}"
            )

        wb_raw = data.get("whiteBalance")
        if not isinstance(wb_raw, Mapping):
            raise PresetDecodeError("Missing or invalid 'whiteBalance' object")

        curve_raw = data.get("toneCurve", [])
        if curve_raw is None:
            curve_raw = []
        if not isinstance(curve_raw, list):
            raise PresetDecodeError("'toneCurve' must be a list of {x, y} points")

        curve = []
        for i, point in enumerate(curve_raw):
            if not isinstance(point, Mapping):
                raise PresetDecodeError(f"toneCurve[{i}] must be an object")
            curve.append(
                ToneCurvePoint(
                    x=_require_number(point, "x", f"toneCurve[{i}]."),
                    y=_require_number(point, "y", f"toneCurve[{i}]."),
                )
            )

        kwargs: Dict[str, Any] = {
            "exposure": _require_number(data, "exposure"),
            "contrast": _require_number(data, "contrast"),
            "saturation": _require_number(data, "saturation"),
            "highlights": _require_number(data, "highlights"),
            "shadows": _require_number(data, "shadows"),
            "white_balance": WhiteBalance(
                temp=_require_number(wb_raw, "temp", "whiteBalance."),
                tint=_require_number(wb_raw, "tint", "whiteBalance."),
            ),
            "tone_curve": tuple(curve),
        }

        for attr, key in _HSL_MAPS:
            kwargs[attr] = _optional_mapping(data, key)
        for attr, key in _OPTIONAL_SCALARS:
            kwargs[attr] = _optional_number(data, key)

        lut = data.get("lutImage")
        if lut is not None and not isinstance(lut, str):
            raise PresetDecodeError("'lutImage' must be a string")
        kwargs["lut_image"] = lut

        return cls(**kwargs)

    @classmethod
    def from_json(cls, text: str) -> "Preset":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise PresetDecodeError(f"Malformed preset JSON: {e}") from e
        return cls.from_dict(data)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_number(data: Mapping[str, Any], key: str, prefix: str = "") -> float:
    if key not in data:
        raise PresetDecodeError(f"Missing required field '{prefix}{key}'")
    value = data[key]
    if not _is_number(value):
        raise PresetDecodeError(f"Field '{prefix}{key}' must be a number, got {value!r}")
    return float(value)


def _optional_number(data: Mapping[str, Any], key: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    if not _is_number(value):
        raise PresetDecodeError(f"Field '{key}' must be a number, got {value!r}")
    return float(value)


def _optional_mapping(data: Mapping[str, Any], key: str) -> Optional[Dict[str, float]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise PresetDecodeError(f"Field '{key}' must be an object of hue buckets")

    res: Dict[str, float] = {}
    for bucket, delta in value.items():
        if not _is_number(delta):
            raise PresetDecodeError(f"'{key}.{bucket}' must be a number, got {delta!r}")
        if bucket not in HUE_BUCKET_NAMES:
            logger.debug(f"Unknown hue bucket '{bucket}' in {key}")
        res[str(bucket)] = float(delta)
    return res
