from typing import List, Sequence, Tuple
import numpy as np
from scipy.interpolate import CubicSpline
from lume.domain.models import ToneCurvePoint
from lume.domain.types import ImageBuffer
from lume.kernel.system.performance import time_function
from lume.kernel.validation import ensure_image

MAX_CONTROL_POINTS = 5

# Identity anchors at logical positions 0..4, in 0-255 units
IDENTITY_ANCHORS: Tuple[Tuple[float, float], ...] = (
    (0.0, 0.0),
    (64.0, 64.0),
    (128.0, 128.0),
    (192.0, 192.0),
    (255.0, 255.0),
)


def fill_control_points(points: Sequence[ToneCurvePoint]) -> List[Tuple[float, float]]:
    """
    Returns exactly 5 anchors normalized to 0-1. Slot i takes the i-th supplied
    point; slots beyond the supplied count keep the identity anchor of that slot.
    Points past the fifth are ignored.
    """
    anchors = [(x / 255.0, y / 255.0) for x, y in IDENTITY_ANCHORS]
    for i, point in enumerate(points[:MAX_CONTROL_POINTS]):
        anchors[i] = (point.x / 255.0, point.y / 255.0)
    return anchors


class ToneCurve:
    """
    Smooth remapping through up to five anchors.

    Anchors are ordered by x; anchors sharing an x keep the earliest one, so
    supplied points win over the identity fillers behind them.
    The curve is a natural cubic spline, flat outside the outermost anchors,
    and clipped to 0-1.
    """

    def __init__(self, anchors: Sequence[Tuple[float, float]]):
        by_x = {}
        for x, y in anchors:
            by_x.setdefault(float(np.clip(x, 0.0, 1.0)), float(y))
        xs = sorted(by_x)
        self.xs = np.array(xs, dtype=np.float64)
        self.ys = np.array([by_x[x] for x in xs], dtype=np.float64)

        self._spline = None
        if len(xs) >= 2:
            self._spline = CubicSpline(self.xs, self.ys, bc_type="natural")

    def __call__(self, values: np.ndarray) -> np.ndarray:
        v = np.asarray(values, dtype=np.float64)
        if self._spline is None:
            res = np.full_like(v, self.ys[0])
        else:
            res = self._spline(np.clip(v, self.xs[0], self.xs[-1]))
        out: np.ndarray = np.clip(res, 0.0, 1.0)
        return out

    def sample(self, samples: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Evaluates the curve once on an even grid over 0-1.
        """
        grid = np.linspace(0.0, 1.0, samples, dtype=np.float64)
        return grid, self(grid)

    @classmethod
    def from_points(cls, points: Sequence[ToneCurvePoint]) -> "ToneCurve":
        return cls(fill_control_points(points))


@time_function
def apply_tone_curve(img: ImageBuffer, curve: ToneCurve, samples: int = 4096) -> ImageBuffer:
    """
    Single remap pass, the same curve on R, G and B.
    """
    grid, table = curve.sample(samples)
    res = np.interp(img, grid, table)
    return ensure_image(res)
