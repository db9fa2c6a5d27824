import os
from typing import Optional
from lume.domain.interfaces import IProcessor, PipelineContext
from lume.domain.types import ImageBuffer
from lume.features.lut.logic import (
    ColorCube,
    apply_color_cube,
    build_color_cube,
    decode_lut_image,
)
from lume.kernel.caching.logic import CacheKey
from lume.kernel.caching.manager import ResultCache
from lume.kernel.system.config import APP_CONFIG
from lume.kernel.system.logging import get_logger

logger = get_logger(__name__)


def resolve_lut_path(reference: str, base_dir: Optional[str] = None) -> str:
    """
    Absolute references are used as-is; relative ones resolve against base_dir,
    falling back to the configured LUT directory.
    """
    reference = os.path.expanduser(reference)
    if os.path.isabs(reference):
        return reference
    return os.path.join(base_dir or APP_CONFIG.lut_dir, reference)


def lut_file_version(path: str) -> Optional[str]:
    """
    mtime and size of a LUT file as one token, None if the file is missing.
    """
    try:
        stat = os.stat(path)
    except OSError:
        return None
    return f"{stat.st_mtime_ns}:{stat.st_size}"


def lut_source_id(reference: str, base_dir: Optional[str] = None) -> str:
    """
    Identity of the LUT a reference points at: resolved path plus file version.
    """
    path = resolve_lut_path(reference, base_dir)
    return f"{path}@{lut_file_version(path) or 'missing'}"


class ColorCubeCache:
    """
    Decoded cubes keyed by (path, file version). Rewriting a LUT file changes
    its version, so the stale decode is dropped on the next load.
    """

    def __init__(self, capacity: Optional[int] = None) -> None:
        self._cubes: ResultCache[ColorCube] = ResultCache(
            capacity or APP_CONFIG.lut_cache_capacity
        )

    def load(self, path: str) -> Optional[ColorCube]:
        version = lut_file_version(path)
        if version is None:
            logger.warning(f"LUT image not found: {path}")
            return None

        key = CacheKey(image_id=path, preset_id=version)
        cube = self._cubes.get(key)
        if cube is not None:
            return cube

        rgba = decode_lut_image(path)
        if rgba is None:
            return None
        cube = build_color_cube(rgba)
        if cube is None:
            return None

        self._cubes.invalidate_all(path)
        self._cubes.put(key, cube)
        return cube

    def __len__(self) -> int:
        return len(self._cubes)


class LUTProcessor(IProcessor):
    def __init__(self, lut_reference: Optional[str], cubes: Optional[ColorCubeCache] = None):
        self.lut_reference = lut_reference
        self.cubes = cubes if cubes is not None else ColorCubeCache()

    def process(
        self, image: ImageBuffer, context: PipelineContext
    ) -> Optional[ImageBuffer]:
        if not self.lut_reference:
            return None

        path = resolve_lut_path(self.lut_reference, context.lut_base_dir)
        cube = self.cubes.load(path)
        if cube is None:
            logger.warning(f"LUT {path} is unreadable or not a colour cube, skipping")
            return None

        context.metrics["lut_dimension"] = cube.dimension
        return apply_color_cube(image, cube)
