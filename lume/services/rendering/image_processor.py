import os
from typing import Optional
import numpy as np
from lume.domain.models import Preset
from lume.domain.types import ImageRGBA8
from lume.kernel.caching.logic import CacheKey, calculate_config_hash
from lume.kernel.caching.manager import ResultCache
from lume.kernel.image.logic import (
    calculate_image_hash,
    ensure_rgba,
    load_image_rgba8,
    save_image_rgba8,
)
from lume.kernel.system.config import APP_CONFIG
from lume.features.lut.processor import lut_source_id
from lume.kernel.system.logging import get_logger
from lume.services.rendering.engine import GradingEngine

logger = get_logger(__name__)

# Presets with this prefix are transient user tweaks and never cached
ADJUSTED_PREFIX = "Adjusted_"


class PresetProcessor:
    """
    Entry point for hosts: grades decoded images, optionally memoizing results.
    The cache is injected so several processors (or none) can share one.
    """

    def __init__(
        self,
        cache: Optional[ResultCache[ImageRGBA8]] = None,
        engine: Optional[GradingEngine] = None,
    ) -> None:
        self.cache = cache
        self.engine = engine or GradingEngine()

    def apply_preset(
        self,
        image: ImageRGBA8,
        preset: Preset,
        lut_base_dir: Optional[str] = None,
    ) -> ImageRGBA8:
        return self.engine.process(image, preset, lut_base_dir=lut_base_dir)

    def cache_key(
        self,
        image: ImageRGBA8,
        preset: Preset,
        preset_name: str,
        lut_base_dir: Optional[str] = None,
    ) -> CacheKey:
        # Name and content both take part: an edited preset under an old name must miss.
        # A LUT reference counts by the file it resolves to, not by its text.
        preset_id = f"{preset_name}:{calculate_config_hash(preset)}"
        if preset.lut_image:
            preset_id = f"{preset_id}:{lut_source_id(preset.lut_image, lut_base_dir)}"
        return CacheKey(
            image_id=calculate_image_hash(ensure_rgba(image)),
            preset_id=preset_id,
        )

    def apply_preset_with_caching(
        self,
        image: ImageRGBA8,
        preset: Preset,
        preset_name: str,
        use_cache: bool = True,
        lut_base_dir: Optional[str] = None,
    ) -> ImageRGBA8:
        """
        Returns a memoized result when one exists for (image content, preset).
        Cached results are read-only arrays shared between callers.
        """
        cacheable = (
            use_cache
            and self.cache is not None
            and not preset_name.startswith(ADJUSTED_PREFIX)
        )
        if not cacheable or self.cache is None:
            return self.apply_preset(image, preset, lut_base_dir)

        key = self.cache_key(image, preset, preset_name, lut_base_dir)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for preset '{preset_name}'")
            return cached

        result = self.apply_preset(image, preset, lut_base_dir)
        result.setflags(write=False)
        self.cache.put(key, result)
        return result

    def clear_cache_for_image(self, image: ImageRGBA8) -> int:
        """
        Drops cached renders of this source image, e.g. when it is replaced.
        """
        if self.cache is None:
            return 0
        return self.cache.invalidate_all(calculate_image_hash(ensure_rgba(image)))

    def process_file(
        self,
        input_path: str,
        preset: Preset,
        output_path: str,
        fmt: Optional[str] = None,
        lut_base_dir: Optional[str] = None,
    ) -> str:
        """
        Decode, grade, encode. Raises ImageDecodeError for unreadable sources.
        """
        image = load_image_rgba8(input_path)
        graded = self.apply_preset(image, preset, lut_base_dir)

        if fmt is None:
            ext = os.path.splitext(output_path)[1].lower().lstrip(".")
            fmt = "JPEG" if ext in ("jpg", "jpeg") else (ext.upper() or "PNG")

        out_dir = os.path.dirname(output_path)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        save_image_rgba8(np.ascontiguousarray(graded), output_path, fmt)
        logger.info(f"Graded {os.path.basename(input_path)} -> {output_path}")
        return output_path


def create_default_processor() -> PresetProcessor:
    return PresetProcessor(cache=ResultCache(capacity=APP_CONFIG.cache_capacity))
