import os
from dataclasses import replace
from lume.domain.models import Preset
from lume.kernel.errors import PresetDecodeError
from lume.kernel.system.logging import get_logger

logger = get_logger(__name__)


def load_preset_file(path: str) -> Preset:
    """
    Reads one preset JSON file. A relative lutImage is rebased onto the
    file's own directory so the preset stays portable with its LUTs.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise PresetDecodeError(f"Cannot read preset: {e}", source=path) from e

    try:
        preset = Preset.from_json(text)
    except PresetDecodeError as e:
        raise PresetDecodeError(str(e), source=path) from e

    if preset.lut_image and not os.path.isabs(os.path.expanduser(preset.lut_image)):
        base_dir = os.path.dirname(os.path.abspath(path))
        preset = replace(preset, lut_image=os.path.join(base_dir, preset.lut_image))

    logger.debug(f"Loaded preset {os.path.basename(path)}")
    return preset


def preset_name_from_path(path: str) -> str:
    return os.path.splitext(os.path.basename(path))[0]


def is_system_preset(name: str) -> bool:
    """
    Bundled presets start with '_' or are duplicates suffixed ' 2'.
    """
    return name.startswith("_") or " 2" in name
