"""
Effect presets.

A preset bundles an EffectParameterSet with the character set used to
build the glyph atlas. Presets come from the built-in table below or
from JSON files shaped like the host component props:

    {
        "cellSize": 9,
        "volumeShading": true,
        "tintColor": "#917AFF",
        "characterSet": "terminal",
        "postfx": {"contrastAdjust": 1.8, "scanlineIntensity": 0.3}
    }
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Union

from crtscope.core.params import EffectParameterSet
from crtscope.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Preset:
    params: EffectParameterSet
    character_set: Any = None


BUILTIN_PRESETS: dict[str, dict[str, Any]] = {
    # Every effect inert, procedural glyphs
    "baseline": {},
    # Tinted terminal glyphs with exaggerated volume
    "terminal": {
        "characterSet": "terminal",
        "volumeShading": True,
        "tintColor": "#917AFF",
        "postfx": {"contrastAdjust": 1.8, "brightnessAdjust": 0.0},
    },
    # Green phosphor monitor
    "crt": {
        "characterSet": "terminal",
        "postfx": {
            "colorPalette": "green",
            "scanlineIntensity": 0.35,
            "scanlineCount": 240,
            "curvature": 0.08,
            "vignetteIntensity": 0.6,
            "vignetteRadius": 1.2,
            "noiseIntensity": 0.06,
            "noiseScale": 40,
            "noiseSpeed": 2,
            "targetFPS": 24,
        },
    },
    # Choppy, torn signal
    "glitch": {
        "postfx": {
            "targetFPS": 12,
            "jitterIntensity": 0.3,
            "jitterSpeed": 6,
            "glitchIntensity": 0.15,
            "glitchFrequency": 8,
            "aberrationStrength": 0.004,
            "waveAmplitude": 0.002,
            "waveFrequency": 40,
            "waveSpeed": 3,
        },
    },
}


def preset_from_dict(data: Mapping[str, Any]) -> Preset:
    """
    Build a Preset from component-style props.

    ``characterSet`` / ``character_set`` selects the atlas glyphs;
    ``postfx`` is merged over the top-level keys.
    """
    data = dict(data)
    character_set = data.pop("characterSet", data.pop("character_set", None))
    postfx = data.pop("postfx", None) or {}
    if not isinstance(postfx, Mapping):
        raise ConfigurationError("postfx must be an object")
    merged = {**data, **postfx}
    return Preset(params=EffectParameterSet.from_dict(merged), character_set=character_set)


def load_preset(source: Union[str, Path]) -> Preset:
    """
    Resolve a built-in preset name or a JSON preset file.

    Raises:
        ConfigurationError: Unknown name, unreadable file, or invalid values.
    """
    name = str(source)
    if name in BUILTIN_PRESETS:
        return preset_from_dict(BUILTIN_PRESETS[name])

    path = Path(source)
    if not path.exists():
        known = ", ".join(sorted(BUILTIN_PRESETS))
        raise ConfigurationError(f"Unknown preset {name!r} (built-in: {known})")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read preset file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Preset file {path} must contain a JSON object")
    logger.debug("Loaded preset file %s", path)
    return preset_from_dict(data)


def save_preset(preset: Preset, path: Union[str, Path]) -> Path:
    """Write a preset as JSON (snake_case keys)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = preset.params.to_dict()
    if preset.character_set is not None:
        data["character_set"] = preset.character_set
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return path
