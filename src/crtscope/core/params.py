"""
Effect parameter set.

One frozen dataclass holds every knob read by the pixel pipeline. The
defaults leave every optional effect inert, so a default-constructed set
renders a plain color ASCII quantization of the source.
"""

import enum
import math
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional, Tuple

from PIL import ImageColor

from crtscope.errors import ConfigurationError


class AsciiStyle(enum.Enum):
    """Procedural glyph families, used when no glyph atlas is bound."""

    STANDARD = "standard"
    DENSE = "dense"
    MINIMAL = "minimal"
    BLOCKS = "blocks"


class ColorPalette(enum.Enum):
    """Monochrome phosphor palettes applied after compositing."""

    NONE = "none"
    GREEN = "green"
    AMBER = "amber"
    CYAN = "cyan"
    BLUE = "blue"


RGB = Tuple[float, float, float]

# Host-facing camelCase names (the "postfx" dictionary) -> field names
_ALIASES = {
    "cellSize": "cell_size",
    "color": "color_mode",
    "colorMode": "color_mode",
    "style": "ascii_style",
    "asciiStyle": "ascii_style",
    "volumeShading": "volume_shading",
    "tintColor": "tint_color",
    "scanlineIntensity": "scanline_intensity",
    "scanlineCount": "scanline_count",
    "targetFPS": "target_fps",
    "jitterIntensity": "jitter_intensity",
    "jitterSpeed": "jitter_speed",
    "mouseGlowEnabled": "mouse_glow_enabled",
    "mouseGlowRadius": "mouse_glow_radius",
    "mouseGlowIntensity": "mouse_glow_intensity",
    "vignetteIntensity": "vignette_intensity",
    "vignetteRadius": "vignette_radius",
    "colorPalette": "color_palette",
    "aberrationStrength": "aberration_strength",
    "noiseIntensity": "noise_intensity",
    "noiseScale": "noise_scale",
    "noiseSpeed": "noise_speed",
    "waveAmplitude": "wave_amplitude",
    "waveFrequency": "wave_frequency",
    "waveSpeed": "wave_speed",
    "glitchIntensity": "glitch_intensity",
    "glitchFrequency": "glitch_frequency",
    "brightnessAdjust": "brightness_adjust",
    "contrastAdjust": "contrast_adjust",
}


def _coerce_enum(enum_cls, value, field_name: str):
    if isinstance(value, enum_cls):
        return value
    members = list(enum_cls)
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 <= value < len(members):
            return members[value]
    elif isinstance(value, str):
        try:
            return enum_cls(value.lower())
        except ValueError:
            pass
    choices = ", ".join(m.value for m in members)
    raise ConfigurationError(f"{field_name} must be one of {choices}, got {value!r}")


def parse_color(value) -> Optional[RGB]:
    """
    Normalize a tint color.

    Accepts None, any Pillow color string ("#917AFF", "orchid") or an
    RGB triple of floats in [0, 1].
    """
    if value is None:
        return None
    if isinstance(value, str):
        try:
            r, g, b = ImageColor.getrgb(value)[:3]
        except ValueError as exc:
            raise ConfigurationError(f"Unrecognised tint color {value!r}") from exc
        return (r / 255.0, g / 255.0, b / 255.0)
    try:
        r, g, b = (float(c) for c in value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"tint_color must be a color string or RGB triple, got {value!r}") from exc
    return (r, g, b)


@dataclass(frozen=True)
class EffectParameterSet:
    """Immutable per-configuration bundle read by every pipeline stage."""

    # Core quantization
    cell_size: float = 9
    invert: bool = True
    color_mode: bool = True
    ascii_style: AsciiStyle = AsciiStyle.STANDARD
    volume_shading: bool = False
    tint_color: Optional[RGB] = None

    # Scanlines
    scanline_intensity: float = 0.0
    scanline_count: float = 200.0

    # Time quantization
    target_fps: float = 0.0

    # Jitter
    jitter_intensity: float = 0.0
    jitter_speed: float = 1.0

    # Pointer glow
    mouse_glow_enabled: bool = False
    mouse_glow_radius: float = 200.0
    mouse_glow_intensity: float = 1.5

    # Vignette
    vignette_intensity: float = 0.0
    vignette_radius: float = 0.8

    color_palette: ColorPalette = ColorPalette.NONE

    # Lens / sampling
    curvature: float = 0.0
    aberration_strength: float = 0.0

    # Film noise
    noise_intensity: float = 0.0
    noise_scale: float = 1.0
    noise_speed: float = 1.0

    # Wave distortion
    wave_amplitude: float = 0.0
    wave_frequency: float = 10.0
    wave_speed: float = 1.0

    # Row glitch
    glitch_intensity: float = 0.0
    glitch_frequency: float = 0.0

    # Tone
    brightness_adjust: float = 0.0
    contrast_adjust: float = 1.0

    def __post_init__(self):
        set_ = object.__setattr__
        set_(self, "ascii_style", _coerce_enum(AsciiStyle, self.ascii_style, "ascii_style"))
        set_(self, "color_palette", _coerce_enum(ColorPalette, self.color_palette, "color_palette"))
        set_(self, "tint_color", parse_color(self.tint_color))

        for f in fields(self):
            value = getattr(self, f.name)
            if f.type is bool:
                set_(self, f.name, bool(value))
                continue
            if f.name in ("ascii_style", "color_palette", "tint_color"):
                continue
            try:
                number = float(value)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"{f.name} must be a number, got {value!r}") from exc
            if not math.isfinite(number):
                raise ConfigurationError(f"{f.name} must be finite, got {value!r}")
            set_(self, f.name, number)

        if self.mouse_glow_enabled and self.mouse_glow_radius <= 0:
            raise ConfigurationError("mouse_glow_radius must be > 0 when the glow is enabled")
        if self.vignette_intensity > 0 and self.vignette_radius <= 0:
            raise ConfigurationError("vignette_radius must be > 0 when the vignette is enabled")

    @property
    def empty_threshold(self) -> float:
        """Brightness below which a cell draws nothing."""
        return 0.04 if self.volume_shading else 0.14

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EffectParameterSet":
        """
        Build a parameter set from snake_case or camelCase keys.

        Unknown keys are rejected so typos in preset files surface early.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unknown effect parameter {key!r}")
            kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-friendly dict, the inverse of ``from_dict``."""
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, enum.Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            out[f.name] = value
        return out

    def replace(self, **changes) -> "EffectParameterSet":
        return replace(self, **changes)
