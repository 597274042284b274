"""Tests for the effect parameter set."""

import pytest

from crtscope.core.params import AsciiStyle, ColorPalette, EffectParameterSet, parse_color
from crtscope.errors import ConfigurationError


class TestDefaults:
    def test_core_defaults(self):
        p = EffectParameterSet()
        assert p.cell_size == 9
        assert p.invert is True
        assert p.color_mode is True
        assert p.ascii_style is AsciiStyle.STANDARD
        assert p.color_palette is ColorPalette.NONE
        assert p.tint_color is None

    def test_effects_inert_by_default(self):
        p = EffectParameterSet()
        for name in (
            "scanline_intensity", "jitter_intensity", "vignette_intensity",
            "curvature", "aberration_strength", "noise_intensity",
            "wave_amplitude", "glitch_intensity", "glitch_frequency",
            "brightness_adjust", "target_fps",
        ):
            assert getattr(p, name) == 0, name
        assert p.contrast_adjust == 1
        assert p.mouse_glow_enabled is False

    def test_frozen(self):
        p = EffectParameterSet()
        with pytest.raises(AttributeError):
            p.cell_size = 12

    def test_empty_threshold_tracks_volume_shading(self):
        assert EffectParameterSet().empty_threshold == 0.14
        assert EffectParameterSet(volume_shading=True).empty_threshold == 0.04


class TestCoercion:
    def test_style_from_string_and_index(self):
        assert EffectParameterSet(ascii_style="blocks").ascii_style is AsciiStyle.BLOCKS
        assert EffectParameterSet(ascii_style=1).ascii_style is AsciiStyle.DENSE

    def test_palette_from_string_and_index(self):
        assert EffectParameterSet(color_palette="Amber").color_palette is ColorPalette.AMBER
        assert EffectParameterSet(color_palette=4).color_palette is ColorPalette.BLUE

    def test_unknown_palette_rejected(self):
        with pytest.raises(ConfigurationError):
            EffectParameterSet(color_palette="magenta")

    def test_numbers_become_floats(self):
        p = EffectParameterSet(cell_size=12, scanline_count="150")
        assert isinstance(p.cell_size, float)
        assert p.scanline_count == 150.0

    def test_bool_fields_stay_bool(self):
        p = EffectParameterSet(invert=0, volume_shading=1)
        assert p.invert is False
        assert p.volume_shading is True

    def test_non_numeric_rejected(self):
        with pytest.raises(ConfigurationError):
            EffectParameterSet(curvature="lots")

    def test_non_finite_rejected(self):
        with pytest.raises(ConfigurationError):
            EffectParameterSet(jitter_intensity=float("nan"))

    def test_glow_radius_must_be_positive_when_enabled(self):
        with pytest.raises(ConfigurationError):
            EffectParameterSet(mouse_glow_enabled=True, mouse_glow_radius=0)
        # Disabled glow ignores the radius
        EffectParameterSet(mouse_glow_radius=0)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            EffectParameterSet(vignette_intensity=0.5, vignette_radius=0)


class TestTintColor:
    def test_hex_string(self):
        r, g, b = parse_color("#917AFF")
        assert r == pytest.approx(0x91 / 255)
        assert g == pytest.approx(0x7A / 255)
        assert b == pytest.approx(1.0)

    def test_float_triple(self):
        assert EffectParameterSet(tint_color=[1, 0.5, 0]).tint_color == (1.0, 0.5, 0.0)

    def test_bad_color(self):
        with pytest.raises(ConfigurationError):
            EffectParameterSet(tint_color="not-a-color")


class TestFromDict:
    def test_camel_case_postfx_keys(self):
        p = EffectParameterSet.from_dict({
            "cellSize": 12,
            "scanlineIntensity": 0.3,
            "targetFPS": 24,
            "colorPalette": 1,
            "tintColor": "#ffffff",
        })
        assert p.cell_size == 12
        assert p.scanline_intensity == 0.3
        assert p.target_fps == 24
        assert p.color_palette is ColorPalette.GREEN
        assert p.tint_color == (1.0, 1.0, 1.0)

    def test_snake_case_keys(self):
        p = EffectParameterSet.from_dict({"jitter_intensity": 0.5, "invert": False})
        assert p.jitter_intensity == 0.5
        assert p.invert is False

    def test_unknown_key_rejected(self):
        with pytest.raises(ConfigurationError, match="bloomIntensity"):
            EffectParameterSet.from_dict({"bloomIntensity": 1})

    def test_to_dict_round_trip(self):
        p = EffectParameterSet(ascii_style="minimal", tint_color="#ff0000", curvature=0.1)
        assert EffectParameterSet.from_dict(p.to_dict()) == p

    def test_replace_returns_new_validated_set(self):
        p = EffectParameterSet()
        q = p.replace(color_palette="cyan")
        assert q.color_palette is ColorPalette.CYAN
        assert p.color_palette is ColorPalette.NONE
