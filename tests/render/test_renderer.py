"""Tests for the frame orchestrator."""

import threading

import numpy as np
import pytest

from crtscope.core.params import AsciiStyle, EffectParameterSet
from crtscope.errors import ConfigurationError
from crtscope.render.renderer import AsciiRenderer, RenderConfig

SMALL_ATLAS = {"atlas_tile_size": 16, "font_size": 14}


class TestRenderFrame:
    def test_follows_source_size(self, gray_image):
        renderer = AsciiRenderer()
        out = renderer.render_frame(gray_image, 1 / 30)
        assert out.shape == (64, 96, 4)
        assert renderer.frames_rendered == 1
        assert renderer.clock.time == pytest.approx(1 / 30)

    def test_missing_image_skips_without_advancing(self):
        renderer = AsciiRenderer()
        assert renderer.render_frame(None, 0.5) is None
        assert renderer.frames_skipped == 1
        assert renderer.clock.time == 0.0

    def test_context_lost_skips(self, gray_image):
        renderer = AsciiRenderer()
        assert renderer.render_frame(gray_image, 0.5, context_available=False) is None
        assert renderer.frames_skipped == 1
        assert renderer.frames_rendered == 0
        assert renderer.clock.time == 0.0

    def test_quantized_time(self, gray_image):
        renderer = AsciiRenderer(EffectParameterSet(target_fps=10))
        renderer.render_frame(gray_image, 0.04)
        assert renderer.clock.time == 0.0
        renderer.render_frame(gray_image, 0.07)
        assert renderer.clock.time == pytest.approx(0.1)

    def test_config_size(self, gray_image):
        renderer = AsciiRenderer(config=RenderConfig(width=48, height=20))
        assert renderer.render_frame(gray_image, 0.0).shape == (20, 48, 4)


class TestInputs:
    def test_resize_applies_next_frame(self, gray_image):
        renderer = AsciiRenderer()
        renderer.update_inputs(resolution=(40, 24))
        assert renderer.render_frame(gray_image, 0.0).shape == (24, 40, 4)

    def test_snapshot(self):
        renderer = AsciiRenderer()
        renderer.update_inputs(mouse_pos=(10, 20))
        frame = renderer.snapshot((320, 200))
        assert frame.resolution == (320.0, 200.0)
        assert frame.mouse_pos == (10.0, 20.0)
        assert frame.time == 0.0

    def test_concurrent_updates_are_whole(self):
        renderer = AsciiRenderer()

        def writer(k):
            for i in range(200):
                renderer.update_inputs(resolution=(k * 100 + i, k * 100 + i))

        threads = [threading.Thread(target=writer, args=(k,)) for k in (1, 2, 3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        w, h = renderer.snapshot().resolution
        assert w == h

    def test_pointer_glow(self, gray_image):
        params = EffectParameterSet(mouse_glow_enabled=True, mouse_glow_radius=20)
        renderer = AsciiRenderer(params)
        renderer.update_inputs(mouse_pos=(95, 63))
        out = renderer.render_frame(gray_image, 0.0)
        assert out[-1, -1, 0] > out[0, 0, 0]


class TestConfiguration:
    def test_set_params_keeps_time(self, gray_image):
        renderer = AsciiRenderer()
        renderer.render_frame(gray_image, 0.5)
        renderer.set_params(EffectParameterSet(target_fps=4, cell_size=6))
        assert renderer.clock.time == pytest.approx(0.5)
        assert renderer.clock.target_fps == 4
        assert renderer.pipeline.params.cell_size == 6

    def test_procedural_by_default(self):
        renderer = AsciiRenderer()
        assert renderer.atlas is None
        assert not renderer.pipeline.uses_atlas

    def test_terminal_atlas(self):
        renderer = AsciiRenderer(config=RenderConfig(character_set="terminal", **SMALL_ATLAS))
        assert renderer.atlas.tile_count == 16
        assert renderer.pipeline.uses_atlas

    def test_swap_character_set_releases_old_atlas(self):
        renderer = AsciiRenderer(config=RenderConfig(character_set="terminal", **SMALL_ATLAS))
        old = renderer.atlas
        renderer.set_character_set(" .:#")
        assert old.tile_count == 0
        assert renderer.atlas.tile_count == 4
        renderer.set_character_set(None)
        assert renderer.atlas is None
        assert not renderer.pipeline.uses_atlas

    def test_unsupported_style_without_atlas(self):
        with pytest.raises(ConfigurationError):
            AsciiRenderer(EffectParameterSet(ascii_style=AsciiStyle.DENSE))

    def test_unsupported_style_with_atlas(self, gray_image):
        renderer = AsciiRenderer(
            EffectParameterSet(ascii_style=AsciiStyle.DENSE),
            RenderConfig(character_set="terminal", **SMALL_ATLAS),
        )
        assert renderer.render_frame(gray_image, 0.0) is not None

    def test_release(self, gray_image):
        renderer = AsciiRenderer(config=RenderConfig(character_set="terminal", **SMALL_ATLAS))
        atlas = renderer.atlas
        renderer.release()
        assert atlas.tile_count == 0
        assert renderer.atlas is None
        # Falls back to procedural glyphs
        assert renderer.render_frame(gray_image, 0.0) is not None


    def test_release_keeps_atlas_without_procedural_fallback(self, gray_image):
        renderer = AsciiRenderer(
            EffectParameterSet(ascii_style=AsciiStyle.BLOCKS),
            RenderConfig(character_set="terminal", **SMALL_ATLAS),
        )
        atlas = renderer.atlas
        renderer.release()
        assert renderer.atlas is atlas
        assert atlas.active
        assert renderer.render_frame(gray_image, 0.1) is not None
        assert renderer.clock.time == pytest.approx(0.1)

    def test_released_atlas_skips_frame_without_advancing(self, gray_image):
        renderer = AsciiRenderer(
            EffectParameterSet(ascii_style=AsciiStyle.BLOCKS),
            RenderConfig(character_set="terminal", **SMALL_ATLAS),
        )
        # Freed behind the renderer's back
        renderer.atlas.release()
        assert not renderer.pipeline.can_draw
        assert renderer.render_frame(gray_image, 0.1) is None
        assert renderer.frames_skipped == 1
        assert renderer.clock.time == 0.0

    def test_failed_character_set_swap_keeps_current_atlas(self):
        renderer = AsciiRenderer(
            EffectParameterSet(ascii_style=AsciiStyle.MINIMAL),
            RenderConfig(character_set="terminal", **SMALL_ATLAS),
        )
        atlas = renderer.atlas
        with pytest.raises(ConfigurationError):
            renderer.set_character_set(None)
        assert renderer.atlas is atlas
        assert atlas.active


class TestRenderSequence:
    def test_yields_frames_and_reports_progress(self, gray_image):
        calls = []
        renderer = AsciiRenderer(config=RenderConfig(fps=30))
        frames = list(renderer.render_sequence(
            [gray_image] * 3, progress_callback=lambda c, t: calls.append((c, t)),
        ))
        assert len(frames) == 3
        assert calls == [(1, 3), (2, 3), (3, 3)]
        # First frame renders at t=0
        assert renderer.clock.time == pytest.approx(2 / 30)

    def test_skipped_frames_not_yielded(self, gray_image):
        renderer = AsciiRenderer()
        frames = list(renderer.render_sequence([gray_image, None, gray_image]))
        assert len(frames) == 2
        assert renderer.frames_skipped == 1

    def test_generator_without_len(self, gray_image):
        calls = []
        renderer = AsciiRenderer()
        images = (gray_image for _ in range(2))
        frames = list(renderer.render_sequence(images, progress_callback=lambda c, t: calls.append((c, t))))
        assert len(frames) == 2
        assert calls == [(1, 1), (2, 2)]

    def test_animated_effect_varies_over_sequence(self, gradient_image):
        params = EffectParameterSet(jitter_intensity=0.5, jitter_speed=45)
        renderer = AsciiRenderer(params, RenderConfig(fps=30))
        first, second = renderer.render_sequence([gradient_image, gradient_image])
        assert not np.array_equal(first, second)
