"""
CLI entry point for the ASCII/CRT renderer.

Usage:
    crtscope <image-or-directory> [options]
    python -m crtscope <image-or-directory> [options]

A single image renders to one PNG, or to an animation with --frames.
A directory is treated as an image sequence and renders to a directory
of PNGs or, with an .mp4 output, to video.
"""

import argparse
import itertools
import logging
import sys
import time
from pathlib import Path

from crtscope.config import BUILTIN_PRESETS, load_preset
from crtscope.core.params import AsciiStyle, ColorPalette
from crtscope.errors import ConfigurationError
from crtscope.io.encoder import encode_video
from crtscope.io.frames import flatten_rgb, iter_images, list_sequence, load_image, save_frame
from crtscope.render.renderer import AsciiRenderer, RenderConfig

# CLI flag -> EffectParameterSet field
_PARAM_FLAGS = {
    "cell_size": "cell_size",
    "style": "ascii_style",
    "palette": "color_palette",
    "tint": "tint_color",
    "contrast": "contrast_adjust",
    "brightness": "brightness_adjust",
    "target_fps": "target_fps",
    "scanlines": "scanline_intensity",
    "scanline_count": "scanline_count",
    "curvature": "curvature",
    "vignette": "vignette_intensity",
    "vignette_radius": "vignette_radius",
    "jitter": "jitter_intensity",
    "jitter_speed": "jitter_speed",
    "glitch": "glitch_intensity",
    "glitch_frequency": "glitch_frequency",
    "aberration": "aberration_strength",
    "noise": "noise_intensity",
    "noise_scale": "noise_scale",
    "noise_speed": "noise_speed",
    "wave": "wave_amplitude",
    "wave_frequency": "wave_frequency",
    "wave_speed": "wave_speed",
    "glow_radius": "mouse_glow_radius",
    "glow_intensity": "mouse_glow_intensity",
}


def _progress_bar(current: int, total: int, width: int = 35):
    """Print a progress bar to stdout."""
    pct = current / max(total, 1) * 100
    filled = int(width * current / max(total, 1))
    bar = "#" * filled + "-" * (width - filled)
    if sys.stdout.isatty():
        sys.stdout.write(f"\r[{bar}] {pct:5.1f}%  frame {current}/{total}")
        sys.stdout.flush()
        if current >= total:
            sys.stdout.write("\n")
    else:
        if current % max(1, total // 20) == 0 or current >= total:
            print(f"{pct:5.1f}%  frame {current}/{total}", flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crtscope",
        description="ASCII/CRT image and image-sequence renderer",
    )

    parser.add_argument("input", type=Path, help="Input image or directory of frames")
    parser.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output .png, .mp4, or directory (default: <input>_ascii.png / _ascii/)",
    )
    parser.add_argument(
        "-p", "--preset", type=str, default="baseline",
        help=f"Built-in preset ({', '.join(sorted(BUILTIN_PRESETS))}) or JSON file",
    )

    # Glyphs
    parser.add_argument("--cell-size", type=float, default=None, help="Cell edge in pixels")
    parser.add_argument(
        "--style", type=str, default=None, choices=[s.value for s in AsciiStyle],
        help="Procedural glyph style",
    )
    parser.add_argument(
        "--character-set", type=str, default=None,
        help="'terminal', 'procedural', or a literal string of glyphs (sparse to dense)",
    )
    parser.add_argument("--font", type=str, default=None, help="TrueType font for the glyph atlas")
    parser.add_argument("--no-invert", action="store_true", help="Do not invert brightness")
    parser.add_argument("--mono", action="store_true", help="Grayscale glyphs instead of scene color")
    parser.add_argument("--volume-shading", action="store_true", help="Exaggerate glyph density range")
    parser.add_argument("--tint", type=str, default=None, help="Single glyph color, e.g. '#917AFF'")
    parser.add_argument(
        "--palette", type=str, default=None, choices=[p.value for p in ColorPalette],
        help="Phosphor palette",
    )

    # Tone
    parser.add_argument("--contrast", type=float, default=None)
    parser.add_argument("--brightness", type=float, default=None)

    # Effects
    parser.add_argument("--scanlines", type=float, default=None, help="Scanline intensity")
    parser.add_argument("--scanline-count", type=float, default=None)
    parser.add_argument("--curvature", type=float, default=None, help="Barrel curvature")
    parser.add_argument("--vignette", type=float, default=None, help="Vignette intensity")
    parser.add_argument("--vignette-radius", type=float, default=None)
    parser.add_argument("--jitter", type=float, default=None, help="Jitter intensity in cells")
    parser.add_argument("--jitter-speed", type=float, default=None)
    parser.add_argument("--glitch", type=float, default=None, help="Row glitch probability")
    parser.add_argument("--glitch-frequency", type=float, default=None)
    parser.add_argument("--aberration", type=float, default=None, help="Channel offset (UV units)")
    parser.add_argument("--noise", type=float, default=None, help="Film noise intensity")
    parser.add_argument("--noise-scale", type=float, default=None)
    parser.add_argument("--noise-speed", type=float, default=None)
    parser.add_argument("--wave", type=float, default=None, help="Wave amplitude (UV units)")
    parser.add_argument("--wave-frequency", type=float, default=None)
    parser.add_argument("--wave-speed", type=float, default=None)
    parser.add_argument(
        "--glow", type=float, nargs=2, default=None, metavar=("X", "Y"),
        help="Enable pointer glow at pixel position X Y",
    )
    parser.add_argument("--glow-radius", type=float, default=None)
    parser.add_argument("--glow-intensity", type=float, default=None)

    # Timing & output
    parser.add_argument("--frames", type=int, default=1, help="Animate a single image over N frames")
    parser.add_argument("-f", "--fps", type=int, default=30, help="Output frames per second")
    parser.add_argument("--target-fps", type=float, default=None, help="Quantize effect time to this rate")
    parser.add_argument("--width", type=int, default=None, help="Output width (default: source)")
    parser.add_argument("--height", type=int, default=None, help="Output height (default: source)")
    parser.add_argument("--workers", type=int, default=1, help="Row bands rendered in parallel")
    parser.add_argument(
        "-q", "--quality", type=str, default="medium", choices=["high", "medium", "fast"],
        help="Encoding quality for .mp4 output",
    )
    parser.add_argument("--audio", type=Path, default=None, help="Audio track to mux into .mp4 output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    return parser


def _param_overrides(args: argparse.Namespace) -> dict:
    overrides = {
        field: getattr(args, flag)
        for flag, field in _PARAM_FLAGS.items()
        if getattr(args, flag) is not None
    }
    if args.no_invert:
        overrides["invert"] = False
    if args.mono:
        overrides["color_mode"] = False
    if args.volume_shading:
        overrides["volume_shading"] = True
    if args.glow is not None:
        overrides["mouse_glow_enabled"] = True
    return overrides


def _character_set(arg: str | None, preset_value):
    if arg is None:
        return preset_value
    if arg == "procedural":
        return None
    return arg


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        sources = list_sequence(args.input)
    except FileNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        preset = load_preset(args.preset)
        params = preset.params
        overrides = _param_overrides(args)
        if overrides:
            params = params.replace(**overrides)

        config = RenderConfig(
            width=args.width,
            height=args.height,
            fps=args.fps,
            character_set=_character_set(args.character_set, preset.character_set),
            font=args.font,
            workers=args.workers,
        )
        renderer = AsciiRenderer(params, config)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    if args.glow is not None:
        renderer.update_inputs(mouse_pos=tuple(args.glow))

    size = (args.width, args.height) if args.width and args.height else None
    first = load_image(sources[0], size)
    if len(sources) == 1:
        total = max(args.frames, 1)
        images = itertools.repeat(first, total)
    else:
        # Frames after the first stream from disk as they are rendered
        total = len(sources)
        images = itertools.chain([first], iter_images(sources[1:], size))
    height, width = first.shape[:2]
    if size is not None:
        width, height = size

    output = args.output
    if output is None:
        stem = args.input.with_suffix("") if args.input.is_file() else args.input
        output = Path(f"{stem}_ascii.png" if total == 1 else f"{stem}_ascii")

    print(f"Rendering {total} frame(s) at {width}x{height}, preset: {args.preset}")
    print(f"  Glyphs: {'atlas (%d tiles)' % renderer.atlas.tile_count if renderer.atlas else 'procedural'}")
    t0 = time.time()

    frames = renderer.render_sequence(images, total=total, progress_callback=_progress_bar)

    if output.suffix.lower() == ".mp4":
        if width % 2 or height % 2:
            print("Error: .mp4 output needs even width and height", file=sys.stderr)
            return 2
        encode_video(
            frame_iterator=(flatten_rgb(f) for f in frames),
            output_path=output,
            width=width,
            height=height,
            fps=args.fps,
            quality=args.quality,
            audio_path=args.audio,
        )
    elif output.suffix.lower() == ".png" and total == 1:
        for frame in frames:
            save_frame(frame, output)
    else:
        output.mkdir(parents=True, exist_ok=True)
        for i, frame in enumerate(frames):
            save_frame(frame, output / f"frame_{i:05d}.png")

    elapsed = time.time() - t0
    print(f"\nDone! {renderer.frames_rendered} frame(s) in {elapsed:.1f}s")
    print(f"  Output: {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
