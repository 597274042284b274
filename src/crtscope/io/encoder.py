"""
FFmpeg video encoder.

Pipes raw RGB frames to ffmpeg via stdin, optionally muxing an audio
track. No intermediate files: frames go straight from numpy arrays to
the encoder.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Iterator

logger = logging.getLogger(__name__)

# Quality presets: (preset, crf, pix_fmt)
QUALITY_PRESETS = {
    "high": ("slow", "18", "yuv444p"),
    "medium": ("medium", "23", "yuv420p"),
    "fast": ("ultrafast", "28", "yuv420p"),
}


def build_command(
    output_path: Path,
    width: int,
    height: int,
    fps: int,
    quality: str = "medium",
    audio_path: Path | None = None,
) -> list[str]:
    """ffmpeg argument list for a raw rgb24 pipe."""
    preset, crf, pix_fmt = QUALITY_PRESETS.get(quality, QUALITY_PRESETS["medium"])

    cmd = [
        "ffmpeg", "-y",
        "-loglevel", "error",
        # Raw video input from pipe
        "-f", "rawvideo",
        "-pix_fmt", "rgb24",
        "-s", f"{width}x{height}",
        "-r", str(fps),
        "-i", "pipe:0",
    ]
    if audio_path is not None:
        cmd += ["-i", str(audio_path)]

    cmd += [
        "-c:v", "libx264",
        "-preset", preset,
        "-crf", crf,
        "-pix_fmt", pix_fmt,
    ]
    if audio_path is not None:
        cmd += ["-c:a", "aac", "-b:a", "192k", "-shortest"]

    cmd.append(str(output_path))
    return cmd


def encode_video(
    frame_iterator: Iterator,
    output_path: Path,
    width: int,
    height: int,
    fps: int = 30,
    quality: str = "medium",
    audio_path: Path | None = None,
    total_frames: int | None = None,
    progress_callback: Callable[[int, int], None] | None = None,
) -> Path:
    """
    Encode frames to MP4.

    Args:
        frame_iterator: Yields (H, W, 3) uint8 numpy arrays.
        output_path: Output MP4 path.
        width: Frame width (must be even for yuv420p).
        height: Frame height.
        fps: Frames per second.
        quality: "high", "medium", or "fast".
        audio_path: Optional audio file to mux in.
        total_frames: Total frame count for progress reporting.
        progress_callback: Optional callback(current_frame, total_frames).

    Returns:
        Path to the output file.
    """
    if shutil.which("ffmpeg") is None:
        raise RuntimeError("ffmpeg not found on PATH")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    cmd = build_command(output_path, width, height, fps, quality, audio_path)
    logger.debug("Running %s", " ".join(cmd))

    proc = subprocess.Popen(
        cmd,
        stdin=subprocess.PIPE,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.PIPE,
    )

    frame_count = 0
    try:
        for frame in frame_iterator:
            if frame.shape[:2] != (height, width):
                raise ValueError(
                    f"Frame {frame_count} is {frame.shape[1]}x{frame.shape[0]}, "
                    f"expected {width}x{height}"
                )
            proc.stdin.write(frame.tobytes())
            frame_count += 1

            if progress_callback and total_frames:
                progress_callback(frame_count, total_frames)

    except BrokenPipeError:
        logger.warning("ffmpeg closed its input after %d frames", frame_count)
    finally:
        if proc.stdin:
            proc.stdin.close()
        proc.wait()

    if proc.returncode != 0:
        stderr = proc.stderr.read().decode("utf-8", errors="replace")
        raise RuntimeError(
            f"ffmpeg exited with code {proc.returncode}: {stderr[-500:]}"
        )

    return output_path
