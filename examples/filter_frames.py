#!/usr/bin/env python3
"""Filter a stream of synthetic camera frames.

This example stands in for a webcam loop:
- Generate moving RGBA test frames (a drifting bright disc over noise)
- Filter each frame in place with one FrameFilter
- Report per-frame timing and the auto-contrast cutoff
- Optionally save the last filtered frame

The filter configuration is read from a lumawave.toml file passed with
--config (see examples/lumawave.toml), otherwise from the command line.
"""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path

import numpy as np

from lumawave import FrameFilter, load_filter_config


def _synthetic_frame(width: int, height: int, t: int, rng: np.random.Generator) -> np.ndarray:
    """RGBA frame with a disc drifting across a noisy background."""
    y, x = np.mgrid[0:height, 0:width]
    cx = (width // 4 + 3 * t) % width
    cy = height // 2
    disc = (x - cx) ** 2 + (y - cy) ** 2 < (min(width, height) // 6) ** 2

    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[..., :3] = rng.integers(30, 80, (height, width, 3), dtype=np.uint8)
    rgba[disc, 0] = 230
    rgba[disc, 1] = 200
    rgba[disc, 2] = 120
    rgba[..., 3] = 255
    return rgba


def _save_image(path: Path, rgba: np.ndarray) -> bool:
    try:
        from PIL import Image
    except ImportError:
        return False
    Image.fromarray(rgba).save(path)
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Wavelet frame filter example")
    parser.add_argument("--width", type=int, default=320, help="Frame width")
    parser.add_argument("--height", type=int, default=256, help="Frame height")
    parser.add_argument("--frames", type=int, default=30, help="Number of frames")
    parser.add_argument(
        "--scheme",
        choices=["haar", "linear", "none"],
        default="haar",
        help="Lifting scheme (ignored when a config file is used)",
    )
    parser.add_argument("--levels", type=int, default=4, help="Decomposition levels")
    parser.add_argument(
        "--noise-gate",
        type=int,
        default=0,
        help="Noise gate applied at every level",
    )
    parser.add_argument("--contrast", action="store_true", help="Enable auto-contrast")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to lumawave.toml",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("examples/filtered_frame.png"),
        help="Output path for the last filtered frame",
    )
    parser.add_argument("--verbose", action="store_true", help="Log pipeline stages")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.config is not None:
        config = load_filter_config(str(args.config))
        print(f"Loaded config: {args.config}")
    else:
        config = {
            "scheme": args.scheme,
            "levels": args.levels,
            "contrast": "histogram" if args.contrast else "none",
            "per_level": [{"noise_gate": args.noise_gate}] * args.levels,
        }

    frame_filter = FrameFilter(config)
    print(f"Filter: {frame_filter.config}")

    rng = np.random.default_rng(0)
    timings = []
    rgba = None
    for t in range(args.frames):
        rgba = _synthetic_frame(args.width, args.height, t, rng)
        start = time.perf_counter()
        meta = frame_filter.process(rgba, args.width, args.height)
        timings.append(time.perf_counter() - start)

        cutoff = meta.get("contrast_cutoff")
        if cutoff is not None:
            print(f"frame {t:3d}: {timings[-1] * 1000:6.2f} ms  cutoff={cutoff}")

    if not timings:
        return

    ms = np.array(timings) * 1000
    print(f"Frames: {len(ms)}  mean {ms.mean():.2f} ms  max {ms.max():.2f} ms")

    luma = rgba[..., 0]
    hist, _ = np.histogram(luma, bins=8, range=(0, 256))
    print(f"Last frame luma: min={luma.min()} max={luma.max()} mean={luma.mean():.1f}")
    print(f"Luma histogram (8 bins): {hist.tolist()}")

    if _save_image(args.output, rgba):
        print(f"Last frame saved to: {args.output}")
    else:
        print("Pillow not installed; skipping image save")


if __name__ == "__main__":
    main()
