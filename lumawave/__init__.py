"""Real-time wavelet filtering of grayscale video frames.

This package turns RGBA camera frames into filtered grayscale frames using:
- Integer lifting-scheme wavelet transforms (Haar and Linear), in place
- Per-level reconstruction shaping (noise gate, gain, bias, squash)
- Histogram auto-contrast and one-bit thresholding
- Entity-Component-System (ECS) stages over a per-stream frame arena

Quick Start:
    >>> import numpy as np
    >>> from lumawave import process
    >>>
    >>> rgba = np.random.randint(0, 256, (240, 320, 4), dtype=np.uint8)
    >>> process(rgba, 320, 240, {"scheme": "haar", "levels": 4})

For a live stream, keep one filter around:
    >>> from lumawave import FrameFilter
    >>>
    >>> frame_filter = FrameFilter({"scheme": "linear", "levels": 3, "one_bit": True})
    >>> for rgba in frames:
    ...     frame_filter.process(rgba, 320, 240)
"""

__version__ = "0.1.0"

from lumawave.api import FrameFilter, process
from lumawave.config import FilterConfig, LevelParameters, load_filter_config
from lumawave.errors import ConfigurationError, DimensionMismatch

__all__ = [
    "__version__",
    "ConfigurationError",
    "DimensionMismatch",
    "FilterConfig",
    "FrameFilter",
    "LevelParameters",
    "load_filter_config",
    "process",
]
