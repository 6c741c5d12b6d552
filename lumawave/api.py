"""High-level frame filtering API.

``process()`` filters one RGBA frame in place. ``FrameFilter`` does the same
for a stream of frames, keeping its World (and so its arena) alive between
frames instead of allocating a new one for each.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import numpy as np

from lumawave.components.frame import RGBA
from lumawave.config import FilterConfig, coerce_config
from lumawave.core.arena import Arena
from lumawave.core.pipeline import Pipe
from lumawave.core.world import World
from lumawave.errors import DimensionMismatch
from lumawave.systems.lifting import check_levels
from lumawave.systems.luma import InvertLuma, LumaCodec
from lumawave.systems.shaping import shapers_for
from lumawave.systems.tone import AutoContrast, OneBit
from lumawave.systems.wavelet import WaveletHaar, WaveletLinear

logger = logging.getLogger(__name__)

_WAVELETS = {"haar": WaveletHaar, "linear": WaveletLinear}


def _as_array(color: Any) -> np.ndarray:
    if isinstance(color, (bytearray, memoryview)):
        return np.frombuffer(color, dtype=np.uint8)
    if not isinstance(color, np.ndarray):
        raise TypeError(f"Expected ndarray, bytearray or memoryview, got {type(color)}")
    if color.dtype != np.uint8:
        raise TypeError(f"Expected uint8 color buffer, got {color.dtype}")
    return color


def _frame_view(color: Any, width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    """Validate the caller's buffer.

    Returns:
        (buffer, frame) where ``buffer`` is the caller's memory as an ndarray
        and ``frame`` is its (H, W, 4) reading (a copy if the layout requires)

    Raises:
        DimensionMismatch: If the buffer size disagrees with width and height
    """
    buffer = _as_array(color)
    if width <= 0 or height <= 0:
        raise DimensionMismatch(f"Frame size must be positive, got {width}x{height}")
    expected = width * height * 4
    if buffer.size != expected:
        raise DimensionMismatch(
            f"Color buffer has {buffer.size} bytes, expected {expected} "
            f"for a {width}x{height} RGBA frame"
        )
    if not buffer.flags.writeable:
        raise ValueError("Color buffer is read-only")
    return buffer, buffer.reshape(height, width, 4)


class FrameFilter:
    """Reusable wavelet frame filter for one stream of frames.

    Example:
        >>> frame_filter = FrameFilter({"scheme": "haar", "levels": 3})
        >>> for rgba in frames:
        ...     frame_filter.process(rgba, width, height)

    Attributes:
        config: Filter configuration applied to every frame
    """

    def __init__(self, config: FilterConfig | Mapping[str, Any] | None = None) -> None:
        self.config = coerce_config(config)
        self._world: World | None = None
        self._frame_size: tuple[int, int] | None = None

    def _world_for(self, width: int, height: int) -> World:
        if self._world is None or self._frame_size != (width, height):
            self._world = World(arena_bytes=Arena.frame_bytes(width, height))
            self._frame_size = (width, height)
            logger.debug("allocated frame world for %dx%d: %r", width, height, self._world)
        else:
            self._world.clear()
        return self._world

    def build_pipe(self, world: World, eid: int) -> Pipe:
        """Assemble the stages enabled by the config for one frame entity."""
        cfg = self.config
        pipe: Pipe = world.pipe(eid).to(LumaCodec(mode="decode"))

        if cfg.scheme != "none":
            wavelet = _WAVELETS[cfg.scheme]
            pipe = pipe.to(wavelet(levels=cfg.levels, mode="forward"))
            if cfg.invert_reconstruction:
                pipe = pipe.to(
                    wavelet(
                        levels=cfg.levels,
                        mode="inverse",
                        shapers=shapers_for(cfg),
                        squash=cfg.squash_bias if cfg.squash else None,
                    )
                )

        if cfg.contrast == "histogram":
            pipe = pipe.to(AutoContrast())
        if cfg.invert_luma:
            pipe = pipe.to(InvertLuma())
        if cfg.one_bit:
            pipe = pipe.to(OneBit(bias=cfg.one_bit_bias))

        return pipe.to(LumaCodec(mode="encode"))

    def process(self, color: Any, width: int, height: int) -> dict[str, Any]:
        """Filter one RGBA frame in place.

        Args:
            color: RGBA buffer with ``width * height * 4`` uint8 elements
            width: Frame width in pixels
            height: Frame height in pixels

        Returns:
            Per-frame metadata recorded by the stages (e.g. 'contrast_cutoff')

        Raises:
            DimensionMismatch: If the buffer size disagrees with width and height
            ConfigurationError: If the level count does not fit the frame
        """
        buffer, frame = _frame_view(color, width, height)
        if self.config.scheme != "none":
            check_levels(width, height, self.config.levels)

        world = self._world_for(width, height)
        eid = world.spawn_frame(frame)
        self.build_pipe(world, eid).execute()

        result = world.arena.view(world.get_component(eid, RGBA).pix)
        np.copyto(buffer, result.reshape(buffer.shape))
        logger.debug("filtered %dx%d frame with %s", width, height, self.config.scheme)
        return dict(world.metadata[eid])


def process(
    color: Any,
    width: int,
    height: int,
    config: FilterConfig | Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Run the full frame pipeline in place on an RGBA buffer.

    Decodes luma, applies the configured wavelet transform and its shaped
    inverse, tone maps, and writes the result back as opaque grayscale.

    Args:
        color: RGBA buffer (ndarray, bytearray or memoryview) of
            ``width * height * 4`` bytes, modified in place
        width: Frame width in pixels
        height: Frame height in pixels
        config: FilterConfig or mapping (defaults if None)

    Returns:
        Per-frame metadata recorded by the stages

    Raises:
        ConfigurationError: If the config is invalid or does not fit the frame
        DimensionMismatch: If the buffer size disagrees with width and height

    Example:
        >>> rgba = np.full((64, 64, 4), 100, dtype=np.uint8)
        >>> process(rgba, 64, 64, {"scheme": "haar", "levels": 3})
        {'frame_shape': (64, 64)}
    """
    return FrameFilter(config).process(color, width, height)
