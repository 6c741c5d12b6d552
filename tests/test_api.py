"""Tests for the high-level frame API."""

import numpy as np
import pytest

from lumawave.api import FrameFilter, process
from lumawave.config import FilterConfig
from lumawave.core.world import World
from lumawave.errors import ConfigurationError, DimensionMismatch


def _gray(value: int, size: int = 16) -> np.ndarray:
    return np.full((size, size, 4), value, dtype=np.uint8)


class TestProcessBasics:
    """Test basic in-place filtering."""

    def test_flat_frame_survives(self) -> None:
        """Test that a flat frame reconstructs to itself."""
        rgba = _gray(100)
        process(rgba, 16, 16, {"scheme": "haar", "levels": 1})

        assert np.all(rgba[..., :3] == 100)
        assert np.all(rgba[..., 3] == 255)

    def test_default_config(self) -> None:
        """Test the six-level Haar default on a frame that allows it."""
        rgba = _gray(80, size=64)
        process(rgba, 64, 64)
        assert np.all(rgba[..., :3] == 80)

    def test_color_becomes_gray(self) -> None:
        """Test that RGB channels are replaced with luma."""
        rgba = np.zeros((16, 16, 4), dtype=np.uint8)
        rgba[..., 0] = 200
        rgba[..., 1] = 100
        process(rgba, 16, 16, {"scheme": "none"})

        # (3 * 200 + 4 * 100 + 0) >> 3
        assert np.all(rgba[..., :3] == 125)
        assert np.all(rgba[..., 3] == 255)

    def test_invert_luma(self) -> None:
        rgba = _gray(100)
        process(rgba, 16, 16, {"levels": 1, "invert_luma": True})
        assert np.all(rgba[..., :3] == 155)

    def test_one_bit(self) -> None:
        rgba = _gray(100)
        process(rgba, 16, 16, {"levels": 1, "one_bit": True, "one_bit_bias": 120})
        assert np.all(rgba[..., :3] == 0)

    def test_squash(self) -> None:
        """Test that squash moves a flat frame to the squash value."""
        rgba = _gray(30)
        process(rgba, 16, 16, {"scheme": "linear", "levels": 2, "squash": True, "squash_bias": 128})
        assert np.all(rgba[..., :3] == 128)

    def test_coefficient_view(self) -> None:
        """Test that disabling reconstruction shows the coefficient plane."""
        rgba = _gray(100)
        process(rgba, 16, 16, {"levels": 1, "invert_reconstruction": False})

        assert np.all(rgba[:8, :8, :3] == 100)
        assert np.all(rgba[8:, :, :3] == 0)
        assert np.all(rgba[:, 8:, :3] == 0)

    def test_accepts_filter_config(self) -> None:
        rgba = _gray(100)
        process(rgba, 16, 16, FilterConfig(levels=2, invert_luma=True))
        assert np.all(rgba[..., :3] == 155)

    def test_returns_metadata(self) -> None:
        """Test that stage results are reported back."""
        rgba = _gray(100)
        meta = process(rgba, 16, 16, {"levels": 1, "contrast": "histogram"})

        assert meta["contrast_cutoff"] == 27
        assert meta["frame_shape"] == (16, 16)
        assert np.all(rgba[..., :3] == 127)


class TestBuffers:
    """Test the accepted buffer types."""

    def test_flat_ndarray(self) -> None:
        rgba = np.full(16 * 16 * 4, 60, dtype=np.uint8)
        process(rgba, 16, 16, {"levels": 2})
        assert np.all(rgba[0::4] == 60)
        assert np.all(rgba[3::4] == 255)

    def test_bytearray(self) -> None:
        """Test in-place filtering of a bytearray."""
        buf = bytearray(b"\x40" * (16 * 16 * 4))
        process(buf, 16, 16, {"levels": 1})

        assert buf[0:4] == bytearray([64, 64, 64, 255])
        assert buf[-4:] == bytearray([64, 64, 64, 255])

    def test_read_only_buffer(self) -> None:
        with pytest.raises(ValueError, match="read-only"):
            process(memoryview(bytes(16 * 16 * 4)), 16, 16)

    def test_wrong_dtype(self) -> None:
        with pytest.raises(TypeError, match="uint8"):
            process(np.zeros((16, 16, 4), dtype=np.float32), 16, 16)

    def test_wrong_type(self) -> None:
        with pytest.raises(TypeError):
            process([0] * (16 * 16 * 4), 16, 16)


class TestErrors:
    """Test error handling."""

    def test_dimension_mismatch(self) -> None:
        rgba = _gray(100)
        with pytest.raises(DimensionMismatch, match="expected 1600"):
            process(rgba, 20, 20)

    def test_non_positive_size(self) -> None:
        with pytest.raises(DimensionMismatch, match="must be positive"):
            process(np.zeros(0, dtype=np.uint8), 0, 16)

    def test_levels_too_deep(self) -> None:
        """Test that an impossible level count leaves the buffer untouched."""
        rgba = np.random.default_rng(0).integers(0, 256, (16, 16, 4), dtype=np.uint8)
        before = rgba.copy()

        with pytest.raises(ConfigurationError):
            process(rgba, 16, 16, {"levels": 5})

        np.testing.assert_array_equal(rgba, before)

    def test_levels_ignored_without_wavelet(self) -> None:
        """Test that scheme 'none' accepts any frame size."""
        rgba = _gray(90, size=6)
        process(rgba, 6, 6, {"scheme": "none", "levels": 6})
        assert np.all(rgba[..., :3] == 90)

    def test_unknown_scheme(self) -> None:
        with pytest.raises(ConfigurationError):
            process(_gray(100), 16, 16, {"scheme": "daubechies4"})


class TestFrameFilter:
    """Test the reusable filter."""

    def test_reuses_world(self) -> None:
        """Test that same-size frames share one World."""
        frame_filter = FrameFilter({"levels": 2})
        frame_filter.process(_gray(10), 16, 16)
        world = frame_filter._world

        second = _gray(200)
        frame_filter.process(second, 16, 16)

        assert frame_filter._world is world
        assert np.all(second[..., :3] == 200)

    def test_resize(self) -> None:
        """Test that a new frame size gets a new World."""
        frame_filter = FrameFilter({"levels": 2})
        frame_filter.process(_gray(10), 16, 16)
        world = frame_filter._world

        bigger = _gray(50, size=32)
        frame_filter.process(bigger, 32, 32)

        assert frame_filter._world is not world
        assert np.all(bigger[..., :3] == 50)

    def test_many_frames(self) -> None:
        """Test that the arena is reset between frames."""
        frame_filter = FrameFilter({"scheme": "linear", "levels": 3})
        for value in range(0, 250, 25):
            rgba = _gray(value)
            frame_filter.process(rgba, 16, 16)
            assert np.all(rgba[..., :3] == value)

    def test_build_pipe_stages(self) -> None:
        """Test that only enabled stages are scheduled."""
        frame_filter = FrameFilter(
            {"levels": 1, "contrast": "histogram", "invert_luma": True, "one_bit": True}
        )

        world = World()
        eid = world.spawn_frame(_gray(0, size=4))
        names = [type(s).__name__ for s in frame_filter.build_pipe(world, eid).systems]

        assert names == [
            "LumaCodec",
            "WaveletHaar",
            "WaveletHaar",
            "AutoContrast",
            "InvertLuma",
            "OneBit",
            "LumaCodec",
        ]
