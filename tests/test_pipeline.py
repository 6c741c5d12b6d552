"""Tests for the fluent Pipe."""

import numpy as np
import pytest

from lumawave.components.frame import Luma, WaveletPlane
from lumawave.core.arena import Arena
from lumawave.core.pipeline import Pipe
from lumawave.core.world import World
from lumawave.systems.luma import InvertLuma, LumaCodec
from lumawave.systems.wavelet import WaveletHaar


def _world_with_frame(value: int = 100, size: int = 8) -> tuple[World, int]:
    world = World(arena_bytes=Arena.frame_bytes(size, size))
    frame = np.full((size, size, 4), value, dtype=np.uint8)
    return world, world.spawn_frame(frame)


class TestPipeBasics:
    """Test basic Pipe construction and chaining."""

    def test_pipe_creation(self) -> None:
        """Test creating a pipe."""
        world, eid = _world_with_frame()
        pipe = world.pipe(eid)

        assert isinstance(pipe, Pipe)
        assert pipe.entities == [eid]
        assert pipe.systems == []

    def test_pipe_to_chaining(self) -> None:
        """Test .to() method chains systems."""
        world, eid = _world_with_frame()
        decode = LumaCodec(mode="decode")

        pipe = world.pipe(eid).to(decode)

        assert pipe.systems == [decode]

    def test_pipe_or_operator(self) -> None:
        """Test | operator for chaining."""
        world, eid = _world_with_frame()
        decode = LumaCodec(mode="decode")
        invert = InvertLuma()

        pipe = world.pipe(eid) | decode | invert

        assert pipe.systems == [decode, invert]


class TestPipeExecution:
    """Test pipeline execution."""

    def test_out_returns_component(self) -> None:
        """Test that out() executes and returns the requested component."""
        world, eid = _world_with_frame(value=100)

        luma = (
            world.pipe(eid)
            .to(LumaCodec(mode="decode"))
            .to(InvertLuma())
            .out(Luma)
        )

        assert np.all(world.arena.view(luma.pix) == 155)

    def test_systems_run_in_order(self) -> None:
        """Test that inverting twice restores the plane."""
        world, eid = _world_with_frame(value=100)

        luma = (
            world.pipe(eid)
            | LumaCodec(mode="decode")
            | InvertLuma()
            | InvertLuma()
        ).out(Luma)

        assert np.all(world.arena.view(luma.pix) == 100)

    def test_missing_dependency_raises(self) -> None:
        """Test that a stage without its inputs fails with RuntimeError."""
        world, eid = _world_with_frame()
        pipe = world.pipe(eid).to(WaveletHaar(levels=1, mode="inverse"))

        with pytest.raises(RuntimeError, match="WaveletHaar cannot run"):
            pipe.execute()

    def test_out_missing_component_raises(self) -> None:
        """Test that out() raises KeyError for a component never produced."""
        world, eid = _world_with_frame()

        with pytest.raises(KeyError):
            world.pipe(eid).to(LumaCodec(mode="decode")).out(WaveletPlane)
