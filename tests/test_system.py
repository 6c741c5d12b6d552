"""Tests for System base class."""

import pytest

from lumawave.components.frame import Component
from lumawave.core.system import System
from lumawave.core.world import World


class MockInput(Component):
    """Mock input component."""

    value: int


class MockOutput(Component):
    """Mock output component."""

    result: int


class MockSystem(System):
    """Doubles on forward, halves on inverse."""

    def required_components(self) -> list[type]:
        if self.mode == "forward":
            return [MockInput]
        return [MockOutput]

    def produced_components(self) -> list[type]:
        if self.mode == "forward":
            return [MockOutput]
        return [MockInput]

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            if self.mode == "forward":
                value = world.get_component(eid, MockInput).value
                world.add_component(eid, MockOutput(result=value * 2))
            else:
                result = world.get_component(eid, MockOutput).result
                world.add_component(eid, MockInput(value=result // 2))


class TestSystemBase:
    """Tests for System base class."""

    def test_cannot_instantiate_abstract(self) -> None:
        """Test that System itself is abstract."""
        with pytest.raises(TypeError):
            System()  # type: ignore[abstract]

    def test_default_mode(self) -> None:
        """Test that systems default to forward mode."""
        assert MockSystem().mode == "forward"

    def test_can_run(self) -> None:
        """Test dependency check against entity components."""
        world = World(arena_bytes=1024)
        eid = world.new_entity()
        system = MockSystem(mode="forward")

        assert not system.can_run(world, eid)
        world.add_component(eid, MockInput(value=3))
        assert system.can_run(world, eid)

    def test_forward_then_inverse(self) -> None:
        """Test running both directions."""
        world = World(arena_bytes=1024)
        eid = world.new_entity()
        world.add_component(eid, MockInput(value=3))

        MockSystem(mode="forward").run(world, [eid])
        assert world.get_component(eid, MockOutput).result == 6

        world.remove_component(eid, MockInput)
        MockSystem(mode="inverse").run(world, [eid])
        assert world.get_component(eid, MockInput).value == 3

    def test_repr(self) -> None:
        """Test string representation."""
        assert repr(MockSystem(mode="inverse")) == "MockSystem(mode=inverse)"
