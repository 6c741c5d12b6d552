"""System base class for frame-filter stages.

Systems are the "logic" layer of the ECS architecture. They read the
components they require from an entity and attach the components they
produce. Transforms that have two directions select one with ``mode``:

- 'decode' / 'forward': towards the coefficient domain
- 'encode' / 'inverse': back towards displayable pixels

Example:
    >>> class Threshold(System):
    ...     def required_components(self):
    ...         return [Luma]
    ...     def produced_components(self):
    ...         return [Luma]
    ...     def run(self, world, eids):
    ...         for eid in eids:
    ...             luma = world.arena.view(world.get_component(eid, Luma).pix)
    ...             luma[luma < 128] = 0
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal

from lumawave.core.world import World


class System(ABC):
    """Base class for all pipeline stages.

    Attributes:
        mode: Transformation direction
    """

    def __init__(
        self,
        mode: Literal["encode", "decode", "forward", "inverse"] = "forward",
    ) -> None:
        self.mode = mode

    @abstractmethod
    def required_components(self) -> list[type]:
        """Return list of component types this system requires as input."""

    @abstractmethod
    def produced_components(self) -> list[type]:
        """Return list of component types this system produces as output."""

    @abstractmethod
    def run(self, world: World, eids: list[int]) -> None:
        """Execute system on given entities.

        Args:
            world: World instance with entities and components
            eids: List of entity IDs to process
        """

    def can_run(self, world: World, eid: int) -> bool:
        """Check if entity has all required components."""
        return all(world.has_component(eid, ct) for ct in self.required_components())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(mode={self.mode})"
