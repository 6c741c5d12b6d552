"""World: Entity-Component-System manager for one frame stream.

The World is the registry a frame filter works against:
- Entity creation (integer IDs)
- Component storage (type -> entity -> component mapping)
- Component queries (find entities with specific component combinations)
- Arena memory management (one arena, reset between frames)

Example:
    >>> world = World(arena_bytes=Arena.frame_bytes(64, 64))
    >>> eid = world.spawn_frame(np.zeros((64, 64, 4), dtype=np.uint8))
    >>> world.has_component(eid, RGBA)
    True
    >>> world.clear()  # Reset for next frame
"""

from __future__ import annotations

from typing import Any, TypeVar

import numpy as np
from pydantic import BaseModel

from lumawave.core.arena import Arena

Component = BaseModel

T = TypeVar("T", bound=Component)


class World:
    """Central ECS registry managing entities, components, and memory.

    Attributes:
        arena: Memory arena for frame buffers
        metadata: Per-entity metadata dict (frame shape, stage results)
    """

    def __init__(self, arena_bytes: int = 16 << 20):
        """Create World with specified arena size.

        Args:
            arena_bytes: Arena size in bytes (default 16 MB)
        """
        self.arena = Arena(size_bytes=arena_bytes)
        self._next_eid = 0
        self._components: dict[type[Component], dict[int, Component]] = {}
        self.metadata: dict[int, dict[str, Any]] = {}

    def new_entity(self) -> int:
        """Create a new entity and return its ID."""
        eid = self._next_eid
        self._next_eid += 1
        self.metadata[eid] = {}
        return eid

    def spawn_frame(self, rgba: np.ndarray) -> int:
        """Copy an RGBA frame into the arena and attach it to a new entity.

        Args:
            rgba: Frame array (H, W, 4) uint8

        Returns:
            Entity ID with RGBA component attached

        Raises:
            ValueError: If frame shape or dtype is invalid
        """
        from lumawave.components.frame import RGBA

        if rgba.ndim != 3 or rgba.shape[2] != 4:
            raise ValueError(f"Expected frame with shape (H, W, 4), got {rgba.shape}")
        if rgba.dtype != np.uint8:
            raise ValueError(f"Expected dtype uint8, got {rgba.dtype}")

        eid = self.new_entity()
        pix_ref = self.arena.copy_tensor(rgba)
        self.add_component(eid, RGBA(pix=pix_ref))

        self.metadata[eid]["frame_shape"] = rgba.shape[:2]
        return eid

    def clear(self) -> None:
        """Reset arena and drop all entities/components before the next frame.

        After clear(), all TensorRefs from previous entities are invalidated.
        """
        self.arena.reset()
        self._next_eid = 0
        self._components.clear()
        self.metadata.clear()

    def add_component(self, eid: int, component: Component) -> None:
        """Attach a component to an entity, replacing one of the same type.

        Raises:
            ValueError: If entity does not exist
        """
        if eid not in self.metadata:
            raise ValueError(f"Entity {eid} does not exist")

        self._components.setdefault(type(component), {})[eid] = component

    def get_component(self, eid: int, comp_type: type[T]) -> T:
        """Retrieve a component from an entity.

        Raises:
            KeyError: If entity does not have the component
        """
        if comp_type not in self._components:
            raise KeyError(f"No entities have component type {comp_type.__name__}")
        if eid not in self._components[comp_type]:
            raise KeyError(f"Entity {eid} does not have component {comp_type.__name__}")

        return self._components[comp_type][eid]  # type: ignore

    def has_component(self, eid: int, comp_type: type[Component]) -> bool:
        """Check if entity has a specific component type."""
        return (
            comp_type in self._components
            and eid in self._components[comp_type]
        )

    def remove_component(self, eid: int, comp_type: type[Component]) -> None:
        """Remove a component from an entity.

        Raises:
            KeyError: If entity does not have the component
        """
        if not self.has_component(eid, comp_type):
            raise KeyError(f"Entity {eid} does not have component {comp_type.__name__}")

        del self._components[comp_type][eid]

    def query(self, *comp_types: type[Component]) -> list[int]:
        """Query entities that have ALL specified component types.

        Example:
            >>> eids = world.query(Luma, WaveletPlane)  # frames mid-transform
        """
        if not comp_types:
            return list(self.metadata.keys())

        result_set = set(self._components.get(comp_types[0], {}).keys())
        for comp_type in comp_types[1:]:
            if comp_type not in self._components:
                return []
            result_set &= set(self._components[comp_type].keys())

        return sorted(result_set)

    def pipe(self, entity: int) -> Any:
        """Create a fluent pipeline for the given entity.

        Example:
            >>> (
            ...     world.pipe(entity)
            ...     .to(LumaCodec(mode="decode"))
            ...     .to(WaveletHaar(levels=3, mode="forward"))
            ...     .execute()
            ... )
        """
        from lumawave.core.pipeline import Pipe

        return Pipe(world=self, entity=entity)

    def __repr__(self) -> str:
        num_entities = len(self.metadata)
        num_comp_types = len(self._components)
        return (
            f"World(entities={num_entities}, component_types={num_comp_types}, "
            f"arena={self.arena})"
        )
