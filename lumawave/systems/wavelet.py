"""Lifting wavelet systems.

Wraps the in-place transforms of ``lumawave.systems.lifting`` as pipeline
stages. The coefficients overwrite the luma plane, so the forward system only
marks the entity with a WaveletPlane; the inverse system removes the mark
once the plane holds pixels again.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Literal

import numpy as np

from lumawave.components.frame import Luma, WaveletPlane
from lumawave.core.system import System
from lumawave.systems import lifting
from lumawave.systems.shaping import LevelShaper

if TYPE_CHECKING:
    from lumawave.core.world import World


class WaveletHaar(System):
    """Lifting Haar wavelet decomposition.

    Forward mode: Luma → WaveletPlane (coefficients in place)
    Inverse mode: WaveletPlane → Luma (shaped reconstruction)
    """

    scheme: lifting.LiftingScheme = "haar"

    def __init__(
        self,
        levels: int = 6,
        mode: Literal["forward", "inverse"] = "forward",
        shapers: Sequence[LevelShaper] | None = None,
        squash: int | None = None,
    ):
        """Initialize wavelet system.

        Args:
            levels: Number of decomposition levels (1-6)
            mode: 'forward' for decomposition, 'inverse' for reconstruction
            shapers: Per-level reconstruction shaping (inverse only)
            squash: Value forced into the coarsest average band (inverse only)
        """
        super().__init__(mode=mode)
        if not 1 <= levels <= 6:
            raise ValueError(f"levels must be in [1, 6], got {levels}")
        self.levels = levels
        self.shapers = list(shapers or [])
        self.squash = squash

    def required_components(self) -> list[type]:
        if self.mode == "forward":
            return [Luma]
        return [WaveletPlane]

    def produced_components(self) -> list[type]:
        if self.mode == "forward":
            return [WaveletPlane]
        return [Luma]

    def run(self, world: World, eids: list[int]) -> None:
        if self.mode == "forward":
            self._run_forward(world, eids)
        else:
            self._run_inverse(world, eids)

    def _run_forward(self, world: World, eids: list[int]) -> None:
        """Forward decomposition: Luma → WaveletPlane."""
        for eid in eids:
            luma_ref = world.get_component(eid, Luma).pix
            luma = world.arena.view(luma_ref)

            scratch_ref = world.arena.alloc_tensor(luma.shape, np.int32)
            lifting.forward(
                luma, self.levels, self.scheme, scratch=world.arena.view(scratch_ref)
            )

            world.add_component(
                eid,
                WaveletPlane(
                    coeffs=luma_ref,
                    scratch=scratch_ref,
                    scheme=self.scheme,
                    levels=self.levels,
                ),
            )

    def _run_inverse(self, world: World, eids: list[int]) -> None:
        """Inverse reconstruction: WaveletPlane → Luma."""
        for eid in eids:
            plane = world.get_component(eid, WaveletPlane)
            if plane.scheme != self.scheme:
                raise ValueError(
                    f"{type(self).__name__} cannot invert {plane.scheme!r} coefficients"
                )

            lifting.inverse(
                world.arena.view(plane.coeffs),
                plane.levels,
                self.scheme,
                shapers=self.shapers,
                squash=self.squash,
                scratch=world.arena.view(plane.scratch),
            )

            world.remove_component(eid, WaveletPlane)
            world.add_component(eid, Luma(pix=plane.coeffs))


class WaveletLinear(WaveletHaar):
    """Lifting linear (predict/update) wavelet decomposition.

    Forward mode: Luma → WaveletPlane (coefficients in place)
    Inverse mode: WaveletPlane → Luma (shaped reconstruction)
    """

    scheme: lifting.LiftingScheme = "linear"
