"""Luma codec: RGBA frames to 8-bit intensity planes and back.

Luma uses an integer approximation of Rec. 601,
``Y' = (3*R' + 4*G' + B') >> 3``. The exact weights would be
``(3*R' + 5*G' + B') / 9``; rounding the green weight down to 4 makes the
divisor a power of two. The largest sum is ``8 * 255``, so the intermediate
needs 16 bits and the result always fits in 8.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

import numpy as np

from lumawave.components.frame import RGBA, Luma
from lumawave.core.system import System

if TYPE_CHECKING:
    from lumawave.core.world import World


def decode_luma(rgba: np.ndarray, out: np.ndarray | None = None) -> np.ndarray:
    """Convert an (H, W, 4) RGBA frame into an (H, W) uint8 luma plane.

    Args:
        rgba: Frame array, alpha is ignored
        out: Optional (H, W) uint8 destination

    Returns:
        The luma plane (``out`` when given)
    """
    px = rgba.astype(np.uint16)
    y = (3 * px[..., 0] + 4 * px[..., 1] + px[..., 2]) >> 3
    if out is None:
        return y.astype(np.uint8)
    out[...] = y
    return out


def encode_luma(luma: np.ndarray, rgba: np.ndarray) -> None:
    """Write a luma plane into an RGBA frame as opaque grayscale, in place."""
    rgba[..., :3] = luma[..., np.newaxis]
    rgba[..., 3] = 255


def invert_luma(luma: np.ndarray) -> None:
    """Invert brightness in place."""
    np.subtract(255, luma, out=luma)


class LumaCodec(System):
    """Move a frame between its RGBA and luma representations.

    Decode mode: RGBA → Luma (allocates the plane in the arena)
    Encode mode: Luma → RGBA (overwrites the RGBA pixels in place)
    """

    def __init__(self, mode: Literal["decode", "encode"] = "decode") -> None:
        super().__init__(mode=mode)

    def required_components(self) -> list[type]:
        if self.mode == "decode":
            return [RGBA]
        return [Luma, RGBA]

    def produced_components(self) -> list[type]:
        if self.mode == "decode":
            return [Luma]
        return [RGBA]

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            rgba = world.arena.view(world.get_component(eid, RGBA).pix)
            if self.mode == "decode":
                luma_ref = world.arena.alloc_tensor(rgba.shape[:2], np.uint8)
                decode_luma(rgba, out=world.arena.view(luma_ref))
                world.add_component(eid, Luma(pix=luma_ref))
            else:
                luma = world.arena.view(world.get_component(eid, Luma).pix)
                encode_luma(luma, rgba)


class InvertLuma(System):
    """Invert the brightness of the luma plane (Luma → Luma)."""

    def required_components(self) -> list[type]:
        return [Luma]

    def produced_components(self) -> list[type]:
        return [Luma]

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            invert_luma(world.arena.view(world.get_component(eid, Luma).pix))
