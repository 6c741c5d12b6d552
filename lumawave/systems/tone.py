"""Tone mapping of reconstructed luma planes: auto-contrast and one-bit output."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from lumawave.components.frame import Luma
from lumawave.core.system import System

if TYPE_CHECKING:
    from lumawave.core.world import World

HISTOGRAM_BUCKETS = 128
BUCKET_SHIFT = 1
BUCKET_WIDTH = 1 << BUCKET_SHIFT
# Bucket counts are shifted down so sparse buckets read as empty
COUNT_SHIFT = 4


def _first_peak(counts: list[int]) -> int | None:
    """Index of the first local peak, or None if the counts never fall.

    Equal counts extend the peak; the scan stops at the first strictly
    smaller count.
    """
    best = -1
    peak = None
    for i, count in enumerate(counts):
        if count >= best:
            best = count
            peak = i
        else:
            return peak
    return None


def histogram_cutoff(luma: np.ndarray) -> int:
    """Offset that centers the luma histogram between its outermost peaks.

    Falls back to the midpoint of the sample range when either peak is
    missing or the peaks are out of order.
    """
    buckets = (luma >> BUCKET_SHIFT).ravel()
    hist = np.bincount(buckets, minlength=HISTOGRAM_BUCKETS) >> COUNT_SHIFT
    counts = hist.tolist()

    first = _first_peak(counts)
    last = _first_peak(counts[::-1])
    if last is not None:
        last = HISTOGRAM_BUCKETS - 1 - last

    if first is not None and last is not None and first <= last:
        return 127 - (((first + last) * BUCKET_WIDTH) >> 1)

    lo = int(luma.min())
    hi = int(luma.max())
    return lo + ((hi - lo) >> 1)


def auto_contrast_histogram(luma: np.ndarray) -> int:
    """Add the histogram cutoff to every sample, clamped, in place.

    Returns:
        The cutoff that was applied
    """
    cutoff = histogram_cutoff(luma)
    luma[...] = np.clip(luma.astype(np.int16) + cutoff, 0, 255)
    return cutoff


def one_bit(luma: np.ndarray, bias: int) -> None:
    """Threshold in place: samples below ``bias`` become 0, the rest 255."""
    luma[...] = np.where(luma < bias, 0, 255)


class AutoContrast(System):
    """Histogram-peak auto-contrast (Luma → Luma).

    Stores the applied cutoff in world.metadata[eid]['contrast_cutoff'].
    """

    def required_components(self) -> list[type]:
        return [Luma]

    def produced_components(self) -> list[type]:
        return [Luma]

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            luma = world.arena.view(world.get_component(eid, Luma).pix)
            world.metadata[eid]["contrast_cutoff"] = auto_contrast_histogram(luma)


class OneBit(System):
    """One-bit thresholding (Luma → Luma)."""

    def __init__(self, bias: int = 128) -> None:
        super().__init__(mode="forward")
        if not 0 <= bias <= 255:
            raise ValueError(f"bias must be in [0, 255], got {bias}")
        self.bias = bias

    def required_components(self) -> list[type]:
        return [Luma]

    def produced_components(self) -> list[type]:
        return [Luma]

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            one_bit(world.arena.view(world.get_component(eid, Luma).pix), self.bias)
