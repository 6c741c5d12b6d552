"""In-place lifting-scheme wavelet transforms on 8-bit luma planes.

Two schemes, after Sweldens & Schröder, "Building Your Own Wavelets at Home":

- Haar (section 1.3): each sample pair becomes an (average, half-difference)
  pair. Math is done on samples scaled up by 4 so the halving keeps two
  fractional bits until the result is stored.
- Linear (section 1.5): odd samples are replaced by their residual against a
  linear prediction from the neighbouring even samples, then even samples
  are updated with the residuals to preserve the running average.

Level 1 transforms the whole plane, level 2 only the top-left quadrant
(the average band of level 1), and so on. Forward levels run rows then
columns; inverse levels run columns then rows.

Difference bands are signed, but they are stored in the uint8 plane as
two's-complement bytes and sign-extended when read back. Haar stores a
half-scale difference (doubled again on inverse), Linear a full-scale
residual clamped to [-128, 127].

All axis helpers below work on a 2-D int32 array of shape ``(lines, n)``
and transform every line along its last axis in place. Column passes are
run on the transposed view.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Literal

import numpy as np

from lumawave.errors import ConfigurationError
from lumawave.systems.shaping import NEUTRAL, LevelShaper

LiftingScheme = Literal["haar", "linear"]


def sign_extend(values: np.ndarray) -> np.ndarray:
    """Interpret 8-bit cells as two's-complement signed values."""
    return (values.astype(np.int32) ^ 0x80) - 0x80


def check_levels(width: int, height: int, levels: int) -> None:
    """Reject level counts the plane cannot be decomposed into.

    Every processed level halves both axes, so both dimensions must be
    divisible by ``2 ** levels``.

    Raises:
        ConfigurationError: If the subregion would become odd or empty
    """
    if levels < 1:
        raise ConfigurationError(f"levels must be at least 1, got {levels}")
    step = 1 << levels
    if width <= 0 or height <= 0 or width % step or height % step:
        raise ConfigurationError(
            f"{width}x{height} frame cannot be decomposed into {levels} levels: "
            f"both dimensions must be divisible by {step}"
        )


# -- Haar ----------------------------------------------------------------------


def haar_forward_axis(lines: np.ndarray) -> None:
    """Replace (a, b) pairs with averages (first half) and differences (second half)."""
    half = lines.shape[1] >> 1
    a = lines[:, 0::2] << 2
    b = lines[:, 1::2] << 2
    diff = (b - a) >> 1  # d/2 = (b - a)/2
    avg = a + diff  # s = a + d/2
    lines[:, :half] = (avg >> 2) & 0xFF
    lines[:, half:] = (diff >> 2) & 0xFF


def haar_inverse_axis(
    lines: np.ndarray,
    shaper: LevelShaper = NEUTRAL,
    squash_lines: int = 0,
    squash_value: int = 0,
) -> None:
    """Rebuild (a, b) pairs from averages and differences.

    The first ``squash_lines`` lines have their averages forced to
    ``squash_value`` before reconstruction.
    """
    half = lines.shape[1] >> 1
    avg = lines[:, :half].copy()
    if squash_lines:
        avg[:squash_lines] = squash_value
    diff = shaper.gate_diff(sign_extend(lines[:, half:]))
    a = avg - diff
    b = (diff << 1) + a
    lines[:, 0::2] = shaper.shape(a)
    lines[:, 1::2] = shaper.shape(b)


# -- Linear --------------------------------------------------------------------


def _predict(even: np.ndarray) -> np.ndarray:
    # The last odd sample has only one even neighbour; it is used twice.
    following = np.concatenate((even[:, 1:], even[:, -1:]), axis=1)
    return (even + following) >> 1


def _update(diff: np.ndarray) -> np.ndarray:
    # The first even sample has only one odd neighbour; it is used twice.
    preceding = np.concatenate((diff[:, :1], diff[:, :-1]), axis=1)
    return (preceding + diff) >> 5


def linear_forward_axis(lines: np.ndarray) -> None:
    """Predict odd samples, update even samples, then de-interleave."""
    half = lines.shape[1] >> 1
    even = lines[:, 0::2].copy()
    diff = np.clip(lines[:, 1::2] - _predict(even), -128, 127)
    even = np.clip(even + _update(diff), 0, 255)
    lines[:, :half] = even
    lines[:, half:] = diff & 0xFF


def linear_inverse_axis(
    lines: np.ndarray,
    shaper: LevelShaper = NEUTRAL,
    squash_lines: int = 0,
    squash_value: int = 0,
) -> None:
    """Re-interleave, undo the update step, then undo the prediction.

    The update is undone with the stored residuals so the even samples are
    recovered exactly; the noise gate only affects the rebuilt odd samples.
    """
    half = lines.shape[1] >> 1
    even = lines[:, :half].copy()
    if squash_lines:
        even[:squash_lines] = squash_value
    stored = sign_extend(lines[:, half:])
    even = np.clip(even - _update(stored), 0, 255)
    odd = np.clip(shaper.gate_diff(stored) + _predict(even), 0, 255)
    lines[:, 0::2] = shaper.shape(even)
    lines[:, 1::2] = shaper.shape(odd)


_FORWARD = {"haar": haar_forward_axis, "linear": linear_forward_axis}
_INVERSE = {"haar": haar_inverse_axis, "linear": linear_inverse_axis}


def _work_plane(luma: np.ndarray, scratch: np.ndarray | None) -> np.ndarray:
    if scratch is None:
        return luma.astype(np.int32)
    if scratch.shape != luma.shape or scratch.dtype != np.int32:
        raise ValueError(
            f"scratch must be int32 with shape {luma.shape}, "
            f"got {scratch.dtype} {scratch.shape}"
        )
    scratch[...] = luma
    return scratch


def _lookup(table: dict[str, Callable[..., None]], scheme: str) -> Callable[..., None]:
    try:
        return table[scheme]
    except KeyError as e:
        raise ConfigurationError(f"Unknown lifting scheme {scheme!r}") from e


def forward(
    luma: np.ndarray,
    levels: int,
    scheme: LiftingScheme,
    scratch: np.ndarray | None = None,
) -> None:
    """Multi-level forward transform of an (H, W) uint8 plane, in place.

    Args:
        luma: Intensity plane, overwritten with coefficients
        levels: Number of decomposition levels
        scheme: 'haar' or 'linear'
        scratch: Optional (H, W) int32 work plane owned by the caller

    Raises:
        ConfigurationError: If the level count or scheme is invalid
    """
    axis = _lookup(_FORWARD, scheme)
    h, w = luma.shape
    check_levels(w, h, levels)
    work = _work_plane(luma, scratch)

    for level in range(1, levels + 1):
        region = work[: h >> (level - 1), : w >> (level - 1)]
        axis(region)
        axis(region.T)

    luma[...] = work


def inverse(
    luma: np.ndarray,
    levels: int,
    scheme: LiftingScheme,
    shapers: Sequence[LevelShaper] | None = None,
    squash: int | None = None,
    scratch: np.ndarray | None = None,
) -> None:
    """Multi-level inverse transform of a coefficient plane, in place.

    Args:
        luma: Coefficient plane produced by ``forward``, overwritten with pixels
        levels: Number of decomposition levels
        scheme: 'haar' or 'linear'
        shapers: Per-level shaping, index 0 is level 1 (neutral if missing)
        squash: If set, the coarsest average band is forced to this value
        scratch: Optional (H, W) int32 work plane owned by the caller

    Raises:
        ConfigurationError: If the level count or scheme is invalid
    """
    axis = _lookup(_INVERSE, scheme)
    h, w = luma.shape
    check_levels(w, h, levels)
    shapers = list(shapers or [])
    work = _work_plane(luma, scratch)

    for level in range(levels, 0, -1):
        rows, cols = h >> (level - 1), w >> (level - 1)
        region = work[:rows, :cols]
        shaper = shapers[level - 1] if level <= len(shapers) else NEUTRAL
        if squash is not None and level == levels:
            # Columns left of cols/2 carry the horizontal averages, so their
            # average halves together form the coarsest band.
            axis(region.T, shaper, cols >> 1, squash)
        else:
            axis(region.T, shaper)
        axis(region, shaper)

    luma[...] = work
