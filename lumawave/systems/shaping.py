"""Reconstruction shaping applied while inverting a lifting transform.

Each level of the inverse transform can:
- gate noise: zero difference samples whose magnitude is below a threshold
- attenuate: right-shift reconstructed samples by a gain
- lift: add ``1 << bias`` to reconstructed samples

Squash is handled by the transform itself: the coarsest average band is
overwritten with a fixed value right before the deepest level is inverted
(see ``lumawave.systems.lifting.inverse``).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from lumawave.config import FilterConfig, LevelParameters


@dataclass(frozen=True)
class LevelShaper:
    """Noise gate, gain and bias for one inverse level.

    Attributes:
        gate: Differences with ``abs(diff) < gate`` are zeroed
        gain: Right shift applied to reconstructed samples (0-7)
        bias: Bias shift, reconstructed samples get ``+ (1 << bias)`` if > 0
    """

    gate: int = 0
    gain: int = 0
    bias: int = 0

    @classmethod
    def from_params(cls, params: LevelParameters) -> LevelShaper:
        return cls(gate=params.noise_gate, gain=params.gain, bias=params.bias)

    @property
    def boost(self) -> int:
        """DC offset added to every reconstructed sample."""
        return (1 << self.bias) if self.bias > 0 else 0

    def gate_diff(self, diff: np.ndarray) -> np.ndarray:
        """Zero sign-extended differences below the gate threshold."""
        if self.gate <= 0:
            return diff
        return np.where(np.abs(diff) < self.gate, 0, diff)

    def shape(self, samples: np.ndarray) -> np.ndarray:
        """Apply gain and bias, then clamp to [0, 255]."""
        out = samples >> self.gain if self.gain else samples
        if self.boost:
            out = out + self.boost
        return np.clip(out, 0, 255)


NEUTRAL = LevelShaper()


def shapers_for(config: FilterConfig) -> list[LevelShaper]:
    """One shaper per configured level, index 0 is level 1."""
    return [LevelShaper.from_params(config.level(n)) for n in range(1, config.levels + 1)]
