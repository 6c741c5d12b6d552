"""ECS components."""

from lumawave.components.frame import RGBA, Component, Luma, WaveletPlane

__all__ = ["Component", "Luma", "RGBA", "WaveletPlane"]
