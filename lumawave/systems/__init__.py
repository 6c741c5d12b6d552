"""Frame-filter systems."""

from lumawave.systems.luma import InvertLuma, LumaCodec
from lumawave.systems.tone import AutoContrast, OneBit
from lumawave.systems.wavelet import WaveletHaar, WaveletLinear

__all__ = [
    "AutoContrast",
    "InvertLuma",
    "LumaCodec",
    "OneBit",
    "WaveletHaar",
    "WaveletLinear",
]
