"""Frame components: RGBA, Luma, WaveletPlane."""

from typing import Literal

from pydantic import BaseModel, Field

from lumawave.core.arena import TensorRef


class Component(BaseModel):
    """Base class for all ECS components.

    Components are data containers using Pydantic for validation. Pixel data
    is never stored directly; components hold TensorRef handles into the
    frame arena.
    """

    model_config = {"arbitrary_types_allowed": True}


class RGBA(Component):
    """Interleaved 4-channel frame.

    Attributes:
        pix: TensorRef to pixel data (H, W, 4) uint8
    """

    pix: TensorRef


class Luma(Component):
    """Single-channel 8-bit intensity plane.

    Attributes:
        pix: TensorRef to intensity data (H, W) uint8
    """

    pix: TensorRef


class WaveletPlane(Component):
    """Marks a luma plane that currently holds lifting coefficients.

    The coefficients are stored in place of the intensity samples, so
    ``coeffs`` points at the same memory as the entity's Luma component.
    Difference bands are signed values packed into uint8 cells.

    Attributes:
        coeffs: TensorRef to the coefficient plane (H, W) uint8
        scratch: TensorRef to the int32 work plane (H, W) used by the transform
        scheme: Lifting scheme that produced the coefficients
        levels: Number of decomposition levels
    """

    coeffs: TensorRef
    scratch: TensorRef
    scheme: Literal["haar", "linear"]
    levels: int = Field(ge=1, le=6)
