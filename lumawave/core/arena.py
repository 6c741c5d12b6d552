"""Frame arena and TensorRef handles.

Every buffer touched while filtering one frame (the RGBA copy of the frame,
the luma plane and the int32 lifting scratch plane) is bump-allocated from a
single contiguous ``bytearray``. Components store TensorRefs, not arrays, and
the arena is reset between frames so the same memory is reused for the whole
stream.

Example:
    >>> arena = Arena(size_bytes=Arena.frame_bytes(320, 240))
    >>> ref = arena.alloc_tensor((240, 320), np.uint8)
    >>> luma = arena.view(ref)
    >>> luma[:] = 128
    >>> arena.reset()  # next frame
    >>> # arena.view(ref)  # Would raise ValueError: stale ref
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

# RGBA copy (4 bytes/pixel) + luma plane (1) + int32 scratch plane (4)
_BYTES_PER_PIXEL = 4 + 1 + 4
# Worst-case alignment padding between the three allocations
_ALIGN_SLACK = 64


@dataclass(frozen=True)
class TensorRef:
    """Handle to a C-contiguous tensor living in an Arena.

    Attributes:
        offset: Byte offset into arena buffer
        shape: Tensor dimensions
        dtype: NumPy data type
        generation: Arena generation the handle was allocated in
    """

    offset: int
    shape: tuple[int, ...]
    dtype: np.dtype[Any]
    generation: int

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValueError(f"offset must be non-negative, got {self.offset}")
        if any(dim < 0 for dim in self.shape):
            raise ValueError(f"shape must be non-negative, got {self.shape}")
        if self.generation < 0:
            raise ValueError(f"generation must be non-negative, got {self.generation}")

    @property
    def ndim(self) -> int:
        """Number of dimensions."""
        return len(self.shape)

    @property
    def size(self) -> int:
        """Total number of elements."""
        return int(np.prod(self.shape))

    @property
    def nbytes(self) -> int:
        """Total number of bytes."""
        return self.size * self.dtype.itemsize


class Arena:
    """Contiguous per-stream allocator, reset once per frame.

    Attributes:
        size: Total arena size in bytes
        offset: Current allocation offset (bump pointer)
        generation: Incremented on reset() to invalidate old TensorRefs
    """

    def __init__(self, size_bytes: int):
        """Create arena with specified size.

        Args:
            size_bytes: Total size in bytes
        """
        if size_bytes <= 0:
            raise ValueError(f"size_bytes must be positive, got {size_bytes}")

        self._buffer = bytearray(size_bytes)
        self._size = size_bytes
        self._offset = 0
        self._generation = 0

    @staticmethod
    def frame_bytes(width: int, height: int) -> int:
        """Arena size needed to filter one ``width`` x ``height`` frame."""
        return width * height * _BYTES_PER_PIXEL + _ALIGN_SLACK

    @property
    def size(self) -> int:
        """Total arena size in bytes."""
        return self._size

    @property
    def offset(self) -> int:
        """Current allocation offset (bytes used)."""
        return self._offset

    @property
    def generation(self) -> int:
        """Current generation counter."""
        return self._generation

    @property
    def available(self) -> int:
        """Remaining bytes available for allocation."""
        return self._size - self._offset

    def reset(self) -> None:
        """Release every allocation. Invalidates all existing TensorRefs."""
        self._offset = 0
        self._generation += 1

    def alloc_tensor(
        self,
        shape: tuple[int, ...],
        dtype: np.dtype[Any] | type | str,
    ) -> TensorRef:
        """Allocate an uninitialized C-contiguous tensor.

        Args:
            shape: Tensor dimensions
            dtype: NumPy data type

        Returns:
            TensorRef handle to the allocated tensor

        Raises:
            ValueError: If allocation would exceed arena size
        """
        dt = np.dtype(dtype)
        nbytes = int(np.prod(shape)) * dt.itemsize

        alignment = dt.alignment
        aligned_offset = (self._offset + alignment - 1) // alignment * alignment

        end_offset = aligned_offset + nbytes
        if end_offset > self._size:
            raise ValueError(
                f"Arena out of memory: need {nbytes} bytes at offset {aligned_offset}, "
                f"but arena size is {self._size} (available: {self.available})"
            )

        ref = TensorRef(
            offset=aligned_offset,
            shape=tuple(shape),
            dtype=dt,
            generation=self._generation,
        )
        self._offset = end_offset
        return ref

    def view(self, ref: TensorRef) -> np.ndarray:
        """Get a writable NumPy view of a TensorRef (zero-copy).

        Raises:
            ValueError: If TensorRef is stale (from previous generation)
        """
        if ref.generation != self._generation:
            raise ValueError(
                f"Stale TensorRef: arena was reset (current generation {self._generation}, "
                f"ref is from generation {ref.generation})"
            )

        end_offset = ref.offset + ref.nbytes
        if end_offset > self._size:
            raise ValueError(
                f"TensorRef out of bounds: offset={ref.offset}, nbytes={ref.nbytes}, "
                f"arena size={self._size}"
            )

        return np.ndarray(
            shape=ref.shape,
            dtype=ref.dtype,
            buffer=self._buffer,
            offset=ref.offset,
        )

    def copy_tensor(self, arr: np.ndarray) -> TensorRef:
        """Allocate a tensor and copy ``arr`` into it."""
        ref = self.alloc_tensor(arr.shape, arr.dtype)
        self.view(ref)[...] = arr
        return ref

    def __repr__(self) -> str:
        return (
            f"Arena(size={self._size}, offset={self._offset}, "
            f"generation={self._generation}, available={self.available})"
        )
