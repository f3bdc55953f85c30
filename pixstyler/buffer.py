"""Owned pixel storage shared by every pipeline stage.

A :class:`PixelBuffer` wraps a C-contiguous ``uint8`` NumPy array of shape
(H, W, C) with C = 3 (RGB) or 4 (RGBA). The memory layout is the plain
interleaved one, so the byte for channel ``c`` of pixel (x, y) lives at
``(y * width + x) * channels + c`` in :meth:`PixelBuffer.tobytes`.
"""
from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

Array = np.ndarray
Color = Tuple[int, int, int]


class PixelBuffer:
    """An image owned by whichever pipeline stage is transforming it."""

    __slots__ = ("data",)

    def __init__(self, data: Array) -> None:
        if not isinstance(data, np.ndarray):
            raise TypeError("data must be a NumPy array")
        if data.dtype != np.uint8:
            raise TypeError("data must have dtype=uint8")
        if data.ndim != 3 or data.shape[2] not in (3, 4):
            raise ValueError("data must have shape (H, W, 3) or (H, W, 4)")
        self.data = np.ascontiguousarray(data)

    @classmethod
    def from_bytes(cls, raw: bytes, width: int, height: int, channels: int) -> "PixelBuffer":
        """Build a buffer from interleaved raw bytes."""
        if channels not in (3, 4):
            raise ValueError("channels must be 3 or 4")
        if width < 0 or height < 0:
            raise ValueError("width and height must be >= 0")
        expected = width * height * channels
        if len(raw) != expected:
            raise ValueError(
                f"raw data has {len(raw)} bytes, expected {expected} "
                f"for {width}x{height}x{channels}"
            )
        arr = np.frombuffer(bytes(raw), dtype=np.uint8).reshape(height, width, channels)
        return cls(arr.copy())

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def channels(self) -> int:
        return int(self.data.shape[2])

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    @property
    def rgb(self) -> Array:
        """View of the color channels, shape (H, W, 3)."""
        return self.data[:, :, :3]

    @property
    def alpha(self) -> Optional[Array]:
        """View of the alpha channel, or None for RGB buffers."""
        if not self.has_alpha:
            return None
        return self.data[:, :, 3]

    def offset(self, x: int, y: int) -> int:
        """Linear byte offset of pixel (x, y)."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} buffer")
        return (y * self.width + x) * self.channels

    def get_pixel(self, x: int, y: int) -> Color:
        self.offset(x, y)
        r, g, b = self.data[y, x, :3]
        return int(r), int(g), int(b)

    def set_pixel(self, x: int, y: int, color: Sequence[int]) -> None:
        self.offset(x, y)
        self.data[y, x, :3] = np.clip(np.asarray(color[:3], dtype=np.int64), 0, 255)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.data.copy())

    def with_rgb(self, rgb: Array) -> "PixelBuffer":
        """Return a new buffer with ``rgb`` as color channels and this buffer's alpha."""
        if rgb.shape != (self.height, self.width, 3):
            raise ValueError(
                f"rgb must have shape {(self.height, self.width, 3)}, got {rgb.shape}"
            )
        out = self.data.copy()
        out[:, :, :3] = rgb
        return PixelBuffer(out)

    def tobytes(self) -> bytes:
        return self.data.tobytes()

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height}x{self.channels})"
