"""Nearest-neighbor resizing for pixel buffers.

Destination pixel (x, y) samples source pixel
``(floor(x * W / new_w), floor(y * H / new_h))``: the image is stretched to
exactly the requested size, so keeping the aspect ratio is up to the caller
(see :func:`target_height`).
"""
from __future__ import annotations

import math

import numpy as np

from ..buffer import PixelBuffer

Array = np.ndarray


def _sample_indices(src: int, dst: int) -> Array:
    # Integer floor(i * src / dst) avoids float rounding at cell edges.
    return (np.arange(dst, dtype=np.int64) * src) // dst


def resize_nearest(buf: PixelBuffer, new_w: int, new_h: int) -> PixelBuffer:
    """Resize a buffer to (new_w, new_h) via nearest-neighbor.

    Parameters
    ----------
    buf : PixelBuffer
        Source image (RGB or RGBA).
    new_w : int
        Target width (>=1).
    new_h : int
        Target height (>=1).

    Returns
    -------
    PixelBuffer
        Resized image. Alpha is resampled like the color channels.
    """
    if not isinstance(buf, PixelBuffer):
        raise TypeError("buf must be a PixelBuffer")
    if new_h < 1 or new_w < 1:
        raise ValueError("new_w and new_h must be >= 1")

    H, W = buf.height, buf.width
    if H == new_h and W == new_w:
        return buf.copy()

    yi = _sample_indices(H, new_h)
    xi = _sample_indices(W, new_w)
    out = buf.data[yi[:, None], xi[None, :], :]
    return PixelBuffer(out.astype(np.uint8))


def resize_nearest_scale(buf: PixelBuffer, scale: float) -> PixelBuffer:
    """Resize a buffer by a float ``scale`` via nearest-neighbor.

    Values >1 upscale, <1 downscale. Output dimensions are rounded and never
    drop below 1.
    """
    if scale <= 0:
        raise ValueError("scale must be > 0")
    new_w = max(1, round_half_up(buf.width * scale))
    new_h = max(1, round_half_up(buf.height * scale))
    return resize_nearest(buf, new_w, new_h)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def target_height(src_w: int, src_h: int, target_w: int) -> int:
    """Height that keeps the source aspect ratio at width ``target_w``."""
    if src_w <= 0 or src_h <= 0:
        raise ValueError("source dimensions must be > 0")
    aspect = src_w / src_h
    return max(1, round_half_up(target_w / aspect))
