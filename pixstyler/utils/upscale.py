"""Nearest-neighbor magnification back to display size."""
from __future__ import annotations

import numpy as np

from ..buffer import PixelBuffer
from .resize import resize_nearest_scale


def upscale_nearest(buf: PixelBuffer, scale: float) -> PixelBuffer:
    """Magnify a buffer by ``scale`` using nearest-neighbor sampling.

    The output is ``(round(W * scale), round(H * scale))``; destination pixel
    (x, y) copies source pixel ``(floor(x / sx), floor(y / sy))`` where
    sx, sy are the effective per-axis factors. Integer factors take the
    block-repeat fast path, which yields the same pixels.

    Parameters
    ----------
    buf : PixelBuffer
        Small image to magnify.
    scale : float
        Magnification factor (>0). Need not be an integer.

    Returns
    -------
    PixelBuffer
        Upscaled image.
    """
    if not isinstance(buf, PixelBuffer):
        raise TypeError("buf must be a PixelBuffer")
    if scale <= 0:
        raise ValueError("scale must be > 0")
    if scale == 1:
        return buf.copy()

    if float(scale).is_integer():
        factor = int(scale)
        up = np.repeat(np.repeat(buf.data, factor, axis=0), factor, axis=1)
        return PixelBuffer(up.astype(np.uint8))

    return resize_nearest_scale(buf, scale)
