"""Palette quantization and a unified entry-point for applying it.

Exported API
------------
- nearest_palette_index(rgb, palette)
- quantize_palette(buf, palette, dithering=False)
- quantize_standard(buf, color_count, dithering)

Modes
-----
- custom palette : every pixel takes its nearest palette color (Euclidean
  RGB distance, ties to the lowest palette index), optionally with
  Floyd–Steinberg error diffusion.
- standard       : Pillow's median-cut quantizer picks the palette itself.

Implementation notes
--------------------
All quantizers operate on NumPy arrays and copy alpha unchanged.
"""
from __future__ import annotations

import numpy as np

from ..buffer import PixelBuffer
from .floyd import dither_floyd
from .standard import quantize_standard

Array = np.ndarray


def nearest_palette_index(rgb: Array, palette: Array) -> Array:
    """Index of the nearest palette color for every pixel.

    Squared distances are computed exactly in integers, so ties are real
    ties and ``argmin`` resolves them to the lowest palette index.

    Parameters
    ----------
    rgb : np.ndarray
        Colors of shape (..., 3).
    palette : np.ndarray
        Palette of shape (K, 3), K >= 1.

    Returns
    -------
    np.ndarray
        Indices with shape ``rgb.shape[:-1]``, dtype=int64.
    """
    pal = np.asarray(palette, dtype=np.int64)
    if pal.ndim != 2 or pal.shape[1] != 3 or len(pal) == 0:
        raise ValueError("palette must be a non-empty array with shape (K, 3)")
    flat = np.asarray(rgb, dtype=np.int64).reshape(-1, 3)
    # |p - c|^2 = |p|^2 - 2 p.c + |c|^2 ; |p|^2 is constant per row.
    d = (pal * pal).sum(axis=1)[None, :] - 2 * (flat @ pal.T)
    idx = np.argmin(d, axis=1)
    return idx.reshape(np.shape(rgb)[:-1])


def quantize_palette(buf: PixelBuffer, palette: Array, dithering: bool = False) -> PixelBuffer:
    """Map every pixel of ``buf`` onto ``palette``.

    Parameters
    ----------
    buf : PixelBuffer
        Input image.
    palette : np.ndarray
        Target palette (K, 3), K >= 1.
    dithering : bool
        Diffuse quantization error with Floyd–Steinberg weights.

    Returns
    -------
    PixelBuffer
        Quantized image; alpha copied from the input.
    """
    pal = np.asarray(palette, dtype=np.uint8)
    if pal.ndim != 2 or pal.shape[1] != 3 or len(pal) == 0:
        raise ValueError("palette must be a non-empty array with shape (K, 3)")
    if dithering:
        idx = dither_floyd(buf.rgb, pal)
    else:
        idx = nearest_palette_index(buf.rgb, pal)
    return buf.with_rgb(pal[idx])


__all__ = ["nearest_palette_index", "quantize_palette", "quantize_standard", "dither_floyd"]
