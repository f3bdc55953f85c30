"""Floyd–Steinberg error diffusion against an arbitrary palette.

The scan is strictly raster order (left to right, top to bottom, no
serpentine): each pixel's value depends on error diffused from every pixel
processed before it, so the loop runs sequentially in a Numba kernel.
"""
from __future__ import annotations

import numpy as np
from numba import njit

Array = np.ndarray


@njit(cache=True)
def _diffuse(work, y, x, er, eg, eb, factor):
    H, W, _ = work.shape
    if x < 0 or y < 0 or x >= W or y >= H:
        return
    v = work[y, x, 0] + er * factor
    work[y, x, 0] = min(255.0, max(0.0, v))
    v = work[y, x, 1] + eg * factor
    work[y, x, 1] = min(255.0, max(0.0, v))
    v = work[y, x, 2] + eb * factor
    work[y, x, 2] = min(255.0, max(0.0, v))


@njit(cache=True)
def _floyd_impl(work, palette, out_idx):
    H, W, _ = work.shape
    K = palette.shape[0]
    for y in range(H):
        for x in range(W):
            r = work[y, x, 0]
            g = work[y, x, 1]
            b = work[y, x, 2]

            best = 0
            best_d = np.inf
            for i in range(K):
                dr = r - palette[i, 0]
                dg = g - palette[i, 1]
                db = b - palette[i, 2]
                d = dr * dr + dg * dg + db * db
                if d < best_d:
                    best_d = d
                    best = i
            out_idx[y, x] = best

            er = r - palette[best, 0]
            eg = g - palette[best, 1]
            eb = b - palette[best, 2]

            # Floyd–Steinberg kernel (normalized by 16):
            #   *   7
            #  3  5  1
            _diffuse(work, y, x + 1, er, eg, eb, 7.0 / 16.0)
            _diffuse(work, y + 1, x - 1, er, eg, eb, 3.0 / 16.0)
            _diffuse(work, y + 1, x, er, eg, eb, 5.0 / 16.0)
            _diffuse(work, y + 1, x + 1, er, eg, eb, 1.0 / 16.0)


def dither_floyd(rgb: Array, palette: Array) -> Array:
    """Map an image onto ``palette`` with Floyd–Steinberg error diffusion.

    Parameters
    ----------
    rgb : np.ndarray
        Input colors (H, W, 3), dtype=uint8.
    palette : np.ndarray
        Target palette (K, 3), K >= 1.

    Returns
    -------
    np.ndarray
        Palette index per pixel, shape (H, W), dtype=int64.
    """
    H, W, _ = rgb.shape
    work = np.ascontiguousarray(rgb, dtype=np.float64).copy()
    pal = np.ascontiguousarray(palette, dtype=np.float64)
    out_idx = np.zeros((H, W), dtype=np.int64)
    _floyd_impl(work, pal, out_idx)
    return out_idx
