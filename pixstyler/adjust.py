"""Tonal adjustments and filters applied before palette reduction.

Every function takes a :class:`PixelBuffer` and returns a new one; only the
color channels are touched, alpha is carried through unchanged. Results are
rounded to the nearest integer and clamped to [0, 255].
"""
from __future__ import annotations

import numpy as np

from .buffer import PixelBuffer
from .utils.resize import resize_nearest

Array = np.ndarray

# Rec. 601 luma weights, used wherever "luminance" appears in this package.
LUMA = np.array([0.299, 0.587, 0.114], dtype=np.float64)


def _to_u8(arr: Array) -> Array:
    return np.clip(np.rint(arr), 0, 255).astype(np.uint8)


def modulate(buf: PixelBuffer, brightness: float = 0.0, saturation: float = 0.0) -> PixelBuffer:
    """Scale saturation and brightness.

    Each pixel is pushed away from (or pulled toward) its own luminance by a
    factor of ``1 + saturation``, then the result is scaled by
    ``1 + brightness``.
    """
    rgb = buf.rgb.astype(np.float64)
    lum = (rgb @ LUMA)[:, :, None]
    out = lum + (rgb - lum) * (1.0 + saturation)
    out *= 1.0 + brightness
    return buf.with_rgb(_to_u8(out))


def linear_contrast(buf: PixelBuffer, contrast: float) -> PixelBuffer:
    """Apply ``out = in * (1 + contrast * 0.5)``.

    The 0.5 damps the effect so the usual [-1, 1] slider range stays usable.
    """
    gain = 1.0 + contrast * 0.5
    return buf.with_rgb(_to_u8(buf.rgb.astype(np.float64) * gain))


def edge_enhance(buf: PixelBuffer, amount: float) -> PixelBuffer:
    """Sharpen with a 3x3 kernel: center ``1 + 8a``, all eight neighbors ``-a``.

    Borders use edge replication. An amount of 0 or less returns a copy.
    """
    if amount <= 0:
        return buf.copy()
    rgb = buf.rgb.astype(np.float64)
    H, W, _ = rgb.shape
    padded = np.pad(rgb, ((1, 1), (1, 1), (0, 0)), mode="edge")
    # Sum of the full 3x3 window; the center gets its own extra weight below.
    window = np.zeros_like(rgb)
    for dy in range(3):
        for dx in range(3):
            window += padded[dy:dy + H, dx:dx + W, :]
    out = rgb * (1.0 + 9.0 * amount) - amount * window
    return buf.with_rgb(_to_u8(out))


def posterize(buf: PixelBuffer, level: int) -> PixelBuffer:
    """Hard per-channel threshold at ``level * 16``.

    A channel becomes 255 when it is at or above the threshold and 0
    otherwise. This is a single cutoff, not multi-level posterization.
    """
    if level <= 0:
        return buf.copy()
    threshold = level * 16
    out = np.where(buf.rgb >= threshold, 255, 0).astype(np.uint8)
    return buf.with_rgb(out)


def preprocess(
    buf: PixelBuffer,
    width: int,
    height: int,
    brightness: float = 0.0,
    contrast: float = 0.0,
    saturation: float = 0.0,
    edge_amount: float = 0.0,
    posterize_level: int = 0,
) -> PixelBuffer:
    """Run the pre-quantization stages in their fixed order.

    1. brightness/saturation modulation (when either is nonzero)
    2. linear contrast (when nonzero)
    3. nearest-neighbor resize to exactly ``width`` x ``height``
    4. edge enhancement (when ``edge_amount > 0``)
    5. threshold posterize (when ``posterize_level > 0``)
    """
    work = buf
    if brightness != 0 or saturation != 0:
        work = modulate(work, brightness=brightness, saturation=saturation)
    if contrast != 0:
        work = linear_contrast(work, contrast)
    work = resize_nearest(work, width, height)
    if edge_amount > 0:
        work = edge_enhance(work, edge_amount)
    if posterize_level > 0:
        work = posterize(work, posterize_level)
    return work
