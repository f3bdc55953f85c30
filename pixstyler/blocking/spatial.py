"""Spatially-aware re-quantization ("color blocking").

Each palette color gets a weight field recording where in the image that
color is the nearest match. Pixels are then re-assigned using a blend of
color similarity and those positional weights, so contiguous areas settle
on one flat color even across ambiguous boundaries.

The work is split in two phases. All weight fields are voted and smoothed
first; only then is any pixel scored.
"""
from __future__ import annotations

import logging
import math

import numpy as np

from ..buffer import PixelBuffer
from ..dithers import nearest_palette_index

Array = np.ndarray

logger = logging.getLogger(__name__)

CENTER_VOTE = 4
NEIGHBOR_VOTE = 1


def region_size(width: int, height: int) -> int:
    """Side of the voting grid cells: ``clamp(floor(sqrt(W * H) / 20), 5, 20)``."""
    return max(5, min(20, int(math.floor(math.sqrt(width * height) / 20))))


def spatial_weight(similarity_threshold: float) -> float:
    """Share of the score taken by position; lower thresholds lean on position."""
    return max(0.1, min(0.7, 1.0 - similarity_threshold / 100.0))


def build_weight_fields(rgb: Array, palette: Array) -> Array:
    """Accumulate per-color positional votes.

    Every pixel votes for its nearest palette color: weight 4 at the center
    pixel of its own grid cell and weight 1 at the centers of the eight
    surrounding cells. Centers falling outside the image are skipped.

    Returns
    -------
    np.ndarray
        Fields of shape (K, H * W), dtype=int64.
    """
    H, W, _ = rgb.shape
    K = len(palette)
    N = H * W
    R = region_size(W, H)
    half = R // 2

    nearest = nearest_palette_index(rgb, palette).ravel()
    ys, xs = np.divmod(np.arange(N, dtype=np.int64), W)
    rx = xs // R
    ry = ys // R

    fields = np.zeros(K * N, dtype=np.int64)
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            cx = (rx + dx) * R + half
            cy = (ry + dy) * R + half
            ok = (rx + dx >= 0) & (ry + dy >= 0) & (cx < W) & (cy < H)
            vote = CENTER_VOTE if dx == 0 and dy == 0 else NEIGHBOR_VOTE
            target = nearest[ok] * N + cy[ok] * W + cx[ok]
            np.add.at(fields, target, vote)
    return fields.reshape(K, N)


def smooth_weight_fields(fields: Array, width: int, height: int) -> Array:
    """One center-weighted blur pass: ``(4c + up + down + left + right) // 8``.

    Only interior pixels are recomputed; border values are kept.
    """
    K = fields.shape[0]
    f = fields.reshape(K, height, width)
    out = f.copy()
    if height >= 3 and width >= 3:
        out[:, 1:-1, 1:-1] = (
            4 * f[:, 1:-1, 1:-1]
            + f[:, :-2, 1:-1]
            + f[:, 2:, 1:-1]
            + f[:, 1:-1, :-2]
            + f[:, 1:-1, 2:]
        ) // 8
    return out.reshape(K, height * width)


def score_colors(rgb: Array, palette: Array, fields: Array, similarity_threshold: float) -> Array:
    """Pick a palette index per pixel from color similarity and field weight.

    ``score = (1 - sw) * (255 - min(255, dist)) + sw * field[pixel]`` with
    ``sw = spatial_weight(similarity_threshold)``. The highest score wins,
    ties to the lowest palette index. Assignments are memoized by exact
    source color: the first pixel of a color (raster order) decides for
    every pixel of that color.

    Returns
    -------
    np.ndarray
        Palette indices, shape (H, W).
    """
    H, W, _ = rgb.shape
    sw = spatial_weight(similarity_threshold)
    flat = rgb.reshape(-1, 3)
    colors, first, inverse = np.unique(flat, axis=0, return_index=True, return_inverse=True)
    inverse = inverse.reshape(-1)

    diff = colors[:, None, :].astype(np.float64) - palette[None, :, :].astype(np.float64)
    dist = np.sqrt((diff * diff).sum(axis=2))
    similarity = 255.0 - np.minimum(255.0, dist)
    spatial = fields[:, first].T.astype(np.float64)
    score = (1.0 - sw) * similarity + sw * spatial
    choice = np.argmax(score, axis=1)
    return choice[inverse].reshape(H, W)


def spatial_block(buf: PixelBuffer, palette: Array, similarity_threshold: float) -> PixelBuffer:
    """Re-quantize ``buf`` onto ``palette`` favoring spatially coherent colors.

    Parameters
    ----------
    buf : PixelBuffer
        Image to re-quantize (usually already quantized and tinted).
    palette : np.ndarray
        Palette (K, 3), K >= 1.
    similarity_threshold : float
        0..100; lower values give position more influence (clamped to a
        spatial share between 0.1 and 0.7).

    Returns
    -------
    PixelBuffer
        Re-quantized image; alpha copied from the input.
    """
    pal = np.asarray(palette, dtype=np.uint8)
    if pal.ndim != 2 or pal.shape[1] != 3 or len(pal) == 0:
        raise ValueError("palette must be a non-empty array with shape (K, 3)")
    rgb = buf.rgb
    fields = build_weight_fields(rgb, pal)
    fields = smooth_weight_fields(fields, buf.width, buf.height)
    logger.debug(
        "Weight fields ready: %d colors, region size %d",
        len(pal), region_size(buf.width, buf.height),
    )
    choice = score_colors(rgb, pal, fields, similarity_threshold)
    return buf.with_rgb(pal[choice])
