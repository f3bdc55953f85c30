"""Palette construction: caller-supplied hex lists and image-derived palettes.

Palettes are ``(K, 3)`` ``uint8`` arrays. Their order matters: every
nearest-color search in the package resolves ties to the lowest index.
"""
from __future__ import annotations

import logging
import re
from typing import List, Sequence

import numpy as np

from .buffer import PixelBuffer

Array = np.ndarray

logger = logging.getLogger(__name__)

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")

EMPTY_PALETTE = np.zeros((0, 3), dtype=np.uint8)


def parse_hex(token: str) -> tuple[int, int, int]:
    """Parse one ``#RRGGBB`` token; raises ValueError when malformed."""
    if not HEX_COLOR.match(token):
        raise ValueError(f"not a #RRGGBB color: {token!r}")
    return int(token[1:3], 16), int(token[3:5], 16), int(token[5:7], 16)


def to_hex(color: Sequence[int]) -> str:
    r, g, b = (int(c) for c in color[:3])
    return f"#{r:02x}{g:02x}{b:02x}"


def parse_palette(text: str) -> Array:
    """Parse comma-separated ``#RRGGBB`` tokens into a palette.

    Malformed tokens are dropped one by one; the result may be empty.
    """
    colors = []
    for raw in (text or "").split(","):
        token = raw.strip()
        if not token:
            continue
        try:
            colors.append(parse_hex(token))
        except ValueError:
            logger.debug("Dropping malformed palette token %r", token)
    if not colors:
        return EMPTY_PALETTE.copy()
    return np.array(colors, dtype=np.uint8)


def luminance(colors: Array) -> Array:
    """Rec. 601 luminance ``0.299r + 0.587g + 0.114b`` of (..., 3) colors."""
    c = np.asarray(colors, dtype=np.float64)
    return c[..., 0] * 0.299 + c[..., 1] * 0.587 + c[..., 2] * 0.114


def _grid_size(width: int) -> int:
    return max(8, min(24, width // 20))


def derive_palette(rgb: Array, color_count: int) -> Array:
    """Derive a palette of at most ``color_count`` colors from image content.

    The image is divided into a ``grid x grid`` lattice of cells
    (``grid = clamp(W // 20, 8, 24)``, cell size ``ceil(dim / grid)``). Each
    non-empty cell contributes its average color; exact duplicates are
    dropped. If too many candidates remain they are ordered by luminance and
    resampled at evenly spaced indices, keeping the tonal spread.

    Parameters
    ----------
    rgb : np.ndarray
        Color channels, shape (H, W, 3), dtype=uint8.
    color_count : int
        Requested palette size. Values below 1 are treated as 1.

    Returns
    -------
    np.ndarray
        Palette of shape (K, 3), 1 <= K <= max(1, color_count) for any image
        with at least one pixel.
    """
    if not isinstance(rgb, np.ndarray) or rgb.ndim != 3 or rgb.shape[2] != 3:
        raise ValueError("rgb must be an array with shape (H, W, 3)")
    H, W, _ = rgb.shape
    if H == 0 or W == 0:
        return EMPTY_PALETTE.copy()
    color_count = max(1, int(color_count))

    grid = _grid_size(W)
    cell_w = -(-W // grid)
    cell_h = -(-H // grid)
    gy = np.arange(H, dtype=np.int64) // cell_h
    gx = np.arange(W, dtype=np.int64) // cell_w
    cell = (gy[:, None] * grid + gx[None, :]).ravel()

    n_cells = grid * grid
    flat = rgb.reshape(-1, 3).astype(np.float64)
    counts = np.bincount(cell, minlength=n_cells)
    sums = np.stack(
        [np.bincount(cell, weights=flat[:, c], minlength=n_cells) for c in range(3)],
        axis=1,
    )
    used = counts > 0
    # Round half up on the average.
    averages = np.floor(sums[used] / counts[used][:, None] + 0.5).astype(np.uint8)

    # First occurrence order, cells scanned row by row.
    _, first = np.unique(averages, axis=0, return_index=True)
    candidates = averages[np.sort(first)]

    n = len(candidates)
    if n <= color_count:
        return candidates

    order = np.argsort(luminance(candidates), kind="stable")
    by_lum = candidates[order]
    picks = (np.arange(color_count, dtype=np.int64) * n) // color_count
    return by_lum[picks]


def extract_palette(buf: PixelBuffer) -> List[str]:
    """List the colors used by an image, most frequent first.

    Fully transparent pixels are ignored. Colors with equal counts keep the
    order in which they first appear.
    """
    rgb = buf.rgb.reshape(-1, 3)
    if buf.has_alpha:
        rgb = rgb[buf.alpha.reshape(-1) != 0]
    if len(rgb) == 0:
        return []
    colors, first, counts = np.unique(rgb, axis=0, return_index=True, return_counts=True)
    # Descending count, then first appearance.
    order = np.lexsort((first, -counts))
    return [to_hex(c) for c in colors[order]]
