"""Connected-region discovery and small-region cleanup.

Regions are maximal sets of same-colored pixels connected through their
four direct neighbors. Discovery is a breadth-first flood fill driven by a
flat index queue, so image size never runs into recursion limits.
"""
from __future__ import annotations

import logging

import numpy as np
from numba import njit

from ..buffer import PixelBuffer
from ..utils.colors import pack_rgb, unpack_rgb

Array = np.ndarray

logger = logging.getLogger(__name__)


@njit(cache=True)
def _label_impl(packed, W):
    N = packed.shape[0]
    labels = np.full(N, -1, dtype=np.int64)
    sizes = np.zeros(N, dtype=np.int64)
    queue = np.empty(N, dtype=np.int64)
    n_regions = 0
    for start in range(N):
        if labels[start] >= 0:
            continue
        color = packed[start]
        labels[start] = n_regions
        head = 0
        tail = 1
        queue[0] = start
        while head < tail:
            p = queue[head]
            head += 1
            y = p // W
            x = p - y * W
            # left, right, up, down
            for d in range(4):
                if d == 0:
                    if x == 0:
                        continue
                    q = p - 1
                elif d == 1:
                    if x == W - 1:
                        continue
                    q = p + 1
                elif d == 2:
                    if y == 0:
                        continue
                    q = p - W
                else:
                    if p + W >= N:
                        continue
                    q = p + W
                if labels[q] < 0 and packed[q] == color:
                    labels[q] = n_regions
                    queue[tail] = q
                    tail += 1
        sizes[n_regions] = tail
        n_regions += 1
    return labels, sizes[:n_regions]


@njit(cache=True)
def _merge_impl(packed, order, starts, sizes, min_size, W):
    N = packed.shape[0]
    out = packed.copy()
    merged = 0
    for region in range(sizes.shape[0]):
        size = sizes[region]
        if size >= min_size:
            continue
        begin = starts[region]
        own = packed[order[begin]]
        candidates = np.empty(4 * size, dtype=np.int64)
        counts = np.zeros(4 * size, dtype=np.int64)
        m = 0
        for k in range(begin, begin + size):
            p = order[k]
            y = p // W
            x = p - y * W
            for d in range(4):
                if d == 0:
                    if x == 0:
                        continue
                    q = p - 1
                elif d == 1:
                    if x == W - 1:
                        continue
                    q = p + 1
                elif d == 2:
                    if y == 0:
                        continue
                    q = p - W
                else:
                    if p + W >= N:
                        continue
                    q = p + W
                c = packed[q]
                if c == own:
                    continue
                found = -1
                for j in range(m):
                    if candidates[j] == c:
                        found = j
                        break
                if found < 0:
                    candidates[m] = c
                    counts[m] = 1
                    m += 1
                else:
                    counts[found] += 1
        if m == 0:
            continue
        best = 0
        for j in range(1, m):
            if counts[j] > counts[best]:
                best = j
        for k in range(begin, begin + size):
            out[order[k]] = candidates[best]
        merged += 1
    return out, merged


def label_regions(rgb: Array) -> tuple[Array, Array]:
    """Label 4-connected same-color regions.

    Parameters
    ----------
    rgb : np.ndarray
        Colors, shape (H, W, 3).

    Returns
    -------
    labels : np.ndarray
        Region id per pixel, shape (H, W). Ids are numbered in the raster
        order of each region's first pixel.
    sizes : np.ndarray
        Pixel count per region id.
    """
    H, W, _ = rgb.shape
    packed = np.ascontiguousarray(pack_rgb(rgb).ravel())
    labels, sizes = _label_impl(packed, W)
    return labels.reshape(H, W), sizes


def clean_regions(buf: PixelBuffer, min_region_size: int) -> PixelBuffer:
    """Merge regions smaller than ``min_region_size`` into a neighbor color.

    Each undersized region takes the color that appears most often among
    the differently-colored 4-neighbors of its pixels. Ties go to the color
    met first when scanning the region's pixels in raster order and each
    pixel's neighbors left, right, up, down. Regions with no such neighbor
    stay as they are. Discovery and tallies read the input only, so merges
    in one pass never cascade into each other.

    A ``min_region_size`` of 1 or less returns an unchanged copy.
    """
    if min_region_size <= 1:
        return buf.copy()
    H, W = buf.height, buf.width
    packed = np.ascontiguousarray(pack_rgb(buf.rgb).ravel())
    labels, sizes = _label_impl(packed, W)

    order = np.argsort(labels, kind="stable")
    starts = np.zeros(len(sizes), dtype=np.int64)
    if len(sizes) > 1:
        starts[1:] = np.cumsum(sizes)[:-1]

    small = int((sizes < min_region_size).sum())
    logger.debug("Found %d small regions to clean up", small)
    out, merged = _merge_impl(packed, order, starts, sizes, int(min_region_size), W)
    logger.debug("Merged %d of them into a neighbor color", merged)
    return buf.with_rgb(unpack_rgb(out.reshape(H, W)))
