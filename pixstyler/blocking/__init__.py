"""Color blocking: spatial re-quantization, region cleanup and smoothing.

Exported API
------------
- color_block(buf, palette, similarity_threshold, min_region_size, smoothing_iterations)
- spatial_block(buf, palette, similarity_threshold)
- clean_regions(buf, min_region_size)
- label_regions(rgb)
- smooth(buf, iterations)
"""
from __future__ import annotations

import numpy as np

from ..buffer import PixelBuffer
from .regions import clean_regions, label_regions
from .smooth import smooth
from .spatial import spatial_block


def color_block(
    buf: PixelBuffer,
    palette: np.ndarray,
    similarity_threshold: float,
    min_region_size: int,
    smoothing_iterations: int,
) -> PixelBuffer:
    """Run the three color-blocking stages in order.

    Region cleanup is skipped when ``min_region_size <= 1`` and smoothing
    when ``smoothing_iterations == 0``.
    """
    work = spatial_block(buf, palette, similarity_threshold)
    if min_region_size > 1:
        work = clean_regions(work, min_region_size)
    if smoothing_iterations > 0:
        work = smooth(work, smoothing_iterations)
    return work


__all__ = ["color_block", "spatial_block", "clean_regions", "label_regions", "smooth"]
