"""Packing RGB triples into single integers for exact color comparison."""
from __future__ import annotations

import numpy as np

Array = np.ndarray


def pack_rgb(rgb: Array) -> Array:
    """Pack (..., 3) uint8 colors into (...) int64 keys ``r << 16 | g << 8 | b``."""
    c = np.asarray(rgb, dtype=np.int64)
    return (c[..., 0] << 16) | (c[..., 1] << 8) | c[..., 2]


def unpack_rgb(packed: Array) -> Array:
    """Inverse of :func:`pack_rgb`."""
    p = np.asarray(packed, dtype=np.int64)
    out = np.empty(p.shape + (3,), dtype=np.uint8)
    out[..., 0] = (p >> 16) & 0xFF
    out[..., 1] = (p >> 8) & 0xFF
    out[..., 2] = p & 0xFF
    return out
