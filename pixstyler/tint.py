"""Diagonal color-matrix tint applied after quantization."""
from __future__ import annotations

import logging

import numpy as np

from .buffer import PixelBuffer
from .palette import HEX_COLOR, parse_hex

logger = logging.getLogger(__name__)


def tint_gains(tint_hex: str) -> np.ndarray:
    """Per-channel gains ``t * 0.8 + 0.2`` for a ``#RRGGBB`` tint (t in [0, 1])."""
    color = np.array(parse_hex(tint_hex), dtype=np.float64) / 255.0
    return color * 0.8 + 0.2


def apply_tint(buf: PixelBuffer, tint_hex: str) -> PixelBuffer:
    """Scale each channel by its tint gain; no cross-channel mixing.

    An empty or malformed tint leaves the image unchanged (a copy is
    returned).
    """
    if not tint_hex or not HEX_COLOR.match(tint_hex):
        if tint_hex:
            logger.debug("Ignoring malformed tint %r", tint_hex)
        return buf.copy()
    out = buf.rgb.astype(np.float64) * tint_gains(tint_hex)
    return buf.with_rgb(np.clip(np.rint(out), 0, 255).astype(np.uint8))
