"""Standard palette reduction delegated to Pillow.

Used when no palette is supplied and color blocking is off. The reduction
algorithm (median cut) belongs to Pillow; this module only adapts buffers.
"""
from __future__ import annotations

import numpy as np
from PIL import Image

from ..buffer import PixelBuffer


def quantize_standard(buf: PixelBuffer, color_count: int, dithering: bool) -> PixelBuffer:
    """Reduce a buffer to at most ``color_count`` colors with Pillow.

    Parameters
    ----------
    buf : PixelBuffer
        Input image. Alpha, if present, is preserved untouched.
    color_count : int
        Target number of colors, clamped to 1..256.
    dithering : bool
        Enable Floyd–Steinberg dithering inside Pillow's quantizer.

    Returns
    -------
    PixelBuffer
        Reduced image with the same shape as the input.
    """
    colors = max(1, min(256, int(color_count)))
    dither = Image.Dither.FLOYDSTEINBERG if dithering else Image.Dither.NONE
    im = Image.fromarray(np.ascontiguousarray(buf.rgb))
    reduced = im.quantize(colors=colors, method=Image.Quantize.MEDIANCUT, dither=dither)
    rgb = np.array(reduced.convert("RGB"), dtype=np.uint8)
    return buf.with_rgb(rgb)
