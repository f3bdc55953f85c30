"""Image decoding and encoding using Pillow, with pixel buffers.

All processing in this project occurs on NumPy arrays wrapped in
:class:`~pixstyler.buffer.PixelBuffer`. These helpers only convert between
Pillow images and buffers at the edges of the pipeline. Pillow's decode
errors (``UnidentifiedImageError``, ``OSError``) propagate unchanged.
"""
from __future__ import annotations

import io
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, ImageOps

from ..buffer import PixelBuffer


def _has_alpha(im: Image.Image) -> bool:
    return im.mode in ("RGBA", "LA", "PA") or (im.mode == "P" and "transparency" in im.info)


def _to_buffer(im: Image.Image) -> PixelBuffer:
    im = ImageOps.exif_transpose(im)
    mode = "RGBA" if _has_alpha(im) else "RGB"
    arr = np.array(im.convert(mode), dtype=np.uint8)
    return PixelBuffer(arr)


def load_image(path: Union[str, Path]) -> PixelBuffer:
    """Load an image file into a pixel buffer.

    Parameters
    ----------
    path : str | Path
        Path to an image supported by Pillow.

    Returns
    -------
    PixelBuffer
        RGBA if the image carries transparency, RGB otherwise.
    """
    p = Path(path)
    with Image.open(p) as im:
        return _to_buffer(im)


def decode_image(data: bytes) -> PixelBuffer:
    """Decode encoded image bytes (PNG, JPEG, ...) into a pixel buffer."""
    with Image.open(io.BytesIO(data)) as im:
        return _to_buffer(im)


def to_pil(buf: PixelBuffer) -> Image.Image:
    """Wrap a buffer's pixels in a Pillow image (RGB or RGBA)."""
    if not isinstance(buf, PixelBuffer):
        raise TypeError("buf must be a PixelBuffer")
    return Image.fromarray(buf.data)


def save_image(buf: PixelBuffer, path: Union[str, Path]) -> None:
    """Save a pixel buffer to an image file via Pillow.

    The format is inferred from the extension. Formats without alpha
    support (JPEG) receive the color channels only.
    """
    p = Path(path)
    im = to_pil(buf)
    if buf.has_alpha and p.suffix.lower() in (".jpg", ".jpeg"):
        im = im.convert("RGB")
    im.save(p)


def encode_png(buf: PixelBuffer) -> bytes:
    """Encode a pixel buffer as PNG bytes."""
    out = io.BytesIO()
    to_pil(buf).save(out, format="PNG")
    return out.getvalue()
