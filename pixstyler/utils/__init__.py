"""Utility functions for pixstyler.

Modules:
- loader: Pillow <-> PixelBuffer decoding and encoding.
- resize: Nearest-neighbor resize to an exact size.
- upscale: Nearest-neighbor magnification by a (possibly fractional) factor.
- colors: Packing RGB triples into integer keys.
"""
from .colors import pack_rgb, unpack_rgb
from .loader import decode_image, encode_png, load_image, save_image
from .resize import resize_nearest, resize_nearest_scale, target_height
from .upscale import upscale_nearest

__all__ = [
    "load_image",
    "save_image",
    "decode_image",
    "encode_png",
    "resize_nearest",
    "resize_nearest_scale",
    "target_height",
    "upscale_nearest",
    "pack_rgb",
    "unpack_rgb",
]
