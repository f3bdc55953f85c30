"""pixstyler: turn photographs into stylized pixel art.

Public API re-exported from the implementation modules. Logging goes to
the ``pixstyler`` logger, silent unless the application configures it.
"""
from __future__ import annotations

import logging

from .buffer import PixelBuffer  # noqa: F401
from .errors import ConfigurationError, PaletteParseError, PixstylerError  # noqa: F401
from .palette import derive_palette, extract_palette, parse_palette  # noqa: F401
from .params import PRESETS, EffectParameters, load_presets  # noqa: F401
from .pipeline import stylize  # noqa: F401
from .utils.loader import decode_image, encode_png, load_image, save_image  # noqa: F401

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "PixelBuffer",
    "EffectParameters",
    "PRESETS",
    "load_presets",
    "stylize",
    "parse_palette",
    "derive_palette",
    "extract_palette",
    "load_image",
    "save_image",
    "decode_image",
    "encode_png",
    "PixstylerError",
    "ConfigurationError",
    "PaletteParseError",
]
