"""Exceptions raised by the stylizing pipeline.

Decode failures are not wrapped: Pillow's own exceptions propagate from
``pixstyler.utils.loader`` unchanged.
"""
from __future__ import annotations


class PixstylerError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(PixstylerError, ValueError):
    """Effect parameters rejected before any pixel work starts."""


class PaletteParseError(PixstylerError, ValueError):
    """Custom palette mode was required but the palette text had no valid colors."""


__all__ = ["PixstylerError", "ConfigurationError", "PaletteParseError"]
