"""The stylizing pipeline: photo in, pixel art out.

Stages run in a fixed order on an exclusively owned buffer:

    preprocess -> quantize (+ tint) -> [color blocking] -> upscale

Parameters are validated before any pixel work, so a bad configuration
never yields partial output.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np

from .adjust import preprocess
from .blocking import color_block
from .buffer import PixelBuffer
from .dithers import quantize_palette, quantize_standard
from .errors import ConfigurationError, PaletteParseError
from .palette import derive_palette, parse_palette
from .params import EffectParameters
from .tint import apply_tint
from .utils.resize import target_height
from .utils.upscale import upscale_nearest

Array = np.ndarray

logger = logging.getLogger(__name__)


def target_size(source: PixelBuffer, params: EffectParameters) -> Tuple[int, int]:
    """Downscale (width, height); height follows the source aspect when unset."""
    width = int(params.downscale_width)
    if params.downscale_height is not None:
        return width, int(params.downscale_height)
    return width, target_height(source.width, source.height, width)


def resolve_custom_palette(params: EffectParameters) -> Optional[Array]:
    """Parse the caller's palette text.

    Returns None when no palette text was given. Text that yields no valid
    colors returns None too (the caller falls back to a derived palette)
    unless ``require_custom_palette`` is set, which raises PaletteParseError.
    """
    text = (params.custom_palette or "").strip()
    if not text:
        if params.require_custom_palette:
            raise PaletteParseError("custom palette required but none was given")
        return None
    palette = parse_palette(text)
    if len(palette) == 0:
        if params.require_custom_palette:
            raise PaletteParseError(f"no valid #RRGGBB colors in {text!r}")
        logger.warning("Custom palette %r has no valid colors; deriving one from the image", text)
        return None
    return palette


def quantize(buf: PixelBuffer, params: EffectParameters, custom: Optional[Array]) -> PixelBuffer:
    """Reduce colors, picking the quantizer mode from the parameters.

    - a custom palette maps pixels onto it;
    - palette text that parsed to nothing, or color blocking without a
      custom palette, maps onto a palette derived from ``buf``;
    - otherwise Pillow's standard quantizer runs.
    """
    if custom is not None:
        return quantize_palette(buf, custom, params.dithering)
    if params.custom_palette.strip() or params.color_blocking:
        derived = derive_palette(buf.rgb, params.color_count)
        logger.debug("Quantizing with a derived palette of %d colors", len(derived))
        return quantize_palette(buf, derived, params.dithering)
    return quantize_standard(buf, params.color_count, params.dithering)


def stylize(source: PixelBuffer, params: EffectParameters) -> PixelBuffer:
    """Turn ``source`` into pixel art.

    Parameters
    ----------
    source : PixelBuffer
        Decoded input image. It is not modified.
    params : EffectParameters
        Effect configuration.

    Returns
    -------
    PixelBuffer
        Image of size ``(downscale_width * scale_up, downscale_height * scale_up)``.

    Raises
    ------
    ConfigurationError
        Non-positive source or target dimensions, non-positive scale-up,
        negative smoothing iterations.
    PaletteParseError
        ``require_custom_palette`` is set and the palette text has no valid
        colors.
    """
    if source.width <= 0 or source.height <= 0:
        raise ConfigurationError(
            f"source image must have positive dimensions, got {source.width}x{source.height}"
        )
    params.validate()
    width, height = target_size(source, params)
    custom = resolve_custom_palette(params)

    logger.debug(
        "Stylizing %dx%d -> %dx%d (x%s): %s",
        source.width, source.height, width, height, params.scale_up, params,
    )

    work = preprocess(
        source,
        width,
        height,
        brightness=params.brightness,
        contrast=params.contrast,
        saturation=params.saturation,
        edge_amount=params.edge_enhance,
        posterize_level=params.posterize,
    )
    work = quantize(work, params, custom)
    if params.tint:
        work = apply_tint(work, params.tint)

    if params.color_blocking:
        palette = custom if custom is not None else derive_palette(work.rgb, params.color_count)
        logger.info(
            "Color blocking with %d colors (similarity %s, min region %d, smoothing %d)",
            len(palette),
            params.similarity_threshold,
            params.min_region_size,
            params.smoothing_iterations,
        )
        work = color_block(
            work,
            palette,
            params.similarity_threshold,
            params.min_region_size,
            params.smoothing_iterations,
        )

    return upscale_nearest(work, params.scale_up)
