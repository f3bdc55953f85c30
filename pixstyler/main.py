"""Command-line entry point for pixstyler.

This tool loads an image, downscales it, optionally adjusts its tones,
reduces it to a limited palette (plain, dithered, or with spatial color
blocking), cleans up small regions, and scales it back up with crisp
nearest-neighbor pixels.

All processing occurs on NumPy arrays; Pillow is used only for
loading and saving.

Usage example:
    python -m pixstyler.main -i photo.jpg -o sprite.png --width 96 --colors 16 --scale 6 --blocking
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import PixstylerError
from .palette import extract_palette
from .params import PRESETS, EffectParameters, get_preset, load_presets
from .pipeline import stylize
from .utils.loader import load_image, save_image

logger = logging.getLogger("pixstyler")

# argparse dest -> EffectParameters attribute, for flags that override presets.
OVERRIDES = {
    "width": "downscale_width",
    "height": "downscale_height",
    "colors": "color_count",
    "scale": "scale_up",
    "brightness": "brightness",
    "contrast": "contrast",
    "saturation": "saturation",
    "dither": "dithering",
    "tint": "tint",
    "edge": "edge_enhance",
    "posterize": "posterize",
    "blocking": "color_blocking",
    "similarity": "similarity_threshold",
    "min_region": "min_region_size",
    "smoothing": "smoothing_iterations",
    "palette": "custom_palette",
    "require_palette": "require_custom_palette",
}


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Every effect flag defaults to None so that only flags given on the
    command line override the selected preset.

    Parameters
    ----------
    argv : list[str] | None
        Optional list of arguments for testing. If None, uses sys.argv.

    Returns
    -------
    argparse.Namespace
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        prog="pixstyler",
        description=(
            "Turn photos into pixel art: downscale, reduce the palette "
            "(optionally dithered or color-blocked), clean up and upscale."
        ),
    )

    parser.add_argument("-i", "--input", required=True, help="Path to input image file")
    parser.add_argument("-o", "--output", help="Path to output image file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details")

    preset = parser.add_argument_group("presets")
    preset.add_argument(
        "--preset",
        type=str,
        default=None,
        help=f"Start from a named preset ({', '.join(sorted(PRESETS))} or one from --presets-file)",
    )
    preset.add_argument(
        "--presets-file",
        type=str,
        default=None,
        help="JSON file of extra presets: {name: {downscaleWidth: ..., ...}}",
    )

    basic = parser.add_argument_group("size and palette")
    basic.add_argument("--width", type=int, default=None, help="Downscale width in pixels (default 80)")
    basic.add_argument(
        "--height",
        type=int,
        default=None,
        help="Downscale height; defaults to keeping the input aspect ratio",
    )
    basic.add_argument("--colors", type=int, default=None, help="Palette size (default 16)")
    basic.add_argument(
        "--scale", type=float, default=None, help="Upscale factor for the output (default 8)"
    )
    basic.add_argument(
        "--palette",
        type=str,
        default=None,
        help='Custom palette, comma-separated "#RRGGBB" colors',
    )
    basic.add_argument(
        "--require-palette",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Fail instead of deriving a palette when --palette has no valid colors",
    )
    basic.add_argument(
        "--dither",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable Floyd–Steinberg dithering",
    )

    tone = parser.add_argument_group("adjustments")
    tone.add_argument("--brightness", type=float, default=None, help="Brightness delta (-1..1)")
    tone.add_argument("--contrast", type=float, default=None, help="Contrast delta (-1..1)")
    tone.add_argument("--saturation", type=float, default=None, help="Saturation delta (-1..1)")
    tone.add_argument("--tint", type=str, default=None, help='Tint color "#RRGGBB"')
    tone.add_argument("--edge", type=float, default=None, help="Edge enhancement amount (>=0)")
    tone.add_argument(
        "--posterize", type=int, default=None, help="Threshold posterize level (0 = off)"
    )

    block = parser.add_argument_group("color blocking")
    block.add_argument(
        "--blocking",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable spatially-aware color blocking",
    )
    block.add_argument(
        "--similarity", type=float, default=None, help="Similarity threshold 0..100 (default 30)"
    )
    block.add_argument(
        "--min-region", type=int, default=None, help="Merge regions smaller than this (default 10)"
    )
    block.add_argument(
        "--smoothing", type=int, default=None, help="Majority smoothing iterations (default 1)"
    )

    parser.add_argument(
        "--print-palette",
        action="store_true",
        help="Print the colors used by the result, most frequent first",
    )

    return parser.parse_args(argv)


def validate_args(ns: argparse.Namespace) -> None:
    """Validate argument values and raise ValueError for invalid inputs.

    Parameters
    ----------
    ns : argparse.Namespace
        Parsed CLI arguments.
    """
    if ns.width is not None and ns.width < 1:
        raise ValueError("--width must be an integer >= 1")
    if ns.height is not None and ns.height < 1:
        raise ValueError("--height must be an integer >= 1")
    if ns.scale is not None and ns.scale <= 0:
        raise ValueError("--scale must be > 0")
    if ns.colors is not None and not 1 <= ns.colors <= 256:
        raise ValueError("--colors must be between 1 and 256")
    if ns.edge is not None and ns.edge < 0:
        raise ValueError("--edge must be >= 0")
    if ns.posterize is not None and ns.posterize < 0:
        raise ValueError("--posterize must be >= 0")
    if ns.smoothing is not None and ns.smoothing < 0:
        raise ValueError("--smoothing must be >= 0")
    if ns.similarity is not None and not 0 <= ns.similarity <= 100:
        raise ValueError("--similarity must be between 0 and 100")
    if ns.output is None and not ns.print_palette:
        raise ValueError("--output is required unless --print-palette is given")
    if not Path(ns.input).exists():
        raise ValueError(f"Input file not found: {ns.input}")
    if ns.presets_file is not None and not Path(ns.presets_file).exists():
        raise ValueError(f"Presets file not found: {ns.presets_file}")


def build_params(ns: argparse.Namespace) -> EffectParameters:
    """Resolve the preset (if any) and apply command-line overrides."""
    extra = load_presets(ns.presets_file) if ns.presets_file else None
    params = get_preset(ns.preset, extra) if ns.preset else EffectParameters()
    changes: Dict[str, Any] = {}
    for dest, attr in OVERRIDES.items():
        value = getattr(ns, dest)
        if value is not None:
            changes[attr] = value
    return params.replace(**changes)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry function for the CLI.

    Parameters
    ----------
    argv : list[str] | None
        Optional list of arguments for testing.

    Returns
    -------
    int
        Exit status code (0 success, 1 processing failure, 2 bad arguments).
    """
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        validate_args(args)
        params = build_params(args)
    except (ValueError, OSError) as e:
        logger.error("Argument error: %s", e)
        return 2

    try:
        # 1) Load (Pillow -> PixelBuffer)
        img = load_image(args.input)
        # 2) Preprocess, quantize, block, upscale
        out = stylize(img, params)
    except PixstylerError as e:
        logger.error("Processing failed: %s", e)
        return 1
    except OSError as e:
        logger.error("Could not read %s: %s", args.input, e)
        return 1

    # 3) Save (PixelBuffer -> Pillow)
    if args.output:
        try:
            save_image(out, args.output)
        except (ValueError, OSError) as e:
            logger.error("Could not write %s: %s", args.output, e)
            return 1
        logger.info("Wrote %dx%d image to %s", out.width, out.height, args.output)
    if args.print_palette:
        for color in extract_palette(out):
            print(color)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
