"""Effect parameters, named presets and form-field mapping."""
from __future__ import annotations

import dataclasses
import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .errors import ConfigurationError

# Form field name -> EffectParameters attribute.
FORM_FIELDS = {
    "downscaleWidth": "downscale_width",
    "downscaleHeight": "downscale_height",
    "colorCount": "color_count",
    "scaleUp": "scale_up",
    "brightness": "brightness",
    "contrast": "contrast",
    "saturation": "saturation",
    "dithering": "dithering",
    "colorTint": "tint",
    "edgeEnhance": "edge_enhance",
    "posterize": "posterize",
    "colorBlockingEnabled": "color_blocking",
    "similarityThreshold": "similarity_threshold",
    "minRegionSize": "min_region_size",
    "smoothingIterations": "smoothing_iterations",
    "customPalette": "custom_palette",
    "requireCustomPalette": "require_custom_palette",
}


@dataclass(frozen=True)
class EffectParameters:
    """Immutable configuration for one :func:`~pixstyler.pipeline.stylize` call.

    ``downscale_height`` may be left as None to keep the source aspect ratio.
    Deltas (brightness, contrast, saturation) are fractions, typically in
    [-1, 1]. ``similarity_threshold`` is 0..100.
    """

    downscale_width: int = 80
    downscale_height: Optional[int] = None
    color_count: int = 16
    scale_up: float = 8
    brightness: float = 0.0
    contrast: float = 0.0
    saturation: float = 0.0
    dithering: bool = False
    tint: str = ""
    edge_enhance: float = 0.0
    posterize: int = 0
    color_blocking: bool = False
    similarity_threshold: float = 30.0
    min_region_size: int = 10
    smoothing_iterations: int = 1
    custom_palette: str = ""
    require_custom_palette: bool = False

    def validate(self) -> None:
        """Raise ConfigurationError for values no pipeline run can use."""
        if self.downscale_width <= 0:
            raise ConfigurationError("downscale_width must be > 0")
        if self.downscale_height is not None and self.downscale_height <= 0:
            raise ConfigurationError("downscale_height must be > 0")
        if not self.scale_up > 0:
            raise ConfigurationError("scale_up must be > 0")
        if self.smoothing_iterations < 0:
            raise ConfigurationError("smoothing_iterations must be >= 0")

    def replace(self, **changes: Any) -> "EffectParameters":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_fields(
        cls, fields: Mapping[str, Any], base: Optional["EffectParameters"] = None
    ) -> "EffectParameters":
        """Build parameters from form fields (camelCase names, text or native values).

        Missing, empty or non-numeric values keep the value from ``base``
        (the defaults when no base is given). Flags are on for ``True`` or
        the text ``"true"``. Unknown field names are ignored.
        """
        base = base or cls()
        changes: Dict[str, Any] = {}
        for field, attr in FORM_FIELDS.items():
            if field not in fields:
                continue
            value = fields[field]
            if attr in _FLAGS:
                changes[attr] = _flag(value)
            elif attr in _TEXT:
                changes[attr] = "" if value is None else str(value).strip()
            elif attr in _INTS:
                number = _number(value)
                if number is not None:
                    changes[attr] = int(number)
            else:
                number = _number(value)
                if number is not None:
                    changes[attr] = number
        return dataclasses.replace(base, **changes)


_FLAGS = {"dithering", "color_blocking", "require_custom_palette"}
_TEXT = {"tint", "custom_palette"}
_INTS = {
    "downscale_width",
    "downscale_height",
    "color_count",
    "posterize",
    "min_region_size",
    "smoothing_iterations",
}


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


PRESETS: Dict[str, EffectParameters] = {
    "rogue-equipment": EffectParameters(
        downscale_width=120,
        color_count=24,
        scale_up=6,
        brightness=0.05,
        contrast=0.4,
        saturation=0.2,
        dithering=True,
        edge_enhance=0.7,
        color_blocking=True,
        similarity_threshold=25,
        min_region_size=15,
        smoothing_iterations=2,
    ),
    "clean-pixel-art": EffectParameters(
        downscale_width=80,
        color_count=12,
        scale_up=8,
        contrast=0.2,
        saturation=0.1,
        edge_enhance=0.5,
        color_blocking=True,
        similarity_threshold=35,
        min_region_size=20,
        smoothing_iterations=3,
    ),
}


def load_presets(path: Union[str, Path]) -> Dict[str, EffectParameters]:
    """Load user presets from a JSON object of ``name -> form fields``.

    Example::

        {"soft": {"downscaleWidth": 64, "colorCount": 8, "dithering": true}}
    """
    p = Path(path)
    with p.open("r", encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{p}: presets file must contain a JSON object")
    presets: Dict[str, EffectParameters] = {}
    for name, fields in raw.items():
        if not isinstance(fields, dict):
            raise ConfigurationError(f"{p}: preset {name!r} must be a JSON object")
        presets[str(name)] = EffectParameters.from_fields(fields)
    return presets


def get_preset(name: str, extra: Optional[Mapping[str, EffectParameters]] = None) -> EffectParameters:
    """Look up a preset by name, user presets first."""
    if extra and name in extra:
        return extra[name]
    if name in PRESETS:
        return PRESETS[name]
    known = sorted(set(PRESETS) | set(extra or {}))
    raise ConfigurationError(f"Unknown preset {name!r}; known presets: {', '.join(known)}")
