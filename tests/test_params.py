import json

import pytest

from pixstyler.errors import ConfigurationError
from pixstyler.params import PRESETS, EffectParameters, get_preset, load_presets


def test_defaults_match_endpoint():
    p = EffectParameters()
    assert (p.downscale_width, p.color_count, p.scale_up) == (80, 16, 8)
    assert (p.similarity_threshold, p.min_region_size, p.smoothing_iterations) == (30, 10, 1)
    assert not p.dithering and not p.color_blocking
    assert p.downscale_height is None


def test_from_fields_parses_form_text():
    fields = {
        "downscaleWidth": "64",
        "colorCount": "8",
        "scaleUp": "4",
        "brightness": "0.1",
        "contrast": "-0.2",
        "dithering": "true",
        "colorTint": " #FF8800 ",
        "edgeEnhance": "0.5",
        "posterize": "3",
        "colorBlockingEnabled": "true",
        "similarityThreshold": "45",
        "minRegionSize": "6",
        "smoothingIterations": "0",
        "customPalette": "#000000,#ffffff",
        "image": b"ignored",
    }
    p = EffectParameters.from_fields(fields)

    assert p.downscale_width == 64
    assert p.color_count == 8
    assert p.scale_up == 4
    assert p.brightness == pytest.approx(0.1)
    assert p.contrast == pytest.approx(-0.2)
    assert p.dithering is True
    assert p.tint == "#FF8800"
    assert p.edge_enhance == 0.5
    assert p.posterize == 3
    assert p.color_blocking is True
    assert p.similarity_threshold == 45
    assert p.min_region_size == 6
    assert p.smoothing_iterations == 0
    assert p.custom_palette == "#000000,#ffffff"


def test_from_fields_keeps_defaults_for_missing_or_bad_values():
    p = EffectParameters.from_fields(
        {"downscaleWidth": "", "colorCount": "lots", "scaleUp": "nan", "dithering": "yes"}
    )
    assert p.downscale_width == 80
    assert p.color_count == 16
    assert p.scale_up == 8
    assert p.dithering is False


def test_from_fields_accepts_native_values_and_base():
    base = PRESETS["clean-pixel-art"]
    p = EffectParameters.from_fields({"colorCount": 5, "dithering": True}, base=base)
    assert p.color_count == 5
    assert p.dithering is True
    assert p.min_region_size == base.min_region_size


def test_presets_are_valid():
    assert set(PRESETS) == {"rogue-equipment", "clean-pixel-art"}
    for preset in PRESETS.values():
        preset.validate()
        assert preset.color_blocking


def test_load_presets_from_json(tmp_path):
    path = tmp_path / "presets.json"
    path.write_text(json.dumps({"soft": {"downscaleWidth": 48, "colorCount": 6, "dithering": True}}))

    presets = load_presets(path)
    assert presets["soft"].downscale_width == 48
    assert presets["soft"].color_count == 6
    assert presets["soft"].dithering is True
    assert get_preset("soft", presets) is presets["soft"]
    assert get_preset("rogue-equipment", presets) is PRESETS["rogue-equipment"]


def test_load_presets_rejects_non_objects(tmp_path):
    path = tmp_path / "presets.json"
    path.write_text(json.dumps(["not", "a", "mapping"]))
    with pytest.raises(ConfigurationError):
        load_presets(path)


def test_unknown_preset():
    with pytest.raises(ConfigurationError):
        get_preset("vaporwave")


def test_replace_returns_new_parameters():
    p = EffectParameters()
    q = p.replace(color_count=3)
    assert p.color_count == 16 and q.color_count == 3
