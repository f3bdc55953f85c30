import numpy as np
import pytest

from pixstyler.buffer import PixelBuffer
from pixstyler.utils.resize import resize_nearest, resize_nearest_scale, target_height
from pixstyler.utils.upscale import upscale_nearest


def _random_buffer(h, w, c=3, seed=0):
    rng = np.random.default_rng(seed)
    return PixelBuffer(rng.integers(0, 256, size=(h, w, c), dtype=np.uint8))


def test_resize_at_scale_one_is_identity():
    buf = _random_buffer(7, 5)
    assert np.array_equal(resize_nearest(buf, 5, 7).data, buf.data)
    assert np.array_equal(resize_nearest_scale(buf, 1.0).data, buf.data)


def test_downscale_samples_floor_positions():
    data = np.arange(4 * 6 * 3, dtype=np.uint8).reshape(4, 6, 3)
    out = resize_nearest(PixelBuffer(data), 4, 3)

    # x: floor(x * 6 / 4) -> 0, 1, 3, 4 ; y: floor(y * 4 / 3) -> 0, 1, 2
    expected = data[[0, 1, 2]][:, [0, 1, 3, 4]]
    assert np.array_equal(out.data, expected)


def test_resize_stretches_to_exact_size():
    out = resize_nearest(_random_buffer(10, 10), 3, 8)
    assert (out.width, out.height) == (3, 8)


def test_resize_rejects_empty_target():
    with pytest.raises(ValueError):
        resize_nearest(_random_buffer(2, 2), 0, 2)


def test_target_height_keeps_aspect_ratio():
    assert target_height(800, 600, 80) == 60
    assert target_height(100, 300, 10) == 30
    assert target_height(1000, 1, 10) == 1


def test_checkerboard_upscale_gives_solid_quadrants():
    black, white = (0, 0, 0), (255, 255, 255)
    data = np.array([[black, white], [white, black]], dtype=np.uint8)
    out = upscale_nearest(PixelBuffer(data), 4)

    assert (out.width, out.height) == (8, 8)
    assert (out.data[:4, :4] == 0).all()
    assert (out.data[:4, 4:] == 255).all()
    assert (out.data[4:, :4] == 255).all()
    assert (out.data[4:, 4:] == 0).all()


def test_upscale_non_integer_factor():
    data = np.array([[[10, 10, 10], [20, 20, 20]], [[30, 30, 30], [40, 40, 40]]], dtype=np.uint8)
    out = upscale_nearest(PixelBuffer(data), 1.5)

    assert (out.width, out.height) == (3, 3)
    # floor(x / 1.5) -> 0, 0, 1
    assert out.data[:, :, 0].tolist() == [[10, 10, 20], [10, 10, 20], [30, 30, 40]]


def test_upscale_keeps_alpha():
    buf = _random_buffer(2, 3, c=4)
    out = upscale_nearest(buf, 2)
    assert out.channels == 4
    assert np.array_equal(out.alpha[::2, ::2], buf.alpha)
