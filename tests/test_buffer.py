import numpy as np
import pytest

from pixstyler.buffer import PixelBuffer


def test_from_bytes_uses_interleaved_row_major_layout():
    raw = bytes([1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12])
    buf = PixelBuffer.from_bytes(raw, width=2, height=2, channels=3)

    assert (buf.width, buf.height, buf.channels) == (2, 2, 3)
    assert buf.get_pixel(1, 0) == (4, 5, 6)
    assert buf.get_pixel(0, 1) == (7, 8, 9)
    assert buf.offset(1, 1) == 9
    assert buf.tobytes() == raw


def test_from_bytes_rejects_length_mismatch():
    with pytest.raises(ValueError):
        PixelBuffer.from_bytes(bytes(11), width=2, height=2, channels=3)


def test_accessors_are_bounds_checked():
    buf = PixelBuffer(np.zeros((2, 3, 3), dtype=np.uint8))
    with pytest.raises(IndexError):
        buf.get_pixel(3, 0)
    with pytest.raises(IndexError):
        buf.set_pixel(0, -1, (1, 2, 3))


def test_rejects_bad_arrays():
    with pytest.raises(ValueError):
        PixelBuffer(np.zeros((2, 2, 2), dtype=np.uint8))
    with pytest.raises(TypeError):
        PixelBuffer(np.zeros((2, 2, 3), dtype=np.float32))


def test_set_pixel_leaves_alpha_alone():
    data = np.zeros((1, 2, 4), dtype=np.uint8)
    data[..., 3] = 77
    buf = PixelBuffer(data)
    buf.set_pixel(1, 0, (10, 20, 30))

    assert buf.get_pixel(1, 0) == (10, 20, 30)
    assert buf.alpha.tolist() == [[77, 77]]


def test_with_rgb_returns_new_buffer_and_keeps_alpha():
    data = np.zeros((2, 2, 4), dtype=np.uint8)
    data[..., 3] = [[0, 255], [128, 9]]
    buf = PixelBuffer(data)
    out = buf.with_rgb(np.full((2, 2, 3), 200, dtype=np.uint8))

    assert out is not buf
    assert out.rgb.min() == 200
    assert buf.rgb.max() == 0
    assert np.array_equal(out.alpha, data[..., 3])
