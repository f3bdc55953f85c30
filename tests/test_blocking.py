import numpy as np
import pytest

from pixstyler.blocking import clean_regions, color_block, label_regions, smooth, spatial_block
from pixstyler.blocking.spatial import (
    build_weight_fields,
    region_size,
    smooth_weight_fields,
    spatial_weight,
)
from pixstyler.buffer import PixelBuffer

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)


def _image(rows):
    return PixelBuffer(np.array(rows, dtype=np.uint8))


def _outlier(center):
    return _image([[BLUE, BLUE, BLUE], [BLUE, center, BLUE], [BLUE, BLUE, BLUE]])


# --- regions -------------------------------------------------------------


def test_label_regions_numbers_in_raster_order():
    labels, sizes = label_regions(np.array([[RED, GREEN, RED]], dtype=np.uint8))
    assert labels.tolist() == [[0, 1, 2]]
    assert sizes.tolist() == [1, 1, 1]


def test_label_regions_uses_four_connectivity():
    rgb = np.array([[RED, BLUE], [BLUE, RED]], dtype=np.uint8)
    _, sizes = label_regions(rgb)
    assert sizes.tolist() == [1, 1, 1, 1]


def test_label_regions_handles_large_flat_areas():
    rgb = np.zeros((300, 300, 3), dtype=np.uint8)
    labels, sizes = label_regions(rgb)
    assert sizes.tolist() == [90000]
    assert (labels == 0).all()


def test_small_outlier_is_absorbed():
    out = clean_regions(_outlier(RED), 2)
    assert (out.rgb == BLUE).all()


def test_min_region_size_one_keeps_outlier():
    buf = _outlier(RED)
    out = clean_regions(buf, 1)
    assert out.get_pixel(1, 1) == RED
    assert np.array_equal(out.data, buf.data)


def test_region_without_other_colors_is_unchanged():
    buf = _image([[GREEN] * 4] * 3)
    assert np.array_equal(clean_regions(buf, 100).data, buf.data)


def test_cleanup_reads_snapshot_and_breaks_ties_by_first_neighbor():
    # R and G are both undersized. R only touches G; G touches R (left,
    # counted first) and B once each. Both read the original colors.
    buf = _image([[RED, GREEN, BLUE, BLUE, BLUE]])
    out = clean_regions(buf, 2)
    assert [out.get_pixel(x, 0) for x in range(5)] == [GREEN, RED, BLUE, BLUE, BLUE]


def test_undersized_region_takes_most_common_neighbor():
    buf = _image(
        [
            [GREEN, GREEN, GREEN, GREEN],
            [BLUE, RED, RED, GREEN],
            [BLUE, BLUE, GREEN, GREEN],
        ]
    )
    out = clean_regions(buf, 3)
    # Red pair neighbors: green x4, blue x2.
    assert out.get_pixel(1, 1) == GREEN
    assert out.get_pixel(2, 1) == GREEN
    # The blue region has 3 pixels and survives.
    assert out.get_pixel(0, 2) == BLUE


def test_cleanup_keeps_alpha():
    data = np.zeros((3, 3, 4), dtype=np.uint8)
    data[..., :3] = BLUE
    data[1, 1, :3] = RED
    data[..., 3] = 99
    out = clean_regions(PixelBuffer(data), 2)
    assert (out.alpha == 99).all()


# --- smoothing -----------------------------------------------------------


def test_zero_iterations_is_identity():
    rng = np.random.default_rng(1)
    buf = PixelBuffer(rng.integers(0, 256, size=(6, 7, 3), dtype=np.uint8))
    out = smooth(buf, 0)
    assert out.tobytes() == buf.tobytes()


def test_smooth_replaces_distant_outlier():
    out = smooth(_outlier(RED), 1)
    assert (out.rgb == BLUE).all()


def test_smooth_keeps_close_colors():
    buf = _outlier((0, 0, 250))
    assert np.array_equal(smooth(buf, 1).data, buf.data)


def test_smooth_never_touches_borders():
    buf = _image([[RED, BLUE, BLUE], [BLUE, BLUE, BLUE], [BLUE, BLUE, BLUE]])
    assert smooth(buf, 3).get_pixel(0, 0) == RED


def test_smooth_iterations_build_on_each_other():
    row = [BLUE, RED, RED, RED, BLUE]
    buf = _image([[BLUE] * 5, row, [BLUE] * 5])

    once = smooth(buf, 1)
    assert [once.get_pixel(x, 1) for x in range(5)] == [BLUE, BLUE, RED, BLUE, BLUE]

    twice = smooth(buf, 2)
    assert (twice.rgb == BLUE).all()


def test_smooth_rejects_negative_iterations():
    with pytest.raises(ValueError):
        smooth(_outlier(RED), -1)


# --- spatial blocking ----------------------------------------------------


def test_region_size_is_clamped():
    assert region_size(10, 10) == 5
    assert region_size(200, 200) == 10
    assert region_size(1000, 1000) == 20


def test_spatial_weight_is_clamped():
    assert spatial_weight(0) == 0.7
    assert spatial_weight(50) == 0.5
    assert spatial_weight(100) == 0.1


def test_weight_fields_vote_at_cell_centers():
    rgb = np.zeros((10, 10, 3), dtype=np.uint8)
    fields = build_weight_fields(rgb, np.array([[0, 0, 0]], dtype=np.uint8))

    # Cells are 5x5 with centers at 2 and 7. Every pixel gives 4 to its own
    # center and 1 to each of the three in-image neighbor centers.
    assert fields.shape == (1, 100)
    assert int(fields.sum()) == 700
    assert fields[0, 2 * 10 + 2] == 25 * 4 + 3 * 25
    assert np.count_nonzero(fields) == 4


def test_weight_field_smoothing_only_changes_interior():
    field = np.zeros((1, 9), dtype=np.int64)
    field[0, 4] = 8
    field[0, 0] = 5
    out = smooth_weight_fields(field, 3, 3)
    assert out.reshape(3, 3).tolist() == [[5, 0, 0], [0, 4, 0], [0, 0, 0]]


@pytest.mark.parametrize("threshold", [0, 30, 60, 100])
def test_flat_image_survives_color_blocking(threshold):
    color = (30, 60, 90)
    buf = PixelBuffer(np.full((24, 32, 3), color, dtype=np.uint8))
    palette = np.array([color], dtype=np.uint8)

    assert np.array_equal(spatial_block(buf, palette, threshold).data, buf.data)
    assert np.array_equal(color_block(buf, palette, threshold, 10, 2).data, buf.data)


def test_spatial_block_decides_once_per_source_color():
    rng = np.random.default_rng(4)
    choices = np.array([[10, 10, 10], [120, 130, 140], [250, 240, 230]], dtype=np.uint8)
    picks = rng.integers(0, 3, size=(20, 20))
    buf = PixelBuffer(choices[picks])
    palette = np.array([[0, 0, 0], [128, 128, 128], [255, 255, 255]], dtype=np.uint8)

    out = spatial_block(buf, palette, 30)
    for k in range(3):
        mapped = out.rgb[picks == k]
        assert len(np.unique(mapped, axis=0)) == 1
        assert any((mapped[0] == p).all() for p in palette)
