from pathlib import Path
import sys

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from featuremorph.geometry import Vec2
from featuremorph.raster import Image
from featuremorph.sampling import sample_bilinear, sample_bilinear_map


def random_image(width=5, height=4, channels=3, seed=7):
    rng = np.random.default_rng(seed)
    return Image.from_array(rng.integers(0, 256, size=(height, width, channels), dtype=np.uint8))


def test_integer_locations_return_exact_pixels():
    image = random_image()
    for row in range(image.height):
        for col in range(image.width):
            color = sample_bilinear(image, Vec2(col, row))
            assert list(color[:3]) == list(image.pixel(row, col))


def test_missing_channels_are_zero():
    image = random_image(channels=3)
    color = sample_bilinear(image, Vec2(1.5, 2.25))
    assert color.shape == (4,)
    assert color.dtype == np.uint8
    assert color[3] == 0

    gray = Image.from_array(np.full((2, 2), 9, dtype=np.uint8))
    assert list(sample_bilinear(gray, Vec2(0.5, 0.5))) == [9, 0, 0, 0]


def test_outside_locations_clamp_to_edge():
    image = random_image()
    assert np.array_equal(sample_bilinear(image, Vec2(-5, -5)), sample_bilinear(image, Vec2(0, 0)))
    far_corner = sample_bilinear(image, Vec2(100.0, 100.0))
    assert list(far_corner[:3]) == list(image.pixel(image.height - 1, image.width - 1))
    left_edge = sample_bilinear(image, Vec2(-0.5, 2.0))
    assert list(left_edge[:3]) == list(image.pixel(2, 0))


def test_horizontal_midpoint_blends_neighbours():
    image = Image.from_array(np.array([[0, 200]], dtype=np.uint8))
    assert sample_bilinear(image, Vec2(0.5, 0.0))[0] == 100
    assert sample_bilinear(image, Vec2(0.25, 0.0))[0] == 50


def test_vertical_midpoint_blends_neighbours():
    image = Image.from_array(np.array([[0], [200]], dtype=np.uint8))
    assert sample_bilinear(image, Vec2(0.0, 0.5))[0] == 100


def test_centre_of_four_pixels():
    image = Image.from_array(np.array([[0, 100], [100, 200]], dtype=np.uint8))
    assert sample_bilinear(image, Vec2(0.5, 0.5))[0] == 100


def test_result_is_floored():
    image = Image.from_array(np.array([[0, 3]], dtype=np.uint8))
    # 1.5 floors to 1
    assert sample_bilinear(image, Vec2(0.5, 0.0))[0] == 1


def test_flooring_allows_rounding_epsilon():
    image = Image.from_array(np.array([[0, 200]], dtype=np.uint8))
    # 99.99999998 is within ROUNDING_EPS of 100
    assert sample_bilinear(image, Vec2(0.4999999999, 0.0))[0] == 100
    # 99.99 is not
    assert sample_bilinear(image, Vec2(0.49995, 0.0))[0] == 99


def test_map_sampling_shape_and_values():
    image = random_image(width=6, height=5, channels=3)
    rows, cols = np.indices((5, 6), dtype=np.float64)
    sampled = sample_bilinear_map(image, cols, rows)
    assert sampled.shape == (5, 6, 3)
    assert np.array_equal(sampled, image.data)


def test_map_sampling_accepts_raw_arrays():
    pixels = np.array([[10, 20], [30, 40]], dtype=np.uint8)
    sampled = sample_bilinear_map(pixels, np.array([[1.0]]), np.array([[1.0]]))
    assert sampled.shape == (1, 1, 1)
    assert sampled[0, 0, 0] == 40


def test_non_finite_locations_do_not_raise():
    image = random_image()
    color = sample_bilinear(image, Vec2(float("nan"), float("nan")))
    assert color.dtype == np.uint8


def test_mismatched_maps_rejected():
    with pytest.raises(ValueError):
        sample_bilinear_map(random_image(), np.zeros((2, 2)), np.zeros((3, 3)))


def test_empty_image_rejected():
    with pytest.raises(ValueError):
        sample_bilinear(Image(0, 0, 3), Vec2(0, 0))
