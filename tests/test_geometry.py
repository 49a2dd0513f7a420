import numpy as np
import pytest

from facepoints.geometry import (
    area,
    center,
    clip_rect,
    contains,
    crop,
    eyebrow_region,
    pad,
    region_for_band,
    to_global,
    to_local,
)

FACES = [(0, 0, 100, 100), (37, 12, 81, 93), (5, 200, 31, 30), (120, 40, 257, 263)]
BANDS = [(0.2, 0.55), (0.4, 0.75), (0.7, 0.99), (0.0, 1.0)]


@pytest.mark.parametrize("face", FACES)
@pytest.mark.parametrize("band", BANDS)
def test_band_region_stays_inside_face(face, band):
    region = region_for_band(face, *band)
    fx, fy, fw, fh = face
    rx, ry, rw, rh = region

    assert rx == fx
    assert rw == fw
    assert ry >= fy
    assert ry + rh <= fy + fh


def test_band_region_truncates_fractional_bounds():
    assert region_for_band((10, 10, 50, 50), 0.2, 0.55) == (10, 20, 50, 17)


def test_clip_rect_limits_to_image():
    assert clip_rect((-5, -5, 20, 20), (10, 12)) == (0, 0, 12, 10)
    assert clip_rect((8, 8, 5, 5), (10, 10)) == (8, 8, 2, 2)
    assert clip_rect((50, 50, 5, 5), (10, 10))[2:] == (0, 0)


def test_crop_is_a_view_of_the_rect():
    image = np.arange(100, dtype=np.uint8).reshape(10, 10)
    patch = crop(image, (2, 3, 4, 2))
    assert patch.shape == (2, 4)
    assert patch[0, 0] == image[3, 2]


def test_pad_and_center():
    assert pad((10, 10, 20, 8), pad_x=3) == (7, 10, 26, 8)
    assert pad((10, 10, 20, 8), pad_x=5, pad_top=5) == (5, 5, 30, 13)
    assert center((0, 0, 15, 9)) == (7.0, 4.0)
    assert area((1, 2, 3, 4)) == 12


def test_eyebrow_region_sits_over_the_eye():
    region = eyebrow_region((100, 100, 40, 20))
    assert region == (94, 97, 52, 8)


def test_frame_translation_round_trips_origin():
    rect = (10, 20, 5, 5)
    assert to_global([(1.0, 2.0)], rect) == [(11.0, 22.0)]
    assert to_local([(11.0, 22.0)], rect) == [(1.0, 2.0)]


def test_contains_is_half_open():
    rect = (0, 0, 10, 10)
    assert contains(rect, (0, 0))
    assert contains(rect, (9.5, 9.5))
    assert not contains(rect, (10, 5))
