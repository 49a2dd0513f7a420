import numpy as np

from facepoints.corners import CornerExtractor


def square_patch(size=40, lo=10, hi=30):
    patch = np.zeros((size, size), dtype=np.uint8)
    patch[lo:hi, lo:hi] = 255
    return patch


def test_square_corners_are_found():
    patch = square_patch()
    points = CornerExtractor().extract(patch)

    assert 4 <= len(points) <= 20
    for corner in [(10, 10), (29, 10), (10, 29), (29, 29)]:
        distances = [np.hypot(x - corner[0], y - corner[1]) for x, y in points]
        assert min(distances) <= 3.0


def test_points_are_local_to_the_patch():
    patch = square_patch()
    for x, y in CornerExtractor().extract(patch):
        assert 0 <= x < patch.shape[1]
        assert 0 <= y < patch.shape[0]


def test_color_patches_are_accepted():
    gray = square_patch()
    color = np.dstack([gray, gray, gray])
    extractor = CornerExtractor()
    assert extractor.extract(color) == extractor.extract(gray)


def test_candidate_count_is_capped(textured_image):
    points = CornerExtractor(max_corners=20).extract(textured_image)
    assert 0 < len(points) <= 20


def test_flat_or_tiny_patches_give_no_candidates():
    extractor = CornerExtractor()
    assert extractor.extract(np.full((30, 30), 128, dtype=np.uint8)) == []
    assert extractor.extract(np.zeros((0, 0), dtype=np.uint8)) == []
    assert extractor.extract(np.zeros((2, 10), dtype=np.uint8)) == []


def test_extraction_is_deterministic(textured_image):
    extractor = CornerExtractor()
    assert extractor.extract(textured_image) == extractor.extract(textured_image)
