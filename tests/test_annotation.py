import numpy as np

from facepoints.annotation import AnnotationLayer, composite


def test_marks_outside_bounds_are_dropped():
    layer = AnnotationLayer((10, 10, 20, 20))
    layer.circle((5.0, 5.0), (255, 0, 0))
    layer.circle((15.0, 15.0), (255, 0, 0))
    layer.rectangle((0, 0, 40, 40), (0, 0, 255))
    layer.rectangle((12, 12, 5, 5), (0, 0, 255))

    assert layer.dropped == 2
    assert len(layer.marks) == 2


def test_rendering_stays_inside_bounds():
    image = np.zeros((50, 50, 3), dtype=np.uint8)
    layer = AnnotationLayer((10, 10, 20, 20))
    layer.circle((10.0, 10.0), (255, 255, 255))
    layer.circle((29.0, 29.0), (255, 255, 255))
    layer.rectangle((10, 10, 20, 20), (0, 255, 0))

    result = composite(image, [layer])

    outside = result.copy()
    outside[10:30, 10:30] = 0
    assert not outside.any()
    assert result[10:30, 10:30].any()
    assert not image.any()


def test_later_layers_draw_over_earlier_ones():
    image = np.zeros((20, 20, 3), dtype=np.uint8)
    first = AnnotationLayer((0, 0, 20, 20))
    second = AnnotationLayer((0, 0, 20, 20))
    first.circle((10.0, 10.0), (255, 0, 0), thickness=-1)
    second.circle((10.0, 10.0), (0, 0, 255), thickness=-1)

    result = composite(image, [first, second])
    assert tuple(result[10, 10]) == (0, 0, 255)
