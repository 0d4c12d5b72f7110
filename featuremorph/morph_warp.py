from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Sequence, Tuple

import numpy as np

from .geometry import LineSegment
from .raster import Image
from .sampling import ROUNDING_EPS, sample_bilinear_map

logger = logging.getLogger(__name__)


def _pixel_grid(width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
    rows, cols = np.indices((height, width), dtype=np.float64)
    return cols, rows


def distort_image(
    image: Image,
    seg_start: Sequence[LineSegment],
    seg_end: Sequence[LineSegment],
    t: float,
    a: float,
    b: float,
    p: float,
) -> Image:
    """Field-warp ``image`` from the ``seg_start`` features towards ``seg_end``.

    Every destination pixel is expressed in the (u, v) frame of each segment
    interpolated to time ``t`` and mapped back into the frame of the
    corresponding start segment. The source location is the weighted mean of
    those candidates, with weight ``(length**p / (a + dist)) ** b``.
    Degenerate segments and zero weight sums are not checked and propagate
    as undefined sample locations.
    """
    if len(seg_start) != len(seg_end):
        raise ValueError(
            f"Segment lists differ in length: {len(seg_start)} != {len(seg_end)}"
        )
    logger.debug("Distorting image (%d segments, t=%.3f)...", len(seg_start), t)
    if not seg_start:
        return image.copy()

    xs, ys = _pixel_grid(image.width, image.height)
    curr = np.stack([xs, ys], axis=-1)
    dis_x = np.zeros_like(xs)
    dis_y = np.zeros_like(ys)
    weight_sum = np.zeros_like(xs)

    # Zero-length segments leave NaN contributions instead of raising.
    with np.errstate(divide="ignore", invalid="ignore"):
        for start_ln, target_ln in zip(seg_start, seg_end):
            end_ln = start_ln.lerp(target_ln, t)
            u = end_ln.line_parameter(curr)
            v = end_ln.signed_line_distance(curr)

            origin = start_ln.start
            direction = start_ln.direction()
            length = np.float64(start_ln.length())
            normal = start_ln.perp() / length

            src_x = origin.x + u * direction.x + v * normal.x
            src_y = origin.y + u * direction.y + v * normal.y

            weight = (length ** p / (a + end_ln.segment_distance(curr, u, v))) ** b
            dis_x += (src_x - xs) * weight
            dis_y += (src_y - ys) * weight
            weight_sum += weight

        map_x = xs + dis_x / weight_sum
        map_y = ys + dis_y / weight_sum

    sampled = sample_bilinear_map(image, map_x, map_y)
    return Image.from_array(sampled[..., : image.num_channels])


def blend_images(img1: Image, img2: Image, t: float) -> Image:
    """Cross-dissolve: ``floor(t * img1 + (1 - t) * img2)`` per byte."""
    if not img1.has_same_dims_as(img2):
        raise ValueError("Images to blend must have identical dimensions")
    logger.debug("Blending images (t=%.3f)...", t)
    mixed = t * img1.data.astype(np.float64) + (1.0 - t) * img2.data.astype(np.float64)
    return Image.from_array(np.clip(np.floor(mixed + ROUNDING_EPS), 0, 255))


def morph_images(
    img1: Image,
    img2: Image,
    seg1: Sequence[LineSegment],
    seg2: Sequence[LineSegment],
    t: float,
    a: float,
    b: float,
    p: float,
) -> Image:
    """Intermediate image at time ``t`` (0 gives ``img1``, 1 gives ``img2``)."""
    if not img1.has_same_dims_as(img2):
        raise ValueError("Both input images must be the same dimensions")
    # img1 moves from 0 to t, img2 from 1 back to t: swap roles and complement t.
    distorted1 = distort_image(img1, seg1, seg2, t, a, b, p)
    distorted2 = distort_image(img2, seg2, seg1, 1.0 - t, a, b, p)
    return blend_images(distorted1, distorted2, 1.0 - t)


def frame_times(count: int) -> List[float]:
    if count < 1:
        raise ValueError(f"Frame count must be positive, got {count}")
    if count == 1:
        return [0.0]
    return [float(t) for t in np.linspace(0.0, 1.0, count)]


def morph_sequence(
    img1: Image,
    img2: Image,
    seg1: Sequence[LineSegment],
    seg2: Sequence[LineSegment],
    times: Iterable[float],
    *,
    a: float,
    b: float,
    p: float,
) -> Iterator[Tuple[float, Image]]:
    for t in times:
        yield t, morph_images(img1, img2, seg1, seg2, t, a, b, p)
