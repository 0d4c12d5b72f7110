from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple, Union

from .geometry import LineSegment, Vec2

logger = logging.getLogger(__name__)

SegmentPairs = Tuple[List[LineSegment], List[LineSegment]]

VALUES_PER_PAIR = 8


class SegmentFileError(ValueError):
    pass


def _meaningful_lines(lines: Iterable[str]) -> Iterable[Tuple[int, List[str]]]:
    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        yield lineno, line.split()


def parse_segments(text: str, source: str = "<string>") -> SegmentPairs:
    """Parse corresponding segment pairs.

    The first line holds the number of pairs, each following line eight
    numbers: start and end of the segment in the first image, then start
    and end of the matching segment in the second image.
    """
    seg1: List[LineSegment] = []
    seg2: List[LineSegment] = []
    expected = None
    for lineno, tokens in _meaningful_lines(text.splitlines()):
        if expected is None:
            try:
                expected = int(tokens[0])
            except ValueError as exc:
                raise SegmentFileError(
                    f"{source}:{lineno}: could not read number of segments"
                ) from exc
            if expected < 0:
                raise SegmentFileError(f"{source}:{lineno}: negative segment count {expected}")
            continue
        if len(seg1) >= expected:
            break
        if len(tokens) < VALUES_PER_PAIR:
            raise SegmentFileError(f"{source}:{lineno}: could not read segment pair {len(seg1)}")
        try:
            asx, asy, aex, aey, bsx, bsy, bex, bey = map(float, tokens[:VALUES_PER_PAIR])
        except ValueError as exc:
            raise SegmentFileError(
                f"{source}:{lineno}: could not read segment pair {len(seg1)}"
            ) from exc
        seg1.append(LineSegment(Vec2(asx, asy), Vec2(aex, aey)))
        seg2.append(LineSegment(Vec2(bsx, bsy), Vec2(bex, bey)))

    if expected is None:
        raise SegmentFileError(f"{source}: empty correspondence file")
    if len(seg1) != expected:
        raise SegmentFileError(f"{source}: expected {expected} segment pairs, found {len(seg1)}")
    return seg1, seg2


def load_segments(path: Union[str, Path]) -> SegmentPairs:
    path = Path(path).expanduser()
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as fh:
        seg1, seg2 = parse_segments(fh.read(), source=str(path))
    logger.debug("Read %d segment pairs from %s", len(seg1), path)
    return seg1, seg2


def format_segments(seg1: Sequence[LineSegment], seg2: Sequence[LineSegment]) -> str:
    if len(seg1) != len(seg2):
        raise ValueError(f"Segment lists differ in length: {len(seg1)} != {len(seg2)}")
    lines = [str(len(seg1))]
    for first, second in zip(seg1, seg2):
        values = (
            first.start.x, first.start.y, first.end.x, first.end.y,
            second.start.x, second.start.y, second.end.x, second.end.y,
        )
        lines.append(" ".join(f"{value:.10g}" for value in values))
    return "\n".join(lines) + "\n"


def save_segments(path: Union[str, Path], seg1: Sequence[LineSegment], seg2: Sequence[LineSegment]) -> Path:
    path = Path(path).expanduser()
    text = format_segments(seg1, seg2)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
