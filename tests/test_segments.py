from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from featuremorph.geometry import LineSegment, Vec2
from featuremorph.segments import (
    SegmentFileError,
    format_segments,
    load_segments,
    parse_segments,
    save_segments,
)

SAMPLE = """2
10 20 30 40 11 21 31 41
0 0 5.5 0 1 1 6.5 1
"""


def test_parse_segments_pairs_by_line():
    seg1, seg2 = parse_segments(SAMPLE)
    assert len(seg1) == len(seg2) == 2
    assert seg1[0] == LineSegment(Vec2(10, 20), Vec2(30, 40))
    assert seg2[0] == LineSegment(Vec2(11, 21), Vec2(31, 41))
    assert seg1[1].end == Vec2(5.5, 0)
    assert seg2[1].start == Vec2(1, 1)


def test_parse_segments_skips_comments_and_blank_lines():
    text = "# exported correspondences\n\n1\n\n0 0 1 0 0 0 0 1\n"
    seg1, seg2 = parse_segments(text)
    assert seg1 == [LineSegment(Vec2(0, 0), Vec2(1, 0))]
    assert seg2 == [LineSegment(Vec2(0, 0), Vec2(0, 1))]


def test_parse_segments_ignores_lines_after_declared_count():
    seg1, _ = parse_segments("1\n0 0 1 0 0 0 0 1\nnot a segment\n")
    assert len(seg1) == 1


def test_parse_segments_rejects_bad_count():
    with pytest.raises(SegmentFileError, match="number of segments"):
        parse_segments("two\n")


def test_parse_segments_reports_malformed_line():
    with pytest.raises(SegmentFileError, match=":3:"):
        parse_segments("2\n0 0 1 0 0 0 0 1\n0 0 1 0 x 0 0 1\n")
    with pytest.raises(SegmentFileError, match="segment pair 0"):
        parse_segments("1\n0 0 1 0\n")


def test_parse_segments_rejects_missing_pairs():
    with pytest.raises(SegmentFileError, match="expected 3"):
        parse_segments("3\n0 0 1 0 0 0 0 1\n")
    with pytest.raises(SegmentFileError):
        parse_segments("")


def test_segment_file_error_is_value_error():
    assert issubclass(SegmentFileError, ValueError)


def test_save_and_load_segments(tmp_path):
    seg1, seg2 = parse_segments(SAMPLE)
    path = save_segments(tmp_path / "nested" / "pairs.txt", seg1, seg2)
    assert path.read_text(encoding="utf-8").splitlines()[0] == "2"
    loaded1, loaded2 = load_segments(path)
    assert loaded1 == seg1
    assert loaded2 == seg2


def test_load_segments_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_segments(tmp_path / "missing.txt")


def test_format_segments_requires_pairs():
    with pytest.raises(ValueError):
        format_segments([LineSegment(Vec2(0, 0), Vec2(1, 0))], [])
