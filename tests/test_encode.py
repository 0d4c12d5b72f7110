from pathlib import Path
import sys

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import cv2

from featuremorph.encode import VideoEncoder
from featuremorph.raster import Image

WIDTH, HEIGHT = 32, 24


def read_back(path):
    capture = cv2.VideoCapture(str(path))
    assert capture.isOpened()
    frames = []
    while True:
        success, frame = capture.read()
        if not success or frame is None:
            break
        frames.append(frame)
    capture.release()
    return frames


def solid(color, width=WIDTH, height=HEIGHT):
    channels = len(color)
    return Image.from_array(np.full((height, width, channels), color, dtype=np.uint8))


def test_sequence_roundtrip_frame_count_and_size(tmp_path):
    path = tmp_path / "clip.avi"
    with VideoEncoder(path, fps=10.0, frame_size=(WIDTH, HEIGHT)) as encoder:
        for value in (0, 80, 160, 240):
            encoder.write(solid((value, value, value)))
    assert encoder.frames_written == 4
    frames = read_back(path)
    assert len(frames) == 4
    assert all(frame.shape == (HEIGHT, WIDTH, 3) for frame in frames)


def test_gray_and_rgba_frames_are_converted(tmp_path):
    path = tmp_path / "mixed.avi"
    with VideoEncoder(path, fps=10.0, frame_size=(WIDTH, HEIGHT)) as encoder:
        encoder.write(solid((200,)))
        encoder.write(solid((255, 0, 0, 255)))
    gray_frame, red_frame = read_back(path)
    assert abs(float(gray_frame.mean()) - 200.0) < 40.0
    # BGR order on read: red lands in the last channel
    blue, green, red = (float(red_frame[..., c].mean()) for c in range(3))
    assert red > 150.0
    assert blue < 100.0 and green < 100.0


def test_frames_are_resized_to_frame_size(tmp_path):
    path = tmp_path / "resized.avi"
    with VideoEncoder(path, fps=10.0, frame_size=(WIDTH, HEIGHT)) as encoder:
        encoder.write(solid((50, 60, 70), width=16, height=12))
    (frame,) = read_back(path)
    assert frame.shape == (HEIGHT, WIDTH, 3)


def test_write_after_close_raises(tmp_path):
    encoder = VideoEncoder(tmp_path / "closed.avi", fps=10.0, frame_size=(WIDTH, HEIGHT))
    encoder.write(solid((1, 2, 3)))
    encoder.close()
    encoder.close()
    with pytest.raises(RuntimeError):
        encoder.write(solid((1, 2, 3)))


def test_encoder_creates_parent_directory(tmp_path):
    path = tmp_path / "nested" / "out" / "clip.avi"
    with VideoEncoder(path, fps=5.0, frame_size=(WIDTH, HEIGHT)) as encoder:
        encoder.write(solid((9, 9, 9)))
    assert path.exists()
