from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

try:
    import cv2
except ImportError as exc:  # pragma: no cover
    raise RuntimeError("OpenCV required for encoding") from exc

from .raster import Image

logger = logging.getLogger(__name__)

FOURCC_CANDIDATES = ("avc1", "H264", "mp4v", "XVID", "MJPG")


class VideoEncoder:
    def __init__(
        self,
        output_path: Path,
        *,
        fps: float,
        frame_size: Tuple[int, int],
    ) -> None:
        self.output_path = output_path
        self.fps = fps
        self.frame_size = frame_size
        self.frames_written = 0
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self._writer = self._create_writer(output_path)
        if self._writer is None:
            raise RuntimeError(
                "Failed to open VideoWriter. Ensure FFmpeg with MP4 support is installed or adjust output codec."
            )
        logger.info("VideoEncoder initialised: %s", output_path)

    def _create_writer(self, path: Path) -> Optional[cv2.VideoWriter]:
        for code in FOURCC_CANDIDATES:
            fourcc = cv2.VideoWriter_fourcc(*code)
            writer = cv2.VideoWriter(str(path), fourcc, self.fps, self.frame_size)
            if writer.isOpened():
                logger.info("Using VideoWriter fourcc=%s", code)
                return writer
            writer.release()
        return None

    def write(self, frame: Image) -> None:
        if self._writer is None:
            raise RuntimeError(f"VideoEncoder for {self.output_path} is closed")
        frame_bgr = frame.to_bgr()
        if frame_bgr.ndim == 2:
            frame_bgr = cv2.cvtColor(frame_bgr, cv2.COLOR_GRAY2BGR)
        elif frame_bgr.shape[2] == 4:
            frame_bgr = cv2.cvtColor(frame_bgr, cv2.COLOR_BGRA2BGR)
        if frame_bgr.shape[1] != self.frame_size[0] or frame_bgr.shape[0] != self.frame_size[1]:
            frame_bgr = cv2.resize(frame_bgr, self.frame_size, interpolation=cv2.INTER_LINEAR)
        self._writer.write(frame_bgr)
        self.frames_written += 1

    def close(self) -> None:
        if self._writer:
            self._writer.release()
            self._writer = None
            logger.info("Wrote %d frames to %s", self.frames_written, self.output_path)

    def __enter__(self) -> "VideoEncoder":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
