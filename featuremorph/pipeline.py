from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from .configuration import MorphConfig
from .encode import VideoEncoder
from .geometry import LineSegment
from .morph_warp import frame_times, morph_images, morph_sequence
from .raster import Image
from .segments import load_segments

logger = logging.getLogger(__name__)


class MorphPipeline:
    def __init__(self, config: MorphConfig) -> None:
        self.config = config
        self._image1: Optional[Image] = None
        self._image2: Optional[Image] = None
        self._seg1: List[LineSegment] = []
        self._seg2: List[LineSegment] = []

    # ------------------------------------------------------------------
    def run(self) -> List[Path]:
        cfg = self.config
        self._load_inputs()
        logger.info(
            "Morphing %s into %s, parameters { a : %s, b : %s, p : %s }",
            cfg.image1_path,
            cfg.image2_path,
            cfg.warp.a,
            cfg.warp.b,
            cfg.warp.p,
        )
        if cfg.frames is not None:
            return self._render_sequence(cfg.frames)
        return [self._render_single(cfg.time)]

    # ------------------------------------------------------------------
    def _load_inputs(self) -> None:
        cfg = self.config
        image1 = Image.load(cfg.image1_path, cfg.channels)
        image2 = Image.load(cfg.image2_path, cfg.channels)
        if not image1.has_same_dims_as(image2):
            raise ValueError("Both input images must be the same dimensions")
        logger.info(
            "Loaded two %dx%d %d-channel images",
            image1.width,
            image1.height,
            image1.num_channels,
        )
        self._image1, self._image2 = image1, image2
        self._seg1, self._seg2 = load_segments(cfg.segments_path)
        logger.info("Read %d segments", len(self._seg1))

    def _render_single(self, t: float) -> Path:
        cfg = self.config
        logger.info("Generating %s at time t = %s", cfg.output_path, t)
        morphed = morph_images(
            self._image1, self._image2, self._seg1, self._seg2, t, cfg.warp.a, cfg.warp.b, cfg.warp.p
        )
        return morphed.save(cfg.output_path)

    def _render_sequence(self, count: int) -> List[Path]:
        cfg = self.config
        times = frame_times(count)
        written: List[Path] = []
        encoder: Optional[VideoEncoder] = None
        if cfg.video_path:
            encoder = VideoEncoder(
                cfg.video_path,
                fps=cfg.fps,
                frame_size=(self._image1.width, self._image1.height),
            )
        frames = morph_sequence(
            self._image1,
            self._image2,
            self._seg1,
            self._seg2,
            times,
            a=cfg.warp.a,
            b=cfg.warp.b,
            p=cfg.warp.p,
        )
        try:
            for index, (t, morphed) in enumerate(tqdm(frames, total=count, desc="Morphing", unit="frame")):
                if cfg.output_frame_pattern:
                    written.append(self._export_frame(cfg.output_frame_pattern, index, t, morphed))
                if encoder:
                    encoder.write(morphed)
        finally:
            if encoder:
                encoder.close()
        if encoder:
            written.append(cfg.video_path)
        return written

    def _export_frame(self, pattern: Path, index: int, t: float, frame: Image) -> Path:
        target_path = Path(str(pattern).format(index=index, i=index, frame=index, t=t))
        return frame.save(target_path)


def pipeline_from_config(config: MorphConfig) -> MorphPipeline:
    logger.info("Pipeline configuration: %s", json.dumps(asdict(config), default=str, indent=2))
    return MorphPipeline(config)
