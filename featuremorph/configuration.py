from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Set

import yaml

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_PRESET_DIR = PROJECT_ROOT / "presets"
PRESET_SUFFIXES = (".yaml", ".yml", ".json")


@dataclass
class WarpParameters:
    a: float = 0.5
    b: float = 1.0
    p: float = 0.2

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WarpParameters":
        return cls(
            a=float(data.get("a", 0.5)),
            b=float(data.get("b", 1.0)),
            p=float(data.get("p", 0.2)),
        )

    def validate(self) -> None:
        if self.a <= 0.0:
            raise ValueError(f"Warp parameter a must be positive, got {self.a}")
        if self.b < 0.0:
            raise ValueError(f"Warp parameter b must be non-negative, got {self.b}")


@dataclass
class MorphConfig:
    image1_path: Path
    image2_path: Path
    segments_path: Path
    output_path: Optional[Path] = None
    time: float = 0.5
    warp: WarpParameters = field(default_factory=WarpParameters)
    channels: int = 4
    frames: Optional[int] = None
    output_frame_pattern: Optional[Path] = None
    video_path: Optional[Path] = None
    fps: float = 24.0
    config_name: str = "cli"
    log_level: str = "INFO"
    cli_overrides: Set[str] = field(default_factory=set, repr=False)

    def resolve(self) -> None:
        self.image1_path = self.image1_path.expanduser()
        self.image2_path = self.image2_path.expanduser()
        self.segments_path = self.segments_path.expanduser()
        if self.output_path:
            self.output_path = self.output_path.expanduser()
        if self.output_frame_pattern:
            self.output_frame_pattern = self.output_frame_pattern.expanduser()
        if self.video_path:
            self.video_path = self.video_path.expanduser()

    def clamp_time(self) -> None:
        if 0.0 <= self.time <= 1.0:
            return
        clamped = 1.0 if self.time > 1.0 else 0.0
        logger.warning("Time t=%s out of range: clamping to %s", self.time, clamped)
        self.time = clamped

    def validate(self) -> None:
        self.warp.validate()
        if self.channels not in (0, 1, 2, 3, 4):
            raise ValueError(f"Unsupported channel count: {self.channels}")
        if self.frames is not None:
            if self.frames < 1:
                raise ValueError(f"Frame count must be positive, got {self.frames}")
            if not (self.output_frame_pattern or self.video_path):
                raise ValueError("Sequence rendering needs an output frame pattern or a video path")
        elif self.output_path is None:
            raise ValueError("An output path is required")
        if self.fps <= 0.0:
            raise ValueError(f"fps must be positive, got {self.fps}")


def resolve_preset_path(name_or_path: str) -> Path:
    """Accept a preset file path or the name of a bundled preset."""
    path = Path(name_or_path).expanduser()
    if path.exists():
        return path
    for suffix in PRESET_SUFFIXES:
        candidate = DEFAULT_PRESET_DIR / f"{name_or_path}{suffix}"
        if candidate.exists():
            return candidate
    raise FileNotFoundError(path)


def load_preset(path: Path) -> Dict[str, Any]:
    path = path.expanduser()
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as fh:
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(fh)
        else:
            data = json.load(fh)
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"Preset {path} must contain a mapping")
    logger.debug("Loaded preset %s", path)
    return data or {}


def _optional_path(value: Any) -> Optional[Path]:
    return Path(value) if value else None


def build_config(cli_args: Dict[str, Any], preset: Optional[Dict[str, Any]] = None) -> MorphConfig:
    merged: Dict[str, Any] = {}
    preset = preset or {}
    merged.update(preset)
    merged.update({k: v for k, v in cli_args.items() if v is not None})

    cli_overrides: Set[str] = {k for k, v in cli_args.items() if v is not None}

    missing = [key for key in ("image1", "image2", "segments") if not merged.get(key)]
    if missing:
        raise ValueError(f"Missing required settings: {', '.join(missing)}")

    warp_data = dict(preset.get("warp") or {})
    warp_data.update({k: merged[k] for k in ("a", "b", "p") if merged.get(k) is not None})

    config = MorphConfig(
        image1_path=Path(merged["image1"]),
        image2_path=Path(merged["image2"]),
        segments_path=Path(merged["segments"]),
        output_path=_optional_path(merged.get("output")),
        time=float(merged.get("time", 0.5)),
        warp=WarpParameters.from_dict(warp_data),
        channels=int(merged.get("channels", 4)),
        frames=int(merged["frames"]) if merged.get("frames") is not None else None,
        output_frame_pattern=_optional_path(merged.get("output_frame_pattern")),
        video_path=_optional_path(merged.get("video")),
        fps=float(merged.get("fps", 24.0)),
        config_name=str(merged.get("config_name", "cli")),
        log_level=str(merged.get("log_level", "INFO")),
    )
    config.cli_overrides = cli_overrides
    config.resolve()
    config.clamp_time()
    config.validate()
    return config
