from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np

try:
    import cv2
except ImportError as exc:  # pragma: no cover
    raise RuntimeError("OpenCV required for image loading and saving") from exc

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = {".png", ".bmp", ".jpg", ".jpeg"}


class Image:
    """Byte-per-channel raster stored as an owned ``(H, W, C)`` uint8 array."""

    def __init__(self, width: int = 0, height: int = 0, channels: int = 0) -> None:
        self._data = np.zeros((0, 0, 0), dtype=np.uint8)
        self.resize(width, height, channels)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "Image":
        arr = np.asarray(array)
        if arr.ndim == 2:
            arr = arr[..., None]
        if arr.ndim != 3:
            raise ValueError(f"Expected (H, W) or (H, W, C) array, got shape {arr.shape}")
        image = cls()
        image._data = np.ascontiguousarray(arr, dtype=np.uint8).copy()
        return image

    @classmethod
    def load(cls, path: Union[str, Path], channels: int = 0) -> "Image":
        """Decode an image file.

        ``channels`` of 0 keeps the channel count stored on disk, otherwise
        the image is converted to 1 (gray), 2 (gray + alpha), 3 (RGB) or
        4 (RGBA) channels.
        """
        path = Path(path).expanduser()
        if not path.exists():
            raise FileNotFoundError(path)
        raw = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if raw is None:
            raise ValueError(f"Could not load image from {path}")
        if raw.dtype != np.uint8:
            raise ValueError(f"Only 8-bit images are supported, got {raw.dtype} in {path}")
        image = cls.from_array(_to_channels(_bgr_to_rgb(raw), channels))
        logger.debug(
            "Loaded %s (%dx%d, %d channels)", path, image.width, image.height, image.num_channels
        )
        return image

    def save(self, path: Union[str, Path]) -> Path:
        path = Path(path).expanduser()
        if path.suffix.lower() not in SUPPORTED_SUFFIXES:
            raise ValueError(f"Unsupported output image format: {path}")
        path.parent.mkdir(parents=True, exist_ok=True)
        if not cv2.imwrite(str(path), self.to_bgr()):
            raise RuntimeError(f"Failed to write image: {path}")
        logger.debug("Saved %s", path)
        return path

    # ------------------------------------------------------------------
    @property
    def width(self) -> int:
        return self._data.shape[1]

    @property
    def height(self) -> int:
        return self._data.shape[0]

    @property
    def num_channels(self) -> int:
        return self._data.shape[2]

    @property
    def data(self) -> np.ndarray:
        return self._data

    def pixel(self, row: int, col: int) -> np.ndarray:
        """View of the ``num_channels`` bytes of one pixel."""
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(
                f"Pixel ({row}, {col}) outside {self.height}x{self.width} image"
            )
        return self._data[row, col]

    def scanline(self, row: int) -> np.ndarray:
        if not 0 <= row < self.height:
            raise IndexError(f"Row {row} outside image of height {self.height}")
        return self._data[row]

    def resize(self, width: int, height: int, channels: int) -> None:
        """Reallocate to the given dimensions; contents survive only an exact match."""
        if width < 0 or height < 0 or channels < 0:
            raise ValueError("Image dimensions must be non-negative")
        if self._data.shape == (height, width, channels):
            return
        self._data = np.zeros((height, width, channels), dtype=np.uint8)

    def has_same_dims_as(self, other: "Image") -> bool:
        return self._data.shape == other._data.shape

    def copy(self) -> "Image":
        return Image.from_array(self._data)

    __copy__ = copy

    def __deepcopy__(self, memo) -> "Image":
        return self.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        return self.has_same_dims_as(other) and bool(np.array_equal(self._data, other._data))

    __hash__ = None

    def __repr__(self) -> str:
        return f"Image(width={self.width}, height={self.height}, channels={self.num_channels})"

    def to_bgr(self) -> np.ndarray:
        """Channel order expected by OpenCV writers."""
        channels = self.num_channels
        if channels == 3:
            return cv2.cvtColor(self._data, cv2.COLOR_RGB2BGR)
        if channels == 4:
            return cv2.cvtColor(self._data, cv2.COLOR_RGBA2BGRA)
        # alpha of gray + alpha rasters is dropped
        return np.ascontiguousarray(self._data[..., 0])


def _bgr_to_rgb(raw: np.ndarray) -> np.ndarray:
    if raw.ndim == 2:
        return raw
    if raw.shape[2] == 3:
        return cv2.cvtColor(raw, cv2.COLOR_BGR2RGB)
    if raw.shape[2] == 4:
        return cv2.cvtColor(raw, cv2.COLOR_BGRA2RGBA)
    return raw


def _to_channels(rgb: np.ndarray, channels: int) -> np.ndarray:
    if rgb.ndim == 2:
        rgb = rgb[..., None]
    current = rgb.shape[2]
    if channels == 0 or channels == current:
        return rgb
    if channels not in (1, 2, 3, 4):
        raise ValueError(f"Unsupported channel count: {channels}")

    if current in (1, 2):
        gray = rgb[..., 0]
        alpha = rgb[..., 1] if current == 2 else np.full(gray.shape, 255, dtype=np.uint8)
    else:
        gray = cv2.cvtColor(np.ascontiguousarray(rgb[..., :3]), cv2.COLOR_RGB2GRAY)
        alpha = rgb[..., 3] if current == 4 else np.full(gray.shape, 255, dtype=np.uint8)

    if channels == 1:
        return gray[..., None]
    if channels == 2:
        return np.stack([gray, alpha], axis=-1)
    color = rgb[..., :3] if current >= 3 else np.repeat(gray[..., None], 3, axis=-1)
    if channels == 3:
        return color
    return np.concatenate([color, alpha[..., None]], axis=-1)
