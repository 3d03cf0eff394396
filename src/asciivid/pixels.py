from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from PIL import Image

VALID_CHANNELS = (1, 3, 4)


@dataclass(frozen=True)
class BoundingBox:
    """Largest grid (in source pixels) a rendered frame may occupy."""

    max_width: int
    max_height: int

    def __post_init__(self):
        if self.max_width <= 0 or self.max_height <= 0:
            raise ValueError(f"Bounding box must be positive, got {self.max_width}x{self.max_height}")

    def contains(self, width: int, height: int) -> bool:
        return width <= self.max_width and height <= self.max_height


@dataclass(frozen=True)
class TargetDimensions:
    width: int
    height: int


@dataclass
class PixelBuffer:
    """Row-major uint8 pixels of shape (height, width, channels).

    One channel is luminance and is replicated across R, G and B by ``rgb()``.
    """

    width: int
    height: int
    channels: int
    pixels: np.ndarray

    def __post_init__(self):
        if self.channels not in VALID_CHANNELS:
            raise ValueError(f"Unsupported channel count: {self.channels}")
        expected = (self.height, self.width, self.channels)
        if self.pixels.dtype != np.uint8 or self.pixels.shape != expected:
            raise ValueError(f"Pixel array {self.pixels.dtype}{self.pixels.shape} does not match uint8{expected}")

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> "PixelBuffer":
        if pixels.ndim == 2:
            pixels = pixels[:, :, None]
        height, width, channels = pixels.shape
        return cls(width=width, height=height, channels=channels, pixels=pixels)

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        """Wrap a Pillow image already in mode L, RGB or RGBA."""
        return cls.from_array(np.asarray(image, dtype=np.uint8))

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    def rgb(self) -> np.ndarray:
        """(height, width, 3) view of the colour channels."""
        if self.channels == 1:
            return np.repeat(self.pixels, 3, axis=2)
        return self.pixels[:, :, :3]

    def alpha(self) -> np.ndarray | None:
        if not self.has_alpha:
            return None
        return self.pixels[:, :, 3]
