from pathlib import Path

import numpy as np
from loguru import logger
from PIL import Image, UnidentifiedImageError

from asciivid.errors import DecodeError
from asciivid.pixels import PixelBuffer

VIDEO_EXTENSIONS = (".mp4", ".avi", ".mkv")

# Pillow modes that map directly onto a supported channel layout
_NATIVE_MODES = ("L", "RGB", "RGBA")


def is_video(path: str | Path) -> bool:
    """Classify by exact file suffix; anything unrecognised is treated as an image."""
    return Path(path).suffix in VIDEO_EXTENSIONS


def _reduce_to_8bit(image: Image.Image) -> Image.Image:
    """Keep the high byte of 16-bit samples (I;16* and I hold 0-65535 greyscale)."""
    samples = np.clip(np.asarray(image, dtype=np.int64), 0, 0xFFFF) >> 8
    return Image.fromarray(samples.astype(np.uint8))


def _normalise_mode(image: Image.Image) -> Image.Image:
    if image.mode in _NATIVE_MODES:
        return image
    if image.mode == "I" or image.mode.startswith("I;16"):
        return _reduce_to_8bit(image)
    if image.mode in ("LA", "PA", "La", "RGBa") or "transparency" in image.info:
        return image.convert("RGBA")
    return image.convert("RGB")


def load_image(path: str | Path) -> PixelBuffer:
    path = Path(path)
    try:
        with Image.open(path) as image:
            image = _normalise_mode(image)
            buffer = PixelBuffer.from_image(image)
    except FileNotFoundError as exc:
        raise DecodeError(f"File not found: {path}") from exc
    except Image.DecompressionBombError as exc:
        raise DecodeError(f"Image {path} is too large to decode: {exc}") from exc
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise DecodeError(f"Cannot decode image {path}: {exc}") from exc
    logger.info("Loaded {} ({}x{}, {} channel(s))", path, buffer.width, buffer.height, buffer.channels)
    return buffer
