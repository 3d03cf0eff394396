import numpy as np
from loguru import logger

from asciivid.errors import AllocationError
from asciivid.pixels import BoundingBox, PixelBuffer, TargetDimensions


def _scale_ratio(width: int, height: int, box: BoundingBox) -> tuple[int, int]:
    """min(max_width / width, max_height / height) as an exact (numerator, denominator) pair."""
    if box.max_width * height <= box.max_height * width:
        return box.max_width, width
    return box.max_height, height


def target_dimensions(width: int, height: int, box: BoundingBox) -> TargetDimensions:
    """Largest size that fits ``box`` with the aspect ratio of ``width`` x ``height``.

    Sources that already fit are returned unchanged; nothing is ever upscaled.
    Each side is floor(side * scale), kept at least one pixel.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Source dimensions must be positive, got {width}x{height}")
    if box.contains(width, height):
        return TargetDimensions(width, height)
    num, den = _scale_ratio(width, height, box)
    return TargetDimensions(max(1, width * num // den), max(1, height * num // den))


def resample(buffer: PixelBuffer, box: BoundingBox) -> PixelBuffer:
    """Nearest-neighbour downsample of ``buffer`` into ``box``.

    Returns ``buffer`` itself when it already fits. Otherwise destination pixel
    (x, y) copies source pixel (floor(x / scale), floor(y / scale)) on every
    channel, with no blending.
    """
    if box.contains(buffer.width, buffer.height):
        return buffer

    target = target_dimensions(buffer.width, buffer.height, box)
    num, den = _scale_ratio(buffer.width, buffer.height, box)
    logger.debug("Resampling {}x{} -> {}x{}", buffer.width, buffer.height, target.width, target.height)

    src_x = np.minimum(np.arange(target.width) * den // num, buffer.width - 1)
    src_y = np.minimum(np.arange(target.height) * den // num, buffer.height - 1)
    try:
        pixels = np.ascontiguousarray(buffer.pixels[src_y[:, None], src_x[None, :]])
    except MemoryError as exc:
        raise AllocationError(f"Cannot allocate {target.width}x{target.height} resampled image") from exc
    return PixelBuffer(width=target.width, height=target.height, channels=buffer.channels, pixels=pixels)
