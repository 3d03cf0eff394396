import numpy as np

# Emptiest to densest
GLYPH_RAMP = " .:-=+*#%@"

# Inclusive lower bounds of each bucket above the first
THRESHOLDS = (30, 60, 90, 120, 150, 180, 210, 240)

# Ramp index for each bucket; the brightest bucket takes the densest glyph
BUCKET_TO_INDEX = (0, 1, 2, 3, 4, 5, 6, 7, 9)

TRANSPARENT_GLYPH = " "

_THRESHOLD_ARRAY = np.array(THRESHOLDS)
_INDEX_ARRAY = np.array(BUCKET_TO_INDEX)


def brightness(r: int, g: int, b: int) -> int:
    """Unweighted channel average, truncated."""
    return (int(r) + int(g) + int(b)) // 3


def glyph_index(level: int) -> int:
    bucket = 0
    for threshold in THRESHOLDS:
        if level < threshold:
            break
        bucket += 1
    return BUCKET_TO_INDEX[bucket]


def get_glyph(level: int) -> str:
    return GLYPH_RAMP[glyph_index(level)]


def brightness_grid(rgb: np.ndarray) -> np.ndarray:
    """Per-pixel brightness of an (..., 3) uint8 array."""
    return rgb.astype(np.int32).sum(axis=-1) // 3


def glyph_indices(levels: np.ndarray) -> np.ndarray:
    """Vectorised ``glyph_index`` over an array of brightness levels."""
    buckets = np.searchsorted(_THRESHOLD_ARRAY, levels, side="right")
    return _INDEX_ARRAY[buckets]
