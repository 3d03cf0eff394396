"""Video demux/decode collaborators.

The session controller only talks to the protocols below, so any backend that
can hand out containers, decoders and scalers can drive it. ``OpenCVBackend``
is the production implementation on top of ``cv2.VideoCapture``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import cv2
import numpy as np
from loguru import logger
from numpy.typing import NDArray

from asciivid.errors import AllocationError, DecodeError
from asciivid.pixels import PixelBuffer, TargetDimensions

VIDEO = "video"

# cv::Error::StsNoMem
_CV_NO_MEMORY = -4


@dataclass(frozen=True)
class StreamInfo:
    index: int
    kind: str
    codec: str
    width: int
    height: int


@dataclass(frozen=True)
class Packet:
    stream_index: int
    payload: Any = None


class Decoder(Protocol):
    def decode(self, packet: Packet) -> list[Any]:
        """Feed one packet and return every frame it completes."""
        ...

    def flush(self) -> list[Any]:
        """Signal end of stream and return the frames still buffered."""
        ...

    def close(self) -> None: ...


class Scaler(Protocol):
    def convert(self, frame: Any) -> PixelBuffer:
        """Convert a raw decoded frame to an RGB buffer at the target size."""
        ...

    def close(self) -> None: ...


class Container(Protocol):
    def find_streams(self) -> list[StreamInfo]: ...

    def read_packet(self) -> Packet | None:
        """Next encoded packet, or None once the input is exhausted."""
        ...

    def open_decoder(self, stream: StreamInfo) -> Decoder: ...

    def close(self) -> None: ...


class VideoBackend(Protocol):
    def open_container(self, path: Path) -> Container: ...

    def create_scaler(self, stream: StreamInfo, target: TargetDimensions) -> Scaler: ...


def _fourcc_name(value: float) -> str:
    code = int(value)
    if code <= 0:
        return ""
    return "".join(chr((code >> (8 * i)) & 0xFF) for i in range(4)).strip("\x00 ")


class OpenCVDecoder:
    """Decoding happens inside the capture; ``retrieve`` finishes the grabbed frame."""

    def __init__(self, capture: cv2.VideoCapture):
        self._capture = capture

    def decode(self, packet: Packet) -> list[NDArray[np.uint8]]:
        ok, frame = self._capture.retrieve()
        if not ok or frame is None:
            logger.warning("Dropped undecodable frame")
            return []
        return [frame]

    def flush(self) -> list[NDArray[np.uint8]]:
        # OpenCV drains buffered frames through grab(), nothing is left here
        return []

    def close(self) -> None:
        self._capture = None


class OpenCVScaler:
    """Resizes BGR frames and converts them to RGB into buffers reused for every frame."""

    def __init__(self, target: TargetDimensions):
        self.target = target
        try:
            self._resized = np.empty((target.height, target.width, 3), dtype=np.uint8)
            self._rgb = np.empty((target.height, target.width, 3), dtype=np.uint8)
        except MemoryError as exc:
            raise AllocationError(f"Cannot allocate {target.width}x{target.height} frame buffer") from exc

    def convert(self, frame: NDArray[np.uint8]) -> PixelBuffer:
        try:
            if frame.ndim == 2:
                frame = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
            cv2.resize(
                frame, (self.target.width, self.target.height), dst=self._resized, interpolation=cv2.INTER_LINEAR
            )
            cv2.cvtColor(self._resized, cv2.COLOR_BGR2RGB, dst=self._rgb)
        except MemoryError as exc:
            raise AllocationError(f"Cannot allocate {self.target.width}x{self.target.height} frame") from exc
        except cv2.error as exc:
            if getattr(exc, "code", None) == _CV_NO_MEMORY:
                raise AllocationError(f"Frame conversion ran out of memory: {exc}") from exc
            raise DecodeError(f"Cannot convert decoded frame: {exc}") from exc
        return PixelBuffer(width=self.target.width, height=self.target.height, channels=3, pixels=self._rgb)

    def close(self) -> None:
        self._resized = None
        self._rgb = None


class OpenCVContainer:
    """A ``cv2.VideoCapture`` exposing a single video stream."""

    def __init__(self, path: Path):
        self.path = path
        self._capture = cv2.VideoCapture(str(path))
        if not self._capture.isOpened():
            self._capture.release()
            raise DecodeError(f"Cannot open video {path}")

    def find_streams(self) -> list[StreamInfo]:
        width = int(self._capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(self._capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        if width <= 0 or height <= 0:
            return []
        codec = _fourcc_name(self._capture.get(cv2.CAP_PROP_FOURCC))
        return [StreamInfo(index=0, kind=VIDEO, codec=codec, width=width, height=height)]

    def read_packet(self) -> Packet | None:
        if not self._capture.grab():
            return None
        return Packet(stream_index=0)

    def open_decoder(self, stream: StreamInfo) -> OpenCVDecoder:
        if not self._capture.isOpened():
            raise DecodeError(f"No decoder available for codec {stream.codec or 'unknown'!r}")
        return OpenCVDecoder(self._capture)

    def close(self) -> None:
        self._capture.release()


class OpenCVBackend:
    def open_container(self, path: Path) -> OpenCVContainer:
        return OpenCVContainer(path)

    def create_scaler(self, stream: StreamInfo, target: TargetDimensions) -> OpenCVScaler:
        return OpenCVScaler(target)
