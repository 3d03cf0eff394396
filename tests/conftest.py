import numpy as np
import pytest

from asciivid.errors import AllocationError, DecodeError
from asciivid.pixels import BoundingBox, PixelBuffer
from asciivid.render import iter_rows
from asciivid.video import VIDEO, Packet, StreamInfo


def solid(width, height, colour, channels=3):
    """Buffer of a single colour; ``colour`` has one value per channel."""
    pixels = np.empty((height, width, channels), dtype=np.uint8)
    pixels[:, :] = colour
    return PixelBuffer.from_array(pixels)


def glyph_text(buffer):
    """Monochrome rendering of ``buffer`` as newline-joined rows."""
    return "\n".join("".join(cell.glyph for cell in row) for row in iter_rows(buffer, colour=False))


class FakeVideo:
    """In-memory video backend that records every acquire and release.

    ``frames`` are RGB arrays delivered one per packet on stream 1. Packets for
    the audio stream 0 are interleaved to check they are skipped. The decoder holds
    back the last ``buffered`` frames until it is flushed. ``fail_at`` names the
    step that raises.
    """

    def __init__(self, frames, fail_at=None, buffered=0, streams=None):
        self.frames = list(frames)
        self.fail_at = fail_at
        self.buffered = buffered
        height, width = self.frames[0].shape[:2] if self.frames else (8, 8)
        self.streams = (
            streams
            if streams is not None
            else [
                StreamInfo(index=0, kind="audio", codec="aac", width=0, height=0),
                StreamInfo(index=1, kind=VIDEO, codec="fake", width=width, height=height),
            ]
        )
        self.events = []
        self.targets = []

    def _check(self, step, error=DecodeError):
        if self.fail_at == step:
            self.events.append(f"fail {step}")
            raise error(f"{step} failed")

    def open_container(self, path):
        self._check("open_container")
        self.events.append("open container")
        return _FakeContainer(self)

    def create_scaler(self, stream, target):
        self._check("create_scaler", AllocationError)
        self.events.append("open scaler")
        self.targets.append(target)
        return _FakeScaler(self)


class _FakeContainer:
    def __init__(self, video):
        self.video = video
        packets = []
        for i in range(len(video.frames)):
            packets.append(Packet(stream_index=0))
            packets.append(Packet(stream_index=1, payload=i))
        self._packets = iter(packets)

    def find_streams(self):
        self.video._check("find_streams")
        return self.video.streams

    def read_packet(self):
        return next(self._packets, None)

    def open_decoder(self, stream):
        self.video._check("open_decoder")
        self.video.events.append("open decoder")
        return _FakeDecoder(self.video)

    def close(self):
        self.video.events.append("close container")


class _FakeDecoder:
    def __init__(self, video):
        self.video = video
        self._pending = []

    def decode(self, packet):
        self._pending.append(self.video.frames[packet.payload])
        if len(self._pending) > self.video.buffered:
            return [self._pending.pop(0)]
        return []

    def flush(self):
        self.video.events.append("flush")
        pending, self._pending = self._pending, []
        return pending

    def close(self):
        self.video.events.append("close decoder")


class _FakeScaler:
    def __init__(self, video):
        self.video = video
        self.converted = 0

    def convert(self, frame):
        self.converted += 1
        if self.video.fail_at == "convert" and self.converted == 2:
            raise AllocationError("convert failed")
        return PixelBuffer.from_array(frame)

    def close(self):
        self.video.events.append("close scaler")


@pytest.fixture
def box():
    return BoundingBox(600, 140)


@pytest.fixture
def grey_frames():
    """Three 4x4 frames: black, mid grey, white."""
    return [np.full((4, 4, 3), level, dtype=np.uint8) for level in (0, 128, 255)]
