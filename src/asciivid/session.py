"""Drives decode -> resample -> render -> sink for one image or one video."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import ExitStack
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from asciivid.decoder import is_video, load_image
from asciivid.errors import DecodeError
from asciivid.pixels import BoundingBox, PixelBuffer, TargetDimensions
from asciivid.render import render_frame, render_video_frame
from asciivid.resample import resample, target_dimensions
from asciivid.sinks import FileSink, Sink, TerminalSink
from asciivid.video import VIDEO, Container, Decoder, OpenCVBackend, Scaler, StreamInfo, VideoBackend

if TYPE_CHECKING:
    from asciivid.config import RenderSettings


class SessionState(Enum):
    UNOPENED = "unopened"
    CONTAINER_OPEN = "container-open"
    STREAM_INFO_KNOWN = "stream-info-known"
    DECODER_OPEN = "decoder-open"
    SCALER_READY = "scaler-ready"
    FRAME_LOOP = "frame-loop"
    CLOSED = "closed"


class DecodeSession:
    """Owns every native resource needed to decode one video stream.

    Resources are acquired in order on ``open()`` and registered on an
    ExitStack, so a failure part-way through, an exception in the frame loop,
    or a normal ``close()`` all release them once, newest first.
    """

    def __init__(self, path: str | Path, box: BoundingBox, backend: VideoBackend | None = None):
        self.path = Path(path)
        self.box = box
        self.backend = backend if backend is not None else OpenCVBackend()
        self.state = SessionState.UNOPENED
        self.stream: StreamInfo | None = None
        self.target: TargetDimensions | None = None
        self._stack = ExitStack()
        self._container: Container | None = None
        self._decoder: Decoder | None = None
        self._scaler: Scaler | None = None

    def _advance(self, state: SessionState) -> None:
        logger.debug("{}: {} -> {}", self.path.name, self.state.value, state.value)
        self.state = state

    def _release(self, name: str, resource) -> None:
        self._stack.callback(logger.debug, "{}: released {}", self.path.name, name)
        self._stack.callback(resource.close)

    def open(self) -> DecodeSession:
        if self.state is not SessionState.UNOPENED:
            raise RuntimeError(f"Session already {self.state.value}")
        try:
            self._container = self.backend.open_container(self.path)
            self._release("container", self._container)
            self._advance(SessionState.CONTAINER_OPEN)

            streams = self._container.find_streams()
            self._advance(SessionState.STREAM_INFO_KNOWN)
            self.stream = next((s for s in streams if s.kind == VIDEO), None)
            if self.stream is None:
                raise DecodeError(f"No video stream found in {self.path}")

            self._decoder = self._container.open_decoder(self.stream)
            self._release("decoder", self._decoder)
            self._advance(SessionState.DECODER_OPEN)

            self.target = target_dimensions(self.stream.width, self.stream.height, self.box)
            self._scaler = self.backend.create_scaler(self.stream, self.target)
            self._release("scaler", self._scaler)
            self._advance(SessionState.SCALER_READY)
        except BaseException:
            self.close()
            raise
        logger.info(
            "Decoding {} ({} {}x{}) at {}x{}",
            self.path,
            self.stream.codec or "unknown codec",
            self.stream.width,
            self.stream.height,
            self.target.width,
            self.target.height,
        )
        return self

    def _convert(self, frames: Iterable) -> Iterator[PixelBuffer]:
        for frame in frames:
            yield self._scaler.convert(frame)

    def frames(self) -> Iterator[PixelBuffer]:
        """Lazily decode the stream, one RGB buffer per frame.

        Each buffer is reused by the scaler and is only valid until the next
        one is requested.
        """
        if self.state is not SessionState.SCALER_READY:
            raise RuntimeError(f"Cannot start decoding from state {self.state.value}")
        self._advance(SessionState.FRAME_LOOP)

        skipped = 0
        while (packet := self._container.read_packet()) is not None:
            if packet.stream_index != self.stream.index:
                skipped += 1
                continue
            yield from self._convert(self._decoder.decode(packet))
        if skipped:
            logger.debug("{}: skipped {} packet(s) from other streams", self.path.name, skipped)
        yield from self._convert(self._decoder.flush())

    def close(self) -> None:
        if self.state is SessionState.CLOSED:
            return
        try:
            self._stack.close()
        finally:
            self._container = self._decoder = self._scaler = None
            self._advance(SessionState.CLOSED)

    def __enter__(self):
        return self.open()

    def __exit__(self, *exc_info):
        self.close()


def process_image(path: str | Path, sink: Sink, box: BoundingBox) -> int:
    buffer = resample(load_image(path), box)
    render_frame(buffer, sink)
    return 1


def process_video(path: str | Path, sink: Sink, box: BoundingBox, backend: VideoBackend | None = None) -> int:
    """Render every frame of a video to ``sink``. Returns the number of frames rendered."""
    frame_number = 0
    with DecodeSession(path, box, backend) as session:
        for buffer in session.frames():
            frame_number += 1
            render_video_frame(buffer, sink, frame_number)
    logger.info("Rendered {} frame(s) from {}", frame_number, path)
    return frame_number


def open_sink(settings: RenderSettings) -> Sink:
    if settings.output_path is not None:
        return FileSink(settings.output_path)
    return TerminalSink()


def run(settings: RenderSettings, backend: VideoBackend | None = None) -> int:
    """Render ``settings.input_path`` to the configured sink, closing it on every path."""
    with open_sink(settings) as sink:
        if is_video(settings.input_path):
            return process_video(settings.input_path, sink, settings.box, backend)
        return process_image(settings.input_path, sink, settings.box)
