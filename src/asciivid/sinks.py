from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

from loguru import logger

from asciivid.errors import OutputError
from asciivid.render import RenderCell
from asciivid.terminal import CLEAR_SCREEN, colour_glyph


class Sink:
    """Destination for rendered cells. Subclasses fix their capabilities for the whole run."""

    colour: bool = False
    clears_between_frames: bool = False

    def __init__(self, stream: TextIO):
        self._stream = stream
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write_cell(self, cell: RenderCell) -> None:
        self._stream.write(cell.glyph)

    def end_row(self) -> None:
        self._stream.write("\n")

    def begin_frame(self, number: int) -> None:
        if self.clears_between_frames:
            self._stream.write(CLEAR_SCREEN)
        self._stream.write(f"Frame {number}:\n")

    def end_frame(self) -> None:
        pass

    def close(self) -> None:
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class TerminalSink(Sink):
    """Writes truecolor glyphs to a terminal stream, clearing the screen before each video frame."""

    colour = True
    clears_between_frames = True

    def __init__(self, stream: TextIO | None = None):
        super().__init__(stream if stream is not None else sys.stdout)

    def write_cell(self, cell: RenderCell) -> None:
        if cell.colour is None:
            self._stream.write(" ")
        else:
            self._stream.write(colour_glyph(cell.glyph, *cell.colour))

    def end_frame(self) -> None:
        self._stream.flush()

    def close(self) -> None:
        # The stream belongs to the caller; only flush it
        if not self._closed:
            self._stream.flush()
        super().close()


class FileSink(Sink):
    """Writes monochrome glyphs to a plain-text transcript."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        try:
            stream = self.path.open("w", encoding="utf-8")
        except OSError as exc:
            raise OutputError(f"Cannot open {self.path} for writing: {exc.strerror or exc}") from exc
        logger.debug("Opened transcript {}", self.path)
        super().__init__(stream)

    def end_frame(self) -> None:
        self._stream.write("\n")

    def close(self) -> None:
        if self._closed:
            return
        self._stream.close()
        logger.debug("Closed transcript {}", self.path)
        super().close()
