from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, NamedTuple

from asciivid.glyphs import GLYPH_RAMP, TRANSPARENT_GLYPH, brightness_grid, glyph_indices
from asciivid.pixels import PixelBuffer

if TYPE_CHECKING:
    from asciivid.sinks import Sink

# Source rows per text row; terminal cells are roughly twice as tall as wide
ROW_STRIDE = 2


class RenderCell(NamedTuple):
    glyph: str
    colour: tuple[int, int, int] | None = None


TRANSPARENT_CELL = RenderCell(TRANSPARENT_GLYPH)


def iter_rows(buffer: PixelBuffer, colour: bool = True) -> Iterator[list[RenderCell]]:
    """Yield one list of cells per text row.

    Only the first source row of each pair is sampled; the second is skipped.
    Pixels with alpha exactly 0 become transparent cells with no colour.
    """
    rgb = buffer.rgb()[::ROW_STRIDE]
    indices = glyph_indices(brightness_grid(rgb))
    alpha = buffer.alpha()
    opaque = alpha[::ROW_STRIDE] != 0 if alpha is not None else None

    for y in range(rgb.shape[0]):
        row = []
        for x in range(buffer.width):
            if opaque is not None and not opaque[y, x]:
                row.append(TRANSPARENT_CELL)
                continue
            glyph = GLYPH_RAMP[indices[y, x]]
            if colour:
                r, g, b = rgb[y, x]
                row.append(RenderCell(glyph, (int(r), int(g), int(b))))
            else:
                row.append(RenderCell(glyph))
        yield row


def render_frame(buffer: PixelBuffer, sink: Sink) -> None:
    for row in iter_rows(buffer, colour=sink.colour):
        for cell in row:
            sink.write_cell(cell)
        sink.end_row()


def render_video_frame(buffer: PixelBuffer, sink: Sink, frame_number: int) -> None:
    """Render one decoded frame framed by the sink's per-frame label and separator."""
    sink.begin_frame(frame_number)
    render_frame(buffer, sink)
    sink.end_frame()
