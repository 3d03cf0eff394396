from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path

from asciivid.pixels import BoundingBox

DEFAULT_MAX_WIDTH = 600
DEFAULT_MAX_HEIGHT = 140
DEFAULT_OUTPUT_FILE = "output.txt"


@dataclass(frozen=True)
class RenderSettings:
    input_path: Path
    box: BoundingBox = BoundingBox(DEFAULT_MAX_WIDTH, DEFAULT_MAX_HEIGHT)
    output_path: Path | None = None
    verbose: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "RenderSettings":
        return cls(
            input_path=Path(args.input),
            box=BoundingBox(args.width, args.height),
            output_path=Path(DEFAULT_OUTPUT_FILE) if args.output else None,
            verbose=args.verbose,
        )
