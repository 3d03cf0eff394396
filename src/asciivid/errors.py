class AsciiVidError(Exception):
    """Base class for every error raised by asciivid."""


class UsageError(AsciiVidError):
    """Missing or malformed command-line arguments."""


class DecodeError(AsciiVidError):
    """The input could not be decoded as an image or a video stream."""


class OutputError(AsciiVidError, OSError):
    """The output transcript could not be opened for writing."""


class AllocationError(AsciiVidError, MemoryError):
    """A resize or colour-conversion buffer could not be allocated."""
