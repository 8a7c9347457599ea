class MpeakError(Exception):
    """Base class of all errors raised by mpeak."""
    def __init__(self, message: str = "mpeak error."):
        super().__init__(message)


class CannotOpenSource(MpeakError):
    """A source file could not be opened."""
    def __init__(self, message: str = "Source can not be opened."):
        super().__init__(message)


class CannotReadSource(MpeakError):
    """A source file was opened but could not be read."""
    def __init__(self, message: str = "Source can not be read."):
        super().__init__(message)


class InvalidFrameHeader(MpeakError):
    """The header resolves to a zero sample rate or a zero bitrate.

    Such a header has no usable frame length; walking on would never advance.
    `offset` and `position` are set when the error is raised by the frame walker.
    """
    def __init__(self, header=None, reason: str = "invalid frame header",
                 offset: int|None = None, position: int|None = None):
        self.header = header
        self.reason = reason
        self.offset = offset
        self.position = position
        message = f"Invalid MP3 frame header: {reason}"
        if header is not None:
            message += f" (raw=0x{header.raw:08X})"
        if offset is not None:
            message += f" at byte offset {offset}"
        if position is not None:
            message += f", frame position {position}"
        super().__init__(message + ".")


class TruncatedHeader(MpeakError):
    """Fewer than 4 bytes remain where a frame header is expected."""
    def __init__(self, offset: int, available: int):
        self.offset = offset
        self.available = available
        super().__init__(f"Truncated frame header at byte offset {offset}: only {available} byte(s) left.")


class FrameIndexMismatch(MpeakError):
    """The requested zarr array is not a frame index written by mpeak."""
    def __init__(self, message: str = "Requested array is not an mpeak frame index (clearly recognised by magic id and format version)."):
        super().__init__(message)


class FrameIndexExists(MpeakError):
    """A frame index of the requested name exists and overwriting was not requested."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Frame index '{name}' already exists (use overwrite to replace it).")
