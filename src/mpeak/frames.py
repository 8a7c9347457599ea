"""
Frame walker
============

Splits a fully loaded MP3 buffer into its frames, starting behind the
metadata block and advancing by the header derived frame length:

    offset := metadata offset, position := 0
    while offset < len(buffer):
        < 4 bytes left          -> end of stream (no error)
        decode header, length   -> InvalidFrameHeader: see policies below
        payload := buffer[offset : offset + length]   (clamped at buffer end)
        emit Frame(header, payload, position); offset += length; position += 1

Invalid headers (zero sample rate or zero bitrate) are handled by the
`WalkPolicy` given to the walker, or `Config.frame_walk_policy` if none is
given:

* STRICT (default): the walk is aborted with `InvalidFrameHeader` carrying
  the byte offset and frame position.
* LENIENT: all bytes from the offset to the buffer end become one last frame
  with `salvaged=True`, then the walk ends.

Consumers tell clean termination from a damaged stream end by the `truncated`
and `salvaged` flags of the last frame.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from .config import Config
from .exceptions import InvalidFrameHeader, TruncatedHeader
from .header import HEADER_SIZE, FrameHeader, frame_length
from .metadata import metadata_offset
from .packagetypes import WalkPolicy

# import and initialize logging
from .logsetup import get_module_logger
logger = get_module_logger(__file__)


@dataclass(frozen=True)
class Frame:
    """One frame: header, payload bytes (header included) and sequence position.

    `truncated` marks a last frame whose nominal length runs past the buffer
    end; its payload is shorter than `header` says. `salvaged` marks the
    last frame of a lenient walk whose header has no valid length.
    """
    header: FrameHeader
    payload: bytes = field(repr=False)
    position: int
    offset: int
    truncated: bool = False
    salvaged: bool = False

    @property
    def length(self) -> int:
        return len(self.payload)

    @property
    def is_mono(self) -> bool:
        return self.header.is_mono


def _resolve_policy(policy: Optional[WalkPolicy]) -> WalkPolicy:
    if policy is None:
        return Config.frame_walk_policy
    if isinstance(policy, str):
        return WalkPolicy.from_json(policy.lower())
    return policy


def _frames_start(buffer: bytes) -> int:
    return min(metadata_offset(buffer), len(buffer))


def decode_first_header(buffer: bytes) -> FrameHeader:
    """Header of the first frame behind the metadata block.

    Raises
    ------
    TruncatedHeader
        If fewer than 4 bytes follow the metadata block
    """
    offset = _frames_start(buffer)
    available = len(buffer) - offset
    if available < HEADER_SIZE:
        raise TruncatedHeader(offset, available)
    return FrameHeader.from_bytes(bytes(buffer[offset:offset + HEADER_SIZE]))


def iter_frames(buffer: bytes, policy: Optional[WalkPolicy] = None) -> Iterator[Frame]:
    """Yield the frames of `buffer` in buffer order.

    Raises
    ------
    InvalidFrameHeader
        With the STRICT policy, at the first header without a valid frame length
    """
    policy = _resolve_policy(policy)
    buffer_length = len(buffer)
    offset = _frames_start(buffer)
    position = 0
    logger.trace(f"Frame walk requested: {buffer_length} bytes, frames start at {offset}, policy '{policy}'.")

    while offset < buffer_length:
        available = buffer_length - offset
        if available < HEADER_SIZE:
            logger.debug(f"Truncated header at byte {offset} ({available} byte(s) left); end of stream.")
            return

        header = FrameHeader.from_bytes(bytes(buffer[offset:offset + HEADER_SIZE]))
        try:
            length = frame_length(header)
        except InvalidFrameHeader as e:
            if policy == WalkPolicy.LENIENT:
                logger.warning(f"Invalid header at byte {offset} (frame {position}): {e.reason}. "
                               f"Salvaging the remaining {available} bytes as last frame.")
                yield Frame(header=header,
                            payload=bytes(buffer[offset:]),
                            position=position,
                            offset=offset,
                            salvaged=True)
                return
            raise InvalidFrameHeader(header, reason=e.reason, offset=offset, position=position) from e

        truncated = length > available
        if truncated:
            logger.debug(f"Frame {position} at byte {offset} needs {length} bytes, only {available} left; clamped.")
        yield Frame(header=header,
                    payload=bytes(buffer[offset:offset + length]),
                    position=position,
                    offset=offset,
                    truncated=truncated)
        offset += length
        position += 1


def walk_frames(buffer: bytes, policy: Optional[WalkPolicy] = None) -> List[Frame]:
    """All frames of `buffer` as a list; see `iter_frames`."""
    frames = list(iter_frames(buffer, policy))
    logger.debug(f"Frame walk finished: {len(frames)} frames.")
    return frames
