"""mpeak package initialization."""

from .logsetup import get_module_logger

# Get logger for this module
logger = get_module_logger(__file__)

# core: metadata block, frame header, frame walker, side information
from .metadata import (
    is_mp3_file,
    has_metadata,
    metadata_offset,
    metadata_block,
    decode_syncsafe
)
from .header import (
    FrameHeader,
    decode_header,
    frame_length
)
from .frames import (
    Frame,
    iter_frames,
    walk_frames,
    decode_first_header
)
from .side_info import SideInformation

# configuration and exceptions
from .config import Config
from .exceptions import (
    MpeakError,
    CannotOpenSource,
    CannotReadSource,
    InvalidFrameHeader,
    TruncatedHeader,
    FrameIndexMismatch,
    FrameIndexExists
)

# data types and enums
from .packagetypes import (
    LogLevel,
    MpegVersion,
    MpegLayer,
    Protection,
    ChannelMode,
    Emphasis,
    WalkPolicy,
    StreamSummary
)

# file access (outside the core)
from .files import load_buffer, write_buffer

# frame index and mixer
from .frame_index import (
    build_frame_index,
    store_frame_index,
    load_frame_index,
    frame_range_for_samples,
    decode_side_info
)
from .mixer import mix_frames, mix_files

__all__ = [
    "is_mp3_file",
    "has_metadata",
    "metadata_offset",
    "metadata_block",
    "decode_syncsafe",
    "FrameHeader",
    "decode_header",
    "frame_length",
    "Frame",
    "iter_frames",
    "walk_frames",
    "decode_first_header",
    "SideInformation",

    "Config",

    "MpeakError",
    "CannotOpenSource",
    "CannotReadSource",
    "InvalidFrameHeader",
    "TruncatedHeader",
    "FrameIndexMismatch",
    "FrameIndexExists",

    "LogLevel",
    "MpegVersion",
    "MpegLayer",
    "Protection",
    "ChannelMode",
    "Emphasis",
    "WalkPolicy",
    "StreamSummary",

    "load_buffer",
    "write_buffer",

    "build_frame_index",
    "store_frame_index",
    "load_frame_index",
    "frame_range_for_samples",
    "decode_side_info",
    "mix_frames",
    "mix_files"
]

logger.trace("mpeak package loaded.")
