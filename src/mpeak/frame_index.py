"""
MP3 Frame Index
===============

Frame boundaries of an MP3 buffer as a compact 3-column numpy array, stored
in a zarr v3 group next to the audio data.

COLUMNS (uint64):
0. byte offset of the frame in the buffer
1. frame size in bytes (header included)
2. sample position: samples per channel before this frame

Timestamps and per-frame durations are calculated from the sample positions
and the sample rate attribute, they are not stored.

The index is built sequentially (each frame start depends on the previous
frame length). Once it exists, frames are independent of each other:
`decode_side_info` decodes the side information of all frames in parallel.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

import numpy as np
import zarr

from .config import Config
from .exceptions import FrameIndexExists, FrameIndexMismatch
from .frames import Frame, walk_frames
from .header import HEADER_SIZE, FrameHeader
from .metadata import metadata_offset
from .packagetypes import WalkPolicy
from .side_info import SideInformation

# import and initialize logging
from .logsetup import get_module_logger
logger = get_module_logger(__file__)
logger.trace("MP3 frame index module loading...")

MP3_INDEX_DTYPE = np.uint64
MP3_INDEX_COLS = 3
MP3_INDEX_COL_BYTE_OFFSET = 0
MP3_INDEX_COL_FRAME_SIZE = 1
MP3_INDEX_COL_SAMPLE_POS = 2

DEFAULT_INDEX_NAME = "mp3_index"


def build_frame_index(frames: List[Frame]) -> np.ndarray:
    """3-column index array of `frames` (see module doc)."""
    index = np.zeros((len(frames), MP3_INDEX_COLS), dtype=MP3_INDEX_DTYPE)
    sample_pos = 0
    for row, frame in enumerate(frames):
        index[row, MP3_INDEX_COL_BYTE_OFFSET] = frame.offset
        index[row, MP3_INDEX_COL_FRAME_SIZE] = frame.length
        index[row, MP3_INDEX_COL_SAMPLE_POS] = sample_pos
        sample_pos += frame.header.samples_per_frame
    return index


def calculate_timestamp_ms(sample_pos: int, sample_rate: int) -> int:
    """Timestamp in milliseconds of a sample position."""
    if sample_rate <= 0:
        return 0
    return int(sample_pos * 1000 / sample_rate)


def store_frame_index(zarr_group: zarr.Group, buffer: bytes,
                      name: str = DEFAULT_INDEX_NAME,
                      policy: Optional[WalkPolicy] = None,
                      source_hash: Optional[str] = None,
                      overwrite: bool = False) -> zarr.Array:
    """Walk `buffer` and store its frame index as array `name` in `zarr_group`.

    Stream parameters are taken from the first frame and written as array
    attributes together with the magic id and format version that
    `load_frame_index` checks.

    Raises
    ------
    InvalidFrameHeader
        If the walk fails (STRICT policy)
    ValueError
        If the buffer contains no frames
    FrameIndexExists
        If `name` exists in `zarr_group` and `overwrite` is False
    """
    logger.trace(f"store_frame_index() requested for array '{name}'.")
    if not overwrite and name in zarr_group:
        raise FrameIndexExists(name)
    start_time = time.time()

    frames = walk_frames(buffer, policy)
    if len(frames) < 1:
        raise ValueError("No MP3 frames found in buffer")

    index = build_frame_index(frames)
    first_header = frames[0].header
    last_frame = frames[-1]
    total_samples = int(index[-1, MP3_INDEX_COL_SAMPLE_POS]) + last_frame.header.samples_per_frame
    sample_rate = first_header.sample_rate

    chunk_rows = max(1, min(Config.frame_index_chunk_size, len(frames)))
    index_array = zarr_group.create_array(
        name=name,
        shape=index.shape,
        chunks=(chunk_rows, MP3_INDEX_COLS),
        dtype=MP3_INDEX_DTYPE,
        overwrite=overwrite
    )
    index_array[:] = index

    index_attrs = {
        'magic_id': Config.frame_index_magic_id,
        'format_version': list(Config.frame_index_format_version),
        'total_frames': len(frames),
        'metadata_offset': min(metadata_offset(buffer), len(buffer)),
        'mpeg_version': str(first_header.version),
        'layer': str(first_header.layer),
        'sample_rate': sample_rate,
        'channel_mode': first_header.channel_mode.name,
        'samples_per_frame': first_header.samples_per_frame,
        'total_samples': total_samples,
        'duration_ms': calculate_timestamp_ms(total_samples, sample_rate),
        'truncated_last_frame': last_frame.truncated,
        'salvaged_last_frame': last_frame.salvaged,
    }
    if source_hash is not None:
        index_attrs['source_sha256'] = source_hash
    index_array.attrs.update(index_attrs)

    logger.success(f"MP3 frame index created: {len(frames)} frames in {time.time() - start_time:.3f}s")
    return index_array


def load_frame_index(zarr_group: zarr.Group, name: str = DEFAULT_INDEX_NAME) -> np.ndarray:
    """Frame index array `name` of `zarr_group` as numpy array.

    Raises
    ------
    FrameIndexMismatch
        If there is no such array or it was not written by `store_frame_index`
    """
    if name not in zarr_group:
        raise FrameIndexMismatch(f"No frame index '{name}' in zarr group.")
    index_array = zarr_group[name]
    if not isinstance(index_array, zarr.Array):
        raise FrameIndexMismatch(f"'{name}' is a zarr group, not a frame index array.")

    attrs = index_array.attrs
    if attrs.get('magic_id') != Config.frame_index_magic_id:
        raise FrameIndexMismatch(f"Array '{name}' has no mpeak frame index magic id.")
    if tuple(attrs.get('format_version', ())) != tuple(Config.frame_index_format_version):
        raise FrameIndexMismatch(f"Array '{name}' has frame index format version "
                                 f"{attrs.get('format_version')}, expected {list(Config.frame_index_format_version)}.")
    if index_array.ndim != 2 or index_array.shape[1] != MP3_INDEX_COLS:
        raise FrameIndexMismatch(f"Array '{name}' has shape {index_array.shape}, expected (n, {MP3_INDEX_COLS}).")

    return np.asarray(index_array[:], dtype=MP3_INDEX_DTYPE)


def frame_range_for_samples(index: np.ndarray, start_sample: int, end_sample: int) -> Tuple[int, int]:
    """First and last frame (inclusive) holding samples `start_sample` .. `end_sample`.

    Raises
    ------
    ValueError
        If the index is empty or the sample range is reversed
    """
    if len(index) == 0:
        raise ValueError("Frame index is empty")
    if end_sample < start_sample:
        raise ValueError(f"Invalid sample range: {start_sample} > {end_sample}")
    sample_positions = np.ascontiguousarray(index[:, MP3_INDEX_COL_SAMPLE_POS])

    start_idx = int(np.searchsorted(sample_positions, start_sample, side='right')) - 1
    start_idx = max(0, start_idx)
    end_idx = int(np.searchsorted(sample_positions, end_sample, side='right')) - 1
    end_idx = min(max(end_idx, start_idx), len(sample_positions) - 1)

    logger.trace(f"Frame range [{start_idx}:{end_idx}] for samples [{start_sample}:{end_sample}]")
    return start_idx, end_idx


def _decode_row(buffer: bytes, position: int, offset: int, size: int) -> Optional[SideInformation]:
    payload = bytes(buffer[offset:offset + size])
    if len(payload) < HEADER_SIZE:
        return None
    frame = Frame(header=FrameHeader.from_bytes(payload[:HEADER_SIZE]),
                  payload=payload,
                  position=position,
                  offset=offset)
    try:
        return SideInformation.from_frame(frame)
    except ValueError as e:
        logger.debug(f"No side information for frame {position}: {e}")
        return None


def decode_side_info(buffer: bytes, index: np.ndarray,
                     max_workers: Optional[int] = None) -> List[Optional[SideInformation]]:
    """Side information of every indexed frame, decoded in parallel threads.

    Results are in frame order; frames too short for their side information
    layout give None.
    """
    if max_workers is None:
        max_workers = Config.max_workers
    offsets = [int(v) for v in index[:, MP3_INDEX_COL_BYTE_OFFSET]]
    sizes = [int(v) for v in index[:, MP3_INDEX_COL_FRAME_SIZE]]
    positions = range(len(offsets))

    logger.trace(f"decode_side_info() requested for {len(offsets)} frames.")
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        results = list(executor.map(lambda p, o, s: _decode_row(buffer, p, o, s), positions, offsets, sizes))
    return results
