"""Random mix of the frame payloads of two MP3 streams.

For every frame position present in both streams one of the two frames is
taken as a whole. The result is a playable stream as long as both inputs
share version, layer and sample rate; this is not checked.
"""

from typing import List, Optional

import numpy as np

from .config import Config
from .files import StrOrPath, load_buffer, write_buffer
from .frames import Frame, walk_frames
from .packagetypes import WalkPolicy

# import and initialize logging
from .logsetup import get_module_logger
logger = get_module_logger(__file__)


def mix_frames(frames_a: List[Frame], frames_b: List[Frame],
               probability: Optional[float] = None,
               seed: Optional[int] = None) -> bytes:
    """Concatenated payloads, per position from `frames_a` with `probability`, else from `frames_b`.

    The output has as many frames as the shorter input. Equal seeds give equal mixes.
    """
    if probability is None:
        probability = Config.mix_probability
    if not 0.0 <= probability <= 1.0:
        raise ValueError(f"probability must be between 0.0 and 1.0, got {probability}")

    n_frames = min(len(frames_a), len(frames_b))
    rng = np.random.default_rng(seed)
    take_a = rng.random(n_frames) < probability

    mixed = bytearray()
    for frame_a, frame_b, from_a in zip(frames_a, frames_b, take_a):
        mixed.extend(frame_a.payload if from_a else frame_b.payload)

    logger.debug(f"Mixed {n_frames} frames: {int(take_a.sum())} from first, {n_frames - int(take_a.sum())} from second stream.")
    return bytes(mixed)


def mix_files(path_a: StrOrPath, path_b: StrOrPath, output_path: StrOrPath,
              probability: Optional[float] = None,
              seed: Optional[int] = None,
              policy: Optional[WalkPolicy] = None) -> int:
    """Mix two MP3 files into `output_path`; returns the number of frames written.

    Metadata blocks of the inputs are not copied.
    """
    frames_a = walk_frames(load_buffer(path_a), policy)
    frames_b = walk_frames(load_buffer(path_b), policy)
    mixed = mix_frames(frames_a, frames_b, probability=probability, seed=seed)
    write_buffer(output_path, mixed)
    n_frames = min(len(frames_a), len(frames_b))
    logger.info(f"Wrote {n_frames} mixed frames ({len(mixed)} bytes) to '{output_path}'.")
    return n_frames
