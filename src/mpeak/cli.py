"""
Command line front end of mpeak.

Usage:
    mpeak info song.mp3 [--frames]
    mpeak mix a.mp3 b.mp3 -o output.mp3 [--seed 42] [--probability 0.5]
    mpeak index song.mp3 --store index.zarr [--name mp3_index] [--overwrite]

Global options:
    --config FILE      YAML configuration (see Config.export_to_yaml)
    --log-level LEVEL  overrides the configured log level
    --lenient          salvage the rest of a stream at an invalid frame header
"""

import argparse
import pathlib
import sys
from typing import List, Optional

import yaml

from .config import Config
from .exceptions import MpeakError, TruncatedHeader
from .files import file_content_hash, load_buffer
from .frames import decode_first_header, walk_frames
from .metadata import has_metadata, is_mp3_file, metadata_offset
from .packagetypes import LogLevel, StreamSummary, WalkPolicy

# import and initialize logging
from .logsetup import get_module_logger
logger = get_module_logger(__file__)


def summarize(buffer: bytes, policy: Optional[WalkPolicy] = None, with_frames: bool = False) -> StreamSummary:
    """Diagnostic summary of an MP3 buffer."""
    try:
        first_header = decode_first_header(buffer).to_dict()
    except TruncatedHeader:
        first_header = None
    frames = walk_frames(buffer, policy)
    summary = StreamSummary(
        is_mp3=is_mp3_file(buffer),
        has_metadata=has_metadata(buffer),
        metadata_offset=metadata_offset(buffer),
        file_size=len(buffer),
        frame_count=len(frames),
        first_header=first_header,
        truncated_last_frame=bool(frames) and frames[-1].truncated,
        salvaged_last_frame=bool(frames) and frames[-1].salvaged,
    )
    if with_frames:
        summary[StreamSummary.FRAME_LENGTHS] = [frame.length for frame in frames]
    return summary


def _walk_policy(args) -> Optional[WalkPolicy]:
    # None falls back to Config.frame_walk_policy
    return WalkPolicy.LENIENT if args.lenient else None


def _cmd_info(args) -> int:
    buffer = load_buffer(args.file)
    summary = summarize(buffer, policy=_walk_policy(args), with_frames=args.frames)
    print(summary.to_yaml(), end="")
    return 0


def _cmd_mix(args) -> int:
    from .mixer import mix_files
    n_frames = mix_files(args.first, args.second, args.output,
                         probability=args.probability, seed=args.seed,
                         policy=_walk_policy(args))
    print(f"{n_frames} frames written to {args.output}")
    return 0


def _cmd_index(args) -> int:
    import zarr
    from .frame_index import store_frame_index

    buffer = load_buffer(args.file)
    group = zarr.open_group(str(args.store), mode="a")
    index_array = store_frame_index(group, buffer, name=args.name,
                                    policy=_walk_policy(args),
                                    source_hash=file_content_hash(args.file),
                                    overwrite=args.overwrite)
    print(f"{index_array.shape[0]} frames indexed in {args.store}/{args.name}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mpeak", description="Inspect the frame structure of MP3 files.")
    parser.add_argument("--config", type=pathlib.Path, help="YAML configuration file")
    parser.add_argument("--log-level", choices=[lvl.value for lvl in LogLevel], type=str.upper,
                        help="log level (overrides the configuration)")
    parser.add_argument("--lenient", action="store_true",
                        help="salvage the remaining bytes at an invalid frame header instead of failing")

    subparsers = parser.add_subparsers(dest="command", required=True)

    info = subparsers.add_parser("info", help="print a YAML summary of an MP3 file")
    info.add_argument("file", type=pathlib.Path)
    info.add_argument("--frames", action="store_true", help="include all frame lengths")
    info.set_defaults(func=_cmd_info)

    mix = subparsers.add_parser("mix", help="randomly mix the frames of two MP3 files")
    mix.add_argument("first", type=pathlib.Path)
    mix.add_argument("second", type=pathlib.Path)
    mix.add_argument("-o", "--output", type=pathlib.Path, default=pathlib.Path("output.mp3"))
    mix.add_argument("--seed", type=int, default=None)
    mix.add_argument("--probability", type=float, default=None,
                     help="probability to take a frame of the first file")
    mix.set_defaults(func=_cmd_mix)

    index = subparsers.add_parser("index", help="store the frame index of an MP3 file in a zarr store")
    index.add_argument("file", type=pathlib.Path)
    index.add_argument("--store", type=pathlib.Path, required=True)
    index.add_argument("--name", default="mp3_index")
    index.add_argument("--overwrite", action="store_true", help="replace an existing frame index of the same name")
    index.set_defaults(func=_cmd_index)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if args.config is not None:
            Config.import_from_yaml(args.config)
        if args.log_level is not None:
            Config.set(log_level=args.log_level)
    except (OSError, yaml.YAMLError, AttributeError, TypeError, ValueError) as e:
        return _report_error(f"invalid configuration: {e}")

    try:
        return args.func(args)
    except (MpeakError, ValueError) as e:
        # ValueError: no frames to index, probability out of range
        return _report_error(str(e))


def _report_error(message: str) -> int:
    logger.error(message)
    print(f"mpeak: {message}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
