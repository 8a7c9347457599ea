"""Types and Enum definitions"""

import json
import yaml
from enum import Enum, auto
from collections.abc import MutableMapping


class LogLevel(str, Enum):
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    SUCCESS = "SUCCESS"
    INFO = "INFO"
    DEBUG = "DEBUG"
    TRACE = "TRACE"
    NOTSET = "NOTSET"


class RestrictedDict(MutableMapping):
    """Base class for dictionaries with fixed and restricted keys.

    Example:

        class FrameSummary(RestrictedDict):
            # Key specifications:

            key_specs = [
                            # as: (key-name, data-type, default-value)
                            ("frame_count", int, 0),
                            ("sample_rate", int, 0),
                        ]

    """

    key_specs: list[tuple[str, type, object]] = []  # has to be overwritten by subclasses

    def __init__(self, **kwargs):
        if not self.key_specs:
            raise ValueError(
                f"{self.__class__.__name__} must define a non-empty `key_specs` list"
            )

        self._specs = {
            key: {"key": key, "type": typ, "default": default}
            for key, typ, default in self.key_specs
        }

        self._data = {
            key: spec["default"] for key, spec in self._specs.items()
        }

        # initial values go through __setitem__ (type check)
        for key, value in kwargs.items():
            self[key] = value

    def __getitem__(self, key):
        return self._data[key]

    def __setitem__(self, key, value):
        if key not in self._specs:
            raise KeyError(f"Invalid key: {key}")
        expected_type = self._specs[key]["type"]
        if not isinstance(value, expected_type):
            if isinstance(expected_type, tuple):
                type_name = " or ".join(t.__name__ for t in expected_type)
            else:
                type_name = expected_type.__name__
            raise TypeError(
                f"Expected type {type_name} for key '{key}', got {type(value).__name__}"
            )
        self._data[key] = value

    def __delitem__(self, key):
        raise NotImplementedError("Deletion is not allowed")

    def __iter__(self):
        return iter(self._data)

    def __len__(self):
        return len(self._data)

    def __repr__(self):
        return f"{self.__class__.__name__}({self._data})"

    # Export
    def to_dict(self) -> dict:
        return dict(self._data)

    def to_json(self, **kwargs) -> str:
        return json.dumps(self._data, **kwargs)

    def to_yaml(self, **kwargs) -> str:
        return yaml.dump(self._data, **kwargs, sort_keys=False)

    # Import
    @classmethod
    def from_dict(cls, data: dict):
        return cls(**data)


class JSONEnumMeta(type(Enum)):
    """Metaclass adding JSON serialization helpers to Enums."""

    def __new__(mcs, name, bases, namespace, **kwargs):
        cls = super().__new__(mcs, name, bases, namespace, **kwargs)

        if not hasattr(cls, '__json__'):
            cls.__json__ = lambda self: self.value

        if not hasattr(cls, 'to_json'):
            cls.to_json = lambda self: self.value

        if not hasattr(cls, 'from_json'):
            @classmethod
            def from_json(cls, value):
                try:
                    return cls(value)
                except ValueError:
                    raise ValueError(f"'{value}' is not a valid {cls.__name__}")
            cls.from_json = from_json

        return cls


# ##########################################################
#
# MPEG frame header field values
# ==============================
#
# Values of the 2 bit fields are their bit patterns in the
# header word, so `MpegVersion(0b11)` is `MpegVersion.V1`.
#
# ##########################################################

class MpegVersion(Enum, metaclass=JSONEnumMeta):
    V2_5 = 0
    RESERVED = 1
    V2 = 2
    V1 = 3

    def __str__(self):
        return {0: "MPEG-2.5", 1: "reserved", 2: "MPEG-2", 3: "MPEG-1"}[self.value]


class MpegLayer(Enum, metaclass=JSONEnumMeta):
    RESERVED = 0
    LAYER3 = 1
    LAYER2 = 2
    LAYER1 = 3

    def __str__(self):
        return {0: "reserved", 1: "Layer III", 2: "Layer II", 3: "Layer I"}[self.value]


class Protection(Enum, metaclass=JSONEnumMeta):
    """Bit 16 of the header; a zero bit means a 16 bit CRC follows the header."""
    PROTECTED_BY_CRC = 0
    NOT_PROTECTED = 1


class ChannelMode(Enum, metaclass=JSONEnumMeta):
    STEREO = 0
    JOINT_STEREO = 1
    DUAL_CHANNEL = 2
    SINGLE_CHANNEL = 3


class Emphasis(Enum, metaclass=JSONEnumMeta):
    # numbered 1..4, i.e. bit pattern + 1
    NONE = 1
    MS_50_15 = 2
    RESERVED = 3
    CCIT_J17 = 4


class WalkPolicy(Enum, metaclass=JSONEnumMeta):
    """What the frame walker does with a header it can not compute a length for.

    STRICT aborts the walk with `InvalidFrameHeader`.
    LENIENT emits the remaining bytes as one final frame flagged `salvaged`
    and stops.
    """
    def _generate_next_value_(name, start, count, last_values):
        # is used by 'auto()'
        return name.lower()

    STRICT = auto()
    LENIENT = auto()

    def __str__(self):
        return self.value


class StreamSummary(RestrictedDict):
    """Diagnostic summary of a walked MP3 buffer (printed by the command line tool)."""

    IS_MP3 = "is_mp3"
    HAS_METADATA = "has_metadata"
    METADATA_OFFSET = "metadata_offset"
    FILE_SIZE = "file_size"
    FRAME_COUNT = "frame_count"
    FIRST_HEADER = "first_header"
    TRUNCATED_LAST_FRAME = "truncated_last_frame"
    SALVAGED_LAST_FRAME = "salvaged_last_frame"
    FRAME_LENGTHS = "frame_lengths"

    key_specs = [
                # as: (key-name, data-type, default-value)
                (IS_MP3, bool, False),
                (HAS_METADATA, bool, False),
                (METADATA_OFFSET, int, 0),
                (FILE_SIZE, int, 0),
                (FRAME_COUNT, int, 0),
                (FIRST_HEADER, (dict, type(None)), None),
                (TRUNCATED_LAST_FRAME, bool, False),
                (SALVAGED_LAST_FRAME, bool, False),
                (FRAME_LENGTHS, (list, type(None)), None),
            ]
