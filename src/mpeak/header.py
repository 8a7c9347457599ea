"""
MPEG audio frame header
=======================

Decoding of the 32 bit frame header and computation of the frame length.

Bit layout of the big endian header word (MSB first):

    AAAAAAAA AAABBCCD EEEEFFGH IIJJKLMM

    A  sync (all set at a frame start; not checked here)
    B  version            C  layer              D  protection
    E  bitrate index      F  sample rate index  G  padding
    H  private            I  channel mode       J  mode extension
    K  copyright          L  original           M  emphasis

Decoding is total: every 32 bit value decodes to a header, reserved bit
combinations map to the RESERVED members of the field enums. Only the frame
length can fail, with `InvalidFrameHeader`.
"""

from dataclasses import dataclass

from .exceptions import InvalidFrameHeader
from .packagetypes import MpegVersion, MpegLayer, Protection, ChannelMode, Emphasis
from .tables import FRAME_LENGTH_FACTOR, bitrate_table, sample_rate_table, samples_per_frame

HEADER_SIZE = 4
CRC_SIZE = 2
SYNC_MASK = 0xFFE00000


def _bits(word: int, shift: int, mask: int) -> int:
    return (word >> shift) & mask


@dataclass(frozen=True)
class FrameHeader:
    """Immutable frame header; all fields are derived from `raw`.

    Two headers are equal if their raw words are equal.
    """
    raw: int

    def __post_init__(self):
        if not isinstance(self.raw, int) or not 0 <= self.raw <= 0xFFFFFFFF:
            raise ValueError(f"Frame header must be an unsigned 32 bit integer, got {self.raw!r}")

    @classmethod
    def from_bytes(cls, data: bytes) -> "FrameHeader":
        """Header from exactly 4 big endian bytes."""
        if len(data) != HEADER_SIZE:
            raise ValueError(f"Frame header needs {HEADER_SIZE} bytes, got {len(data)}")
        return cls(int.from_bytes(data, 'big'))

    def to_bytes(self) -> bytes:
        return self.raw.to_bytes(HEADER_SIZE, 'big')

    @property
    def has_sync(self) -> bool:
        return (self.raw & SYNC_MASK) == SYNC_MASK

    @property
    def version(self) -> MpegVersion:
        return MpegVersion(_bits(self.raw, 19, 0b11))

    @property
    def layer(self) -> MpegLayer:
        return MpegLayer(_bits(self.raw, 17, 0b11))

    @property
    def protection(self) -> Protection:
        return Protection(_bits(self.raw, 16, 0b1))

    @property
    def bitrate_index(self) -> int:
        return _bits(self.raw, 12, 0xF)

    @property
    def sample_rate_index(self) -> int:
        return _bits(self.raw, 10, 0b11)

    @property
    def padding(self) -> bool:
        return bool(_bits(self.raw, 9, 0b1))

    @property
    def private(self) -> bool:
        return bool(_bits(self.raw, 8, 0b1))

    @property
    def channel_mode(self) -> ChannelMode:
        return ChannelMode(_bits(self.raw, 6, 0b11))

    @property
    def mode_extension(self) -> int:
        return _bits(self.raw, 4, 0b11)

    @property
    def copyright(self) -> bool:
        return bool(_bits(self.raw, 3, 0b1))

    @property
    def original(self) -> bool:
        return bool(_bits(self.raw, 2, 0b1))

    @property
    def emphasis(self) -> Emphasis:
        return Emphasis(_bits(self.raw, 0, 0b11) + 1)

    # derived values
    # --------------

    @property
    def is_mono(self) -> bool:
        return self.channel_mode == ChannelMode.SINGLE_CHANNEL

    @property
    def is_crc_protected(self) -> bool:
        return self.protection == Protection.PROTECTED_BY_CRC

    @property
    def bitrate_kbps(self) -> int:
        """Bitrate in kbit/s; 0 for free format, bad and reserved values."""
        return bitrate_table(self.version, self.layer)[self.bitrate_index]

    @property
    def sample_rate(self) -> int:
        """Sample rate in Hz; 0 for reserved values."""
        return sample_rate_table(self.version)[self.sample_rate_index]

    @property
    def samples_per_frame(self) -> int:
        return samples_per_frame(self.version, self.layer)

    def to_dict(self) -> dict:
        """Plain field values for diagnostics and YAML output."""
        return {
            "raw": f"0x{self.raw:08X}",
            "version": str(self.version),
            "layer": str(self.layer),
            "protection": self.protection.name,
            "bitrate_index": self.bitrate_index,
            "bitrate_kbps": self.bitrate_kbps,
            "sample_rate_index": self.sample_rate_index,
            "sample_rate": self.sample_rate,
            "padding": self.padding,
            "private": self.private,
            "channel_mode": self.channel_mode.name,
            "mode_extension": self.mode_extension,
            "copyright": self.copyright,
            "original": self.original,
            "emphasis": self.emphasis.name,
        }

    def __repr__(self):
        return f"FrameHeader(raw=0x{self.raw:08X}, version={self.version.name}, layer={self.layer.name})"


def decode_header(word: int) -> FrameHeader:
    return FrameHeader(word)


def frame_length(header: FrameHeader) -> int:
    """Byte length of the frame described by `header`, header bytes included.

    `144 * bitrate / sample_rate`, plus one byte if the padding bit is set.

    Raises
    ------
    InvalidFrameHeader
        If the sample rate or the bitrate resolves to 0 (reserved version,
        layer or sample rate index, free format or bad bitrate index). A
        zero length frame would stop the frame walker from advancing.
    """
    sample_rate = header.sample_rate
    if sample_rate == 0:
        raise InvalidFrameHeader(header, reason=f"no sample rate for {header.version.name} "
                                                f"with sample rate index {header.sample_rate_index}")
    bitrate = header.bitrate_kbps
    if bitrate == 0:
        raise InvalidFrameHeader(header, reason=f"no bitrate for {header.version.name}/{header.layer.name} "
                                                f"with bitrate index {header.bitrate_index}")
    length = FRAME_LENGTH_FACTOR * bitrate * 1000 // sample_rate
    if header.padding:
        length += 1
    return length
