"""Layer III side information at the start of the frame data.

The first bits behind the header (and its CRC, if present):

    mono:    DDDDDDDD DPPPPPSS SSLLLLLL LLLLLL..
    stereo:  DDDDDDDD DPPPSSSS SSSSLLLL LLLLLLLL LLLLLLLL LLLL....

    D main_data_begin   P private bits   S scfsi   L part2_3_length

The bare functions take the side information bytes and do not check their
length; `SideInformation.from_frame` does and accepts MPEG-1 Layer III
frames only. The MPEG-2 and MPEG-2.5 layouts (8 bit main_data_begin, no
scfsi) are not decoded.
"""

from .header import HEADER_SIZE, CRC_SIZE
from .packagetypes import MpegLayer, MpegVersion

MONO_MIN_BYTES = 4
STEREO_MIN_BYTES = 6


def main_data_begin(data: bytes, is_mono: bool = False) -> int:
    # same position for mono and stereo
    return data[0] << 1 | data[1] >> 7


def private_bits(data: bytes, is_mono: bool) -> int:
    if is_mono:
        return (data[1] & 0b0111_1100) >> 2
    return (data[1] & 0b0111_0000) >> 4


def scfsi(data: bytes, is_mono: bool) -> int:
    if is_mono:
        return (data[1] & 0b0000_0011) << 2 | (data[2] & 0b1100_0000) >> 6
    return (data[1] & 0b0000_1111) << 4 | (data[2] & 0b1111_0000) >> 4


def part2_3_length(data: bytes, is_mono: bool) -> int:
    if is_mono:
        return (data[2] & 0b0011_1111) << 6 | (data[3] & 0b1111_1100) >> 2
    return ((data[2] & 0b0000_1111) << 20
            | data[3] << 12
            | data[4] << 4
            | (data[5] & 0b1111_0000) >> 4)


def required_bytes(is_mono: bool) -> int:
    return MONO_MIN_BYTES if is_mono else STEREO_MIN_BYTES


class SideInformation:
    """On-demand view over side information bytes; nothing is cached."""

    def __init__(self, data: bytes, is_mono: bool):
        self.data = data
        self.is_mono = is_mono

    @classmethod
    def from_frame(cls, frame) -> "SideInformation":
        """Side information of `frame`, mono flag from its channel mode.

        Raises
        ------
        ValueError
            If the frame is not MPEG-1 Layer III or its payload is too short
            for the side information fields
        """
        header = frame.header
        if header.layer != MpegLayer.LAYER3 or header.version != MpegVersion.V1:
            raise ValueError(f"Frame {frame.position} is {header.version} {header.layer}; "
                             f"only MPEG-1 Layer III side information is decoded")
        start = HEADER_SIZE + (CRC_SIZE if frame.header.is_crc_protected else 0)
        data = frame.payload[start:]
        is_mono = frame.header.is_mono
        needed = required_bytes(is_mono)
        if len(data) < needed:
            raise ValueError(f"Frame {frame.position} has {len(data)} side information byte(s), "
                             f"{'mono' if is_mono else 'stereo'} layout needs {needed}")
        return cls(data, is_mono)

    @property
    def main_data_begin(self) -> int:
        return main_data_begin(self.data, self.is_mono)

    @property
    def private_bits(self) -> int:
        return private_bits(self.data, self.is_mono)

    @property
    def scfsi(self) -> int:
        return scfsi(self.data, self.is_mono)

    @property
    def part2_3_length(self) -> int:
        return part2_3_length(self.data, self.is_mono)

    def to_dict(self) -> dict:
        return {
            "main_data_begin": self.main_data_begin,
            "private_bits": self.private_bits,
            "scfsi": self.scfsi,
            "part2_3_length": self.part2_3_length,
        }

    def __repr__(self):
        return f"SideInformation(is_mono={self.is_mono}, {self.to_dict()})"
