import pytest

from mpeak.frames import Frame, walk_frames
from mpeak.header import decode_header
from mpeak.side_info import (
    SideInformation,
    main_data_begin,
    part2_3_length,
    private_bits,
    scfsi,
)

from conftest import make_frame, make_header_word


class TestMainDataBegin:

    @pytest.mark.parametrize("is_mono", [True, False])
    def test_bit_positions(self, is_mono):
        assert main_data_begin(bytes([0b0000_0000, 0b0000_0000, 0, 0]), is_mono) == 0
        assert main_data_begin(bytes([0b1000_0000, 0b0000_0000, 0, 0]), is_mono) == 0b1_0000_0000
        assert main_data_begin(bytes([0b0000_0000, 0b1000_0000, 0, 0]), is_mono) == 1
        assert main_data_begin(bytes([0xFF, 0xFF, 0, 0]), is_mono) == 0x1FF


class TestPrivateBits:

    def test_mono(self):
        assert private_bits(bytes([0, 0b0000_0000, 0, 0]), True) == 0
        assert private_bits(bytes([0, 0b0000_0100, 0, 0]), True) == 1
        assert private_bits(bytes([0, 0b0100_0000, 0b1000_0000, 0]), True) == 16
        assert private_bits(bytes([0, 0b1111_1111, 0, 0]), True) == 0b11111

    def test_stereo(self):
        assert private_bits(bytes([0, 0b1000_0000, 0, 0]), False) == 0
        assert private_bits(bytes([0, 0b1001_0000, 0, 0]), False) == 1
        assert private_bits(bytes([0, 0b1100_0000, 0, 0b0100_0000]), False) == 4
        assert private_bits(bytes([0, 0b1111_1111, 0, 0]), False) == 0b111


class TestScfsi:

    def test_mono(self):
        assert scfsi(bytes([0xFF, 0b1111_1100, 0b0000_0000, 0]), True) == 0
        assert scfsi(bytes([0xFF, 0b1111_1100, 0b0100_0000, 0]), True) == 1
        assert scfsi(bytes([0xFF, 0b1111_1100, 0b1000_0000, 0]), True) == 2
        assert scfsi(bytes([0xFF, 0b1111_1110, 0b0000_0000, 0]), True) == 8

    def test_stereo(self):
        assert scfsi(bytes([0xFF, 0b1111_0000, 0b0000_0000, 0]), False) == 0
        assert scfsi(bytes([0xFF, 0b1111_0000, 0b0001_0000, 0]), False) == 1
        assert scfsi(bytes([0xFF, 0b1111_1000, 0b0000_0000, 0]), False) == 128
        assert scfsi(bytes([0xFF, 0b1111_0100, 0b0001_0000, 0]), False) == 65


class TestPart23Length:

    def test_mono(self):
        assert part2_3_length(bytes([0xFF, 0xFF, 0b1100_0000, 0b0000_0000, 0, 0, 0, 0]), True) == 0
        assert part2_3_length(bytes([0xFF, 0xFF, 0b1100_0000, 0b0000_0100, 0, 0, 0, 0]), True) == 1
        assert part2_3_length(bytes([0xFF, 0xFF, 0b1110_0000, 0b0000_0000, 0, 0, 0, 0]), True) == 2048
        assert part2_3_length(bytes([0, 0, 0b0011_1111, 0b1111_1100]), True) == 0xFFF

    def test_stereo(self):
        assert part2_3_length(bytes([0xFF, 0xFF, 0b1111_0000, 0, 0, 0b0000_0000, 0, 0]), False) == 0
        assert part2_3_length(bytes([0xFF, 0xFF, 0b1111_0000, 0, 0, 0b0001_0000, 0, 0]), False) == 1
        assert part2_3_length(bytes([0xFF, 0xFF, 0b1111_1000, 0, 0, 0b0000_0000, 0, 0]), False) == 8388608
        assert part2_3_length(bytes([0, 0, 0b0000_0001, 0b1000_0000, 0b0000_0001, 0b0001_0000]), False) == \
            (1 << 20) | (0x80 << 12) | (1 << 4) | 1


class TestSideInformation:

    def test_properties(self):
        info = SideInformation(bytes([0b1000_0000, 0b1001_0100, 0b0001_0000, 0, 0, 0b0001_0000]), False)
        assert info.main_data_begin == 0b1_0000_0001
        assert info.private_bits == 1
        assert info.scfsi == 0b0100_0001
        assert info.part2_3_length == 1
        assert set(info.to_dict()) == {"main_data_begin", "private_bits", "scfsi", "part2_3_length"}

    def test_from_frame_skips_header(self):
        side = bytes([0b0000_0001, 0b1000_0100, 0, 0])
        frame = walk_frames(make_frame(side_info=side, channel_mode=0b11))[0]
        info = SideInformation.from_frame(frame)
        assert info.is_mono
        assert info.data[:4] == side
        assert info.main_data_begin == 3
        assert info.private_bits == 1

    def test_from_frame_skips_crc(self):
        crc = b"\xAB\xCD"
        side = bytes([0b0000_0001, 0b1000_0000, 0, 0, 0, 0])
        frame = walk_frames(make_frame(side_info=crc + side, protection=0))[0]
        info = SideInformation.from_frame(frame)
        assert not info.is_mono
        assert info.main_data_begin == 3

    def test_from_frame_too_short(self):
        frame = walk_frames(make_frame() + make_frame()[:8])[-1]
        assert frame.truncated
        with pytest.raises(ValueError):
            SideInformation.from_frame(frame)

    @pytest.mark.parametrize("fields", [
        {"layer": 0b11},                    # MPEG-1 Layer I
        {"layer": 0b10},                    # MPEG-1 Layer II
        {"version": 0b10},                  # MPEG-2 Layer III
        {"version": 0b00},                  # MPEG-2.5 Layer III
    ])
    def test_from_frame_other_layouts(self, fields):
        payload = make_frame(side_info=bytes([0xFF] * 6), **fields)
        frame = Frame(header=decode_header(make_header_word(**fields)), payload=payload, position=0, offset=0)
        with pytest.raises(ValueError, match="MPEG-1 Layer III"):
            SideInformation.from_frame(frame)
