"""Shared helpers and fixtures of the mpeak tests."""

import pytest

from mpeak.config import Config

SYNC = 0xFFE00000

# MPEG-1 Layer III, no CRC, 128 kbit/s, 44100 Hz: 417 bytes (418 padded)
V1_L3_128K_LENGTH = 417


def make_header_word(version=0b11, layer=0b01, protection=1, bitrate_index=0b1001,
                     sample_rate_index=0b00, padding=0, private=0, channel_mode=0b00,
                     mode_extension=0, copyright=0, original=0, emphasis=0):
    """Raw 32 bit header word with sync bits set."""
    return (SYNC
            | version << 19
            | layer << 17
            | protection << 16
            | bitrate_index << 12
            | sample_rate_index << 10
            | padding << 9
            | private << 8
            | channel_mode << 6
            | mode_extension << 4
            | copyright << 3
            | original << 2
            | emphasis)


def make_frame(length=V1_L3_128K_LENGTH, side_info=b"", **header_fields) -> bytes:
    """Frame bytes: header, optional side information bytes, zero filler up to `length`."""
    header = make_header_word(**header_fields).to_bytes(4, 'big')
    body = side_info + bytes(length - 4 - len(side_info))
    return header + body


def make_id3(tag_size: int) -> bytes:
    """ID3v2 header declaring `tag_size` tag bytes plus the zeroed tag bytes."""
    size = bytes([(tag_size >> 21) & 0x7F, (tag_size >> 14) & 0x7F, (tag_size >> 7) & 0x7F, tag_size & 0x7F])
    return b"ID3" + bytes([4, 0, 0]) + size + bytes(tag_size)


@pytest.fixture
def mp3_buffer() -> bytes:
    """ID3 block with 20 tag bytes followed by three 128 kbit/s MPEG-1 Layer III frames."""
    return make_id3(20) + make_frame() * 3


@pytest.fixture(autouse=True)
def restore_config():
    """Every test starts and ends with the same configuration."""
    snapshot = {key: getattr(Config, key) for key in Config._CONFIGURABLE_KEYS}
    snapshot["module_log_levels"] = dict(snapshot["module_log_levels"])
    yield
    Config.set(**snapshot)
