import pytest

from mpeak.metadata import (
    decode_syncsafe,
    has_metadata,
    is_mp3_file,
    metadata_block,
    metadata_offset,
)

from conftest import make_frame, make_id3


class TestIsMp3File:

    @pytest.mark.parametrize("buffer", [b"", b"\xFF", b"I"])
    def test_short_buffers_are_not_mp3(self, buffer):
        assert is_mp3_file(buffer) is False

    @pytest.mark.parametrize("second", [0xFB, 0xF3, 0xF2])
    def test_frame_sync_without_metadata(self, second):
        assert is_mp3_file(bytes([0xFF, second]))
        assert is_mp3_file(bytes([0xFF, second, 0x90, 0x00]))

    def test_other_sync_bytes_are_not_mp3(self):
        assert is_mp3_file(bytes([0xFF, 0xAA])) is False
        assert is_mp3_file(bytes([0xFF, 0xFA])) is False

    def test_metadata_signature(self):
        assert is_mp3_file(bytes([0x49, 0x44])) is False
        assert is_mp3_file(bytes([0x49, 0x44, 0x33]))
        assert is_mp3_file(bytes([0x49, 0x44, 0x33, 0x90]))

    def test_unrelated_data(self):
        assert is_mp3_file(b"RIFF....WAVE") is False


class TestMetadataOffset:

    def test_has_metadata(self):
        assert has_metadata(b"ID3") is True
        assert has_metadata(b"ID") is False
        assert has_metadata(b"\xFF\xFBID3") is False

    def test_no_metadata_gives_zero(self):
        assert metadata_offset(make_frame()) == 0
        assert metadata_offset(b"") == 0

    def test_incomplete_metadata_header_is_whole_buffer(self):
        assert metadata_offset(b"ID3") == 3
        assert metadata_offset(b"ID3\x04\x00\x00\x00\x00\x00") == 9

    def test_zero_size(self):
        assert metadata_offset(bytes([0x49, 0x44, 0x33, 0x90, 0, 0, 0, 0, 0, 0])) == 10

    def test_syncsafe_size(self):
        assert metadata_offset(bytes([0x49, 0x44, 0x33, 0x90, 0, 0, 0, 0, 0, 1])) == 11
        assert metadata_offset(bytes([0x49, 0x44, 0x33, 0x90, 0, 0, 0, 0, 1, 1])) == 10 + 128 + 1

    def test_maximum_syncsafe_size(self):
        buffer = bytes([0x49, 0x44, 0x33, 0x90, 0, 0, 0x7F, 0x7F, 0x7F, 0x7F])
        assert metadata_offset(buffer) == 10 + 0b1111111_1111111_1111111_1111111
        assert metadata_offset(buffer) == 10 + 0x0FFFFFFF

    def test_high_bits_of_size_bytes_are_ignored(self):
        assert metadata_offset(bytes([0x49, 0x44, 0x33, 4, 0, 0, 0x80, 0x80, 0x81, 0x81])) == 10 + 128 + 1

    def test_decode_syncsafe(self):
        assert decode_syncsafe(bytes([0, 0, 2, 1])) == 257
        assert decode_syncsafe(b"") == 0

    def test_metadata_block(self):
        buffer = make_id3(5) + make_frame()
        block = metadata_block(buffer)
        assert len(block) == 15
        assert block.startswith(b"ID3")
        assert metadata_block(make_frame()) == b""

    def test_metadata_block_is_clamped_to_buffer(self):
        buffer = bytes([0x49, 0x44, 0x33, 4, 0, 0, 0, 0, 1, 0])
        assert metadata_block(buffer) == buffer
