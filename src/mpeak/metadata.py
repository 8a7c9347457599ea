"""Leading ID3v2 metadata block: detection and the offset where audio frames begin.

All functions are pure and never fail; they never read past the end of the buffer.
"""

ID3_SIGNATURE = b"ID3"
ID3_HEADER_SIZE = 10
ID3_SIZE_SLICE = slice(6, 10)

# second byte after 0xFF of an MPEG-1 Layer III frame start:
# 0xFB no CRC, 0xF3 / 0xF2 MPEG-2 Layer III without / with CRC
MP3_SYNC_SECOND_BYTES = (0xFB, 0xF3, 0xF2)


def decode_syncsafe(data: bytes) -> int:
    """Integer of 7-bit groups, most significant first; the high bit of each byte is ignored."""
    value = 0
    for byte in data:
        value = (value << 7) | (byte & 0x7F)
    return value


def has_metadata(buffer: bytes) -> bool:
    """True if the buffer starts with the ID3 signature."""
    return len(buffer) >= 3 and bytes(buffer[:3]) == ID3_SIGNATURE


def metadata_offset(buffer: bytes) -> int:
    """Byte offset where the audio frames begin.

    0 without metadata block. If the block is present but its 10 byte header
    is incomplete, the whole buffer is metadata. Otherwise the declared
    block end `10 + syncsafe size`, which may lie beyond the buffer end
    of a truncated file; consumers clamp it to `len(buffer)`.
    """
    if not has_metadata(buffer):
        return 0
    if len(buffer) < ID3_HEADER_SIZE:
        return len(buffer)
    return ID3_HEADER_SIZE + decode_syncsafe(buffer[ID3_SIZE_SLICE])


def metadata_block(buffer: bytes) -> bytes:
    """The raw metadata block (header included); empty without block."""
    return bytes(buffer[:min(metadata_offset(buffer), len(buffer))])


def is_mp3_file(buffer: bytes) -> bool:
    """Fast file type sniff on the first bytes, no header validation."""
    if len(buffer) < 2:
        return False
    if buffer[0] == 0xFF:
        return buffer[1] in MP3_SYNC_SECOND_BYTES
    return has_metadata(buffer)
