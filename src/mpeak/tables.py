"""Static MPEG audio lookup tables.

Bitrates in kbit/s indexed by the 4 bit bitrate index, sample rates in Hz
indexed by the 2 bit sample rate index. Index 0 (free format), index 15 and
all reserved combinations resolve to 0.
"""

from types import MappingProxyType

from .packagetypes import MpegVersion, MpegLayer

V1_L1 = (0, 32, 64, 96, 128, 160, 192, 224, 256, 288, 320, 352, 384, 416, 448, 0)
V1_L2 = (0, 32, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320, 384, 0)
V1_L3 = (0, 32, 40, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320, 0)
V2_L1 = (0, 32, 48, 56, 64, 80, 96, 112, 128, 144, 160, 176, 192, 224, 256, 0)
V2_L2_L3 = (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160, 0)
RESERVED_BITRATES = (0,) * 16

MPEG1_SAMPLE_RATES = (44100, 48000, 32000, 0)
MPEG2_SAMPLE_RATES = (22050, 24000, 16000, 0)
MPEG2_5_SAMPLE_RATES = (11025, 12000, 8000, 0)
RESERVED_SAMPLE_RATES = (0, 0, 0, 0)

SAMPLE_RATES = MappingProxyType({
    MpegVersion.V1: MPEG1_SAMPLE_RATES,
    MpegVersion.V2: MPEG2_SAMPLE_RATES,
    MpegVersion.V2_5: MPEG2_5_SAMPLE_RATES,
    MpegVersion.RESERVED: RESERVED_SAMPLE_RATES,
})

# factor of the frame length formula: bytes = FRAME_LENGTH_FACTOR * bitrate / sample rate
FRAME_LENGTH_FACTOR = 144


def bitrate_table(version: MpegVersion, layer: MpegLayer) -> tuple:
    if version == MpegVersion.RESERVED or layer == MpegLayer.RESERVED:
        return RESERVED_BITRATES
    if version == MpegVersion.V1:
        return {MpegLayer.LAYER1: V1_L1, MpegLayer.LAYER2: V1_L2, MpegLayer.LAYER3: V1_L3}[layer]
    # MPEG-2 and MPEG-2.5 share their tables
    return V2_L1 if layer == MpegLayer.LAYER1 else V2_L2_L3


def sample_rate_table(version: MpegVersion) -> tuple:
    return SAMPLE_RATES[version]


def samples_per_frame(version: MpegVersion, layer: MpegLayer) -> int:
    """PCM samples per channel coded in one frame; 0 for reserved combinations."""
    if version == MpegVersion.RESERVED or layer == MpegLayer.RESERVED:
        return 0
    if layer == MpegLayer.LAYER1:
        return 384
    if layer == MpegLayer.LAYER2 or version == MpegVersion.V1:
        return 1152
    return 576
