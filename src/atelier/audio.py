"""PCM to WAV container encoding."""

import struct

WAV_HEADER_SIZE = 44


def pcm_to_wav(
    pcm: bytes,
    sample_rate: int = 24000,
    channels: int = 1,
    bits_per_sample: int = 16,
) -> bytes:
    """Wrap raw little-endian PCM samples in a canonical 44-byte WAV header.

    Args:
        pcm: Raw PCM payload.
        sample_rate: Samples per second.
        channels: Channel count.
        bits_per_sample: Bit depth.

    Returns:
        bytes: Header followed by the untouched payload.

    """
    data_size = len(pcm)
    block_align = channels * bits_per_sample // 8
    byte_rate = sample_rate * block_align

    header = struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,  # fmt chunk size
        1,  # PCM
        channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        b"data",
        data_size,
    )
    return header + pcm
