"""Sample-rate and bit-budget helpers for the AAC encoder."""

from __future__ import annotations

import math

FRAME_LEN = 1024
"""Number of samples per channel in one AAC frame."""

MAX_CHANNEL_BITS = 6144
"""Largest number of bits one channel may spend on a frame."""

MIN_BITRATE = 8000

# Lower bound of each sample-rate index, from index 0 upwards.
_SR_THRESHOLDS = (
    92017,
    75132,
    55426,
    46009,
    37566,
    27713,
    23004,
    18783,
    13856,
    11502,
    9391,
)


def get_sr_index(sample_rate: int) -> int:
    """Return the AAC sampling-frequency index for ``sample_rate``."""
    for index, threshold in enumerate(_SR_THRESHOLDS):
        if sample_rate >= threshold:
            return index
    return len(_SR_THRESHOLDS)


def max_bitrate(sample_rate: int) -> int:
    """Return the largest bitrate an 8 KiB ADTS frame allows at ``sample_rate``."""
    return int(0x2000 * 8 * float(sample_rate) / float(FRAME_LEN))


def min_bitrate() -> int:
    """Return the smallest bitrate per channel."""
    return MIN_BITRATE


def bit_allocation(pe: float, short_block: bool) -> int:
    """Return the bits to allocate for a block of perceptual entropy ``pe``."""
    if short_block:
        pew1, pew2 = 0.6, 24.0
    else:
        pew1, pew2 = 0.3, 6.0
    root = math.sqrt(pe) if pe >= 0 else math.nan
    allocation = pew1 * pe + pew2 * root
    # The clamps are ordered so that a NaN allocation ends up at the maximum.
    if 0.0 > allocation:
        allocation = 0.0
    if not allocation < float(MAX_CHANNEL_BITS):
        allocation = float(MAX_CHANNEL_BITS)
    return int(allocation + 0.5)


def max_bitres_size(bit_rate: int, sample_rate: int) -> int:
    """Return the size of the bit reservoir for the given rates."""
    per_frame = int(float(bit_rate) / float(sample_rate) * float(FRAME_LEN))
    return MAX_CHANNEL_BITS - per_frame