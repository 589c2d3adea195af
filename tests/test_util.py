import pytest

from aaccore.util import (
    FRAME_LEN,
    bit_allocation,
    get_sr_index,
    max_bitrate,
    max_bitres_size,
    min_bitrate,
)

THRESHOLDS = [92017, 75132, 55426, 46009, 37566, 27713, 23004, 18783, 13856, 11502, 9391]


@pytest.mark.parametrize("index,threshold", list(enumerate(THRESHOLDS)))
def test_sr_index_boundaries(index, threshold):
    assert get_sr_index(threshold) == index
    assert get_sr_index(threshold - 1) == index + 1


def test_sr_index_extremes():
    assert get_sr_index(192000) == 0
    assert get_sr_index(0) == len(THRESHOLDS)


def test_sr_index_is_monotonic():
    rates = range(0, 100000, 997)
    indices = [get_sr_index(r) for r in rates]
    assert indices == sorted(indices, reverse=True)


def test_min_bitrate():
    assert min_bitrate() == 8000


def test_max_bitrate_scales_with_rate():
    assert max_bitrate(FRAME_LEN) == 0x2000 * 8
    assert max_bitrate(2 * FRAME_LEN) == 2 * max_bitrate(FRAME_LEN)


def test_max_bitres_size():
    assert max_bitres_size(0, 44100) == 6144
    assert max_bitres_size(44100, 44100) == 6144 - FRAME_LEN


def test_bit_allocation_zero():
    assert bit_allocation(0.0, False) == 0
    assert bit_allocation(0.0, True) == 0


def test_bit_allocation_values():
    assert bit_allocation(100.0, False) == 90
    assert bit_allocation(100.0, True) == 300


def test_bit_allocation_saturates():
    assert bit_allocation(1e9, False) == 6144
    assert bit_allocation(1e9, True) == 6144


def test_bit_allocation_short_exceeds_long():
    for pe in (1.0, 10.0, 500.0, 2000.0):
        assert bit_allocation(pe, True) >= bit_allocation(pe, False)


def test_bit_allocation_monotonic():
    values = [bit_allocation(float(pe), False) for pe in range(0, 20000, 250)]
    assert values == sorted(values)