"""Temporal noise shaping: per-profile limits, analysis and filtering."""

from __future__ import annotations

from collections.abc import Callable, MutableSequence, Sequence
from dataclasses import dataclass, field
from enum import IntEnum

from aaccore.huffman import WindowType
from aaccore.lpc import (
    levinson_durbin,
    quantize_reflection_coeffs,
    step_up,
    tns_filter,
    tns_inv_filter,
    truncate_coeffs,
)
from aaccore.quantize import BLOCK_LEN_LONG, BLOCK_LEN_SHORT, MAX_SHORT_WINDOWS

TNS_MAX_ORDER = 20
DEF_TNS_COEFF_RES = 4
DEF_TNS_GAIN_THRESH = 1.4
DEF_TNS_COEFF_THRESH = 0.1

MPEG2 = 1
"""Value of ``mpeg_version`` that selects MPEG-2 limits."""

# Lowest band to filter (bands above 2 kHz), by sample-rate index.
_MIN_BAND_LONG = (11, 12, 15, 16, 17, 20, 25, 26, 24, 28, 30, 31)
_MIN_BAND_SHORT = (2, 2, 2, 3, 3, 4, 6, 6, 8, 10, 10, 12)

# Main/Low profile band limits, by sample-rate index.
_MAX_BANDS_LONG = (31, 31, 34, 40, 42, 51, 46, 46, 42, 42, 42, 39)
_MAX_BANDS_SHORT = (9, 9, 10, 14, 14, 14, 14, 14, 14, 14, 14, 14)

_MAX_ORDER_LONG_MAIN = 20
_MAX_ORDER_LONG_LOW = 12
_MAX_ORDER_SHORT = 7


class ObjectType(IntEnum):
    """AAC audio object type."""

    MAIN = 1
    LOW = 2
    SSR = 3
    LTP = 4


@dataclass
class TnsFilterData:
    """One TNS filter: its order, direction and coefficients."""

    order: int = 0
    direction: int = 0
    coef_compress: int = 0
    length: int = 0
    a_coeffs: list[float] = field(default_factory=lambda: [1.0])
    k_coeffs: list[float] = field(default_factory=lambda: [1.0])
    index: list[int] = field(default_factory=lambda: [0])


@dataclass
class TnsWindowData:
    """TNS state of one window."""

    num_filters: int = 0
    coef_resolution: int = DEF_TNS_COEFF_RES
    tns_filter: TnsFilterData = field(default_factory=TnsFilterData)


@dataclass
class TnsInfo:
    """TNS limits of one channel and the filters chosen for its windows."""

    tns_data_present: bool = False
    max_bands_long: int = 0
    max_bands_short: int = 0
    max_order_long: int = 0
    max_order_short: int = 0
    min_band_long: int = 0
    min_band_short: int = 0
    window_data: list[TnsWindowData] = field(
        default_factory=lambda: [TnsWindowData() for _ in range(MAX_SHORT_WINDOWS)]
    )


def tns_init(profile: ObjectType | int, mpeg_version: int, sample_rate_index: int) -> TnsInfo:
    """Return the TNS limits for a profile, MPEG version and sample-rate index."""
    if not 0 <= sample_rate_index < len(_MIN_BAND_LONG):
        raise ValueError(f"sample-rate index {sample_rate_index} out of range 0..11")
    info = TnsInfo()
    if profile in (ObjectType.MAIN, ObjectType.LTP, ObjectType.LOW):
        info.max_bands_long = _MAX_BANDS_LONG[sample_rate_index]
        info.max_bands_short = _MAX_BANDS_SHORT[sample_rate_index]
        if mpeg_version == MPEG2:
            if profile == ObjectType.LOW:
                info.max_order_long = _MAX_ORDER_LONG_LOW
            else:
                info.max_order_long = _MAX_ORDER_LONG_MAIN
        else:
            # Above 32 kHz the order stays at 12.
            info.max_order_long = 12 if sample_rate_index <= 5 else 20
        info.max_order_short = _MAX_ORDER_SHORT
    info.min_band_long = _MIN_BAND_LONG[sample_rate_index]
    info.min_band_short = _MIN_BAND_SHORT[sample_rate_index]
    return info


def _band_range(min_band: int, max_bands: int, number_of_bands: int, max_sfb: int) -> tuple[int, int]:
    start = max(min(min_band, max_bands, max_sfb), 0)
    stop = max(min(number_of_bands, max_bands, max_sfb), 0)
    return start, stop


def tns_encode(
    info: TnsInfo,
    number_of_bands: int,
    max_sfb: int,
    block_type: WindowType | int,
    sfb_offsets: Sequence[int],
    spec: MutableSequence[float],
) -> None:
    """Analyse ``spec`` and, where prediction pays off, filter it in place.

    Short blocks are never filtered.
    """
    if block_type == WindowType.ONLY_SHORT:
        info.tns_data_present = False
        return

    length_in_bands = number_of_bands - info.min_band_long
    order = info.max_order_long
    start_band, stop_band = _band_range(
        info.min_band_long, info.max_bands_long, number_of_bands, max_sfb
    )
    info.tns_data_present = False

    window = info.window_data[0]
    filt = window.tns_filter
    window.num_filters = 0
    window.coef_resolution = DEF_TNS_COEFF_RES

    begin = sfb_offsets[start_band]
    length = sfb_offsets[stop_band] - begin
    segment = list(spec[begin:begin + max(length, 0)])
    gain, k = levinson_durbin(order, segment)
    filt.k_coeffs = k

    if gain > DEF_TNS_GAIN_THRESH:
        window.num_filters += 1
        info.tns_data_present = True
        filt.direction = 0
        filt.coef_compress = 0
        filt.length = length_in_bands
        filt.index, k = quantize_reflection_coeffs(order, DEF_TNS_COEFF_RES, k)
        filt.order, k = truncate_coeffs(order, DEF_TNS_COEFF_THRESH, k)
        filt.k_coeffs = k
        filt.a_coeffs = step_up(filt.order, k)
        spec[begin:begin + length] = tns_inv_filter(
            segment, filt.a_coeffs, filt.order, filt.direction
        )


def _apply_filters(
    info: TnsInfo,
    number_of_bands: int,
    max_sfb: int,
    block_type: WindowType | int,
    sfb_offsets: Sequence[int],
    spec: MutableSequence[float],
    run: Callable[[Sequence[float], Sequence[float], int, int], list[float]],
) -> None:
    if block_type == WindowType.ONLY_SHORT:
        windows, window_size = MAX_SHORT_WINDOWS, BLOCK_LEN_SHORT
        start_band, stop_band = _band_range(
            info.min_band_short, info.max_bands_short, number_of_bands, max_sfb
        )
    else:
        windows, window_size = 1, BLOCK_LEN_LONG
        start_band, stop_band = _band_range(
            info.min_band_long, info.max_bands_long, number_of_bands, max_sfb
        )

    length = sfb_offsets[stop_band] - sfb_offsets[start_band]
    for w, window in enumerate(info.window_data[:windows]):
        if not (info.tns_data_present and window.num_filters):
            continue
        begin = w * window_size + sfb_offsets[start_band]
        filt = window.tns_filter
        segment = list(spec[begin:begin + length])
        spec[begin:begin + length] = run(segment, filt.a_coeffs, filt.order, filt.direction)


def tns_encode_filter_only(
    info: TnsInfo,
    number_of_bands: int,
    max_sfb: int,
    block_type: WindowType | int,
    sfb_offsets: Sequence[int],
    spec: MutableSequence[float],
) -> None:
    """Apply the analysis filters already chosen in ``info`` to ``spec`` in place."""
    _apply_filters(info, number_of_bands, max_sfb, block_type, sfb_offsets, spec, tns_inv_filter)


def tns_decode_filter_only(
    info: TnsInfo,
    number_of_bands: int,
    max_sfb: int,
    block_type: WindowType | int,
    sfb_offsets: Sequence[int],
    spec: MutableSequence[float],
) -> None:
    """Apply the synthesis filters chosen in ``info`` to ``spec`` in place."""
    _apply_filters(info, number_of_bands, max_sfb, block_type, sfb_offsets, spec, tns_filter)