"""Joint stereo coding: mid/side and intensity stereo decisions per band."""

from __future__ import annotations

import math
from collections.abc import Iterator, MutableSequence, Sequence
from dataclasses import dataclass, field
from enum import IntEnum

from aaccore.huffman import Codebook, CoderInfo, WindowType
from aaccore.quantize import BLOCK_LEN_SHORT

_THR075 = 1.09 - 1.0  # ~0.75 dB
_THRMAX = 1.25 - 1.0  # ~2 dB
_SIDEMIN = 0.1  # -20 dB
_SIDEMAX = 0.3  # ~-10.5 dB
_ISTHRMAX = math.sqrt(2.0) - 1.0
_IS_STEP = 10 / 1.50515
_PAN_LIMIT = 30


class StereoMode(IntEnum):
    """Joint stereo coding mode."""

    NONE = 0
    MS = 1
    IS = 2


@dataclass
class ChannelInfo:
    """Channel layout and the stereo decisions made for it."""

    present: bool = True
    cpe: bool = False
    ch_is_left: bool = False
    paired_ch: int = 0
    common_window: bool = False
    ms_present: bool = False
    ms_used: list[int] = field(default_factory=list)


def _first_band(coder: CoderInfo) -> int:
    return 1 if coder.block_type == WindowType.ONLY_SHORT else 8


def _bands(coder: CoderInfo) -> list[tuple[int, int]]:
    offsets = coder.sfb_offset
    if len(offsets) < coder.sfbn + 1:
        raise ValueError(
            f"{len(offsets)} band offsets given, {coder.sfbn + 1} needed"
        )
    return list(zip(offsets[:coder.sfbn], offsets[1:coder.sfbn + 1]))


def _lines(wstart: int, wend: int, start: int, end: int) -> Iterator[int]:
    for win in range(wstart, wend):
        base = win * BLOCK_LEN_SHORT
        yield from range(base + start, base + end)


def _energies(
    sl: Sequence[float], sr: Sequence[float], lines: Sequence[int], scale: float
) -> tuple[float, float, float, float]:
    enrgs = enrgd = enrgl = enrgr = 0.0
    for i in lines:
        lx, rx = sl[i], sr[i]
        total = scale * (lx + rx)
        diff = scale * (lx - rx)
        enrgs += total * total
        enrgd += diff * diff
        enrgl += lx * lx
        enrgr += rx * rx
    return enrgs, enrgd, enrgl, enrgr


def _intensity(
    left: CoderInfo,
    right: CoderInfo,
    sl: MutableSequence[float],
    sr: MutableSequence[float],
    sfcnt: int,
    wstart: int,
    wend: int,
    isthr: float,
) -> int:
    """Apply intensity stereo to one window group; return the next band index."""
    if not isthr:
        return sfcnt
    phthr = 1.0 / isthr
    sfmin = _first_band(left)
    sfcnt += sfmin

    for start, end in _bands(left)[sfmin:]:
        lines = list(_lines(wstart, wend, start, end))
        enrgs, enrgd, enrgl, enrgr = _energies(sl, sr, lines, 1.0)
        efix = enrgl + enrgr
        if efix == 0.0:
            # Silent band: nothing to steer.
            sfcnt += 1
            continue

        ethr = (math.sqrt(enrgl) + math.sqrt(enrgr)) ** 2 * phthr
        if enrgs >= ethr:
            hcb = Codebook.INTENSITY
            vfix = math.sqrt(efix / enrgs)
        elif enrgd >= ethr:
            hcb = Codebook.INTENSITY2
            vfix = math.sqrt(efix / enrgd)
        else:
            sfcnt += 1
            continue

        sf = 0
        if enrgl == 0.0:
            pan: float = math.inf
        elif enrgr == 0.0:
            pan = -math.inf
        else:
            sf = round(math.log10(enrgl / efix) * _IS_STEP)
            pan = round(math.log10(enrgr / efix) * _IS_STEP) - sf

        if pan > _PAN_LIMIT:
            left.book[sfcnt] = int(Codebook.ZERO)
            sfcnt += 1
            continue
        if pan < -_PAN_LIMIT:
            right.book[sfcnt] = int(Codebook.ZERO)
            sfcnt += 1
            continue

        left.sf[sfcnt] = sf
        right.sf[sfcnt] = -int(pan)
        right.book[sfcnt] = int(hcb)
        for i in lines:
            if hcb == Codebook.INTENSITY:
                total = sl[i] + sr[i]
            else:
                total = sl[i] - sr[i]
            sl[i] = total * vfix
        sfcnt += 1
    return sfcnt


def _set_ms(channel: ChannelInfo, index: int, value: int) -> None:
    while len(channel.ms_used) <= index:
        channel.ms_used.append(0)
    channel.ms_used[index] = value


def _midside(
    coder: CoderInfo,
    channel: ChannelInfo,
    sl: MutableSequence[float],
    sr: MutableSequence[float],
    sfcnt: int,
    wstart: int,
    wend: int,
    thrmid: float,
    thrside: float,
) -> int:
    """Apply mid/side coding to one window group; return the next band index."""
    sfmin = _first_band(coder)
    for _ in range(sfmin):
        _set_ms(channel, sfcnt, 0)
        sfcnt += 1

    for start, end in _bands(coder)[sfmin:]:
        lines = list(_lines(wstart, wend, start, end))
        enrgs, enrgd, enrgl, enrgr = _energies(sl, sr, lines, 0.5)
        ms = 0

        if min(enrgl, enrgr) * thrmid >= max(enrgs, enrgd):
            in_phase = None
            if enrgs * thrmid * 2.0 >= enrgl + enrgr:
                in_phase = True
            elif enrgd * thrmid * 2.0 >= enrgl + enrgr:
                in_phase = False

            if in_phase is not None:
                ms = 1
                for i in lines:
                    if in_phase:
                        sl[i] = 0.5 * (sl[i] + sr[i])
                        sr[i] = 0.0
                    else:
                        diff = sl[i] - sr[i]
                        sl[i] = 0.0
                        sr[i] = 0.5 * diff

        if min(enrgl, enrgr) <= thrside * max(enrgl, enrgr):
            target = sl if enrgl < enrgr else sr
            for i in lines:
                target[i] = 0.0

        _set_ms(channel, sfcnt, ms)
        sfcnt += 1
    return sfcnt


def _scaled(limit: float, base: float, quality: float) -> float:
    value = base / quality if quality else math.inf
    return min(value, limit)


def aac_stereo(
    coders: Sequence[CoderInfo],
    channels: Sequence[ChannelInfo],
    spectra: Sequence[MutableSequence[float]],
    quality: float,
    mode: StereoMode | int,
) -> None:
    """Reset band books and apply joint stereo coding to every channel pair.

    The spectra of paired channels are changed in place.
    """
    mode = StereoMode(mode)
    thrmid, thrside, isthr = 1.0, 0.0, 1.0
    if mode is StereoMode.MS:
        thrmid = _scaled(_THRMAX, _THR075, quality) + 1.0
        thrside = _scaled(_SIDEMAX, _SIDEMIN, quality)
    elif mode is StereoMode.IS:
        isthr = _scaled(_ISTHRMAX, 0.18, quality * quality) + 1.0

    # Work in energies.
    thrmid *= thrmid
    thrside *= thrside
    isthr *= isthr

    for coder, channel in zip(coders, channels):
        if not channel.present:
            continue
        count = len(coder.group_lengths) * coder.sfbn
        coder.book = [int(Codebook.NONE)] * count
        coder.sf = [0] * count

    for chn, channel in enumerate(channels):
        if not channel.present:
            continue
        if not (channel.cpe and channel.ch_is_left):
            continue

        rch = channel.paired_ch
        partner = channels[rch]
        left, right = coders[chn], coders[rch]

        channel.common_window = False
        channel.ms_present = False
        partner.ms_present = False

        if left.block_type != right.block_type:
            continue
        if len(left.group_lengths) != len(right.group_lengths):
            continue
        if list(left.group_lengths) != list(right.group_lengths):
            continue

        channel.common_window = True
        if mode is StereoMode.MS:
            channel.ms_present = True
            partner.ms_present = True

        sl, sr = spectra[chn], spectra[rch]
        sfcnt = 0
        start = 0
        for glen in left.group_lengths:
            end = start + glen
            if mode is StereoMode.MS:
                sfcnt = _midside(left, channel, sl, sr, sfcnt, start, end, thrmid, thrside)
            elif mode is StereoMode.IS:
                sfcnt = _intensity(left, right, sl, sr, sfcnt, start, end, isthr)
            start = end