"""Band quantization, bandwidth limits and short-window grouping."""

from __future__ import annotations

import math
from collections.abc import Iterator, MutableSequence, Sequence
from dataclasses import dataclass, field

from aaccore.huffman import Codebook, CoderInfo, WindowType, huffbook

BLOCK_LEN_LONG = 1024
BLOCK_LEN_SHORT = 128
MAX_SHORT_WINDOWS = 8

DEFQUAL = 100
MAXQUAL = 5000
MAXQUALADTS = MAXQUAL
MINQUAL = 10
SF_OFFSET = 100

MAGIC_NUMBER = 0.4054
NOISEFLOOR = 0.4
NOISETONE = 0.2
_POWM = 0.4
_SF_CLAMP = 60
_MINSFB = 2
_GROUP_THRESHOLD = 3.0

# A 2^0.25 (1.50515 dB) scalefactor step.
_SFSTEP = 1.0 / math.log10(math.sqrt(math.sqrt(2.0)))


@dataclass
class QuantConfig:
    """Quantizer settings and the band limits found by :func:`calc_bandwidth`."""

    quality: float = float(DEFQUAL)
    max_cbl: int = 0
    max_cbs: int = 0
    max_l: int = 0
    pnslevel: int = 0


@dataclass
class SampleRateInfo:
    """Scalefactor band widths of long and short windows for one sample rate."""

    cb_width_long: list[int] = field(default_factory=list)
    cb_width_short: list[int] = field(default_factory=list)

    @property
    def num_cb_long(self) -> int:
        return len(self.cb_width_long)

    @property
    def num_cb_short(self) -> int:
        return len(self.cb_width_short)


def _bands(coder: CoderInfo) -> list[tuple[int, int]]:
    offsets = coder.sfb_offset
    if len(offsets) < coder.sfbn + 1:
        raise ValueError(
            f"{len(offsets)} band offsets given, {coder.sfbn + 1} needed"
        )
    return list(zip(offsets[:coder.sfbn], offsets[1:coder.sfbn + 1]))


def _window_lines(
    xr: Sequence[float], base: int, gsize: int, start: int, end: int
) -> Iterator[Sequence[float]]:
    for win in range(gsize):
        offset = base + win * BLOCK_LEN_SHORT
        yield xr[offset + start:offset + end]


def _band_mask(
    coder: CoderInfo, xr: Sequence[float], base: int, gsize: int, quality: float
) -> list[float]:
    """Return the target quality of every band in one window group."""
    bands = _bands(coder)
    totenrg = 0.0
    enrgcnt = 0
    for start, end in bands:
        for lines in _window_lines(xr, base, gsize, start, end):
            for x in lines:
                totenrg += x * x
                enrgcnt += 1

    if totenrg < (NOISEFLOOR * NOISEFLOOR) * float(enrgcnt):
        return [0.0] * len(bands)

    short = coder.block_type == WindowType.ONLY_SHORT
    last = BLOCK_LEN_SHORT if short else BLOCK_LEN_LONG
    result = []
    for start, end in bands:
        avge = 0.0
        maxe = 0.0
        for lines in _window_lines(xr, base, gsize, start, end):
            for x in lines:
                e = x * x
                avge += e
                if maxe < e:
                    maxe = e
        maxe *= gsize

        avgenrg = totenrg / last * (end - start)
        target = NOISETONE * math.pow(avge / avgenrg, _POWM)
        target += (1.0 - NOISETONE) * 0.45 * math.pow(maxe / avgenrg, _POWM)
        if short:
            target *= 1.5
        target *= 10.0 / (1.0 + (float(start + end) / last))
        result.append(target * quality)
    return result


def _ensure_band(coder: CoderInfo, index: int) -> None:
    while len(coder.book) <= index:
        coder.book.append(int(Codebook.NONE))
    while len(coder.sf) <= index:
        coder.sf.append(0)


def _quantize_group(
    coder: CoderInfo,
    xr: Sequence[float],
    base: int,
    bandqual: Sequence[float],
    gsize: int,
    pnslevel: int,
) -> None:
    """Quantize and code every band of one window group."""
    pnsthr = 0.1 * pnslevel
    for (start, end), qual in zip(_bands(coder), bandqual):
        band = coder.bandcnt
        _ensure_band(coder, band)
        if coder.book[band] != Codebook.NONE:
            coder.bandcnt += 1
            continue

        windows = list(_window_lines(xr, base, gsize, start, end))
        etot = sum(x * x for lines in windows for x in lines)
        etot /= float(gsize)
        rmsx = math.sqrt(etot / (end - start))

        if rmsx < NOISEFLOOR or not qual:
            coder.book[band] = int(Codebook.ZERO)
            coder.bandcnt += 1
            continue

        if qual < pnsthr:
            coder.book[band] = int(Codebook.PNS)
            coder.sf[band] += round(math.log10(etot) * (0.5 * _SFSTEP))
            coder.bandcnt += 1
            continue

        sfac = round(math.log10(qual / rmsx) * _SFSTEP)
        if SF_OFFSET - sfac < 10:
            sfacfix = 0.0
        else:
            sfacfix = math.pow(10, sfac / _SFSTEP)

        quantized = []
        for lines in windows:
            for x in lines:
                tmp = abs(x) * sfacfix
                tmp = math.sqrt(tmp * math.sqrt(tmp))
                q = int(tmp + MAGIC_NUMBER)
                quantized.append(-q if x < 0 else q)

        huffbook(coder, quantized)
        coder.sf[band] += SF_OFFSET - sfac
        coder.bandcnt += 1


def _clamp(diff: int) -> int:
    return max(-_SF_CLAMP, min(_SF_CLAMP, diff))


def quantize_block(coder: CoderInfo, xr: Sequence[float], cfg: QuantConfig) -> None:
    """Quantize the spectrum ``xr`` into ``coder``: books, scalefactors and codes.

    Bands whose book is already set (not ``Codebook.NONE``) are left alone.
    """
    coder.global_gain = 0
    coder.bandcnt = 0
    coder.codes.clear()

    quality = float(cfg.quality) / DEFQUAL
    base = 0
    for gsize in coder.group_lengths:
        bandqual = _band_mask(coder, xr, base, gsize, quality)
        _quantize_group(coder, xr, base, bandqual, gsize, cfg.pnslevel)
        base += gsize * BLOCK_LEN_SHORT

    intensity = (Codebook.INTENSITY, Codebook.INTENSITY2)
    bands = range(coder.bandcnt)
    coder.global_gain = next(
        (coder.sf[i] for i in bands if coder.book[i] and coder.book[i] not in intensity),
        0,
    )

    last_sf = coder.global_gain
    last_is = 0
    for i in bands:
        book = coder.book[i]
        if book in intensity:
            last_is += _clamp(coder.sf[i] - last_is)
            coder.sf[i] = last_is
        elif book == Codebook.ESC:
            last_sf += _clamp(coder.sf[i] - last_sf)
            coder.sf[i] = last_sf


def _count_bands(widths: Sequence[int], limit: int) -> tuple[int, int]:
    count = 0
    lines = 0
    for width in widths:
        if lines >= limit:
            break
        lines += width
        count += 1
    return count, lines


def calc_bandwidth(bw: int, rate: int, sr: SampleRateInfo, cfg: QuantConfig) -> int:
    """Fit the bandwidth ``bw`` to whole bands, store the limits in ``cfg``.

    Returns the bandwidth the long-window band limit gives.
    """
    if rate <= 0:
        raise ValueError(f"sample rate must be positive, got {rate}")
    bw = int(bw)

    limit = bw * (BLOCK_LEN_SHORT << 1) // rate
    count, lines = _count_bands(sr.cb_width_short, limit)
    cfg.max_cbs = count
    if cfg.pnslevel:
        bw = int(float(lines) * rate / (BLOCK_LEN_SHORT << 1))

    limit = bw * (BLOCK_LEN_LONG << 1) // rate
    count, lines = _count_bands(sr.cb_width_long, limit)
    cfg.max_cbl = count
    cfg.max_l = lines

    return int(float(lines) * rate / (BLOCK_LEN_LONG << 1))


def _window_energies(
    xr: MutableSequence[float], base: int, bands: Sequence[int], maxsfb: int, maxl: int
) -> list[float]:
    """Mute lines above the cutoff and return each band's energy."""
    for line in range(maxl, bands[maxsfb]):
        xr[base + line] = 0.0
    energies = [0.0] * max(maxsfb, 0)
    for sfb in range(_MINSFB, maxsfb):
        energies[sfb] = sum(
            x * x for x in xr[base + bands[sfb]:base + bands[sfb + 1]]
        )
    return energies


def group_blocks(xr: MutableSequence[float], coder: CoderInfo, cfg: QuantConfig) -> None:
    """Group the short windows of ``xr`` with similar band energies.

    Lines above the cutoff are muted in ``xr``. Long blocks form one group.
    """
    if coder.block_type != WindowType.ONLY_SHORT:
        coder.group_lengths = [1]
        return

    maxl = cfg.max_l // 8
    maxsfb = cfg.max_cbs
    fastmin = ((maxsfb - _MINSFB) * 3) >> 2
    bands = coder.sfb_offset

    energies = _window_energies(xr, 0, bands, maxsfb, maxl)
    lows = list(energies)
    highs = list(energies)
    win0 = 0
    groups: list[int] = []
    for win in range(1, MAX_SHORT_WINDOWS):
        energies = _window_energies(xr, win * BLOCK_LEN_SHORT, bands, maxsfb, maxl)
        fast = 0
        for sfb in range(_MINSFB, maxsfb):
            lows[sfb] = min(lows[sfb], energies[sfb])
            highs[sfb] = max(highs[sfb], energies[sfb])
            if highs[sfb] > _GROUP_THRESHOLD * lows[sfb]:
                fast += 1
        if fast > fastmin:
            groups.append(win - win0)
            win0 = win
            lows = list(energies)
            highs = list(energies)
    groups.append(MAX_SHORT_WINDOWS - win0)
    coder.group_lengths = groups