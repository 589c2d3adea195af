"""Huffman coding of quantized spectra, section data and scalefactors."""

from __future__ import annotations

import itertools
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import IntEnum

from aaccore.codebooks import HuffCode, codebook

ESCAPE_LIMIT = 8192
"""Quantized magnitudes must stay below this to be escape coded."""

_SF_CLAMP = 60
_BOOK_BITS = 4
_PNS_FIRST_BITS = 9
_PNS_OFFSET = 90


class Codebook(IntEnum):
    """Special codebook numbers used in section data."""

    ZERO = 0
    ESC = 11
    PNS = 13
    INTENSITY2 = 14
    INTENSITY = 15
    NONE = 16


class WindowType(IntEnum):
    """Window sequence of a block."""

    ONLY_LONG = 0
    LONG_START = 1
    ONLY_SHORT = 2
    LONG_STOP = 3


class BitWriter:
    """Collects bits most significant first and packs them into bytes."""

    def __init__(self) -> None:
        self._value = 0
        self._nbits = 0

    def put_bits(self, value: int, nbits: int) -> None:
        """Append the low ``nbits`` bits of ``value``."""
        if nbits < 0:
            raise ValueError(f"bit count must not be negative, got {nbits}")
        self._value = (self._value << nbits) | (int(value) & ((1 << nbits) - 1))
        self._nbits += nbits

    def getvalue(self) -> bytes:
        """Return the bits written so far, zero padded to whole bytes."""
        pad = -self._nbits % 8
        total = self._nbits + pad
        return (self._value << pad).to_bytes(total // 8, "big")

    def __len__(self) -> int:
        return self._nbits


@dataclass
class CoderInfo:
    """Per-channel coding state shared by the quantizer and the bitstream writer."""

    block_type: WindowType = WindowType.ONLY_LONG
    sfbn: int = 0
    sfb_offset: list[int] = field(default_factory=list)
    group_lengths: list[int] = field(default_factory=lambda: [1])
    book: list[int] = field(default_factory=list)
    sf: list[int] = field(default_factory=list)
    bandcnt: int = 0
    global_gain: int = 0
    codes: list[HuffCode] = field(default_factory=list)


def escape_code(x: int) -> tuple[int, int]:
    """Return ``(code, length)`` of the escape sequence for magnitude ``x``."""
    if x >= ESCAPE_LIMIT:
        raise ValueError(f"quantized value {x} is not below {ESCAPE_LIMIT}")
    if x < 16:
        raise ValueError(f"escape sequences start at 16, got {x}")
    prefix_len = 0
    base = 32
    code = 0
    while base <= x:
        base <<= 1
        code = (code << 1) | 1
        prefix_len += 1
    base >>= 1
    code <<= 1  # separator
    code = (code << (prefix_len + 4)) | (x - base)
    return code, (prefix_len << 1) + 5


def _idx_quad_signed(q: Sequence[int]) -> int:
    return 27 * q[0] + 9 * q[1] + 3 * q[2] + q[3] + 40


def _idx_quad_unsigned(q: Sequence[int]) -> int:
    return 27 * abs(q[0]) + 9 * abs(q[1]) + 3 * abs(q[2]) + abs(q[3])


def _idx_pair_signed(q: Sequence[int]) -> int:
    return 9 * q[0] + q[1] + 40


def _idx_pair8(q: Sequence[int]) -> int:
    return 8 * abs(q[0]) + abs(q[1])


def _idx_pair13(q: Sequence[int]) -> int:
    return 13 * abs(q[0]) + abs(q[1])


def _idx_esc(q: Sequence[int]) -> int:
    return 17 * min(abs(q[0]), 16) + min(abs(q[1]), 16)


# book -> (values per codeword, index function, sign bits appended)
_LAYOUT: dict[int, tuple[int, Callable[[Sequence[int]], int], bool]] = {
    1: (4, _idx_quad_signed, False),
    2: (4, _idx_quad_signed, False),
    3: (4, _idx_quad_unsigned, True),
    4: (4, _idx_quad_unsigned, True),
    5: (2, _idx_pair_signed, False),
    6: (2, _idx_pair_signed, False),
    7: (2, _idx_pair8, True),
    8: (2, _idx_pair8, True),
    9: (2, _idx_pair13, True),
    10: (2, _idx_pair13, True),
    11: (2, _idx_esc, True),
}


def huffcode(qs: Sequence[int], book: int, coder: CoderInfo | None = None) -> int:
    """Return the bits needed to code ``qs`` with spectral ``book``.

    When ``coder`` is given, the codewords are appended to ``coder.codes``.
    """
    try:
        width, index_of, signed = _LAYOUT[int(book)]
    except KeyError:
        raise ValueError(f"book {book} out of range") from None
    if len(qs) % width:
        raise ValueError(f"{len(qs)} values do not fill codewords of {width}")
    table = codebook(int(book))

    bits = 0
    produced: list[HuffCode] = []
    for group in zip(*[iter(qs)] * width):
        idx = index_of(group)
        if not 0 <= idx < len(table):
            raise ValueError(f"values {group} cannot be coded with book {book}")
        entry = table[idx]
        length, data = entry.length, entry.data
        if signed:
            for q in group:
                if q:
                    length += 1
                    data = (data << 1) | (1 if q < 0 else 0)
        produced.append(HuffCode(length, data))
        bits += length

        if book == Codebook.ESC:
            for q in group:
                if abs(q) >= 16:
                    code, esc_len = escape_code(abs(q))
                    produced.append(HuffCode(esc_len, code))
                    bits += esc_len

    if coder is not None:
        coder.codes.extend(produced)
    return bits


def _smallest_of(qs: Sequence[int], book: int) -> int:
    if huffcode(qs, book + 1) < huffcode(qs, book):
        return book + 1
    return book


def huffbook(coder: CoderInfo, qs: Sequence[int]) -> int:
    """Pick the cheapest codebook for ``qs``, code it into ``coder`` and return it.

    The book is recorded at ``coder.book[coder.bandcnt]``.
    """
    maxq = max((abs(q) for q in qs), default=0)
    if maxq < 1:
        chosen = int(Codebook.ZERO)
    elif maxq < 2:
        chosen = _smallest_of(qs, 1)
    elif maxq < 3:
        chosen = _smallest_of(qs, 3)
    elif maxq < 5:
        chosen = _smallest_of(qs, 5)
    elif maxq < 8:
        chosen = _smallest_of(qs, 7)
    elif maxq < 13:
        chosen = _smallest_of(qs, 9)
    else:
        chosen = int(Codebook.ESC)

    if chosen > Codebook.ZERO:
        huffcode(qs, chosen, coder)
    while len(coder.book) <= coder.bandcnt:
        coder.book.append(int(Codebook.NONE))
    coder.book[coder.bandcnt] = chosen
    return chosen


def write_books(coder: CoderInfo, stream: BitWriter | None = None) -> int:
    """Write the section data of ``coder`` and return its size in bits.

    With no ``stream`` the size is only counted.
    """
    if coder.block_type == WindowType.ONLY_SHORT:
        maxcnt, cntbits = 7, 3
    else:
        maxcnt, cntbits = 31, 5

    sfbn = coder.sfbn
    needed = len(coder.group_lengths) * sfbn
    if len(coder.book) < needed:
        raise ValueError(f"{len(coder.book)} band books given, {needed} needed")

    bits = 0
    for group in range(len(coder.group_lengths)):
        bands = coder.book[group * sfbn:(group + 1) * sfbn]
        for book, run in itertools.groupby(bands):
            count = sum(1 for _ in run)
            if stream is not None:
                stream.put_bits(book, _BOOK_BITS)
            bits += _BOOK_BITS
            while count >= maxcnt:
                if stream is not None:
                    stream.put_bits(maxcnt, cntbits)
                bits += cntbits
                count -= maxcnt
            if stream is not None:
                stream.put_bits(count, cntbits)
            bits += cntbits
    return bits


def _clamp(diff: int) -> int:
    return max(-_SF_CLAMP, min(_SF_CLAMP, diff))


def write_scalefactors(coder: CoderInfo, stream: BitWriter | None = None) -> int:
    """Write the scalefactor data of ``coder`` and return its size in bits.

    With no ``stream`` the size is only counted.
    """
    table = codebook(12)
    last_sf = coder.global_gain
    last_is = 0
    last_pns = coder.global_gain - _PNS_OFFSET
    first_pns = True
    bits = 0

    for book, sf in zip(coder.book[:coder.bandcnt], coder.sf[:coder.bandcnt]):
        if book in (Codebook.INTENSITY, Codebook.INTENSITY2):
            diff = _clamp(sf - last_is)
            last_is += diff
        elif book == Codebook.PNS:
            diff = sf - last_pns
            if first_pns:
                first_pns = False
                bits += _PNS_FIRST_BITS
                last_pns += diff
                if stream is not None:
                    stream.put_bits(diff + 256, _PNS_FIRST_BITS)
                continue
            diff = _clamp(diff)
            last_pns += diff
        elif book:
            diff = _clamp(sf - last_sf)
            last_sf += diff
        else:
            continue

        entry = table[_SF_CLAMP + diff]
        bits += entry.length
        if stream is not None:
            stream.put_bits(entry.data, entry.length)
    return bits