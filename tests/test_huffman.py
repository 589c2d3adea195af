import pytest

from aaccore.codebooks import HuffCode, codebook
from aaccore.huffman import (
    BitWriter,
    Codebook,
    CoderInfo,
    WindowType,
    escape_code,
    huffbook,
    huffcode,
    write_books,
    write_scalefactors,
)


def _decode_escape(code, length):
    prefix = (length - 5) // 2
    bits = format(code, f"0{length}b")
    assert bits[:prefix] == "1" * prefix
    assert bits[prefix] == "0"
    return (1 << (prefix + 4)) + int(bits[prefix + 1:], 2)


@pytest.mark.parametrize("x", [16, 17, 31, 32, 63, 64, 100, 1000, 4095, 4096, 8191])
def test_escape_code_round_trip(x):
    code, length = escape_code(x)
    assert (length - 5) % 2 == 0
    assert code < (1 << length)
    assert _decode_escape(code, length) == x


@pytest.mark.parametrize("x", [8192, 10000, 15, 0])
def test_escape_code_rejects_out_of_range(x):
    with pytest.raises(ValueError):
        escape_code(x)


def test_huffcode_zero_quads_book1():
    qs = [0] * 16
    assert huffcode(qs, 1) == 4 * codebook(1)[40].length


def test_huffcode_counts_match_written_codes():
    qs = [1, -2, 0, 3, -4, 2, 0, 0, 1, 1]
    coder = CoderInfo()
    counted = huffcode(qs, 9)
    written = huffcode(qs, 9, coder)
    assert counted == written
    assert sum(code.length for code in coder.codes) == written
    assert len(coder.codes) == len(qs) // 2


def test_huffcode_sign_bits():
    coder = CoderInfo()
    bits = huffcode([1, -1], 7, coder)
    entry = codebook(7)[9]
    assert bits == entry.length + 2
    assert coder.codes == [HuffCode(entry.length + 2, (entry.data << 2) | 0b01)]


def test_huffcode_unsigned_books_have_no_sign_bits():
    coder = CoderInfo()
    bits = huffcode([1, -1, 0, 1], 1, coder)
    entry = codebook(1)[27 - 9 + 1 + 40]
    assert bits == entry.length
    assert coder.codes == [entry]


def test_huffcode_escape_book():
    coder = CoderInfo()
    bits = huffcode([20, 0], 11, coder)
    entry = codebook(11)[17 * 16]
    esc_code, esc_len = escape_code(20)
    assert bits == entry.length + 1 + esc_len
    assert coder.codes == [
        HuffCode(entry.length + 1, entry.data << 1),
        HuffCode(esc_len, esc_code),
    ]


@pytest.mark.parametrize("book", [0, 12, 13, -1])
def test_huffcode_rejects_bad_book(book):
    with pytest.raises(ValueError):
        huffcode([0, 0, 0, 0], book)


def test_huffcode_rejects_index_out_of_table():
    coder = CoderInfo()
    with pytest.raises(ValueError):
        huffcode([0, 0, 0, 0, 2, 2, 2, 2], 1, coder)
    assert coder.codes == []


def test_huffcode_rejects_partial_codeword():
    with pytest.raises(ValueError):
        huffcode([1, 0, 0], 1)


def test_huffbook_zero_band():
    coder = CoderInfo()
    assert huffbook(coder, [0] * 8) == Codebook.ZERO
    assert coder.book == [Codebook.ZERO]
    assert coder.codes == []


@pytest.mark.parametrize(
    "qs, pair",
    [
        ([1, 0, -1, 0, 0, 0, 1, 1], (1, 2)),
        ([2, 0, -1, 0, 0, 0, 1, 1], (3, 4)),
        ([4, -3, 0, 1], (5, 6)),
        ([7, 0, 5, -6], (7, 8)),
        ([12, 0, 1, -9], (9, 10)),
    ],
)
def test_huffbook_picks_cheaper_book(qs, pair):
    coder = CoderInfo()
    chosen = huffbook(coder, qs)
    assert chosen in pair
    costs = {book: huffcode(qs, book) for book in pair}
    assert costs[chosen] == min(costs.values())
    if costs[pair[0]] == costs[pair[1]]:
        assert chosen == pair[0]
    assert sum(code.length for code in coder.codes) == costs[chosen]


def test_huffbook_large_values_use_escape():
    coder = CoderInfo()
    assert huffbook(coder, [13, 0, 0, 200]) == Codebook.ESC
    assert sum(c.length for c in coder.codes) == huffcode([13, 0, 0, 200], 11)


def test_huffbook_records_at_band_counter():
    coder = CoderInfo(book=[Codebook.NONE] * 3, bandcnt=2)
    huffbook(coder, [1, 0, 0, 0])
    assert coder.book[:2] == [Codebook.NONE, Codebook.NONE]
    assert coder.book[2] in (1, 2)


def test_write_books_pinned_stream():
    coder = CoderInfo(sfbn=4, book=[1, 1, 5, 5])
    stream = BitWriter()
    bits = write_books(coder, stream)
    assert bits == write_books(coder)
    assert len(stream) == bits
    assert stream.getvalue() == bytes([0x11, 0x28, 0x80])


def test_write_books_long_run_splits_counts():
    coder = CoderInfo(sfbn=31, book=[1] * 31)
    stream = BitWriter()
    bits = write_books(coder, stream)
    assert bits == 14
    assert len(stream) == bits


def test_write_books_short_windows_use_three_bit_counts():
    coder = CoderInfo(
        block_type=WindowType.ONLY_SHORT,
        sfbn=7,
        group_lengths=[4, 4],
        book=[2] * 14,
    )
    long_coder = CoderInfo(sfbn=7, group_lengths=[4, 4], book=[2] * 14)
    assert write_books(coder) > write_books(long_coder)


def test_write_books_rejects_missing_bands():
    coder = CoderInfo(sfbn=4, book=[1, 1])
    with pytest.raises(ValueError):
        write_books(coder)


def test_write_scalefactors_uses_book12_differences():
    table = codebook(12)
    coder = CoderInfo(book=[1, 1, 0], sf=[100, 102, 50], bandcnt=3, global_gain=100)
    stream = BitWriter()
    bits = write_scalefactors(coder, stream)
    assert bits == table[60].length + table[62].length
    expected = BitWriter()
    expected.put_bits(table[60].data, table[60].length)
    expected.put_bits(table[62].data, table[62].length)
    assert stream.getvalue() == expected.getvalue()


def test_write_scalefactors_clamps_difference():
    table = codebook(12)
    coder = CoderInfo(book=[1, 1], sf=[200, 200], bandcnt=2, global_gain=100)
    bits = write_scalefactors(coder)
    assert bits == table[120].length + table[100].length


def test_write_scalefactors_first_pns_is_nine_bits():
    table = codebook(12)
    coder = CoderInfo(book=[13, 13], sf=[15, 17], bandcnt=2, global_gain=100)
    stream = BitWriter()
    bits = write_scalefactors(coder, stream)
    assert bits == 9 + table[62].length
    expected = BitWriter()
    expected.put_bits(5 + 256, 9)
    expected.put_bits(table[62].data, table[62].length)
    assert stream.getvalue() == expected.getvalue()


def test_write_scalefactors_intensity_starts_from_zero():
    table = codebook(12)
    coder = CoderInfo(
        book=[Codebook.INTENSITY, Codebook.INTENSITY2],
        sf=[-3, -1],
        bandcnt=2,
        global_gain=100,
    )
    assert write_scalefactors(coder) == table[57].length + table[62].length


def test_bit_writer_packs_msb_first():
    stream = BitWriter()
    stream.put_bits(0b101, 3)
    stream.put_bits(0x1FF, 8)
    assert len(stream) == 11
    assert stream.getvalue() == bytes([0xBF, 0xE0])


def test_bit_writer_rejects_negative_count():
    with pytest.raises(ValueError):
        BitWriter().put_bits(1, -1)