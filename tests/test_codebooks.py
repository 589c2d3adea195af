from fractions import Fraction

import pytest

from aaccore.codebooks import HuffCode, codebook

_SIZES = {1: 81, 2: 81, 3: 81, 4: 81, 5: 81, 6: 81, 7: 64, 8: 64, 9: 169, 10: 169, 11: 289, 12: 121}


@pytest.mark.parametrize("number,size", sorted(_SIZES.items()))
def test_book_sizes(number, size):
    assert len(codebook(number)) == size


@pytest.mark.parametrize("number", range(1, 13))
def test_codes_fit_their_length(number):
    for code in codebook(number):
        assert 1 <= code.length
        assert 0 <= code.data < (1 << code.length)


@pytest.mark.parametrize("number", range(1, 13))
def test_codes_are_prefix_free(number):
    words = sorted(format(c.data, f"0{c.length}b") for c in codebook(number))
    assert len(set(words)) == len(words)
    for shorter, longer in zip(words, words[1:]):
        assert not longer.startswith(shorter)


@pytest.mark.parametrize("number", range(1, 13))
def test_kraft_inequality(number):
    total = sum(Fraction(1, 1 << c.length) for c in codebook(number))
    assert total <= 1


def test_zero_entries_are_shortest():
    assert codebook(1)[40] == HuffCode(1, 0)
    assert codebook(12)[60] == HuffCode(1, 0)
    assert codebook(5)[40] == HuffCode(1, 0)


def test_escape_entry_of_book11():
    assert codebook(11)[-1] == HuffCode(5, 4)


def test_scalefactor_book_lengths_grow_from_centre():
    book = codebook(12)
    centre = 60
    assert min(c.length for c in book) == book[centre].length
    assert book[centre - 1].length <= book[centre - 10].length
    assert book[centre + 1].length <= book[centre + 10].length


def test_book_is_immutable():
    book = codebook(3)
    with pytest.raises(AttributeError):
        book[0].length = 7
    assert book[0] == HuffCode(1, 0)
    assert codebook(3)[0].length == 1


@pytest.mark.parametrize("number", [0, 13, -1, "1"])
def test_out_of_range_raises(number):
    with pytest.raises(ValueError):
        codebook(number)