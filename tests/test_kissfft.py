import cmath
import math

import pytest

from aaccore.kissfft import KissFFT, factorize

SIZES = [1, 2, 3, 4, 5, 7, 8, 11, 12, 13, 15, 16, 30, 49, 60, 64, 120, 128]


def _signal(n):
    return [complex(math.sin(0.7 * i + 0.3), math.cos(1.3 * i) * 0.5) for i in range(n)]


def test_factorize_128():
    assert factorize(128) == [(4, 32), (4, 8), (4, 2), (2, 1)]


@pytest.mark.parametrize("n", SIZES + [97, 1024, 2048, 960])
def test_factorize_invariants(n):
    stages = factorize(n)
    assert stages[-1][1] == 1
    prev = n
    for p, m in stages:
        assert p * m == prev
        prev = m


def test_factorize_rejects_nonpositive():
    with pytest.raises(ValueError):
        factorize(0)
    with pytest.raises(ValueError):
        KissFFT(0)


@pytest.mark.parametrize("n", SIZES)
def test_impulse_gives_flat_spectrum(n):
    data = [1.0] + [0.0] * (n - 1)
    out = list(KissFFT(n).transform(data))
    assert len(out) == n
    assert out == pytest.approx([1.0 + 0j] * n, rel=1e-9, abs=1e-9)


@pytest.mark.parametrize("n", SIZES)
def test_constant_gives_dc(n):
    out = list(KissFFT(n).transform([1.0] * n))
    assert len(out) == n
    expected = [complex(n)] + [0j] * (n - 1)
    assert out == pytest.approx(expected, rel=1e-9, abs=1e-9)


@pytest.mark.parametrize("n", [4, 5, 12, 13, 60])
def test_tone_lands_in_its_bin(n):
    k = n // 3
    data = [cmath.exp(2j * math.pi * k * i / n) for i in range(n)]
    out = list(KissFFT(n).transform(data))
    expected = [0j] * n
    expected[k] = complex(n)
    assert len(out) == n
    assert out == pytest.approx(expected, rel=1e-8, abs=1e-8)


@pytest.mark.parametrize("n", SIZES)
def test_round_trip(n):
    data = _signal(n)
    spec = KissFFT(n).transform(data)
    back = list(KissFFT(n, inverse=True).transform(spec))
    assert len(back) == n
    assert [x / n for x in back] == pytest.approx(data, rel=1e-9, abs=1e-9)


@pytest.mark.parametrize("n", SIZES)
def test_parseval(n):
    data = _signal(n)
    spec = KissFFT(n).transform(data)
    assert math.isclose(
        sum(abs(x) ** 2 for x in spec), n * sum(abs(x) ** 2 for x in data), rel_tol=1e-9
    )


def test_linearity():
    n = 30
    a, b = _signal(n), [complex(i % 4, -i % 3) for i in range(n)]
    fft = KissFFT(n)
    combined = list(fft.transform([2 * x + y for x, y in zip(a, b)]))
    separate = [2 * x + y for x, y in zip(fft.transform(a), fft.transform(b))]
    assert len(combined) == n
    assert combined == pytest.approx(separate, rel=1e-9, abs=1e-9)


def test_stride_selects_every_nth_sample():
    data = _signal(40)
    fft = KissFFT(20)
    strided = list(fft.transform(data, 2))
    direct = list(fft.transform(data[::2]))
    assert len(strided) == 20
    assert strided == pytest.approx(direct, rel=1e-9, abs=1e-9)


def test_short_input_rejected():
    with pytest.raises(ValueError):
        KissFFT(8).transform([0.0] * 7)
    with pytest.raises(ValueError):
        KissFFT(8).transform([0.0] * 8, 2)