"""Mixed-radix complex FFT."""

from __future__ import annotations

import math
from collections.abc import Sequence

_PI = 3.14159265358979323846264338327


def factorize(n: int) -> list[tuple[int, int]]:
    """Split ``n`` into ``(radix, remaining length)`` stages.

    Powers of 4 come first, then powers of 2, then remaining primes.
    """
    if n < 1:
        raise ValueError(f"FFT length must be positive, got {n}")
    floor_sqrt = math.floor(math.sqrt(float(n)))
    stages: list[tuple[int, int]] = []
    p = 4
    while True:
        while n % p:
            if p == 4:
                p = 2
            elif p == 2:
                p = 3
            else:
                p += 2
            if p > floor_sqrt:
                p = n
        n //= p
        stages.append((p, n))
        if n <= 1:
            return stages


class KissFFT:
    """Complex FFT (or inverse FFT, unscaled) of a fixed length."""

    def __init__(self, nfft: int, inverse: bool = False) -> None:
        if nfft < 1:
            raise ValueError(f"FFT length must be positive, got {nfft}")
        self.nfft = nfft
        self.inverse = bool(inverse)
        phase0 = -2.0 * _PI / float(nfft)
        sign = -1.0 if self.inverse else 1.0
        self.twiddles = [
            complex(math.cos(sign * phase0 * i), math.sin(sign * phase0 * i))
            for i in range(nfft)
        ]
        self.factors = factorize(nfft)

    def transform(self, fin: Sequence[complex], stride: int = 1) -> list[complex]:
        """Transform every ``stride``-th element of ``fin`` and return the result."""
        if stride < 1:
            raise ValueError(f"stride must be positive, got {stride}")
        needed = (self.nfft - 1) * stride + 1
        if len(fin) < needed:
            raise ValueError(f"input holds {len(fin)} values, {needed} needed")
        data = [complex(x) for x in fin]
        out = [0j] * self.nfft
        self._work(out, 0, data, 0, 1, stride, 0)
        return out

    def _work(self, out, o, f, fo, fstride, in_stride, stage):
        p, m = self.factors[stage]
        step = fstride * in_stride
        if m == 1:
            for k in range(p):
                out[o + k] = f[fo + k * step]
        else:
            for k in range(p):
                self._work(out, o + k * m, f, fo + k * step, fstride * p, in_stride, stage + 1)

        if p == 2:
            self._bfly2(out, o, fstride, m)
        elif p == 3:
            self._bfly3(out, o, fstride, m)
        elif p == 4:
            self._bfly4(out, o, fstride, m)
        elif p == 5:
            self._bfly5(out, o, fstride, m)
        else:
            self._bfly_generic(out, o, fstride, m, p)

    def _bfly2(self, out, o, fstride, m):
        tw = self.twiddles
        for u in range(m):
            t = out[o + u + m] * tw[u * fstride]
            out[o + u + m] = out[o + u] - t
            out[o + u] += t

    def _bfly3(self, out, o, fstride, m):
        tw = self.twiddles
        epi3 = tw[fstride * m]
        m2 = 2 * m
        for u in range(m):
            i = o + u
            s1 = out[i + m] * tw[u * fstride]
            s2 = out[i + m2] * tw[2 * u * fstride]
            s3 = s1 + s2
            s0 = (s1 - s2) * epi3.imag
            out[i + m] = out[i] - s3 / 2
            out[i] += s3
            out[i + m2] = out[i + m] - 1j * s0
            out[i + m] += 1j * s0

    def _bfly4(self, out, o, fstride, m):
        tw = self.twiddles
        m2, m3 = 2 * m, 3 * m
        for u in range(m):
            i = o + u
            s0 = out[i + m] * tw[u * fstride]
            s1 = out[i + m2] * tw[2 * u * fstride]
            s2 = out[i + m3] * tw[3 * u * fstride]
            s5 = out[i] - s1
            out[i] += s1
            s3 = s0 + s2
            s4 = s0 - s2
            out[i + m2] = out[i] - s3
            out[i] += s3
            if self.inverse:
                out[i + m] = s5 + 1j * s4
                out[i + m3] = s5 - 1j * s4
            else:
                out[i + m] = s5 - 1j * s4
                out[i + m3] = s5 + 1j * s4

    def _bfly5(self, out, o, fstride, m):
        tw = self.twiddles
        ya = tw[fstride * m]
        yb = tw[fstride * 2 * m]
        for u in range(m):
            i0, i1, i2, i3, i4 = (o + u + k * m for k in range(5))
            s0 = out[i0]
            s1 = out[i1] * tw[u * fstride]
            s2 = out[i2] * tw[2 * u * fstride]
            s3 = out[i3] * tw[3 * u * fstride]
            s4 = out[i4] * tw[4 * u * fstride]
            s7 = s1 + s4
            s10 = s1 - s4
            s8 = s2 + s3
            s9 = s2 - s3
            out[i0] += s7 + s8
            s5 = s0 + s7 * ya.real + s8 * yb.real
            s6 = -1j * (s10 * ya.imag + s9 * yb.imag)
            out[i1] = s5 - s6
            out[i4] = s5 + s6
            s11 = s0 + s7 * yb.real + s8 * ya.real
            s12 = 1j * (s10 * yb.imag - s9 * ya.imag)
            out[i2] = s11 + s12
            out[i3] = s11 - s12

    def _bfly_generic(self, out, o, fstride, m, p):
        tw = self.twiddles
        norig = self.nfft
        for u in range(m):
            scratch = [out[o + u + q * m] for q in range(p)]
            for q1 in range(p):
                k = u + q1 * m
                acc = scratch[0]
                twidx = 0
                for q in range(1, p):
                    twidx += fstride * k
                    if twidx >= norig:
                        twidx -= norig
                    acc += scratch[q] * tw[twidx]
                out[o + k] = acc