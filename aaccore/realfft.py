"""Real-input FFT built on a half-length complex FFT."""

from __future__ import annotations

import math
from collections.abc import Sequence

from aaccore.kissfft import KissFFT

_PI = 3.14159265358979323846264338327


class KissFFTR:
    """Real FFT of even length ``nfft``, or its unscaled inverse."""

    def __init__(self, nfft: int, inverse: bool = False) -> None:
        if nfft & 1:
            raise ValueError("Real FFT optimization must be even.")
        half = nfft >> 1
        self.nfft = nfft
        self.inverse = bool(inverse)
        self.substate = KissFFT(half, self.inverse)
        sign = -1.0 if self.inverse else 1.0
        self.super_twiddles = []
        for i in range(half):
            phase = sign * -_PI * (float(i) / half + 0.5)
            self.super_twiddles.append(complex(math.cos(phase), math.sin(phase)))

    def forward(self, timedata: Sequence[float]) -> list[complex]:
        """Return the ``nfft // 2 + 1`` spectrum bins of the real signal."""
        if self.inverse:
            raise ValueError("improper alloc: this transform is an inverse one")
        if len(timedata) != self.nfft:
            raise ValueError(f"expected {self.nfft} samples, got {len(timedata)}")
        n = self.substate.nfft
        packed = [
            complex(float(re), float(im))
            for re, im in zip(timedata[0::2], timedata[1::2])
        ]
        tmp = self.substate.transform(packed)

        freq = [0j] * (n + 1)
        freq[0] = complex(tmp[0].real + tmp[0].imag, 0.0)
        for k in range(1, n // 2 + 1):
            fpk = tmp[k]
            fpnk = tmp[n - k].conjugate()
            f1k = fpk + fpnk
            f2k = fpk - fpnk
            tw = f2k * self.super_twiddles[k]
            freq[k] = (f1k + tw) / 2
            freq[n - k] = ((f1k - tw) / 2).conjugate()
        freq[n] = complex(tmp[0].real - tmp[0].imag, 0.0)
        return freq

    def inverse_transform(self, freqdata: Sequence[complex]) -> list[float]:
        """Return ``nfft`` real samples from ``nfft // 2 + 1`` bins, scaled by ``nfft``."""
        if not self.inverse:
            raise ValueError("improper alloc: this transform is a forward one")
        n = self.substate.nfft
        if len(freqdata) != n + 1:
            raise ValueError(f"expected {n + 1} bins, got {len(freqdata)}")
        freq = [complex(x) for x in freqdata]

        tmp = [0j] * n
        tmp[0] = complex(freq[0].real + freq[n].real, freq[0].real - freq[n].real)
        for k in range(1, n // 2 + 1):
            fk = freq[k]
            fnkc = freq[n - k].conjugate()
            fek = fk + fnkc
            fok = (fk - fnkc) * self.super_twiddles[k]
            tmp[k] = fek + fok
            tmp[n - k] = (fek - fok).conjugate()

        result = self.substate.transform(tmp)
        samples: list[float] = []
        for value in result:
            samples.append(value.real)
            samples.append(value.imag)
        return samples