"""Linear prediction helpers for temporal noise shaping."""

from __future__ import annotations

import math
from collections.abc import Sequence


def _check_order(order: int) -> None:
    if order < 0:
        raise ValueError(f"order must not be negative, got {order}")


def _check_coeffs(coeffs: Sequence[float], order: int) -> None:
    _check_order(order)
    if len(coeffs) < order + 1:
        raise ValueError(f"{len(coeffs)} coefficients given, {order + 1} needed")


def autocorrelation(order: int, data: Sequence[float]) -> list[float]:
    """Return the autocorrelation of ``data`` at lags ``0..order``."""
    _check_order(order)
    values = [float(x) for x in data]
    return [
        sum((a * b for a, b in zip(values, values[lag:])), 0.0)
        for lag in range(order + 1)
    ]


def levinson_durbin(order: int, data: Sequence[float]) -> tuple[float, list[float]]:
    """Return ``(prediction gain, reflection coefficients)`` of ``data``.

    The coefficient list has ``order + 1`` entries, the first being 1.
    Data with no energy gives a gain of 0.
    """
    r = autocorrelation(order, data)
    signal = r[0]
    k = [1.0] + [0.0] * order
    if not signal:
        return 0.0, k

    prev = [1.0] + [0.0] * order
    error = signal
    for m in range(1, order + 1):
        if error == 0.0:
            return math.inf, k
        acc = prev[0] * r[m]
        for i in range(1, m):
            acc += prev[i] * r[m - i]
        km = -acc / error
        k[m] = km
        cur = list(prev)
        cur[m] = km
        for i in range(1, m):
            cur[i] = prev[i] + km * prev[m - i]
        error *= 1 - km * km
        prev = cur
    if error == 0.0:
        return math.inf, k
    return signal / error, k


def step_up(order: int, k: Sequence[float]) -> list[float]:
    """Convert reflection coefficients into ``order + 1`` predictor coefficients."""
    _check_coeffs(k, order)
    a = [1.0]
    for m in range(1, order + 1):
        a.append(0.0)
        a = [1.0] + [a[i] + k[m] * a[m - i] for i in range(1, m + 1)]
    return a


def quantize_reflection_coeffs(
    order: int, resolution: int, k: Sequence[float]
) -> tuple[list[int], list[float]]:
    """Quantize ``k[1..order]`` to ``resolution`` bits.

    Returns the indices and the coefficients rebuilt from them; entry 0 of the
    indices is 0 and entry 0 of the coefficients is kept as given.
    """
    _check_coeffs(k, order)
    if resolution < 1:
        raise ValueError(f"resolution must be at least 1 bit, got {resolution}")
    levels = 1 << (resolution - 1)
    iqfac = (levels - 0.5) / (math.pi / 2)
    iqfac_m = (levels + 0.5) / (math.pi / 2)

    indices = [0] * (order + 1)
    quantized = [float(x) for x in k]
    for i in range(1, order + 1):
        angle = math.asin(k[i])
        if k[i] >= 0:
            idx = int(0.5 + angle * iqfac)
        else:
            idx = int(-0.5 + angle * iqfac_m)
        indices[i] = idx
        quantized[i] = math.sin(idx / (iqfac if idx >= 0 else iqfac_m))
    return indices, quantized


def truncate_coeffs(
    order: int, threshold: float, k: Sequence[float]
) -> tuple[int, list[float]]:
    """Zero the tail coefficients not above ``threshold``.

    Returns the truncated order and the coefficients.
    """
    _check_coeffs(k, order)
    coeffs = [float(x) for x in k]
    for i in range(order, -1, -1):
        value = coeffs[i] if abs(coeffs[i]) > threshold else 0.0
        coeffs[i] = value
        if value != 0.0:
            return i, coeffs
    return 0, coeffs


def tns_filter(
    spec: Sequence[float], a: Sequence[float], order: int, direction: int = 0
) -> list[float]:
    """Return ``spec`` run through the all-pole (synthesis) filter ``a``.

    A nonzero ``direction`` filters from the last line towards the first.
    """
    _check_coeffs(a, order)
    out = [float(x) for x in spec]
    n = len(out)
    indices = range(n - 1, -1, -1) if direction else range(n)
    step = 1 if direction else -1
    for pos, i in enumerate(indices):
        acc = out[i]
        for j in range(1, min(order, pos) + 1):
            acc -= out[i + step * j] * a[j]
        out[i] = acc
    return out


def tns_inv_filter(
    spec: Sequence[float], a: Sequence[float], order: int, direction: int = 0
) -> list[float]:
    """Return ``spec`` run through the all-zero (analysis) filter ``a``.

    A nonzero ``direction`` filters from the last line towards the first.
    """
    _check_coeffs(a, order)
    source = [float(x) for x in spec]
    out = list(source)
    n = len(out)
    indices = range(n - 1, -1, -1) if direction else range(n)
    step = 1 if direction else -1
    for pos, i in enumerate(indices):
        acc = out[i]
        for j in range(1, min(order, pos) + 1):
            acc += source[i + step * j] * a[j]
        out[i] = acc
    return out