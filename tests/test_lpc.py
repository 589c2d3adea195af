import random

import pytest

from aaccore.lpc import (
    autocorrelation,
    levinson_durbin,
    quantize_reflection_coeffs,
    step_up,
    tns_filter,
    tns_inv_filter,
    truncate_coeffs,
)


def noise(n, seed=1):
    rng = random.Random(seed)
    return [rng.uniform(-1.0, 1.0) for _ in range(n)]


def ar1(n, coeff=0.9, seed=2):
    rng = random.Random(seed)
    out = []
    prev = 0.0
    for _ in range(n):
        prev = coeff * prev + rng.uniform(-1.0, 1.0)
        out.append(prev)
    return out


def test_autocorrelation_length_and_symmetry():
    data = noise(40)
    forward = autocorrelation(5, data)
    backward = autocorrelation(5, list(reversed(data)))
    assert len(forward) == 6
    assert forward == pytest.approx(backward)
    assert all(abs(r) <= forward[0] + 1e-12 for r in forward)


def test_autocorrelation_lags_beyond_data_are_zero():
    assert autocorrelation(3, [2.0]) == [4.0, 0.0, 0.0, 0.0]


def test_autocorrelation_negative_order():
    with pytest.raises(ValueError):
        autocorrelation(-1, [1.0])


def test_levinson_silent_data():
    gain, k = levinson_durbin(3, [0.0] * 16)
    assert gain == 0
    assert k == [1.0, 0.0, 0.0, 0.0]


def test_levinson_noise_invariants():
    gain, k = levinson_durbin(8, noise(256))
    assert len(k) == 9
    assert k[0] == 1.0
    assert gain >= 1.0
    assert all(abs(x) < 1.0 for x in k[1:])


def test_levinson_finds_ar1_correlation():
    gain, k = levinson_durbin(1, ar1(2048))
    assert k[1] < -0.5
    assert gain > 2.0


def test_step_up_order_zero_and_one():
    assert step_up(0, [1.0]) == [1.0]
    assert step_up(1, [1.0, 0.5]) == [1.0, 0.5]


def test_step_up_leading_one_and_last_equals_reflection():
    k = [1.0, 0.3, -0.2, 0.1]
    a = step_up(3, k)
    assert len(a) == 4
    assert a[0] == 1.0
    assert a[3] == pytest.approx(k[3])


def test_step_up_too_few_coefficients():
    with pytest.raises(ValueError):
        step_up(3, [1.0, 0.2])


def test_step_up_predictor_whitens_signal():
    data = ar1(2048)
    _, k = levinson_durbin(4, data)
    a = step_up(4, k)
    residual = tns_inv_filter(data, a, 4)
    assert sum(x * x for x in residual) < sum(x * x for x in data)


def test_quantize_reflection_close_and_idempotent():
    k = [1.0, 0.3, -0.6, 0.0, 0.9]
    indices, quant = quantize_reflection_coeffs(4, 4, k)
    assert indices[0] == 0
    assert quant[0] == 1.0
    assert indices[3] == 0
    assert quant[3] == 0.0
    for orig, q, idx in zip(k[1:], quant[1:], indices[1:]):
        assert abs(orig - q) < 0.15
        if orig > 0:
            assert idx > 0
        if orig < 0:
            assert idx < 0
    again, _ = quantize_reflection_coeffs(4, 4, quant)
    assert again == indices


def test_quantize_reflection_rejects_out_of_range():
    with pytest.raises(ValueError):
        quantize_reflection_coeffs(1, 4, [1.0, 1.5])


def test_truncate_coeffs_drops_small_tail():
    order, k = truncate_coeffs(3, 0.1, [1.0, 0.5, 0.05, 0.01])
    assert order == 1
    assert k == [1.0, 0.5, 0.0, 0.0]


def test_truncate_coeffs_keeps_large_last():
    order, k = truncate_coeffs(2, 0.1, [1.0, 0.05, -0.5])
    assert order == 2
    assert k == [1.0, 0.05, -0.5]


def test_inv_filter_impulse_response():
    a = [1.0, 0.5, 0.25]
    assert tns_inv_filter([1.0, 0.0, 0.0, 0.0], a, 2, 0) == [1.0, 0.5, 0.25, 0.0]
    assert tns_inv_filter([0.0, 0.0, 0.0, 1.0], a, 2, 1) == [0.0, 0.25, 0.5, 1.0]


@pytest.mark.parametrize("direction", [0, 1])
@pytest.mark.parametrize("length", [1, 3, 10, 64])
def test_filters_invert_each_other(direction, length):
    _, k = levinson_durbin(6, noise(128, seed=5))
    a = step_up(6, k)
    spec = noise(length, seed=length)
    shaped = tns_inv_filter(spec, a, 6, direction)
    restored = tns_filter(shaped, a, 6, direction)
    assert restored == pytest.approx(spec, abs=1e-9)


def test_order_zero_filters_are_identity():
    spec = noise(16)
    assert tns_filter(spec, [1.0], 0) == spec
    assert tns_inv_filter(spec, [1.0], 0, 1) == spec


def test_filters_leave_input_unchanged():
    spec = noise(16)
    copy = list(spec)
    tns_filter(spec, [1.0, 0.4], 1)
    tns_inv_filter(spec, [1.0, 0.4], 1)
    assert spec == copy


def test_filter_rejects_short_coefficients():
    with pytest.raises(ValueError):
        tns_filter([1.0, 2.0], [1.0], 2)
    with pytest.raises(ValueError):
        tns_inv_filter([1.0, 2.0], [1.0], 2)