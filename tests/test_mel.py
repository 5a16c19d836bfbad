import math

import numpy as np
import pytest

from tekken.errors import InvalidConfigError, TokenizerError
from tekken.mel import hertz_to_mel, mel_filter_bank, mel_to_hertz


def test_hertz_to_mel_break_point():
    assert hertz_to_mel(1000.0) == pytest.approx(15.0)
    assert mel_to_hertz(15.0) == pytest.approx(1000.0)


def test_linear_region():
    assert hertz_to_mel(200.0) == pytest.approx(3.0)
    assert mel_to_hertz(3.0) == pytest.approx(200.0)
    assert hertz_to_mel(0.0) == 0.0


@pytest.mark.parametrize("freq", [0.0, 50.0, 440.0, 999.0, 1000.0, 4000.0, 8000.0, 12000.0])
def test_round_trip(freq):
    assert mel_to_hertz(hertz_to_mel(freq)) == pytest.approx(freq, abs=1e-9)


def test_mel_monotonic():
    values = [hertz_to_mel(f) for f in range(0, 16000, 250)]
    assert all(a < b for a, b in zip(values, values[1:]))


def test_filter_bank_shape_from_source_case():
    bank = mel_filter_bank(201, 80, 0.0, 8000.0, 16000)
    assert bank.shape == (201, 80)


def test_filter_bank_non_negative_and_finite():
    bank = mel_filter_bank(201, 80, 0.0, 8000.0, 16000)
    assert float(bank.min()) >= 0.0
    assert math.isfinite(float(bank.max()))
    assert math.isfinite(float(bank.min()))


def test_filter_bank_every_filter_has_energy():
    bank = mel_filter_bank(201, 80, 0.0, 8000.0, 16000)
    column_sums = bank.sum(axis=0)
    assert column_sums.shape == (80,)
    assert float(column_sums.min()) > 0.0


def test_filter_bank_edges_are_zero():
    bank = mel_filter_bank(201, 80, 0.0, 8000.0, 16000)
    assert bank[0].tolist() == [0.0] * 80
    assert bank[-1].tolist() == [0.0] * 80


def test_filter_bank_support_and_height():
    num_mel = 10
    bank = mel_filter_bank(257, num_mel, 0.0, 8000.0, 16000)
    mel_max = hertz_to_mel(8000.0)
    edges = [mel_to_hertz(mel_max * i / (num_mel + 1)) for i in range(num_mel + 2)]
    fft_freqs = np.linspace(0.0, 8000.0, 257)
    for m in range(num_mel):
        left, right = edges[m], edges[m + 2]
        column = bank[:, m]
        outside = (fft_freqs < left - 1e-9) | (fft_freqs > right + 1e-9)
        assert np.all(column[outside] == 0.0)
        assert column.max() <= 2.0 / (right - left) + 1e-12


def test_filter_bank_respects_frequency_range():
    bank = mel_filter_bank(201, 20, 1000.0, 4000.0, 16000)
    fft_freqs = np.linspace(0.0, 8000.0, 201)
    below = fft_freqs < 1000.0
    above = fft_freqs > 4000.0
    assert np.all(bank[below] == 0.0)
    assert np.all(bank[above] == 0.0)
    assert bank.sum() > 0.0


def test_too_few_frequency_bins():
    with pytest.raises(InvalidConfigError, match="num_frequency_bins must be >= 2, got 1"):
        mel_filter_bank(1, 80, 0.0, 8000.0, 16000)


def test_min_above_max_frequency():
    with pytest.raises(TokenizerError) as info:
        mel_filter_bank(201, 80, 9000.0, 8000.0, 16000)
    assert "must be <= max_frequency" in str(info.value)


def test_zero_mel_bins_gives_empty_columns():
    bank = mel_filter_bank(201, 0, 0.0, 8000.0, 16000)
    assert bank.shape == (201, 0)


def test_log_region_value():
    expected = 15.0 + math.log(2.0) * 27.0 / math.log(6.4)
    assert hertz_to_mel(2000.0) == pytest.approx(expected)