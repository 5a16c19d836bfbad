"""Mel-scale conversions and Slaney-style triangular filter banks."""

from __future__ import annotations

import math

import numpy as np

from .errors import InvalidConfigError

_MIN_LOG_HERTZ = 1000.0
_MIN_LOG_MEL = 15.0


def hertz_to_mel(freq: float) -> float:
    """Convert a frequency in Hz to the Slaney mel scale."""
    if freq >= _MIN_LOG_HERTZ:
        logstep = 27.0 / math.log(6.4)
        return _MIN_LOG_MEL + math.log(freq / _MIN_LOG_HERTZ) * logstep
    return 3.0 * freq / 200.0


def mel_to_hertz(mel: float) -> float:
    """Convert a Slaney mel value back to Hz."""
    if mel >= _MIN_LOG_MEL:
        logstep = math.log(6.4) / 27.0
        return _MIN_LOG_HERTZ * math.exp((mel - _MIN_LOG_MEL) * logstep)
    return 200.0 * mel / 3.0


def mel_filter_bank(
    num_frequency_bins: int,
    num_mel_bins: int,
    min_frequency: float,
    max_frequency: float,
    sampling_rate: int,
) -> np.ndarray:
    """Build a filter bank of shape ``(num_frequency_bins, num_mel_bins)``.

    Each column is a triangular filter on the mel scale with Slaney energy
    normalisation applied.
    """
    if num_frequency_bins < 2:
        raise InvalidConfigError(
            f"num_frequency_bins must be >= 2, got {num_frequency_bins}"
        )
    if min_frequency > max_frequency:
        raise InvalidConfigError(
            f"min_frequency ({min_frequency}) must be <= max_frequency ({max_frequency})"
        )

    mel_min = hertz_to_mel(min_frequency)
    mel_max = hertz_to_mel(max_frequency)
    steps = num_mel_bins + 1
    filter_freqs = np.array(
        [
            mel_to_hertz(mel_min + (mel_max - mel_min) * i / steps)
            for i in range(num_mel_bins + 2)
        ],
        dtype=np.float64,
    )

    fft_freqs = (
        np.arange(num_frequency_bins, dtype=np.float64)
        * float(sampling_rate)
        / 2.0
        / (num_frequency_bins - 1)
    )

    left = filter_freqs[:-2][np.newaxis, :]
    center = filter_freqs[1:-1][np.newaxis, :]
    right = filter_freqs[2:][np.newaxis, :]
    freqs = fft_freqs[:, np.newaxis]

    with np.errstate(divide="ignore", invalid="ignore"):
        rising = (freqs - left) / (center - left)
        falling = (right - freqs) / (right - center)
        bank = np.where(
            (freqs >= left) & (freqs <= center),
            rising,
            np.where((freqs > center) & (freqs <= right), falling, 0.0),
        )
        bank = np.fmax(bank, 0.0)
        enorm = 2.0 / (right - left)
        bank = bank * enorm

    return bank