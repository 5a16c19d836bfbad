"""Audio loading, padding and conversion of waveforms into audio tokens."""

from __future__ import annotations

import base64
import binascii
import math
import struct
from dataclasses import dataclass, field, replace
from os import PathLike
from typing import Any, Mapping

import numpy as np

from .errors import AudioError, InvalidConfigError

_WAVE_FORMAT_PCM = 0x0001
_WAVE_FORMAT_IEEE_FLOAT = 0x0003
_WAVE_FORMAT_EXTENSIBLE = 0xFFFE
_INT_SCALE = np.float32(np.iinfo(np.int32).max)


def _require(data: Mapping[str, Any], key: str, owner: str) -> Any:
    try:
        return data[key]
    except (KeyError, TypeError) as exc:
        raise InvalidConfigError(f"{owner} is missing field '{key}'") from exc


@dataclass(frozen=True)
class AudioSpectrogramConfig:
    """Parameters of the mel spectrogram computed from a waveform."""

    num_mel_bins: int
    hop_length: int
    window_size: int

    def __post_init__(self) -> None:
        for name in ("num_mel_bins", "hop_length", "window_size"):
            if getattr(self, name) <= 0:
                raise InvalidConfigError(f"{name} must be > 0")

    def to_dict(self) -> dict[str, Any]:
        return {
            "num_mel_bins": self.num_mel_bins,
            "hop_length": self.hop_length,
            "window_size": self.window_size,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AudioSpectrogramConfig:
        owner = "audio_encoding_config"
        return cls(
            num_mel_bins=int(_require(data, "num_mel_bins", owner)),
            hop_length=int(_require(data, "hop_length", owner)),
            window_size=int(_require(data, "window_size", owner)),
        )


@dataclass(frozen=True)
class AudioConfig:
    """Settings that govern how audio is padded and turned into tokens."""

    sampling_rate: int
    frame_rate: float
    audio_encoding_config: AudioSpectrogramConfig
    chunk_length_s: float | None = None

    def __post_init__(self) -> None:
        if self.sampling_rate <= 0:
            raise InvalidConfigError("sampling_rate must be > 0")
        if self.frame_rate <= 0.0:
            raise InvalidConfigError("frame_rate must be > 0")
        if self.chunk_length_s is not None and self.chunk_length_s <= 0.0:
            raise InvalidConfigError("chunk_length_s must be > 0")

    def chunk_frames(self) -> int:
        """Number of samples in one padding chunk."""
        if self.chunk_length_s is None:
            raise InvalidConfigError("chunk_length_s not set")
        return int(self.chunk_length_s * float(self.sampling_rate))

    def audio_length_per_tok(self) -> int:
        """Number of spectrogram frames represented by one audio token."""
        factor = float(self.sampling_rate) / self.frame_rate
        factor /= float(self.audio_encoding_config.hop_length)
        return int(factor)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sampling_rate": self.sampling_rate,
            "frame_rate": self.frame_rate,
            "audio_encoding_config": self.audio_encoding_config.to_dict(),
            "chunk_length_s": self.chunk_length_s,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AudioConfig:
        owner = "audio"
        chunk = data.get("chunk_length_s") if isinstance(data, Mapping) else None
        return cls(
            sampling_rate=int(_require(data, "sampling_rate", owner)),
            frame_rate=float(_require(data, "frame_rate", owner)),
            audio_encoding_config=AudioSpectrogramConfig.from_dict(
                _require(data, "audio_encoding_config", owner)
            ),
            chunk_length_s=None if chunk is None else float(chunk),
        )


class _WavError(Exception):
    def __init__(self, stage: str, detail: str) -> None:
        super().__init__(detail)
        self.stage = stage


def _parse_fmt(body: bytes) -> tuple[int, int, int, int]:
    if len(body) < 16:
        raise _WavError("header", "fmt chunk is too short")
    tag, channels, rate, _byte_rate, _align, bits = struct.unpack_from("<HHIIHH", body)
    if tag == _WAVE_FORMAT_EXTENSIBLE:
        if len(body) < 40:
            raise _WavError("header", "extensible fmt chunk is too short")
        (tag,) = struct.unpack_from("<H", body, 24)
    if channels == 0:
        raise _WavError("header", "number of channels must be > 0")
    supported = (tag == _WAVE_FORMAT_PCM and bits in (8, 16, 24, 32)) or (
        tag == _WAVE_FORMAT_IEEE_FLOAT and bits == 32
    )
    if not supported:
        raise _WavError("header", f"unsupported sample format (tag {tag}, {bits} bits)")
    return tag, channels, rate, bits


def _decode_samples(payload: bytes, tag: int, bits: int) -> np.ndarray:
    width = bits // 8
    payload = payload[: len(payload) // width * width]
    if tag == _WAVE_FORMAT_IEEE_FLOAT:
        return np.frombuffer(payload, dtype="<f4").astype(np.float32)
    if bits == 8:
        ints = np.frombuffer(payload, dtype=np.uint8).astype(np.int32) - 128
    elif bits == 16:
        ints = np.frombuffer(payload, dtype="<i2").astype(np.int32)
    elif bits == 24:
        raw = np.frombuffer(payload, dtype=np.uint8).reshape(-1, 3).astype(np.int32)
        ints = raw[:, 0] | (raw[:, 1] << 8) | (raw[:, 2] << 16)
        ints = np.where(ints & 0x800000, ints - 0x1000000, ints)
    else:
        ints = np.frombuffer(payload, dtype="<i4").astype(np.int32)
    return ints.astype(np.float32) / _INT_SCALE


def _to_mono(samples: np.ndarray, channels: int) -> np.ndarray:
    if channels == 1:
        return samples
    whole = len(samples) // channels * channels
    mono = samples[:whole].reshape(-1, channels).sum(axis=1, dtype=np.float32)
    mono = (mono / np.float32(channels)).astype(np.float32)
    rest = samples[whole:]
    if len(rest):
        tail = np.float32(rest.sum(dtype=np.float32) / np.float32(len(rest)))
        mono = np.append(mono, tail).astype(np.float32)
    return mono


def _read_wav(data: bytes) -> tuple[np.ndarray, int]:
    if len(data) < 12 or data[:4] != b"RIFF" or data[8:12] != b"WAVE":
        raise _WavError("header", "no RIFF/WAVE tag found")
    fmt: tuple[int, int, int, int] | None = None
    pos = 12
    while pos + 8 <= len(data):
        chunk_id, size = struct.unpack_from("<4sI", data, pos)
        body_start = pos + 8
        if chunk_id == b"fmt ":
            fmt = _parse_fmt(data[body_start : body_start + size])
        elif chunk_id == b"data":
            if fmt is None:
                raise _WavError("header", "data chunk found before fmt chunk")
            payload = data[body_start : body_start + size]
            if len(payload) < size:
                raise _WavError("samples", "unexpected end of sample data")
            tag, channels, rate, bits = fmt
            samples = _decode_samples(payload, tag, bits)
            return _to_mono(samples, channels), rate
        pos = body_start + size + (size & 1)
    raise _WavError("header", "no data chunk found")


@dataclass(eq=False)
class Audio:
    """A mono waveform together with its sampling rate and format."""

    audio_array: np.ndarray
    sampling_rate: int
    format: str = "wav"

    def __post_init__(self) -> None:
        self.audio_array = np.asarray(self.audio_array, dtype=np.float32).reshape(-1)

    @classmethod
    def from_file(cls, path: str | PathLike[str]) -> Audio:
        """Load a WAV file, averaging multiple channels into one."""
        try:
            with open(path, "rb") as handle:
                data = handle.read()
        except OSError as exc:
            raise AudioError(f"Failed to open audio file: {exc}") from exc
        return cls._from_wav(data, "Failed to open audio file")

    @classmethod
    def from_base64(cls, data: str) -> Audio:
        """Load WAV data that has been base64 encoded."""
        try:
            raw = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise AudioError(f"Base64 decode error: {exc}") from exc
        return cls.from_bytes(raw)

    @classmethod
    def from_bytes(cls, data: bytes) -> Audio:
        """Parse the bytes of a WAV file."""
        return cls._from_wav(bytes(data), "Failed to parse audio bytes")

    @classmethod
    def _from_wav(cls, data: bytes, header_message: str) -> Audio:
        try:
            samples, rate = _read_wav(data)
        except _WavError as exc:
            message = header_message if exc.stage == "header" else "Failed to read samples"
            raise AudioError(f"{message}: {exc}") from exc
        return cls(samples, rate, "wav")

    def duration(self) -> float:
        """Length of the audio in seconds."""
        return len(self.audio_array) / float(self.sampling_rate)

    def resample(self, target_rate: int) -> Audio:
        """Return the audio at ``target_rate`` using band-limited FFT resampling."""
        if target_rate <= 0:
            raise AudioError("target sampling rate must be > 0")
        if target_rate == self.sampling_rate:
            return self
        length = len(self.audio_array)
        out_length = int(round(length * target_rate / self.sampling_rate))
        if length == 0 or out_length == 0:
            resampled = np.zeros(out_length, dtype=np.float32)
        else:
            spectrum = np.fft.rfft(self.audio_array.astype(np.float64))
            target_bins = np.zeros(out_length // 2 + 1, dtype=np.complex128)
            keep = min(len(spectrum), len(target_bins))
            target_bins[:keep] = spectrum[:keep]
            resampled = np.fft.irfft(target_bins, n=out_length) * (out_length / length)
        return replace(
            self, audio_array=resampled.astype(np.float32), sampling_rate=target_rate
        )

    def pad(self, config: AudioConfig) -> Audio:
        """Return the audio zero-padded to a whole number of chunks or one window."""
        current = len(self.audio_array)
        if config.chunk_length_s is not None:
            chunk = config.chunk_frames()
            if chunk == 0:
                raise InvalidConfigError("chunk_length_s yields zero samples per chunk")
            target = -(-current // chunk) * chunk
        elif current < config.audio_encoding_config.window_size:
            target = config.audio_encoding_config.window_size
        else:
            return self
        if target <= current:
            return self
        padded = np.zeros(target, dtype=np.float32)
        padded[:current] = self.audio_array
        return replace(self, audio_array=padded)


@dataclass
class AudioEncoding:
    """Tokens that stand for a piece of audio, and the audio they came from."""

    tokens: list[int]
    audio: Audio


@dataclass(frozen=True)
class AudioEncoder:
    """Turns waveforms into a begin-audio token followed by audio tokens."""

    config: AudioConfig
    audio_token_id: int
    begin_audio_token_id: int

    def encode(self, audio: Audio) -> AudioEncoding:
        """Resample and pad ``audio``, then count the audio tokens it needs."""
        processed = audio.resample(self.config.sampling_rate).pad(self.config)
        hop = self.config.audio_encoding_config.hop_length
        length = len(processed.audio_array)
        if length % hop:
            frames = max(0, math.ceil(length / hop - 1.0))
        else:
            frames = length // hop
        per_token = self.config.audio_length_per_tok()
        if per_token == 0:
            raise InvalidConfigError("audio length per token must be > 0")
        count = math.ceil(frames / per_token)
        tokens = [self.begin_audio_token_id, *([self.audio_token_id] * count)]
        return AudioEncoding(tokens=tokens, audio=processed)