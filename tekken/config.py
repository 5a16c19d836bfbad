"""Tokenizer file model: vocabulary entries, core settings and versions."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from .audio import AudioConfig
from .errors import InvalidConfigError
from .tokens import SpecialTokenInfo


def _field(data: Mapping[str, Any], key: str, owner: str) -> Any:
    if not isinstance(data, Mapping):
        raise InvalidConfigError(f"{owner} must be an object")
    try:
        return data[key]
    except KeyError as exc:
        raise InvalidConfigError(f"{owner} is missing field '{key}'") from exc


def _count(value: Any, key: str, owner: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidConfigError(
            f"{owner}.{key} must be a non-negative integer, got {value!r}"
        )
    return value


def _text(value: Any, key: str, owner: str) -> str:
    if not isinstance(value, str):
        raise InvalidConfigError(f"{owner}.{key} must be a string, got {value!r}")
    return value


@dataclass(frozen=True)
class TokenInfo:
    """One vocabulary entry: its rank, its base64 bytes and optional text."""

    rank: int
    token_bytes: str
    token_str: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "token_bytes": self.token_bytes,
            "token_str": self.token_str,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TokenInfo:
        owner = "vocab entry"
        token_str = data.get("token_str") if isinstance(data, Mapping) else None
        return cls(
            rank=_count(_field(data, "rank", owner), "rank", owner),
            token_bytes=_text(_field(data, "token_bytes", owner), "token_bytes", owner),
            token_str=None if token_str is None else _text(token_str, "token_str", owner),
        )


@dataclass(frozen=True)
class TekkenConfig:
    """Core settings: split pattern, vocabulary sizes and version string."""

    pattern: str
    num_vocab_tokens: int
    default_vocab_size: int
    default_num_special_tokens: int
    version: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "pattern": self.pattern,
            "num_vocab_tokens": self.num_vocab_tokens,
            "default_vocab_size": self.default_vocab_size,
            "default_num_special_tokens": self.default_num_special_tokens,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TekkenConfig:
        owner = "config"
        counts = {
            key: _count(_field(data, key, owner), key, owner)
            for key in (
                "num_vocab_tokens",
                "default_vocab_size",
                "default_num_special_tokens",
            )
        }
        return cls(
            pattern=_text(_field(data, "pattern", owner), "pattern", owner),
            version=_text(_field(data, "version", owner), "version", owner),
            **counts,
        )


@dataclass
class ModelData:
    """Everything stored in a tokenizer file."""

    vocab: list[TokenInfo]
    config: TekkenConfig
    special_tokens: list[SpecialTokenInfo] | None = None
    audio: AudioConfig | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "vocab": [token.to_dict() for token in self.vocab],
            "special_tokens": (
                None
                if self.special_tokens is None
                else [token.to_dict() for token in self.special_tokens]
            ),
            "config": self.config.to_dict(),
            "audio": None if self.audio is None else self.audio.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ModelData:
        owner = "tokenizer file"
        vocab = _field(data, "vocab", owner)
        if not isinstance(vocab, list):
            raise InvalidConfigError("vocab must be a list")
        special = data.get("special_tokens")
        if special is not None and not isinstance(special, list):
            raise InvalidConfigError("special_tokens must be a list")
        audio = data.get("audio")
        return cls(
            vocab=[TokenInfo.from_dict(entry) for entry in vocab],
            config=TekkenConfig.from_dict(_field(data, "config", owner)),
            special_tokens=(
                None
                if special is None
                else [SpecialTokenInfo.from_dict(entry) for entry in special]
            ),
            audio=None if audio is None else AudioConfig.from_dict(audio),
        )

    @classmethod
    def from_json(cls, text: str) -> ModelData:
        """Parse the JSON text of a tokenizer file."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise InvalidConfigError(f"JSON error: {exc}") from exc
        return cls.from_dict(data)

    def to_json(self) -> str:
        """Serialise to indented JSON."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


class TokenizerVersion(Enum):
    """Known tokenizer file versions."""

    V3 = "v3"
    V7 = "v7"
    V11 = "v11"
    V13 = "v13"

    @classmethod
    def from_string(cls, s: str) -> TokenizerVersion | None:
        """Return the version named by ``s``, or ``None`` if it is unknown."""
        try:
            return cls(s)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value