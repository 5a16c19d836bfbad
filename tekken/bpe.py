"""Byte-level BPE engine: regex pre-splitting and rank-ordered merging."""

from __future__ import annotations

from itertools import pairwise
from types import MappingProxyType
from typing import Iterable, Mapping

import regex

from .errors import DecodeError, InvalidConfigError, TokenNotFoundError

_NO_RANK = float("inf")


def _merge_boundaries(piece: bytes, ranks: Mapping[bytes, int]) -> list[int]:
    """Return the start offsets of the parts left after merging ``piece``."""
    parts = [[i, ranks.get(piece[i : i + 2], _NO_RANK)] for i in range(len(piece) - 1)]
    parts.append([len(piece) - 1, _NO_RANK])
    parts.append([len(piece), _NO_RANK])

    def rank_at(i: int) -> float:
        if i + 3 < len(parts):
            return ranks.get(piece[parts[i][0] : parts[i + 3][0]], _NO_RANK)
        return _NO_RANK

    while True:
        best, i = min(
            ((rank, idx) for idx, (_, rank) in enumerate(parts[:-1])),
            default=(_NO_RANK, -1),
        )
        if best == _NO_RANK:
            break
        if i > 0:
            parts[i - 1][1] = rank_at(i - 1)
        parts[i][1] = rank_at(i)
        del parts[i + 1]

    return [start for start, _ in parts]


def byte_pair_encode(piece: bytes, ranks: Mapping[bytes, int]) -> list[int]:
    """Encode one pre-split piece by repeatedly merging its lowest-ranked pair."""
    if not piece:
        return []
    if len(piece) == 1:
        try:
            return [ranks[piece]]
        except KeyError as exc:
            raise TokenNotFoundError(f"No token for byte sequence {piece!r}") from exc
    result = []
    for start, end in pairwise(_merge_boundaries(piece, ranks)):
        part = piece[start:end]
        try:
            result.append(ranks[part])
        except KeyError as exc:
            raise TokenNotFoundError(f"No token for byte sequence {part!r}") from exc
    return result


class CoreBPE:
    """Encodes text to ranks and decodes ranks back, without special tokens."""

    def __init__(self, mergeable_ranks: Mapping[bytes, int], pattern: str) -> None:
        encoder = {bytes(key): int(rank) for key, rank in mergeable_ranks.items()}
        decoder = {rank: key for key, rank in encoder.items()}
        if len(decoder) != len(encoder):
            raise InvalidConfigError(
                "Failed to create CoreBPE: encoder and decoder must be of equal length"
            )
        try:
            self._regex = regex.compile(pattern)
        except regex.error as exc:
            raise InvalidConfigError(f"Failed to create CoreBPE: {exc}") from exc
        self._encoder = encoder
        self._decoder = decoder

    @property
    def encoder(self) -> Mapping[bytes, int]:
        """Mapping from byte sequences to ranks."""
        return MappingProxyType(self._encoder)

    @property
    def decoder(self) -> Mapping[int, bytes]:
        """Mapping from ranks to byte sequences."""
        return MappingProxyType(self._decoder)

    def encode(self, text: str) -> list[int]:
        """Split ``text`` with the pattern and encode each piece."""
        tokens: list[int] = []
        for match in self._regex.finditer(text):
            piece = match.group().encode("utf-8")
            rank = self._encoder.get(piece)
            if rank is not None:
                tokens.append(rank)
            else:
                tokens.extend(byte_pair_encode(piece, self._encoder))
        return tokens

    def decode_bytes(self, tokens: Iterable[int]) -> bytes:
        """Concatenate the bytes of ``tokens``."""
        try:
            return b"".join(self._decoder[token] for token in tokens)
        except KeyError as exc:
            raise DecodeError(f"Invalid token for decoding: {exc.args[0]}") from exc

    def decode(self, tokens: Iterable[int]) -> str:
        """Decode ``tokens`` to text; the bytes must form valid UTF-8."""
        data = self.decode_bytes(tokens)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Invalid UTF-8 in decoded tokens: {exc}") from exc