"""Conversion of vocabulary entries into the rank table used by the BPE engine."""

from __future__ import annotations

import base64
import binascii
from itertools import islice
from typing import Iterable

from .config import TokenInfo
from .errors import InvalidConfigError


def _decode_token_bytes(token: TokenInfo) -> bytes:
    try:
        return base64.b64decode(token.token_bytes, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidConfigError(
            f"Base64 decode error in token at rank {token.rank}: {exc}"
        ) from exc


def load_mergeable_ranks(vocab: Iterable[TokenInfo], max_vocab: int) -> dict[bytes, int]:
    """Map the byte sequences of the first ``max_vocab`` tokens to their ranks.

    The first 256 ranks must be the single bytes with the same value, and the
    resulting ranks must form the contiguous range ``0..len(result)``.
    """
    ranks: dict[bytes, int] = {}
    for token in islice(vocab, max(max_vocab, 0)):
        token_bytes = _decode_token_bytes(token)
        if token.rank < 256 and token_bytes != bytes([token.rank]):
            raise InvalidConfigError(
                f"Expected byte token at rank {token.rank} to be [{token.rank}], "
                f"got {list(token_bytes)}"
            )
        ranks[token_bytes] = token.rank

    if set(ranks.values()) != set(range(len(ranks))):
        raise InvalidConfigError("Vocabulary ranks are not contiguous")
    return ranks