"""Special token definitions and the policy for handling them when decoding."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from .errors import InvalidConfigError


@dataclass(frozen=True)
class SpecialTokenInfo:
    """A special token: its id, its text and whether it is a control token."""

    rank: int
    token_str: str
    is_control: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "token_str": self.token_str,
            "is_control": self.is_control,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SpecialTokenInfo:
        try:
            return cls(
                rank=int(data["rank"]),
                token_str=str(data["token_str"]),
                is_control=bool(data["is_control"]),
            )
        except (KeyError, TypeError) as exc:
            raise InvalidConfigError(f"special token is missing field {exc}") from exc


class SpecialTokenPolicy(Enum):
    """How decoding treats special tokens."""

    IGNORE = "ignore"
    KEEP = "keep"
    RAISE = "raise"


class SpecialTokens(str, Enum):
    """Text of the well-known special tokens."""

    UNK = "<unk>"
    BOS = "<s>"
    EOS = "</s>"
    BEGIN_INST = "[INST]"
    END_INST = "[/INST]"
    BEGIN_TOOLS = "[AVAILABLE_TOOLS]"
    END_TOOLS = "[/AVAILABLE_TOOLS]"
    BEGIN_TOOL_RESULTS = "[TOOL_RESULTS]"
    END_TOOL_RESULTS = "[/TOOL_RESULTS]"
    TOOL_CALLS = "[TOOL_CALLS]"
    IMG = "[IMG]"
    PAD = "<pad>"
    IMG_BREAK = "[IMG_BREAK]"
    IMG_END = "[IMG_END]"
    PREFIX = "[PREFIX]"
    MIDDLE = "[MIDDLE]"
    SUFFIX = "[SUFFIX]"
    BEGIN_SYSTEM = "[SYSTEM_PROMPT]"
    END_SYSTEM = "[/SYSTEM_PROMPT]"
    BEGIN_TOOL_CONTENT = "[TOOL_CONTENT]"
    AUDIO = "[AUDIO]"
    BEGIN_AUDIO = "[BEGIN_AUDIO]"

    def __str__(self) -> str:
        return self.value


_DEPRECATED_ORDER = (
    SpecialTokens.UNK,
    SpecialTokens.BOS,
    SpecialTokens.EOS,
    SpecialTokens.BEGIN_INST,
    SpecialTokens.END_INST,
    SpecialTokens.BEGIN_TOOLS,
    SpecialTokens.END_TOOLS,
    SpecialTokens.BEGIN_TOOL_RESULTS,
    SpecialTokens.END_TOOL_RESULTS,
    SpecialTokens.TOOL_CALLS,
    SpecialTokens.IMG,
    SpecialTokens.PAD,
    SpecialTokens.IMG_BREAK,
    SpecialTokens.IMG_END,
    SpecialTokens.PREFIX,
    SpecialTokens.MIDDLE,
    SpecialTokens.SUFFIX,
    SpecialTokens.BEGIN_SYSTEM,
    SpecialTokens.END_SYSTEM,
    SpecialTokens.BEGIN_TOOL_CONTENT,
)


def deprecated_special_tokens() -> list[SpecialTokenInfo]:
    """Special tokens assumed by tokenizer files that do not list their own."""
    return [
        SpecialTokenInfo(rank=rank, token_str=token.value, is_control=True)
        for rank, token in enumerate(_DEPRECATED_ORDER)
    ]