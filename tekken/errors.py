"""Exception hierarchy raised by the tokenizer and its audio pipeline."""

from __future__ import annotations


class TokenizerError(Exception):
    """Base class for every error raised by this package."""

    prefix = "Tokenizer error"

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.prefix}: {self.detail}"


class InvalidConfigError(TokenizerError, ValueError):
    """Configuration parameters are invalid or inconsistent."""

    prefix = "Invalid configuration"


class AudioError(TokenizerError):
    """An audio processing operation failed."""

    prefix = "Audio error"


class TokenNotFoundError(TokenizerError, LookupError):
    """A required token, usually a special token, is not in the vocabulary."""

    prefix = "Token not found"


class SpecialTokenPolicyError(TokenizerError):
    """An operation violated the requested special token policy."""

    prefix = "Special token policy violation"


class DecodeError(TokenizerError):
    """The underlying BPE engine could not decode a token sequence."""

    prefix = "Tokenizers error"


class UnsupportedFormatError(TokenizerError):
    """A file or data format is not supported."""

    prefix = "Unsupported format"