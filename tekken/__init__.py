"""Tekken byte-pair tokenizer with control tokens and audio token support."""

__version__ = "0.1.1"

__all__ = ["audio", "bpe", "config", "demo", "errors", "mel", "tekkenizer", "tokens", "vocab"]