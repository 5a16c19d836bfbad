"""Command-line walk-through of text and audio tokenization."""

from __future__ import annotations

import argparse
import base64
import math
from typing import Sequence

import numpy as np

from .audio import Audio, AudioConfig, AudioSpectrogramConfig
from .config import TokenInfo, TokenizerVersion
from .errors import TokenizerError
from .tekkenizer import Tekkenizer
from .tokens import SpecialTokenInfo, SpecialTokenPolicy, SpecialTokens

DEFAULT_TOKENIZER_PATH = "tests/assets/tekken.json"

_DEMO_PATTERN = (
    r"[^\r\n\p{L}\p{N}]?[\p{Lu}\p{Lt}\p{Lm}\p{Lo}\p{M}]*[\p{Ll}\p{Lm}\p{Lo}\p{M}]+"
    r"|[^\r\n\p{L}\p{N}]?[\p{Lu}\p{Lt}\p{Lm}\p{Lo}\p{M}]+[\p{Ll}\p{Lm}\p{Lo}\p{M}]*"
    r"|\p{N}| ?[^\s\p{L}\p{N}]+[\r\n/]*|\s*[\r\n]+|\s+(?!\S)|\s+"
)

_DEMO_SPECIAL_NAMES = (
    "<unk>",
    "<s>",
    "</s>",
    "[INST]",
    "[/INST]",
    "[AVAILABLE_TOOLS]",
    "[/AVAILABLE_TOOLS]",
    "[TOOL_RESULTS]",
    "[/TOOL_RESULTS]",
    "[TOOL_CALLS]",
    "[IMG]",
    "<pad>",
    "[IMG_BREAK]",
    "[IMG_END]",
    "[PREFIX]",
    "[MIDDLE]",
    "[SUFFIX]",
    "[SYSTEM_PROMPT]",
    "[/SYSTEM_PROMPT]",
    "[TOOL_CONTENT]",
)

_COMMON_TOKENS = (b"hello", b"world", b"test", b"and", b"is")

_SAMPLE_TEXTS = (
    "Hello, world!",
    "The quick brown fox jumps over the lazy dog.",
    "This is a test of the Mistral Tekken tokenizer.",
    "🚀 Émojis and ünícode characters work too! 🎉",
)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def build_demo_tokenizer() -> Tekkenizer:
    """Build a small tokenizer with byte tokens, a few words and audio support."""
    vocab = [
        TokenInfo(
            rank=i,
            token_bytes=_b64(bytes([i])),
            token_str=chr(i) if i < 128 else None,
        )
        for i in range(256)
    ]
    vocab.extend(
        TokenInfo(
            rank=256 + offset,
            token_bytes=_b64(token),
            token_str=token.decode("utf-8", errors="replace"),
        )
        for offset, token in enumerate(_COMMON_TOKENS)
    )

    special = [
        SpecialTokenInfo(rank=rank, token_str=name, is_control=True)
        for rank, name in enumerate(_DEMO_SPECIAL_NAMES)
    ]
    special.append(
        SpecialTokenInfo(rank=24, token_str=SpecialTokens.AUDIO.value, is_control=True)
    )
    special.append(
        SpecialTokenInfo(
            rank=25, token_str=SpecialTokens.BEGIN_AUDIO.value, is_control=True
        )
    )

    audio_config = AudioConfig(
        sampling_rate=24000,
        frame_rate=12.5,
        audio_encoding_config=AudioSpectrogramConfig(
            num_mel_bins=128, hop_length=160, window_size=400
        ),
        chunk_length_s=1.0,
    )

    return Tekkenizer(
        vocab,
        special,
        _DEMO_PATTERN,
        vocab_size=300,
        num_special_tokens=100,
        version=TokenizerVersion.V7,
        audio_config=audio_config,
    )


def _load_tokenizer(path: str) -> Tekkenizer:
    try:
        tokenizer = Tekkenizer.from_file(path)
    except (OSError, TokenizerError) as exc:
        print(f"Could not load from {path}: {exc}")
        print("Creating a demo tokenizer instead...\n")
        return build_demo_tokenizer()
    print(f"Loaded tokenizer from {path}")
    return tokenizer


def _show_info(tokenizer: Tekkenizer) -> None:
    print("Tokenizer info:")
    print(f"   Vocab size: {tokenizer.vocab_size}")
    print(f"   Special tokens: {tokenizer.num_special_tokens}")
    print(f"   Version: {tokenizer.version.name}")
    print(f"   Audio support: {'yes' if tokenizer.has_audio_support else 'no'}\n")


def _show_basic_tokenization(tokenizer: Tekkenizer) -> None:
    print("Testing basic tokenization...")
    for text in _SAMPLE_TEXTS:
        print(f'   Input: "{text}"')
        try:
            tokens = tokenizer.encode(text, False, False)
            decoded = tokenizer.decode(tokens, SpecialTokenPolicy.IGNORE)
        except TokenizerError as exc:
            print(f"   Could not tokenize: {exc}\n")
            continue
        print(f"   Tokens: {tokens[:10]}")
        print(f'   Decoded: "{decoded}"')
        if text.strip() == decoded.strip():
            print("   Perfect round-trip!")
        else:
            print("   Round-trip differs (this is normal for BPE)")
        print()


def _show_special_tokens(tokenizer: Tekkenizer) -> None:
    print("Testing special tokens...")
    text = "Test message"
    tokens = tokenizer.encode(text, True, True)
    print(f"   With BOS/EOS: {tokens}")
    kept = tokenizer.decode(tokens, SpecialTokenPolicy.KEEP)
    ignored = tokenizer.decode(tokens, SpecialTokenPolicy.IGNORE)
    print(f'   Decoded (KEEP): "{kept}"')
    print(f'   Decoded (IGNORE): "{ignored}"')
    for label, name in (("BOS", SpecialTokens.BOS), ("EOS", SpecialTokens.EOS)):
        try:
            print(f"   {label} token ID: {tokenizer.get_control_token(name.value)}")
        except TokenizerError:
            pass
    print()


def _sine_wave(duration: float, sampling_rate: int, frequency: float) -> np.ndarray:
    length = int(duration * sampling_rate)
    t = np.arange(length, dtype=np.float64) / sampling_rate
    wave = np.sin(2.0 * math.pi * frequency * t).astype(np.float32)
    return wave * np.float32(0.5)


def _show_audio_encoding(tokenizer: Tekkenizer) -> None:
    print("Testing audio encoding...")
    sampling_rate = 24000
    audio = Audio(_sine_wave(1.0, sampling_rate, 440.0), sampling_rate, "wav")
    print(f"   Audio duration: {audio.duration():.2f}s")
    print(f"   Audio samples: {len(audio.audio_array)}")

    encoding = tokenizer.encode_audio(audio)
    print(f"   Audio tokens: {len(encoding.tokens)}")
    print(f"   First few tokens: {encoding.tokens[:5]}")

    if encoding.tokens:
        begin_id = tokenizer.get_control_token(SpecialTokens.BEGIN_AUDIO.value)
        audio_id = tokenizer.get_control_token(SpecialTokens.AUDIO.value)
        if encoding.tokens[0] == begin_id:
            print("   First token is BEGIN_AUDIO")
        count = sum(1 for token in encoding.tokens[1:] if token == audio_id)
        print(f"   Audio content tokens: {count}")
    print()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the demo against a tokenizer file, or a built-in one if it is missing."""
    parser = argparse.ArgumentParser(
        description="Demonstrate text and audio tokenization."
    )
    parser.add_argument(
        "tokenizer",
        nargs="?",
        default=DEFAULT_TOKENIZER_PATH,
        help="path to a tokenizer JSON file",
    )
    args = parser.parse_args(argv)

    print("=== Tekken Tokenizer Demo ===\n")
    tokenizer = _load_tokenizer(args.tokenizer)
    _show_info(tokenizer)
    _show_basic_tokenization(tokenizer)
    _show_special_tokens(tokenizer)
    if tokenizer.has_audio_support:
        _show_audio_encoding(tokenizer)
    print("All demos completed successfully!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())