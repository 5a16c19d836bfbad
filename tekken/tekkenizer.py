"""The Tekken tokenizer: byte-level BPE text encoding plus audio tokens."""

from __future__ import annotations

from itertools import groupby
from os import PathLike
from pathlib import Path
from typing import Iterable, Sequence

from .audio import Audio, AudioConfig, AudioEncoder, AudioEncoding
from .bpe import CoreBPE
from .config import ModelData, TekkenConfig, TokenInfo, TokenizerVersion
from .errors import (
    AudioError,
    DecodeError,
    InvalidConfigError,
    SpecialTokenPolicyError,
    TokenNotFoundError,
)
from .tokens import (
    SpecialTokenInfo,
    SpecialTokenPolicy,
    SpecialTokens,
    deprecated_special_tokens,
)
from .vocab import load_mergeable_ranks


class Tekkenizer:
    """Encodes text and audio into token ids, and decodes ids back to text.

    Ids below ``num_special_tokens`` are special tokens; the remaining ids are
    BPE ranks shifted up by ``num_special_tokens``.
    """

    def __init__(
        self,
        vocab: Iterable[TokenInfo],
        special_tokens: Iterable[SpecialTokenInfo],
        pattern: str,
        vocab_size: int,
        num_special_tokens: int,
        version: TokenizerVersion,
        audio_config: AudioConfig | None = None,
    ) -> None:
        vocab = list(vocab)
        special_tokens = list(special_tokens)

        if vocab_size > len(vocab) + num_special_tokens:
            raise InvalidConfigError(
                f"vocab_size ({vocab_size}) must be <= vocab.len() ({len(vocab)}) "
                f"+ num_special_tokens ({num_special_tokens})"
            )

        seen: set[str] = set()
        for token in special_tokens:
            if token.token_str in seen:
                raise InvalidConfigError(f"Duplicate special token: {token.token_str}")
            seen.add(token.token_str)

        if len(special_tokens) > num_special_tokens:
            raise InvalidConfigError(
                f"special_tokens.len() ({len(special_tokens)}) must be <= "
                f"num_special_tokens ({num_special_tokens})"
            )
        if vocab_size < num_special_tokens:
            raise InvalidConfigError(
                f"vocab_size ({vocab_size}) must be >= "
                f"num_special_tokens ({num_special_tokens})"
            )

        all_special = special_tokens + [
            SpecialTokenInfo(rank=i, token_str=f"<SPECIAL_{i}>", is_control=True)
            for i in range(len(special_tokens), num_special_tokens)
        ]

        ranks = load_mergeable_ranks(vocab, vocab_size - num_special_tokens)
        self._core = CoreBPE(ranks, pattern)

        self._vocab_size = vocab_size
        self._num_special_tokens = num_special_tokens
        self._version = version
        self._pattern = pattern
        self._special_tokens = all_special
        self._special_tokens_map = {token.token_str: token.rank for token in all_special}
        self._vocab_tokens = vocab

        decoder = self._core.decoder
        self._vocab = [
            all_special[i].token_str
            if i < num_special_tokens
            else (
                decoder[i - num_special_tokens].decode("utf-8", errors="replace")
                if (i - num_special_tokens) in decoder
                else "<?>"
            )
            for i in range(vocab_size)
        ]

        self._audio_config = audio_config
        self._audio_encoder: AudioEncoder | None = None
        if audio_config is not None:
            audio_id = self._special_tokens_map.get(SpecialTokens.AUDIO.value)
            if audio_id is None:
                raise TokenNotFoundError("Audio token not found")
            begin_id = self._special_tokens_map.get(SpecialTokens.BEGIN_AUDIO.value)
            if begin_id is None:
                raise TokenNotFoundError("BeginAudio token not found")
            self._audio_encoder = AudioEncoder(audio_config, audio_id, begin_id)

    @classmethod
    def from_model_data(cls, model_data: ModelData) -> Tekkenizer:
        """Build a tokenizer from the parsed contents of a tokenizer file."""
        config = model_data.config
        version = TokenizerVersion.from_string(config.version)
        if version is None:
            raise InvalidConfigError(f"Unknown version: {config.version}")
        special = model_data.special_tokens
        if special is None:
            special = deprecated_special_tokens()
        return cls(
            model_data.vocab,
            special,
            config.pattern,
            config.default_vocab_size,
            config.default_num_special_tokens,
            version,
            model_data.audio,
        )

    @classmethod
    def from_file(cls, path: str | PathLike[str]) -> Tekkenizer:
        """Load a tokenizer from a JSON tokenizer file."""
        text = Path(path).read_text(encoding="utf-8")
        return cls.from_model_data(ModelData.from_json(text))

    @property
    def vocab_size(self) -> int:
        """Total number of ids, special tokens included."""
        return self._vocab_size

    @property
    def num_special_tokens(self) -> int:
        return self._num_special_tokens

    @property
    def version(self) -> TokenizerVersion:
        return self._version

    @property
    def pattern(self) -> str:
        return self._pattern

    @property
    def special_tokens(self) -> tuple[SpecialTokenInfo, ...]:
        return tuple(self._special_tokens)

    @property
    def vocab(self) -> list[str]:
        """Text of every id, special tokens first."""
        return list(self._vocab)

    @property
    def bos_id(self) -> int:
        return self.get_control_token(SpecialTokens.BOS.value)

    @property
    def eos_id(self) -> int:
        return self.get_control_token(SpecialTokens.EOS.value)

    @property
    def pad_id(self) -> int:
        return self.get_control_token(SpecialTokens.PAD.value)

    @property
    def unk_id(self) -> int:
        return self.get_control_token(SpecialTokens.UNK.value)

    @property
    def has_audio_support(self) -> bool:
        return self._audio_encoder is not None

    @property
    def audio_config(self) -> AudioConfig | None:
        return self._audio_config

    def get_control_token(self, token_str: str) -> int:
        """Return the id of the special token whose text is ``token_str``."""
        try:
            return self._special_tokens_map[str(token_str)]
        except KeyError:
            available = list(self._special_tokens_map)
            raise TokenNotFoundError(
                f"Unknown control token: '{token_str}'. "
                f"Available special tokens: {available}"
            ) from None

    def encode(self, text: str, add_bos: bool = False, add_eos: bool = False) -> list[int]:
        """Encode ``text``, optionally wrapped in BOS and EOS tokens."""
        shift = self._num_special_tokens
        tokens = [rank + shift for rank in self._core.encode(text)]
        if add_bos:
            tokens.insert(0, self.bos_id)
        if add_eos:
            tokens.append(self.eos_id)
        return tokens

    def decode(
        self, tokens: Iterable[int], special_token_policy: SpecialTokenPolicy
    ) -> str:
        """Decode ``tokens`` to a single string."""
        return "".join(self.decode_all(tokens, special_token_policy))

    def decode_all(
        self, tokens: Iterable[int], special_token_policy: SpecialTokenPolicy
    ) -> list[str]:
        """Decode ``tokens`` into pieces, one per run of regular tokens.

        Kept special tokens each become their own piece.
        """
        decoded: list[str] = []
        for is_special, run in groupby(tokens, key=self.is_special_token):
            group = list(run)
            if is_special:
                decoded.extend(self._decode_special(group, special_token_policy))
            else:
                shift = self._num_special_tokens
                decoded.append(self._core.decode(token - shift for token in group))
        return decoded

    def _decode_special(
        self, group: Sequence[int], policy: SpecialTokenPolicy
    ) -> list[str]:
        if policy is SpecialTokenPolicy.RAISE:
            raise SpecialTokenPolicyError(
                f"Decoding tokens that contain special tokens ({list(group)}) "
                "is not allowed"
            )
        if policy is SpecialTokenPolicy.KEEP:
            return [self._special_tokens[token].token_str for token in group]
        return []

    def is_special_token(self, token_id: int) -> bool:
        return token_id < self._num_special_tokens

    def is_byte(self, token_id: int) -> bool:
        """True if ``token_id`` stands for a single raw byte."""
        if token_id < self._num_special_tokens:
            return False
        return token_id - self._num_special_tokens < 256

    def _check_range(self, token_id: int) -> None:
        if not 0 <= token_id < self._vocab_size:
            raise InvalidConfigError(
                f"Token ID {token_id} is out of vocabulary range "
                f"(0-{self._vocab_size - 1})"
            )

    def id_to_piece(self, token_id: int) -> str:
        """Text of a single id, special tokens included."""
        self._check_range(token_id)
        return self.decode([token_id], SpecialTokenPolicy.KEEP)

    def id_to_byte_piece(
        self, token_id: int, special_token_policy: SpecialTokenPolicy
    ) -> bytes:
        """Bytes of a single id, with special tokens handled by the policy."""
        self._check_range(token_id)
        if self.is_special_token(token_id):
            token_str = self._special_tokens[token_id].token_str
            if special_token_policy is SpecialTokenPolicy.KEEP:
                return token_str.encode("utf-8")
            if special_token_policy is SpecialTokenPolicy.RAISE:
                raise SpecialTokenPolicyError(
                    f"Token ID {token_id} is a special token ({token_str}), "
                    "cannot convert to byte piece with Raise policy"
                )
            return b""

        shifted = token_id - self._num_special_tokens
        try:
            return self._core.decode([shifted]).encode("utf-8")
        except DecodeError as exc:
            if token_id < len(self._vocab):
                return self._vocab[token_id].encode("utf-8")
            raise DecodeError(
                f"Failed to decode token ID {token_id} to bytes: {exc}. "
                "Token may represent invalid UTF-8 sequence."
            ) from exc

    def encode_audio(self, audio: Audio) -> AudioEncoding:
        """Encode a waveform into a begin-audio token and audio tokens."""
        if self._audio_encoder is None:
            raise AudioError("Audio encoder not configured")
        return self._audio_encoder.encode(audio)

    def to_model_data(self) -> ModelData:
        """Describe this tokenizer in the tokenizer file model."""
        return ModelData(
            vocab=list(self._vocab_tokens),
            config=TekkenConfig(
                pattern=self._pattern,
                num_vocab_tokens=self._vocab_size - self._num_special_tokens,
                default_vocab_size=self._vocab_size,
                default_num_special_tokens=self._num_special_tokens,
                version=self._version.value,
            ),
            special_tokens=list(self._special_tokens),
            audio=self._audio_config,
        )

    def to_file(self, path: str | PathLike[str]) -> None:
        """Write this tokenizer as a JSON file readable by ``from_file``."""
        Path(path).write_text(self.to_model_data().to_json(), encoding="utf-8")