import pytest

from tekken.errors import (
    AudioError,
    DecodeError,
    InvalidConfigError,
    SpecialTokenPolicyError,
    TokenizerError,
    TokenNotFoundError,
    UnsupportedFormatError,
)


@pytest.mark.parametrize(
    "cls, prefix",
    [
        (InvalidConfigError, "Invalid configuration"),
        (AudioError, "Audio error"),
        (TokenNotFoundError, "Token not found"),
        (SpecialTokenPolicyError, "Special token policy violation"),
        (DecodeError, "Tokenizers error"),
        (UnsupportedFormatError, "Unsupported format"),
    ],
)
def test_message_format(cls, prefix):
    err = cls("something went wrong")
    assert str(err) == f"{prefix}: something went wrong"
    assert err.detail == "something went wrong"


@pytest.mark.parametrize(
    "cls",
    [
        InvalidConfigError,
        AudioError,
        TokenNotFoundError,
        SpecialTokenPolicyError,
        DecodeError,
        UnsupportedFormatError,
    ],
)
def test_caught_by_base_class(cls):
    err = cls("boom")
    assert isinstance(err, TokenizerError)
    assert err.detail == "boom"
    assert str(err).endswith(": boom")


def test_invalid_config_is_value_error():
    err = InvalidConfigError("hop_length must be > 0")
    assert isinstance(err, ValueError)
    assert str(err) == "Invalid configuration: hop_length must be > 0"


def test_token_not_found_is_lookup_error():
    err = TokenNotFoundError("Audio token not found")
    assert isinstance(err, LookupError)
    assert str(err) == "Token not found: Audio token not found"


def test_args_hold_detail():
    err = AudioError("Resampling not yet implemented")
    assert err.args == ("Resampling not yet implemented",)