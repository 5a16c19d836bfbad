import pytest

from tekken.errors import InvalidConfigError
from tekken.tokens import (
    SpecialTokenInfo,
    SpecialTokenPolicy,
    SpecialTokens,
    deprecated_special_tokens,
)


def test_special_token_info_round_trip():
    info = SpecialTokenInfo(rank=24, token_str="[AUDIO]", is_control=True)
    assert SpecialTokenInfo.from_dict(info.to_dict()) == info
    assert info.to_dict() == {"rank": 24, "token_str": "[AUDIO]", "is_control": True}


def test_special_token_info_missing_field():
    with pytest.raises(InvalidConfigError):
        SpecialTokenInfo.from_dict({"rank": 0, "token_str": "<unk>"})


def test_special_tokens_text():
    assert SpecialTokens.BOS.value == "<s>"
    assert SpecialTokens.EOS.value == "</s>"
    assert str(SpecialTokens.BEGIN_AUDIO) == "[BEGIN_AUDIO]"
    assert SpecialTokens("[INST]") is SpecialTokens.BEGIN_INST


def test_policies_are_distinct():
    assert len({policy.value for policy in SpecialTokenPolicy}) == len(
        list(SpecialTokenPolicy)
    )
    assert SpecialTokenPolicy("keep") is SpecialTokenPolicy.KEEP


def test_deprecated_tokens_ranks_contiguous():
    tokens = deprecated_special_tokens()
    assert len(tokens) == 20
    assert [token.rank for token in tokens] == list(range(len(tokens)))
    assert all(token.is_control for token in tokens)


def test_deprecated_tokens_positions():
    tokens = deprecated_special_tokens()
    by_text = {token.token_str: token.rank for token in tokens}
    assert by_text["<unk>"] == 0
    assert by_text["<s>"] == 1
    assert by_text["</s>"] == 2
    assert by_text["<pad>"] == 11
    assert tokens[-1].token_str == "[TOOL_CONTENT]"


def test_deprecated_tokens_unique_and_without_audio():
    texts = [token.token_str for token in deprecated_special_tokens()]
    assert len(set(texts)) == len(texts)
    assert SpecialTokens.AUDIO.value not in texts
    assert SpecialTokens.BEGIN_AUDIO.value not in texts


def test_deprecated_tokens_fresh_list():
    first = deprecated_special_tokens()
    first.pop()
    assert len(deprecated_special_tokens()) == len(first) + 1