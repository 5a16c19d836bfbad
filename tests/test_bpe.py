import pytest

from tekken.bpe import CoreBPE, byte_pair_encode
from tekken.errors import DecodeError, InvalidConfigError, TokenNotFoundError

PATTERN = (
    r"(?i:'s|'t|'re|'ve|'m|'ll|'d)|[^\r\n\p{L}\p{N}]?\p{L}+|\p{N}{1,3}"
    r"| ?[^\s\p{L}\p{N}]+[\r\n]*|\s*[\r\n]+|\s+(?!\S)|\s+"
)


@pytest.fixture
def ranks():
    table = {bytes([i]): i for i in range(256)}
    table[b"he"] = 256
    table[b"ll"] = 257
    table[b"llo"] = 258
    table[b"hello"] = 259
    return table


@pytest.fixture
def bpe(ranks):
    return CoreBPE(ranks, PATTERN)


def test_single_byte_piece(ranks):
    assert byte_pair_encode(b"a", ranks) == [97]


def test_empty_piece(ranks):
    assert byte_pair_encode(b"", ranks) == []


def test_merges_reach_whole_word(ranks):
    assert byte_pair_encode(b"hello", ranks) == [259]


def test_partial_merges(ranks):
    assert byte_pair_encode(b"hellx", ranks) == [256, 257, 120]


def test_unmergeable_bytes(ranks):
    assert byte_pair_encode(b"xyz", ranks) == [120, 121, 122]


def test_missing_byte_raises():
    with pytest.raises(TokenNotFoundError):
        byte_pair_encode(b"ab", {b"a": 0})


def test_encode_hello_world(bpe):
    tokens = bpe.encode("hello world")
    assert tokens == [259, 32, 119, 111, 114, 108, 100]


def test_encode_not_empty(bpe):
    tokens = bpe.encode("Hello world!")
    assert len(tokens) > 0
    assert bpe.decode(tokens) == "Hello world!"


@pytest.mark.parametrize(
    "text",
    ["", " ", "hello hello", "Numbers: 123, 456", "café 北京 🚀", "a\n\tb  "],
)
def test_round_trip(bpe, text):
    assert bpe.decode(bpe.encode(text)) == text


def test_byte_tokens_decode_to_their_byte(bpe):
    for value in range(256):
        assert bpe.decode_bytes([value]) == bytes([value])


def test_decode_invalid_utf8(bpe):
    assert bpe.decode_bytes([0xC3]) == b"\xc3"
    with pytest.raises(DecodeError):
        bpe.decode([0xC3])


def test_decode_unknown_token(bpe):
    with pytest.raises(DecodeError):
        bpe.decode([100000])


def test_decoder_is_inverse_of_encoder(bpe, ranks):
    assert dict(bpe.encoder) == ranks
    assert all(bpe.decoder[rank] == key for key, rank in ranks.items())


def test_invalid_pattern():
    with pytest.raises(InvalidConfigError):
        CoreBPE({b"a": 0}, "(unclosed")


def test_duplicate_ranks():
    with pytest.raises(InvalidConfigError):
        CoreBPE({b"a": 0, b"b": 0}, PATTERN)