# tekken

A byte-pair-encoding tokenizer for Tekken vocabulary files (`tekken.json`),
with control tokens, several decoding policies for those tokens, and audio
clips turned into token runs that can be mixed with text.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Text

```python
from tekken.tekkenizer import Tekkenizer
from tekken.tokens import SpecialTokenPolicy

tokenizer = Tekkenizer.from_file("tekken.json")

tokens = tokenizer.encode("Hello, world!", True, True)   # add BOS and EOS
print(tokens)

print(tokenizer.decode(tokens, SpecialTokenPolicy.KEEP))    # "<s>Hello, world!</s>"
print(tokenizer.decode(tokens, SpecialTokenPolicy.IGNORE))  # "Hello, world!"
```

Ids below `num_special_tokens` are control tokens; the other ids are BPE
ranks shifted up by that number. How control tokens are treated on decoding
depends on the policy:

- `KEEP` writes the token's text, such as `<s>` or `[INST]`;
- `IGNORE` leaves it out;
- `RAISE` raises `SpecialTokenPolicyError`.

`decode_all` returns the decoded text in pieces: one for each run of ordinary
tokens, and one for each kept control token. Other useful members:

```python
tokenizer.vocab_size, tokenizer.num_special_tokens, tokenizer.version
tokenizer.bos_id, tokenizer.eos_id, tokenizer.pad_id, tokenizer.unk_id
tokenizer.get_control_token("[INST]")      # id of a control token
tokenizer.is_special_token(1)              # True for control tokens
tokenizer.is_byte(tokens[1])               # True for the 256 single-byte tokens
tokenizer.id_to_piece(tokens[1])           # text of one token
tokenizer.id_to_byte_piece(tokens[1], SpecialTokenPolicy.KEEP)  # its bytes
tokenizer.vocab                            # text of every id, control tokens first
```

Files without a `special_tokens` list get the default set from
`tekken.tokens.deprecated_special_tokens()`. Missing control tokens up to
`num_special_tokens` are filled in as `<SPECIAL_n>`.

A tokenizer can be written back to disk and loaded again:

```python
tokenizer.to_file("copy.json")
same = Tekkenizer.from_file("copy.json")
```

`Tekkenizer.from_model_data` builds one from a `tekken.config.ModelData`,
and `to_model_data` goes the other way. The BPE engine itself is
`tekken.bpe.CoreBPE`.

## Audio

A tokenizer whose file carries an `audio` section turns audio into a
`[BEGIN_AUDIO]` token followed by a run of `[AUDIO]` tokens:

```python
from tekken.audio import Audio

audio = Audio.from_file("speech.wav")     # multi-channel audio is averaged to mono
encoding = tokenizer.encode_audio(audio)
print(len(encoding.tokens), encoding.audio.duration())
```

`Audio.from_file`, `Audio.from_bytes` and `Audio.from_base64` read WAV data
with 8, 16, 24 or 32-bit integer samples or 32-bit float samples.

The encoder can also be used on its own:

```python
from tekken.audio import Audio, AudioConfig, AudioEncoder, AudioSpectrogramConfig

config = AudioConfig(
    sampling_rate=16000,
    frame_rate=12.5,
    audio_encoding_config=AudioSpectrogramConfig(num_mel_bins=80, hop_length=160, window_size=400),
    chunk_length_s=None,
)
encoder = AudioEncoder(config, 1000, 1001)   # audio token id, begin-audio token id
encoding = encoder.encode(Audio.from_file("speech.wav"))
```

Before counting tokens the encoder resamples the audio to the configured rate
(FFT-based, via `Audio.resample`) and pads it with silence (`Audio.pad`) to a
whole number of chunks, or to one window when no chunk length is set. Both
methods return a new `Audio`.

Slaney-style mel helpers are in `tekken.mel`:

```python
from tekken.mel import hertz_to_mel, mel_to_hertz, mel_filter_bank

bank = mel_filter_bank(201, 80, 0.0, 8000.0, 16000)   # shape (201, 80)
```

## What it does not do

The audio encoder only works out how many audio tokens a clip needs; it does
not compute spectrogram features or any model input from the waveform. Only
WAV audio can be read. There is no image support.

## Errors

The package raises subclasses of `tekken.errors.TokenizerError`:
`InvalidConfigError`, `AudioError`, `TokenNotFoundError`,
`SpecialTokenPolicyError`, `DecodeError` and `UnsupportedFormatError`.
Reading or writing a tokenizer file that cannot be opened raises the usual
`OSError`.

## Demo

```
tekken-demo [path/to/tekken.json]
```

This loads the given tokenizer file (by default `tests/assets/tekken.json`),
and if it cannot be loaded builds a small tokenizer with audio support. It
then encodes and decodes a few sentences, shows the special-token policies
and encodes a one-second sine tone.