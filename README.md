# stackstt

Record short clips of mono, 16 kHz, signed 16-bit PCM and send them to a
speech-to-text service. Two services are supported: Google Cloud Speech
(`CloudSpeechClient`) and OpenAI Whisper (`WhisperClient`). The Whisper
client can also send the same clip to a speaker-identification service over
plain HTTP.

The package uses only the standard library.

## Install

```
pip install .
pip install ".[test]"   # adds pytest
```

## Modules

### `stackstt.mic`

- `Microphone(source=())` reads samples from any iterable of ints. Call
  `begin(sample_rate=16000)` before reading, and call `end()` when done.
  `read_frame(length)` returns exactly `length` samples. A short last frame
  is padded with zeros. Once the source is empty it raises `MicrophoneError`.
  Samples outside the 16-bit range raise `ValueError`.
- `ListenEngine(microphone, frame_length=160, max_seconds=5)`: `begin()`
  starts the microphone and sets up a ring buffer that holds
  `sample_rate * max_seconds` samples. `listen()` reads frames until the
  microphone runs dry and then returns `False`. `buffered_samples()` returns
  the most recent audio, oldest sample first. `end()` stops the microphone and
  releases the buffer.

### `stackstt.wav`

- `make_wav_header(data_size)` builds the 44-byte RIFF/WAVE header for
  16 kHz mono linear PCM.
- `wav_bytes(samples)` returns a complete WAV file.
- `record_samples(microphone, duration_ms=5000, sample_rate=16000, chunk_size=160)`
  records a clip in chunks and returns it as a list of ints.
- `Recording` holds a fixed clip of 60,000 samples (400 chunks of 150,
  about 3.75 s). Its members are:
  - `record(microphone)`, which fills the clip.
  - `padded_header`, which holds 48 bytes: the header followed by four zero
    bytes.
  - `data_bytes`, which holds the samples as little-endian PCM.
- `WhisperRecording` holds the same fixed clip. Its `buffer` is a single WAV
  file, and its `size` gives the length of that file in bytes.

### `stackstt.google`

- `CloudSpeechClient(api_key, language_code="ja-jp", timeout=10.0)`
  - `request_body(recording)` builds the JSON `speech:recognize` body. The
    audio goes in Base64.
  - `request_headers(body)` returns the matching HTTP headers.
  - `transcribe(recording)` posts the request over HTTPS and returns the first
    transcript. If the response cannot be parsed, it returns `""`. Network
    errors are raised to the caller.
- `parse_transcript(payload)` takes the first transcript out of a response.
  It returns `""` when the response has none, and raises `ValueError` when
  the payload is not valid JSON.
- `Authentication` is an enum with `USE_ACCESSTOKEN` and `USE_APIKEY`. The
  client always uses an API key.

### `stackstt.whisper`

- `WhisperClient(api_key, timeout=10.0, identify_host="192.168.10.22", identify_port=8082)`
  - `transcribe(recording)` and `transcribe_from_buffer(buffer)` send a
    multipart request to `/v1/audio/transcriptions`. The request asks for
    model `whisper-1` and language `ja`. Both methods return the text, or
    `""` on a timeout or an unreadable reply.
  - `identify_from_buffer(buffer)` posts the WAV to `/identify` on the
    identify host. It returns a `SpeakerIdentity(speaker, kana, score)`. If
    the request fails, times out or gets a reply that is not JSON, it raises
    `IdentificationError`.
- Helpers:
  - `generate_boundary(rng=None)`
  - `build_transcription_body(data, boundary)`
  - `build_identify_body(data, boundary)`
  - `parse_identity(payload)`: when `kana` is missing, the name is used
    instead. When `score` is missing, it is `0.0`.

### `stackstt.engine`

- `STTEngine(microphone)`
  - `begin(stt_key, use_google=False)` sets the key and picks the service.
  - `transcribe()` records a `Recording` or a `WhisperRecording` and returns
    the text.
  - `transcribe_with_speaker()` records five seconds, transcribes them with
    Whisper and asks the identify service who spoke. It returns an
    `STTResult(text, speaker, kana, score)`. If identification fails, the
    text is still returned and the speaker fields stay empty.
  - `set_listen_engine(engine)` attaches a `ListenEngine`. The engine is
    stored but not used.
  - Calling a transcribe method before `begin()` raises `RuntimeError`.

## Example

```python
from stackstt.mic import Microphone
from stackstt.wav import make_wav_header, wav_bytes
from stackstt.engine import STTEngine

assert len(make_wav_header(0)) == 44
clip = wav_bytes([0, 1000, -1000])      # 44-byte header + 6 bytes of PCM

mic = Microphone(my_samples)            # any iterable of 16-bit ints
engine = STTEngine(mic)
engine.begin("placeholder", False)      # False selects Whisper, True selects Google
print(engine.transcribe())
```

## What it does not do

- It does not capture audio from a sound device. `Microphone` only reads
  samples you give it. To use a real device, subclass `Microphone` or pass an
  iterable that reads from your device.
- It has no voice activity detection. `ListenEngine.listen()` never reports
  a detected voice.
- It has no command-line program. It does not speak replies, and it does not
  drive a display.