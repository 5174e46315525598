"""WAV headers and fixed-length recordings of 16-bit mono PCM at 16 kHz."""

from __future__ import annotations

import struct
import sys
from array import array
from collections.abc import Iterable

from stackstt.mic import Microphone

RECORD_NUMBER = 400
RECORD_LENGTH = 150
RECORD_SIZE = RECORD_NUMBER * RECORD_LENGTH
RECORD_SAMPLE_RATE = 16000
HEADER_SIZE = 44
WAV_DATA_SIZE = RECORD_SIZE * 2

_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


def make_wav_header(data_size: int) -> bytes:
    """Build the 44-byte header for ``data_size`` bytes of 16 kHz mono PCM."""
    if data_size < 0 or data_size + HEADER_SIZE - 8 > 0xFFFFFFFF:
        raise ValueError(f"data size out of range: {data_size}")
    return _HEADER.pack(
        b"RIFF",
        data_size + HEADER_SIZE - 8,
        b"WAVE",
        b"fmt ",
        16,
        1,
        1,
        RECORD_SAMPLE_RATE,
        RECORD_SAMPLE_RATE * 2,
        2,
        16,
        b"data",
        data_size,
    )


def _le_bytes(samples: array) -> bytes:
    if sys.byteorder == "big":
        samples = array("h", samples)
        samples.byteswap()
    return samples.tobytes()


def _record_chunks(microphone: Microphone, samples: array) -> None:
    microphone.begin(RECORD_SAMPLE_RATE)
    try:
        for start in range(0, RECORD_SIZE, RECORD_LENGTH):
            samples[start:start + RECORD_LENGTH] = array(
                "h", microphone.read_frame(RECORD_LENGTH)
            )
    finally:
        microphone.end()


class Recording:
    """A fixed-length recording whose header is padded for Base64 encoding."""

    def __init__(self) -> None:
        self.samples = array("h", bytes(WAV_DATA_SIZE))
        self._header = bytes(HEADER_SIZE + 4)

    def record(self, microphone: Microphone) -> None:
        """Fill the recording from the microphone in fixed-size chunks."""
        self._header = make_wav_header(WAV_DATA_SIZE) + bytes(4)
        _record_chunks(microphone, self.samples)

    @property
    def padded_header(self) -> bytes:
        """The WAV header followed by four zero bytes (48 bytes)."""
        return self._header

    @property
    def data_bytes(self) -> bytes:
        """The samples as little-endian 16-bit PCM."""
        return _le_bytes(self.samples)


class WhisperRecording:
    """A fixed-length recording held as one complete WAV file."""

    def __init__(self) -> None:
        self.samples = array("h", bytes(WAV_DATA_SIZE))
        self._header = bytes(HEADER_SIZE)

    def record(self, microphone: Microphone) -> None:
        """Write the header and fill the samples from the microphone."""
        self._header = make_wav_header(WAV_DATA_SIZE)
        _record_chunks(microphone, self.samples)

    @property
    def buffer(self) -> bytes:
        """The whole WAV file: header followed by the samples."""
        return self._header + _le_bytes(self.samples)

    @property
    def size(self) -> int:
        """The size of the WAV file in bytes."""
        return RECORD_SIZE * 2 + HEADER_SIZE


def record_samples(
    microphone: Microphone,
    duration_ms: int = 5000,
    sample_rate: int = RECORD_SAMPLE_RATE,
    chunk_size: int = 160,
) -> list[int]:
    """Record about ``duration_ms`` of audio in chunks of ``chunk_size``."""
    if chunk_size <= 0:
        raise ValueError(f"chunk size must be positive, got {chunk_size}")
    total = sample_rate * duration_ms // 1000
    samples: list[int] = []
    microphone.begin(sample_rate)
    try:
        for _ in range(0, total, chunk_size):
            samples.extend(microphone.read_frame(chunk_size))
    finally:
        microphone.end()
    return samples


def wav_bytes(samples: Iterable[int]) -> bytes:
    """Return a complete WAV file holding the given 16-bit samples."""
    data = _le_bytes(array("h", samples))
    return make_wav_header(len(data)) + data