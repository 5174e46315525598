"""Microphone input and a listening engine that keeps the latest audio."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from itertools import islice

log = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 16000
INT16_MIN = -32768
INT16_MAX = 32767


class MicrophoneError(Exception):
    """Raised when the microphone cannot deliver a frame."""


class Microphone:
    """A 16-bit mono microphone fed from an iterable of samples."""

    def __init__(self, source: Iterable[int] = ()) -> None:
        self._source = iter(source)
        self.sample_rate = DEFAULT_SAMPLE_RATE
        self._active = False

    @property
    def active(self) -> bool:
        """Whether the microphone has been started and not yet ended."""
        return self._active

    def begin(self, sample_rate: int = DEFAULT_SAMPLE_RATE) -> None:
        """Start capturing at the given sample rate."""
        if sample_rate <= 0:
            raise ValueError(f"sample rate must be positive, got {sample_rate}")
        self.sample_rate = sample_rate
        self._active = True

    def read_frame(self, length: int) -> list[int]:
        """Read one frame of exactly ``length`` samples.

        A short final frame is padded with silence; a microphone with
        nothing left to give raises :class:`MicrophoneError`.
        """
        if not self._active:
            raise MicrophoneError("microphone has not been started")
        if length <= 0:
            raise ValueError(f"frame length must be positive, got {length}")
        frame = [int(sample) for sample in islice(self._source, length)]
        if not frame:
            raise MicrophoneError("no samples available")
        for sample in frame:
            if not INT16_MIN <= sample <= INT16_MAX:
                raise ValueError(f"sample {sample} is outside the 16-bit range")
        frame.extend([0] * (length - len(frame)))
        return frame

    def end(self) -> None:
        """Stop capturing."""
        self._active = False


class ListenEngine:
    """Reads frames from a microphone into a ring buffer of recent audio."""

    def __init__(
        self,
        microphone: Microphone,
        frame_length: int = 160,
        max_seconds: int = 5,
    ) -> None:
        if frame_length <= 0:
            raise ValueError(f"frame length must be positive, got {frame_length}")
        if max_seconds <= 0:
            raise ValueError(f"max seconds must be positive, got {max_seconds}")
        self.microphone = microphone
        self.frame_length = frame_length
        self.max_seconds = max_seconds
        self._ring: deque[int] | None = None

    def begin(self, sample_rate: int = DEFAULT_SAMPLE_RATE) -> bool:
        """Start the microphone and allocate the ring buffer."""
        self.microphone.begin(sample_rate)
        self._ring = deque(maxlen=sample_rate * self.max_seconds)
        return True

    def listen(self) -> bool:
        """Capture frames until the microphone stops delivering.

        Returns whether a voice was detected; without voice activity
        detection this is always ``False`` once the microphone runs dry.
        """
        if self._ring is None:
            raise RuntimeError("listen engine has not been started")
        while True:
            try:
                frame = self.microphone.read_frame(self.frame_length)
            except MicrophoneError:
                log.warning("Failed to read mic frame.")
                break
            self._ring.extend(frame)
        return False

    def buffered_samples(self) -> list[int]:
        """Return the buffered samples, oldest first."""
        if self._ring is None:
            return []
        return list(self._ring)

    def end(self) -> None:
        """Stop the microphone and release the buffer."""
        self.microphone.end()
        self._ring = None