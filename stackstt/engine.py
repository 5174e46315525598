"""Speech-to-text engine choosing between the Google and Whisper services."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from stackstt.google import CloudSpeechClient
from stackstt.mic import ListenEngine, Microphone
from stackstt.wav import Recording, WhisperRecording, record_samples, wav_bytes
from stackstt.whisper import IdentificationError, WhisperClient

log = logging.getLogger(__name__)


@dataclass
class STTResult:
    """Recognised text and who said it."""

    text: str = ""
    speaker: str = ""
    kana: str = ""
    score: float = 0.0


class STTEngine:
    """Records from a microphone and sends the audio for recognition."""

    def __init__(self, microphone: Microphone) -> None:
        self.microphone = microphone
        self.listen_engine: ListenEngine | None = None
        self._stt_key: str | None = None
        self.use_google = False

    def begin(self, stt_key: str, use_google: bool = False) -> None:
        """Set the service key and choose the service."""
        self._stt_key = stt_key
        self.use_google = use_google

    def set_listen_engine(self, engine: ListenEngine) -> None:
        """Attach a listening engine."""
        self.listen_engine = engine

    def _key(self) -> str:
        if self._stt_key is None:
            raise RuntimeError("STT engine has not been started")
        return self._stt_key

    def transcribe(self) -> str:
        """Record a fixed-length clip and return its transcript."""
        key = self._key()
        if self.use_google:
            recording = Recording()
            recording.record(self.microphone)
            log.info("Record complete. Sending to Google STT...")
            return CloudSpeechClient(key).transcribe(recording)
        whisper_recording = WhisperRecording()
        whisper_recording.record(self.microphone)
        log.info("Record complete. Sending to OpenAI Whisper...")
        return WhisperClient(key).transcribe(whisper_recording)

    def transcribe_with_speaker(self) -> STTResult:
        """Record five seconds, transcribe them and identify the speaker."""
        key = self._key()
        samples = record_samples(self.microphone)
        if not samples:
            log.warning("No audio recorded.")
            return STTResult()
        log.info("Sending audio to Whisper and Identify...")
        buffer = wav_bytes(samples)
        result = STTResult(text=WhisperClient(key).transcribe_from_buffer(buffer))
        try:
            identity = WhisperClient(key).identify_from_buffer(buffer)
        except IdentificationError as exc:
            log.warning("Identify failed: %s", exc)
            return result
        result.speaker = identity.speaker
        result.kana = identity.kana
        result.score = identity.score
        log.info("Speaker: %s (%s), score=%.2f", identity.speaker, identity.kana, identity.score)
        return result