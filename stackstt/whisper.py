"""Client for the Whisper transcription API and a speaker-identify service."""

from __future__ import annotations

import http.client
import json
import logging
import random
from dataclasses import dataclass

from stackstt.wav import WhisperRecording

log = logging.getLogger(__name__)

API_HOST = "api.openai.com"
API_PORT = 443
API_PATH = "/v1/audio/transcriptions"
DEFAULT_TIMEOUT = 10.0

IDENTIFY_HOST = "192.168.10.22"
IDENTIFY_PORT = 8082
IDENTIFY_PATH = "/identify"
IDENTIFY_TIMEOUT = 5.0
IDENTIFY_BOUNDARY = "----ESP32Boundary"

_BOUNDARY_PREFIX = "-" * 24


class IdentificationError(Exception):
    """Raised when the speaker cannot be identified."""


@dataclass(frozen=True)
class SpeakerIdentity:
    """Who spoke, with a reading of the name and a similarity score."""

    speaker: str = ""
    kana: str = ""
    score: float = 0.0


def generate_boundary(rng: random.Random | None = None) -> str:
    """Return a multipart boundary made of dashes and two random hex numbers."""
    rng = rng or random.Random()
    return _BOUNDARY_PREFIX + "".join(
        format(rng.randrange(0x7FFFFFFF), "x") for _ in range(2)
    )


def build_transcription_body(data: bytes, boundary: str) -> bytes:
    """The multipart body asking for a Japanese transcription of ``data``."""
    header = (
        f"--{boundary}\r\n"
        'Content-Disposition: form-data; name="model"\r\n\r\nwhisper-1\r\n'
        f"--{boundary}\r\n"
        'Content-Disposition: form-data; name="language"\r\n\r\nja\r\n'
        f"--{boundary}\r\n"
        'Content-Disposition: form-data; name="file"; filename="speak.wav"\r\n'
        "Content-Type: application/octet-stream\r\n\r\n"
    )
    footer = f"\r\n--{boundary}--\r\n"
    return header.encode() + bytes(data) + footer.encode()


def build_identify_body(data: bytes, boundary: str = IDENTIFY_BOUNDARY) -> bytes:
    """The multipart body carrying ``data`` as an uploaded WAV file."""
    head = (
        f"--{boundary}\r\n"
        'Content-Disposition: form-data; name="audio"; filename="temp.wav"\r\n'
        "Content-Type: audio/wav\r\n\r\n"
    )
    tail = f"\r\n--{boundary}--\r\n"
    return head.encode() + bytes(data) + tail.encode()


def parse_identity(payload: str | bytes) -> SpeakerIdentity:
    """Read ``name``, ``kana`` and ``score`` from an identify response.

    A missing kana falls back to the name; a missing score is zero.
    Raises :class:`ValueError` when the payload is not a JSON object.
    """
    document = json.loads(payload)
    if not isinstance(document, dict):
        raise ValueError("identify response is not a JSON object")
    name = document.get("name")
    speaker = name if isinstance(name, str) else ""
    kana = document.get("kana")
    if not isinstance(kana, str):
        kana = speaker
    score = document.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        score = 0.0
    return SpeakerIdentity(speaker=speaker, kana=kana, score=float(score))


class WhisperClient:
    """Transcribes WAV audio and asks a local service who is speaking."""

    def __init__(
        self,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        identify_host: str = IDENTIFY_HOST,
        identify_port: int = IDENTIFY_PORT,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.identify_host = identify_host
        self.identify_port = identify_port

    def transcribe(self, recording: WhisperRecording) -> str:
        """Transcribe a complete recording."""
        return self.transcribe_from_buffer(recording.buffer)

    def transcribe_from_buffer(self, buffer: bytes) -> str:
        """Transcribe a WAV file held in memory; ``""`` on timeout or bad reply."""
        boundary = generate_boundary()
        body = build_transcription_body(buffer, boundary)
        headers = {
            "Host": API_HOST,
            "Accept": "*/*",
            "Authorization": f"Bearer {self.api_key}",
            "Content-Length": str(len(body)),
            "Content-Type": f"multipart/form-data; boundary={boundary}",
        }
        connection = http.client.HTTPSConnection(API_HOST, API_PORT, timeout=self.timeout)
        try:
            connection.request("POST", API_PATH, body=body, headers=headers)
            payload = connection.getresponse().read()
        except TimeoutError:
            log.warning("Client timeout waiting for transcription")
            return ""
        finally:
            connection.close()
        try:
            document = json.loads(payload)
        except ValueError:
            log.warning("Transcription response is not JSON")
            return ""
        text = document.get("text") if isinstance(document, dict) else None
        return text if isinstance(text, str) else ""

    def identify_from_buffer(self, buffer: bytes) -> SpeakerIdentity:
        """Ask the identify service who speaks in a WAV file held in memory."""
        body = build_identify_body(buffer, IDENTIFY_BOUNDARY)
        headers = {
            "Host": self.identify_host,
            "Connection": "close",
            "Content-Type": f"multipart/form-data; boundary={IDENTIFY_BOUNDARY}",
            "Content-Length": str(len(body)),
        }
        connection = http.client.HTTPConnection(
            self.identify_host, self.identify_port, timeout=IDENTIFY_TIMEOUT
        )
        try:
            connection.request("POST", IDENTIFY_PATH, body=body, headers=headers)
            payload = connection.getresponse().read()
        except TimeoutError as exc:
            raise IdentificationError("timeout waiting for response") from exc
        except OSError as exc:
            raise IdentificationError(f"connection failed: {exc}") from exc
        finally:
            connection.close()
        try:
            return parse_identity(payload)
        except ValueError as exc:
            raise IdentificationError("failed to parse JSON") from exc