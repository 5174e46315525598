"""Client for the Google Cloud Speech-to-Text recognize endpoint."""

from __future__ import annotations

import base64
import http.client
import json
import logging
from enum import Enum, auto
from urllib.parse import quote

from stackstt.wav import RECORD_SAMPLE_RATE, Recording

log = logging.getLogger(__name__)

API_HOST = "speech.googleapis.com"
API_PORT = 443
API_PATH = "/v1/speech:recognize"
DEFAULT_LANGUAGE_CODE = "ja-jp"
DEFAULT_TIMEOUT = 10.0

_BODY_SUFFIX = b'"}}\r\n\r\n'


class Authentication(Enum):
    """How a request to the speech service is authorised."""

    USE_ACCESSTOKEN = auto()
    USE_APIKEY = auto()


def parse_transcript(payload: str | bytes) -> str:
    """Return the first transcript in a recognize response, or ``""``.

    Raises :class:`ValueError` when the payload is not valid JSON.
    """
    document = json.loads(payload)
    try:
        text = document["results"][0]["alternatives"][0]["transcript"]
    except (KeyError, IndexError, TypeError):
        return ""
    return text if isinstance(text, str) else ""


class CloudSpeechClient:
    """Sends a recording to the speech service and returns its transcript."""

    def __init__(
        self,
        api_key: str,
        language_code: str = DEFAULT_LANGUAGE_CODE,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.api_key = api_key
        self.language_code = language_code
        self.timeout = timeout
        self.authentication = Authentication.USE_APIKEY

    def _body_prefix(self) -> bytes:
        return (
            '{"config":{"encoding":"LINEAR16","sampleRateHertz":'
            f"{RECORD_SAMPLE_RATE},"
            f'"languageCode":{json.dumps(self.language_code)}}},'
            '"audio":{"content":"'
        ).encode("utf-8")

    def request_body(self, recording: Recording) -> bytes:
        """The JSON request body with the recording as Base64 content."""
        content = base64.b64encode(recording.padded_header + recording.data_bytes)
        return self._body_prefix() + content + _BODY_SUFFIX

    def request_headers(self, body: bytes) -> dict[str, str]:
        """The HTTP headers that go with ``body``."""
        return {
            "Host": API_HOST,
            "Content-Type": "application/json",
            "Content-Length": str(len(body)),
        }

    def transcribe(self, recording: Recording) -> str:
        """Send the recording and return the recognised text.

        An unparsable response gives ``""``; network failures raise.
        """
        body = self.request_body(recording)
        path = f"{API_PATH}?key={quote(self.api_key, safe='')}"
        connection = http.client.HTTPSConnection(API_HOST, API_PORT, timeout=self.timeout)
        try:
            connection.request("POST", path, body=body, headers=self.request_headers(body))
            payload = connection.getresponse().read()
        finally:
            connection.close()
        try:
            text = parse_transcript(payload)
        except ValueError:
            log.warning("Parsing failed!")
            return ""
        if text:
            log.info("Recognised: %s", text)
        else:
            log.info("Recognition returned no transcript")
        return text