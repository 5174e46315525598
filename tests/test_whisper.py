import json
import random
from unittest import mock

import pytest

from stackstt.mic import Microphone
from stackstt.wav import RECORD_SIZE, WhisperRecording, wav_bytes
from stackstt.whisper import (
    IDENTIFY_BOUNDARY,
    IdentificationError,
    SpeakerIdentity,
    WhisperClient,
    build_identify_body,
    build_transcription_body,
    generate_boundary,
    parse_identity,
)


class _FixedRng:
    def __init__(self, *values):
        self._values = list(values)

    def randrange(self, stop):
        assert stop == 0x7FFFFFFF
        return self._values.pop(0)


def _respond(conn_cls, payload):
    conn_cls.return_value.getresponse.return_value.read.return_value = payload
    return conn_cls.return_value


def test_generate_boundary_uses_hex_of_random_values():
    assert generate_boundary(_FixedRng(255, 16)) == "-" * 24 + "ff10"


def test_generate_boundary_is_reproducible_with_seed():
    first = generate_boundary(random.Random(7))
    second = generate_boundary(random.Random(7))
    assert first == second
    assert first.startswith("-" * 24)
    int(first[24:], 16)


def test_transcription_body_parts():
    body = build_transcription_body(b"WAVDATA", "B")
    assert b'name="model"\r\n\r\nwhisper-1\r\n' in body
    assert b'name="language"\r\n\r\nja\r\n' in body
    assert body.endswith(b"\r\n--B--\r\n")
    assert body.count(b"--B\r\n") == 3


def test_transcription_body_carries_data():
    data = bytes(range(256))
    body = build_transcription_body(data, "B")
    marker = b"Content-Type: application/octet-stream\r\n\r\n"
    start = body.index(marker) + len(marker)
    assert body[start:start + len(data)] == data


def test_identify_body():
    body = build_identify_body(b"xyz", "B")
    assert body == (
        b"--B\r\n"
        b'Content-Disposition: form-data; name="audio"; filename="temp.wav"\r\n'
        b"Content-Type: audio/wav\r\n\r\n"
        b"xyz\r\n--B--\r\n"
    )


def test_parse_identity_full():
    identity = parse_identity(json.dumps({"name": "taro", "kana": "たろう", "score": 0.5}))
    assert identity == SpeakerIdentity("taro", "たろう", 0.5)


def test_parse_identity_kana_falls_back_to_name():
    identity = parse_identity(b'{"name": "hanako"}')
    assert identity.kana == "hanako"
    assert identity.score == 0.0


def test_parse_identity_empty():
    assert parse_identity("{}") == SpeakerIdentity()


def test_parse_identity_invalid():
    with pytest.raises(ValueError):
        parse_identity("garbage")


@mock.patch("http.client.HTTPSConnection")
def test_transcribe_from_buffer(conn_cls):
    connection = _respond(conn_cls, b'{"text": "hello"}')
    text = WhisperClient("placeholder").transcribe_from_buffer(b"RIFF....")
    assert text == "hello"
    assert conn_cls.call_args.args[0] == "api.openai.com"
    call = connection.request.call_args
    assert call.args == ("POST", "/v1/audio/transcriptions")
    headers = call.kwargs["headers"]
    assert headers["Authorization"] == "Bearer placeholder"
    assert headers["Content-Length"] == str(len(call.kwargs["body"]))
    boundary = headers["Content-Type"].split("boundary=", 1)[1]
    assert call.kwargs["body"].endswith(f"\r\n--{boundary}--\r\n".encode())


@mock.patch("http.client.HTTPSConnection")
def test_transcribe_from_buffer_timeout(conn_cls):
    conn_cls.return_value.getresponse.side_effect = TimeoutError()
    assert WhisperClient("placeholder").transcribe_from_buffer(b"abc") == ""


@mock.patch("http.client.HTTPSConnection")
def test_transcribe_from_buffer_without_text(conn_cls):
    _respond(conn_cls, b'{"error": {}}')
    assert WhisperClient("placeholder").transcribe_from_buffer(b"abc") == ""


@mock.patch("http.client.HTTPSConnection")
def test_transcribe_sends_recording_buffer(conn_cls):
    connection = _respond(conn_cls, b'{"text": "ok"}')
    recording = WhisperRecording()
    recording.record(Microphone([5] * RECORD_SIZE))
    assert WhisperClient("placeholder").transcribe(recording) == "ok"
    assert recording.buffer in connection.request.call_args.kwargs["body"]


@mock.patch("http.client.HTTPConnection")
def test_identify_from_buffer(conn_cls):
    connection = _respond(conn_cls, b'{"name": "taro", "score": 0.75}')
    client = WhisperClient("placeholder", identify_host="localhost", identify_port=9000)
    audio = wav_bytes([1, 2, 3])
    identity = client.identify_from_buffer(audio)
    assert identity == SpeakerIdentity("taro", "taro", 0.75)
    assert conn_cls.call_args.args[:2] == ("localhost", 9000)
    call = connection.request.call_args
    assert call.args == ("POST", "/identify")
    assert call.kwargs["body"] == build_identify_body(audio, IDENTIFY_BOUNDARY)


@mock.patch("http.client.HTTPConnection")
def test_identify_connection_failure(conn_cls):
    conn_cls.return_value.request.side_effect = ConnectionRefusedError()
    with pytest.raises(IdentificationError):
        WhisperClient("placeholder").identify_from_buffer(b"abc")


@mock.patch("http.client.HTTPConnection")
def test_identify_bad_json(conn_cls):
    _respond(conn_cls, b"not json")
    with pytest.raises(IdentificationError):
        WhisperClient("placeholder").identify_from_buffer(b"abc")