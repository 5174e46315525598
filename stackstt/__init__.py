"""Microphone input, WAV framing, and Google Speech and Whisper speech-to-text clients."""

__version__ = "0.1.0"