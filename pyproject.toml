[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stackstt"
version = "0.1.0"
description = "Record 16 kHz mono PCM clips and transcribe them with Google Cloud Speech or Whisper"
requires-python = ">=3.10"
dependencies = []
keywords = ["speech-to-text", "wav", "whisper", "google-speech", "microphone", "speaker-identification"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: Speech",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["stackstt"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
