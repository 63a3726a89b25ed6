"""pytest configuration and fixtures for set-audio-format tests."""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional

import pytest

# Allow running `pytest tests` from a checkout without installing the package
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from set_audio_format.exceptions import AudioHardwareError  # noqa: E402
from set_audio_format.models import (  # noqa: E402
    STREAM_FORMAT_SIZE,
    FormatBuffer,
    StreamFormat,
)

LINEAR_PCM = int.from_bytes(b"lpcm", "big")


class FakeAudioBackend:
    """In-memory device that records every call.

    ``fail`` maps a call name to the OSStatus it should return; ``clamp`` is
    applied to the submitted format to mimic hardware that keeps only part of
    a request.
    """

    def __init__(
        self,
        current: StreamFormat,
        *,
        device: int = 73,
        property_size: int = STREAM_FORMAT_SIZE,
        clamp: Optional[Callable[[StreamFormat], StreamFormat]] = None,
    ) -> None:
        self.device = device
        self.current = current
        self.property_size = property_size
        self.clamp = clamp
        self.fail: dict[str, int] = {}
        self.calls: list[str] = []
        self.written: list[StreamFormat] = []
        self.buffers: list[FormatBuffer] = []
        self._read_count = 0

    def _check(self, name: str, message: str) -> None:
        self.calls.append(name)
        if name in self.fail:
            raise AudioHardwareError(self.fail[name], message)

    def default_output_device(self) -> int:
        self._check("default_output_device", "Error getting default output device")
        return self.device

    def physical_format_size(self, device: int) -> int:
        assert device == self.device
        self._check("physical_format_size", "Error getting stream format property size")
        return self.property_size

    def read_physical_format(self, device: int, buffer: FormatBuffer) -> None:
        assert device == self.device
        self.buffers.append(buffer)
        self._read_count += 1
        name = "read" if self._read_count == 1 else "reread"
        self._check(name, "Error getting current stream format")
        buffer.store(self.current)

    def write_physical_format(self, device: int, buffer: FormatBuffer) -> None:
        assert device == self.device
        self._check("write", "Error setting stream format")
        submitted = buffer.stream_format
        self.written.append(submitted)
        self.current = self.clamp(submitted) if self.clamp else replace(submitted)


@pytest.fixture
def stereo_format() -> StreamFormat:
    return StreamFormat(
        sample_rate=44100.0,
        format_id=LINEAR_PCM,
        format_flags=0x9,
        bytes_per_packet=8,
        frames_per_packet=1,
        bytes_per_frame=8,
        channels_per_frame=2,
        bits_per_channel=24,
    )


@pytest.fixture
def backend(stereo_format: StreamFormat) -> FakeAudioBackend:
    return FakeAudioBackend(stereo_format)


@pytest.fixture
def make_backend() -> type[FakeAudioBackend]:
    return FakeAudioBackend
