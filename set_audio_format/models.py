"""Data models for the physical stream format and requested overrides."""

from __future__ import annotations

import ctypes
import struct
from dataclasses import dataclass, replace
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .constants import MAX_CHANNELS, MIN_CHANNELS
from .exceptions import FormatLayoutError

# AudioStreamBasicDescription: Float64 + 8 x UInt32, native byte order
_ASBD_STRUCT = struct.Struct("=dIIIIIIII")
STREAM_FORMAT_SIZE = _ASBD_STRUCT.size


# ============================================================================
# Stream format
# ============================================================================


@dataclass
class StreamFormat:
    """Physical stream format of a device (AudioStreamBasicDescription)."""

    sample_rate: float
    format_id: int = 0
    format_flags: int = 0
    bytes_per_packet: int = 0
    frames_per_packet: int = 1
    bytes_per_frame: int = 0
    channels_per_frame: int = 0
    bits_per_channel: int = 0
    reserved: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "StreamFormat":
        if len(data) < STREAM_FORMAT_SIZE:
            raise FormatLayoutError(
                f"Stream format needs {STREAM_FORMAT_SIZE} bytes, got {len(data)}"
            )
        return cls(*_ASBD_STRUCT.unpack_from(data))

    def to_bytes(self) -> bytes:
        return _ASBD_STRUCT.pack(
            float(self.sample_rate),
            self.format_id,
            self.format_flags,
            self.bytes_per_packet,
            self.frames_per_packet,
            self.bytes_per_frame,
            self.channels_per_frame,
            self.bits_per_channel,
            self.reserved,
        )

    def with_recomputed_layout(self) -> "StreamFormat":
        """Return a copy whose byte sizes follow bit depth and channel count.

        The frame size keeps the extra byte per channel the device tool has
        always submitted: ``(bits // 8) * channels + channels``.
        """
        bytes_per_frame = (
            self.bits_per_channel // 8
        ) * self.channels_per_frame + self.channels_per_frame
        bytes_per_frame &= 0xFFFFFFFF
        bytes_per_packet = (bytes_per_frame * self.frames_per_packet) & 0xFFFFFFFF
        return replace(
            self,
            bytes_per_frame=bytes_per_frame,
            bytes_per_packet=bytes_per_packet,
        )

    def describe(self) -> str:
        """One-line summary for logs and dry-run output."""
        return (
            f"rate={self.sample_rate:.0f} Hz bits={self.bits_per_channel} "
            f"channels={self.channels_per_frame} "
            f"bytes/frame={self.bytes_per_frame} "
            f"bytes/packet={self.bytes_per_packet} "
            f"frames/packet={self.frames_per_packet}"
        )


class FormatBuffer:
    """Property blob holding a stream format, sized by the backend.

    Use it as a context manager so the memory is released on every path::

        with FormatBuffer(size) as buffer:
            backend.read_physical_format(device, buffer)
    """

    def __init__(self, size: int) -> None:
        if size < STREAM_FORMAT_SIZE:
            raise FormatLayoutError(
                f"Stream format property is {size} bytes, "
                f"expected at least {STREAM_FORMAT_SIZE}"
            )
        self._data: Optional[ctypes.Array] = ctypes.create_string_buffer(size)

    def __enter__(self) -> "FormatBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    @property
    def released(self) -> bool:
        return self._data is None

    @property
    def data(self) -> ctypes.Array:
        """Underlying ctypes buffer passed to the OS calls."""
        if self._data is None:
            raise ValueError("FormatBuffer has been released")
        return self._data

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def raw(self) -> bytes:
        return self.data.raw

    @property
    def stream_format(self) -> StreamFormat:
        return StreamFormat.from_bytes(self.raw)

    def store(self, fmt: StreamFormat) -> None:
        """Overwrite the leading record, keeping any trailing bytes."""
        ctypes.memmove(self.data, fmt.to_bytes(), STREAM_FORMAT_SIZE)

    def release(self) -> None:
        self._data = None


# ============================================================================
# Requested overrides
# ============================================================================

BitDepth = Literal[16, 20, 24]


class FormatOverrides(BaseModel):
    """Fields the user asked to change. ``None`` means not requested."""

    model_config = ConfigDict(frozen=True)

    sample_rate: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    bits_per_channel: Optional[BitDepth] = None
    channels_per_frame: Optional[int] = Field(
        default=None, ge=MIN_CHANNELS, le=MAX_CHANNELS
    )

    def is_empty(self) -> bool:
        return (
            self.sample_rate is None
            and self.bits_per_channel is None
            and self.channels_per_frame is None
        )


@dataclass
class FormatMismatch:
    """A requested value the device did not keep after the write."""

    label: str
    desired: float | int
    actual: float | int

    def render(self) -> str:
        if self.label == "sample rate":
            desired = f"{self.desired:.0f}"
            actual = f"{self.actual:.0f}"
        else:
            desired = str(self.desired)
            actual = str(self.actual)
        return (
            f"Warning: New {self.label} was not applied.\n"
            "   Value may be invalid for this device, or the device does not "
            "support the resulting format.\n"
            f"   Desired: {desired}, Actual: {actual}"
        )


@dataclass
class ApplyResult:
    """Outcome of one read-modify-write cycle."""

    device: int
    submitted: StreamFormat
    actual: Optional[StreamFormat]
    mismatches: list[FormatMismatch]
    dry_run: bool = False
