"""CoreAudio backend over ctypes (macOS)."""

from __future__ import annotations

import ctypes
import logging
from ctypes import POINTER, byref, c_int32, c_uint32, c_void_p
from typing import Optional

from ..constants import (
    AUDIO_HARDWARE_PROPERTY_DEFAULT_OUTPUT_DEVICE,
    AUDIO_OBJECT_PROPERTY_ELEMENT_MAIN,
    AUDIO_OBJECT_PROPERTY_SCOPE_GLOBAL,
    AUDIO_OBJECT_PROPERTY_SCOPE_OUTPUT,
    AUDIO_OBJECT_SYSTEM_OBJECT,
    AUDIO_STREAM_PROPERTY_PHYSICAL_FORMAT,
    COREAUDIO_FRAMEWORK_PATH,
    NO_ERR,
)
from ..exceptions import AudioHardwareError, BackendUnavailableError
from ..models import FormatBuffer

logger = logging.getLogger(__name__)


class AudioObjectPropertyAddress(ctypes.Structure):
    _fields_ = [
        ("mSelector", c_uint32),
        ("mScope", c_uint32),
        ("mElement", c_uint32),
    ]


DEFAULT_OUTPUT_DEVICE_ADDRESS = AudioObjectPropertyAddress(
    AUDIO_HARDWARE_PROPERTY_DEFAULT_OUTPUT_DEVICE,
    AUDIO_OBJECT_PROPERTY_SCOPE_GLOBAL,
    AUDIO_OBJECT_PROPERTY_ELEMENT_MAIN,
)

PHYSICAL_FORMAT_ADDRESS = AudioObjectPropertyAddress(
    AUDIO_STREAM_PROPERTY_PHYSICAL_FORMAT,
    AUDIO_OBJECT_PROPERTY_SCOPE_OUTPUT,
    AUDIO_OBJECT_PROPERTY_ELEMENT_MAIN,
)


def _load_framework(path: str) -> ctypes.CDLL:
    try:
        lib = ctypes.CDLL(path)
    except OSError as exc:
        raise BackendUnavailableError(
            f"CoreAudio framework not available at {path}: {exc}"
        ) from exc

    address_ptr = POINTER(AudioObjectPropertyAddress)

    lib.AudioObjectGetPropertyDataSize.argtypes = [
        c_uint32,
        address_ptr,
        c_uint32,
        c_void_p,
        POINTER(c_uint32),
    ]
    lib.AudioObjectGetPropertyDataSize.restype = c_int32

    lib.AudioObjectGetPropertyData.argtypes = [
        c_uint32,
        address_ptr,
        c_uint32,
        c_void_p,
        POINTER(c_uint32),
        c_void_p,
    ]
    lib.AudioObjectGetPropertyData.restype = c_int32

    lib.AudioObjectSetPropertyData.argtypes = [
        c_uint32,
        address_ptr,
        c_uint32,
        c_void_p,
        c_uint32,
        c_void_p,
    ]
    lib.AudioObjectSetPropertyData.restype = c_int32
    return lib


class CoreAudioBackend:
    """Talks to the HAL through AudioObjectGet/SetPropertyData."""

    def __init__(
        self,
        framework_path: str = COREAUDIO_FRAMEWORK_PATH,
        lib: Optional[ctypes.CDLL] = None,
    ) -> None:
        self._lib = lib if lib is not None else _load_framework(framework_path)

    def _property_size(
        self, object_id: int, address: AudioObjectPropertyAddress
    ) -> tuple[int, int]:
        size = c_uint32(0)
        status = self._lib.AudioObjectGetPropertyDataSize(
            object_id, byref(address), 0, None, byref(size)
        )
        return status, size.value

    def default_output_device(self) -> int:
        status, size = self._property_size(
            AUDIO_OBJECT_SYSTEM_OBJECT, DEFAULT_OUTPUT_DEVICE_ADDRESS
        )
        if status != NO_ERR:
            raise AudioHardwareError(
                status, "Error getting default output device property size"
            )

        logger.debug("default output device property size=%d", size)

        # the OS writes at most io_size bytes into the 4-byte device id
        device = c_uint32(0)
        io_size = c_uint32(ctypes.sizeof(device))
        status = self._lib.AudioObjectGetPropertyData(
            AUDIO_OBJECT_SYSTEM_OBJECT,
            byref(DEFAULT_OUTPUT_DEVICE_ADDRESS),
            0,
            None,
            byref(io_size),
            byref(device),
        )
        if status != NO_ERR:
            raise AudioHardwareError(status, "Error getting default output device")
        logger.debug("default output device id=%d", device.value)
        return device.value

    def physical_format_size(self, device: int) -> int:
        status, size = self._property_size(device, PHYSICAL_FORMAT_ADDRESS)
        if status != NO_ERR:
            raise AudioHardwareError(
                status, "Error getting stream format property size"
            )
        return size

    def read_physical_format(self, device: int, buffer: FormatBuffer) -> None:
        io_size = c_uint32(buffer.size)
        status = self._lib.AudioObjectGetPropertyData(
            device,
            byref(PHYSICAL_FORMAT_ADDRESS),
            0,
            None,
            byref(io_size),
            buffer.data,
        )
        if status != NO_ERR:
            raise AudioHardwareError(status, "Error getting current stream format")

    def write_physical_format(self, device: int, buffer: FormatBuffer) -> None:
        status = self._lib.AudioObjectSetPropertyData(
            device,
            byref(PHYSICAL_FORMAT_ADDRESS),
            0,
            None,
            buffer.size,
            buffer.data,
        )
        if status != NO_ERR:
            raise AudioHardwareError(status, "Error setting stream format")
