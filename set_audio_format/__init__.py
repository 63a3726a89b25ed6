"""Set the physical stream format of the default audio output device."""

from .device import resolve_default_output_device
from .models import FormatBuffer, FormatOverrides, StreamFormat
from .mutator import apply_format

__version__ = "1.0.0"

__all__ = [
    "FormatBuffer",
    "FormatOverrides",
    "StreamFormat",
    "apply_format",
    "resolve_default_output_device",
]
