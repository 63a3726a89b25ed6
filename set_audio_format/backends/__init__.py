"""Audio backends: the OS capabilities the format tool consumes."""

from typing import Protocol

from ..models import FormatBuffer


class AudioBackend(Protocol):
    """Property get/set interface of the OS audio subsystem.

    Every method raises ``AudioHardwareError`` carrying the OS status when the
    underlying call does not succeed.
    """

    def default_output_device(self) -> int:
        """Return the id of the current default output device."""
        ...

    def physical_format_size(self, device: int) -> int:
        """Return the size in bytes of the device's physical format property."""
        ...

    def read_physical_format(self, device: int, buffer: FormatBuffer) -> None:
        """Fill ``buffer`` with the device's current physical format."""
        ...

    def write_physical_format(self, device: int, buffer: FormatBuffer) -> None:
        """Submit ``buffer`` as the device's new physical format."""
        ...


def default_backend() -> AudioBackend:
    """Backend for the running OS."""
    from .coreaudio import CoreAudioBackend

    return CoreAudioBackend()


__all__ = ["AudioBackend", "default_backend"]
