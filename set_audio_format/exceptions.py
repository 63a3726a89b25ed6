"""Exceptions raised while validating input and talking to the audio backend."""

from dataclasses import dataclass


class SetAudioFormatError(Exception):
    """Base class for every error this tool reports before exiting."""


@dataclass
class ArgumentValidationError(SetAudioFormatError):
    """A command-line value failed to parse or is out of range.

    Attributes:
        message: Diagnostic printed to stderr, e.g.
            ``"Error: Bit depth must be 16, 20, or 24"``
    """

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class AudioHardwareError(SetAudioFormatError):
    """The OS audio subsystem returned a non-success status.

    Attributes:
        status: Raw OSStatus returned by the failing call
        message: What the tool was doing when the call failed
    """

    status: int
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.status}"


class BackendUnavailableError(SetAudioFormatError):
    """The OS audio framework could not be loaded on this machine."""


class FormatLayoutError(SetAudioFormatError):
    """The property blob is too small to hold a stream format record."""
