"""Default output device lookup."""

import logging

from .backends import AudioBackend

logger = logging.getLogger(__name__)


def resolve_default_output_device(backend: AudioBackend) -> int:
    """Return the id of the OS default output device.

    Failures propagate as ``AudioHardwareError``; there is no fallback device.
    """
    device = backend.default_output_device()
    logger.debug("Resolved default output device: %d", device)
    return device
