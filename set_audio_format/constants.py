"""Constants for set-audio-format."""

import os


def fourcc(code: str) -> int:
    """Pack a four-character code (e.g. ``"dOut"``) into a UInt32 selector."""
    raw = code.encode("ascii")
    if len(raw) != 4:
        raise ValueError(f"four-character code expected: {code!r}")
    return int.from_bytes(raw, "big")


# ============================================================================
# CoreAudio property model
# ============================================================================

COREAUDIO_FRAMEWORK_PATH = os.getenv(
    "SET_AUDIO_FORMAT_COREAUDIO_PATH",
    "/System/Library/Frameworks/CoreAudio.framework/CoreAudio",
)

NO_ERR = 0
AUDIO_OBJECT_SYSTEM_OBJECT = 1

AUDIO_HARDWARE_PROPERTY_DEFAULT_OUTPUT_DEVICE = fourcc("dOut")
AUDIO_STREAM_PROPERTY_PHYSICAL_FORMAT = fourcc("pft ")
AUDIO_OBJECT_PROPERTY_SCOPE_GLOBAL = fourcc("glob")
AUDIO_OBJECT_PROPERTY_SCOPE_OUTPUT = fourcc("outp")
AUDIO_OBJECT_PROPERTY_ELEMENT_MAIN = 0

# ============================================================================
# Accepted override ranges
# ============================================================================

ALLOWED_BIT_DEPTHS = (16, 20, 24)
MIN_CHANNELS = 1
MAX_CHANNELS = 8
