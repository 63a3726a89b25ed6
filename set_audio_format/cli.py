"""Command-line entry point: set the default output device's stream format."""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from pathlib import Path
from typing import Optional, TextIO

from pydantic import ValidationError

from .backends import AudioBackend, default_backend
from .device import resolve_default_output_device
from .exceptions import ArgumentValidationError, SetAudioFormatError
from .models import FormatOverrides
from .mutator import apply_format

logger = logging.getLogger(__name__)

RATE_ERROR = "Error: Sample rate must be a positive number"
BITS_ERROR = "Error: Bit depth must be 16, 20, or 24"
CHANNELS_ERROR = "Error: Channel count must be between 1 and 8, inclusive"
NO_OPTIONS_ERROR = "No valid options provided."

# strtod/strtol accept leading whitespace and a sign, nothing after the digits
_FLOAT_RE = re.compile(
    r"[ \t\n\v\f\r]*[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)
_INT_RE = re.compile(r"[ \t\n\v\f\r]*[+-]?[0-9]+")

USAGE = """\
Usage: {prog} [OPTIONS]
Set audio format parameters for the default output device.

Options:
  -r, --rate=RATE       Set the sample rate in KHz
  -b, --bits=BITS       Set the bit depth (Usually 16, 20, or 24)
  -c, --channels=NUM    Set the number of channels (Usually between 1 and 8, inclusive)
  -v, --verbose         Enable debug logging
      --dry-run         Print the format that would be applied and exit
  -h, --help            Display this help message

Examples:
  {prog} --rate=44100 --bits=16 --channels=2
  {prog} -r 48000 -b 24 -c 8
"""


class UsageError(Exception):
    """Unknown option, missing value or stray argument."""


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def print_usage(prog: str, file: TextIO | None = None) -> None:
    print(USAGE.format(prog=prog), end="", file=file or sys.stdout)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_parser(prog: str) -> _Parser:
    parser = _Parser(prog=prog, add_help=False)
    parser.add_argument("-r", "--rate")
    parser.add_argument("-b", "--bits")
    parser.add_argument("-c", "--channels")
    parser.add_argument("-h", "--help", action="store_true")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=_env_bool("SET_AUDIO_FORMAT_VERBOSE", False),
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=_env_bool("SET_AUDIO_FORMAT_DRY_RUN", False),
    )
    return parser


def _parse_rate(raw: str) -> float:
    if not _FLOAT_RE.fullmatch(raw):
        raise ArgumentValidationError(RATE_ERROR)
    rate = float(raw)
    if rate <= 0:
        raise ArgumentValidationError(RATE_ERROR)
    return rate


def _parse_int(raw: str, message: str) -> int:
    if not _INT_RE.fullmatch(raw):
        raise ArgumentValidationError(message)
    return int(raw)


def parse_overrides(
    rate: Optional[str], bits: Optional[str], channels: Optional[str]
) -> FormatOverrides:
    """Turn raw flag values into validated overrides.

    Raises:
        ArgumentValidationError: A value does not parse fully or is out of
            range. The message is the diagnostic for that flag.
    """
    values: dict[str, float | int] = {}
    if rate is not None:
        values["sample_rate"] = _parse_rate(rate)
    if bits is not None:
        values["bits_per_channel"] = _parse_int(bits, BITS_ERROR)
    if channels is not None:
        values["channels_per_frame"] = _parse_int(channels, CHANNELS_ERROR)

    try:
        return FormatOverrides(**values)
    except ValidationError as exc:
        field = exc.errors()[0]["loc"][0]
        message = {
            "sample_rate": RATE_ERROR,
            "bits_per_channel": BITS_ERROR,
            "channels_per_frame": CHANNELS_ERROR,
        }[field]
        raise ArgumentValidationError(message) from exc


def main(
    argv: list[str] | None = None,
    backend: AudioBackend | None = None,
) -> int:
    if argv is None:
        argv = sys.argv[1:]
    prog = Path(sys.argv[0]).name if sys.argv and sys.argv[0] else "set-audio-format"

    parser = _build_parser(prog)
    try:
        args = parser.parse_args(argv)
    except UsageError as exc:
        print(f"{prog}: {exc}", file=sys.stderr)
        print_usage(prog, file=sys.stderr)
        return 1

    if args.help:
        print_usage(prog)
        return 0

    _setup_logging(args.verbose)

    try:
        overrides = parse_overrides(args.rate, args.bits, args.channels)
    except ArgumentValidationError as exc:
        print(exc, file=sys.stderr)
        return 1

    if overrides.is_empty():
        print(f"{NO_OPTIONS_ERROR}\n", file=sys.stderr)
        print_usage(prog, file=sys.stderr)
        return 1

    try:
        if backend is None:
            backend = default_backend()
        device = resolve_default_output_device(backend)
        result = apply_format(backend, device, overrides, dry_run=args.dry_run)
    except SetAudioFormatError as exc:
        print(exc, file=sys.stderr)
        return 1

    if result.dry_run:
        print(f"Device {result.device}: would apply {result.submitted.describe()}")
        return 0

    for mismatch in result.mismatches:
        print(mismatch.render())
    logger.info(
        "Applied format to device %d: %s", result.device, result.actual.describe()
    )
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover - CLI entry
    run()
