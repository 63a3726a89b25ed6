"""Read-modify-write of a device's physical stream format.

The device gets exactly one write per call. Whatever the hardware keeps is
read back and compared with the request; values it clamped or rejected are
reported as mismatches, not errors.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from .backends import AudioBackend
from .exceptions import AudioHardwareError
from .models import (
    ApplyResult,
    FormatBuffer,
    FormatMismatch,
    FormatOverrides,
    StreamFormat,
)

logger = logging.getLogger(__name__)


def merge_overrides(current: StreamFormat, overrides: FormatOverrides) -> StreamFormat:
    """Apply requested fields to ``current`` and recompute the byte layout.

    Rate and channel count are only replaced when requested. Bit depth is
    always written from the request, so an absent bit depth submits 0.
    """
    fmt = replace(current)
    if overrides.sample_rate is not None and overrides.sample_rate > 0:
        fmt.sample_rate = overrides.sample_rate
    if overrides.channels_per_frame is not None and overrides.channels_per_frame > 0:
        fmt.channels_per_frame = overrides.channels_per_frame
    fmt.bits_per_channel = overrides.bits_per_channel or 0
    return fmt.with_recomputed_layout()


def find_mismatches(
    overrides: FormatOverrides, actual: StreamFormat
) -> list[FormatMismatch]:
    """Compare requested fields with what the device reports after the write."""
    mismatches: list[FormatMismatch] = []
    if (
        overrides.sample_rate is not None
        and actual.sample_rate != overrides.sample_rate
    ):
        mismatches.append(
            FormatMismatch("sample rate", overrides.sample_rate, actual.sample_rate)
        )
    if (
        overrides.bits_per_channel is not None
        and actual.bits_per_channel != overrides.bits_per_channel
    ):
        mismatches.append(
            FormatMismatch(
                "bit depth", overrides.bits_per_channel, actual.bits_per_channel
            )
        )
    if (
        overrides.channels_per_frame is not None
        and actual.channels_per_frame != overrides.channels_per_frame
    ):
        mismatches.append(
            FormatMismatch(
                "channel count",
                overrides.channels_per_frame,
                actual.channels_per_frame,
            )
        )
    return mismatches


def apply_format(
    backend: AudioBackend,
    device: int,
    overrides: FormatOverrides,
    *,
    dry_run: bool = False,
) -> ApplyResult:
    """Apply ``overrides`` to the physical format of ``device``.

    Args:
        backend: OS audio backend
        device: Device id from ``resolve_default_output_device``
        overrides: Validated fields to change
        dry_run: Stop after computing the format; nothing is written

    Returns:
        ApplyResult with the submitted format, the format read back and
        any mismatches between the two.

    Raises:
        AudioHardwareError: Any backend call failed. Nothing is retried and
            a failed write is not rolled back.
    """
    size = backend.physical_format_size(device)
    logger.debug("Physical format property size: %d bytes", size)

    with FormatBuffer(size) as buffer:
        backend.read_physical_format(device, buffer)
        current = buffer.stream_format
        logger.debug("Current format: %s", current.describe())

        submitted = merge_overrides(current, overrides)
        logger.debug("Submitting format: %s", submitted.describe())

        if dry_run:
            return ApplyResult(
                device=device,
                submitted=submitted,
                actual=None,
                mismatches=[],
                dry_run=True,
            )

        buffer.store(submitted)
        backend.write_physical_format(device, buffer)

        try:
            backend.read_physical_format(device, buffer)
        except AudioHardwareError as exc:
            raise AudioHardwareError(
                exc.status, "Error verifying stream format application"
            ) from exc
        actual = buffer.stream_format
        logger.debug("Device reports: %s", actual.describe())

    mismatches = find_mismatches(overrides, actual)
    for mismatch in mismatches:
        logger.debug(
            "%s not applied (desired=%s actual=%s)",
            mismatch.label,
            mismatch.desired,
            mismatch.actual,
        )
    return ApplyResult(
        device=device,
        submitted=submitted,
        actual=actual,
        mismatches=mismatches,
    )
