from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, TextIO

from ..config import PROFILE_JSON_NAME, RunSettings
from ..dispatch.errors import JobResult
from ..dispatch.model import Device, ProfilingSample
from ..profiling.export import build_profile_record, write_profile
from ..profiling.recorder import format_sample


def check_profile_out(settings: RunSettings) -> bool:
    """Fail fast (before any device work) if the profile dir already holds a record."""
    if settings.profile_out is None:
        return True
    existing = Path(settings.profile_out) / PROFILE_JSON_NAME
    if existing.exists():
        print(f"Refusing to overwrite existing profile: {existing}", file=sys.stderr)
        return False
    return True


def _measured(result: JobResult) -> tuple[Device, ProfilingSample]:
    if result.sample is None or result.device is None:
        raise AssertionError(f"Successful job result carries no sample/device: {result!r}")
    return result.device, result.sample


def export_profile(
    result: JobResult,
    *,
    operation: str,
    details: dict[str, Any],
    settings: RunSettings,
    out: TextIO,
) -> bool:
    """Write the profile record if `--profile-out` was given.

    Runs before the operation's output artifact is written, so a failed export
    leaves no output behind. Returns False on failure.
    """
    if settings.profile_out is None:
        return True
    device, sample = _measured(result)
    record = build_profile_record(
        operation=operation,
        device=device,
        sample=sample,
        details=details,
        verified=result.verified if settings.verify else None,
    )
    try:
        path = write_profile(Path(settings.profile_out), record)
    except Exception as e:
        print(f"Failed to write profile: {e}", file=sys.stderr)
        return False
    print(f"Profile written to: {path}", file=out)
    return True


def print_profile(result: JobResult, *, title: str, details: dict[str, Any], out: TextIO) -> None:
    _, sample = _measured(result)
    print("", file=out)
    print(format_sample(sample, title=title, details=[f"{k}: {v}" for k, v in details.items()]), file=out)
