from __future__ import annotations

import sys
from collections.abc import Iterable, Sequence
from typing import Any, TextIO

from ..dispatch.devices import enumerate_platforms
from ..dispatch.model import DeviceType, Platform

_TYPE_LABELS: dict[DeviceType, str] = {
    "cpu": "CPU",
    "gpu": "GPU",
    "accelerator": "Accelerator",
    "other": "Other",
}


def format_device_report(platforms: Sequence[Platform]) -> str:
    lines: list[str] = []
    for plat in platforms:
        lines.append(f"Platform: {plat.name}")
        for dev in plat.devices:
            lines.append(f"  Device: {dev.name}")
            lines.append(f"    Vendor: {dev.vendor}")
            lines.append(f"    Type: {_TYPE_LABELS[dev.device_type]}")
            lines.append(f"    Backend: {dev.backend}")
    if not lines:
        lines.append("No OpenCL platforms found.")
    return "\n".join(lines)


def list_run(*, platforms: Iterable[Any] | None = None, out: TextIO | None = None) -> int:
    stream = sys.stdout if out is None else out
    print(format_device_report(enumerate_platforms(platforms)), file=stream)
    return 0
