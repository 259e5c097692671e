from __future__ import annotations

import io

from syckle.dispatch.devices import enumerate_platforms
from syckle.operations.listing import format_device_report, list_run


def test_format_device_report(mixed_platforms) -> None:
    report = format_device_report(enumerate_platforms(mixed_platforms))
    lines = report.splitlines()
    assert lines[:5] == [
        "Platform: Portable Computing Language",
        "  Device: pthread-cpu",
        "    Vendor: GenuineIntel",
        "    Type: CPU",
        "    Backend: OpenCL",
    ]
    assert "    Type: Accelerator" in lines
    assert lines.count("    Type: GPU") == 2


def test_list_run_without_platforms() -> None:
    out = io.StringIO()
    assert list_run(platforms=[], out=out) == 0
    assert out.getvalue() == "No OpenCL platforms found.\n"
