from __future__ import annotations

import logging
import time
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from ..dispatch.model import ProfilingSample

logger = logging.getLogger(__name__)


class ProfilingRecorder:
    """Capture one (wall, device) duration pair for a single job.

    Wall time is measured on the host around staging, submission and the
    blocking wait; device time comes from the completed event's
    command start/end timestamps.
    """

    def __init__(self) -> None:
        self._start_ns: int | None = None
        self._end_ns: int | None = None

    @contextmanager
    def measure(self) -> Iterator[None]:
        if self._start_ns is not None:
            raise RuntimeError("ProfilingRecorder already used; one sample per job")
        self._start_ns = time.perf_counter_ns()
        yield
        self._end_ns = time.perf_counter_ns()

    @property
    def wall_ns(self) -> int:
        if self._start_ns is None or self._end_ns is None:
            raise RuntimeError("Wall clock not captured; run the job inside measure()")
        return self._end_ns - self._start_ns

    def sample(self, event: Any) -> ProfilingSample:
        wall_ns = self.wall_ns
        device_ns = device_duration_ns(event)
        if device_ns > wall_ns:
            logger.warning(
                "Device duration %d ns exceeds wall duration %d ns (clock skew); clamping", device_ns, wall_ns
            )
            device_ns = wall_ns
        return ProfilingSample(wall_ns=wall_ns, device_ns=device_ns)


def device_duration_ns(event: Any) -> int:
    """Device-reported execution window of a completed, profiled event."""
    start = int(event.profile.start)
    end = int(event.profile.end)
    return max(0, end - start)


def format_sample(sample: ProfilingSample, *, title: str, details: Sequence[str] = ()) -> str:
    header = f"=== {title} ==="
    lines: list[str] = [
        header,
        "Wall Clock Time (Host + Device + Transfers):",
        f"  {sample.wall_ns} nanoseconds",
        f"  {sample.wall_us} microseconds",
        f"  {sample.wall_ms} milliseconds",
        "",
        "Device Execution Time (Kernel Only):",
        f"  {sample.device_ns} nanoseconds",
        f"  {sample.device_us} microseconds",
        f"  {sample.device_ms} milliseconds",
    ]
    if details:
        lines.append("")
        lines.extend(details)
    lines.append("=" * len(header))
    return "\n".join(lines)
