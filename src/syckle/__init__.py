"""syckle: dispatch small data-parallel kernels onto OpenCL devices.

This package selects a compute device, stages host arrays into device buffers,
runs one of two kernels (elementwise vector add, box blur), and records both the
host wall-clock duration and the device-reported execution duration of the job.
"""

from __future__ import annotations

__version__ = "0.1.0"
