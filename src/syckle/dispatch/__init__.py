"""Device dispatch core.

Device selection, profiling-enabled compute queues, host/device buffer staging,
the two OpenCL kernels, and the error boundary that turns failures into
`JobResult` values instead of exceptions.
"""

from __future__ import annotations
