from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any, TextIO

import attrs
import numpy as np

from .devices import resolve_device
from .errors import JobResult, run_guarded
from .kernels import dispatch, verify
from .model import BlurJob, KernelJob, VectorAddJob
from .queue import ComputeQueue

logger = logging.getLogger(__name__)


def _output_of(job: KernelJob) -> np.ndarray:
    if isinstance(job, VectorAddJob):
        return job.c
    return job.output


def run_job(
    make_job: Callable[[], KernelJob],
    *,
    device: str,
    operation: str,
    platforms: Iterable[Any] | None = None,
    out: TextIO | None = None,
    verify_output: bool = False,
) -> JobResult:
    """Validate, select a device, dispatch, and collect the output of one job.

    `make_job` runs before any device work so input errors (e.g. size
    mismatch) never touch the platform layer.
    """

    def _body() -> JobResult:
        job = make_job()
        dev = resolve_device(device, platforms=platforms, out=out)
        with ComputeQueue(dev) as queue:
            sample = dispatch(queue, job)
        if verify_output:
            verify(job)
        logger.debug("%s completed on %s: %s", operation, dev.name, sample)
        return JobResult(output=_output_of(job), sample=sample, device=dev, verified=verify_output)

    return run_guarded(_body, operation=operation)


def run_vector_add(
    a: Any,
    b: Any,
    *,
    device: str = "auto",
    platforms: Iterable[Any] | None = None,
    out: TextIO | None = None,
    verify_output: bool = False,
) -> JobResult:
    """Compute `c = a + b` elementwise on the selected device."""
    return run_job(
        lambda: VectorAddJob.create(a, b),
        device=device,
        operation="vector_add",
        platforms=platforms,
        out=out,
        verify_output=verify_output,
    )


def run_box_blur(
    image: Any,
    radius: int,
    *,
    device: str = "auto",
    platforms: Iterable[Any] | None = None,
    out: TextIO | None = None,
    verify_output: bool = False,
) -> JobResult:
    """Box-blur an `HxW` or `HxWxC` uint8 image; the output keeps the input shape."""
    result = run_job(
        lambda: BlurJob.create(image, radius),
        device=device,
        operation="blur",
        platforms=platforms,
        out=out,
        verify_output=verify_output,
    )
    if result.ok:
        return attrs.evolve(result, output=result.output.reshape(np.shape(image)))
    return result
